"""
Mapping from objects to objects with type constraints on keys and values.
"""

from __future__ import annotations

from typing import (
    Any,
    Iterable,
    Iterator,
    Mapping,
    MutableMapping,
    Self,
    TypeVar,
    cast,
)

from .exceptions import (
    InvalidKeyTypeError,
    InvalidTypeError,
    InvalidValueTypeError,
    KeyNotFoundError,
    MutationDuringIterationError,
)
from .inspecting.classes import extract_args, resolve_type
from .inspecting.utils import is_strict_subclass

__all__ = [
    "TypedMapping",
    "EntryCursor",
    "PositionView",
]


class TypedMapping[KT, VT](MutableMapping[KT, VT]):
    """
    Maintains a mapping from arbitrary objects to other objects, requiring keys and
    values to be instances of the respective types passed upon construction.

    Keys are looked up by equality using a linear scan rather than by hash, so keys
    need not be hashable; lookups are O(n). Entries are stored in two parallel
    lists and keep their insertion order. Removing an entry shifts all subsequent
    entries down by one position.

    Key and value types may be passed as classes, runtime-checkable protocols or
    dotted paths to classes. Alternatively they can be declared by subclassing:

    ```python
    class AnimalSounds(TypedMapping[Animal, Sound]):
        pass

    sounds = AnimalSounds()
    ```

    Not thread-safe.
    """

    _key_type: type[KT]
    """
    Type which all keys must be instances of.
    """

    _value_type: type[VT]
    """
    Type which all values must be instances of.
    """

    _keys: list[KT]
    """
    Key objects, index-aligned with values.
    """

    _values: list[VT]
    """
    Value objects, index-aligned with keys.
    """

    _version: int
    """
    Incremented upon each structural modification, used by iterators to detect
    concurrent modification.
    """

    def __init__(
        self,
        key_type: type[KT] | str | None = None,
        value_type: type[VT] | str | None = None,
        /,
        *,
        entries: Mapping[KT, VT] | Iterable[tuple[KT, VT]] | None = None,
    ):
        declared_key_type, declared_value_type = self.__declared_types()

        # explicitly passed types take precedence over declared ones
        self._key_type = cast(
            type[KT],
            _resolve(declared_key_type if key_type is None else key_type, "key"),
        )
        self._value_type = cast(
            type[VT],
            _resolve(
                declared_value_type if value_type is None else value_type, "value"
            ),
        )
        self._keys = []
        self._values = []
        self._version = 0

        if entries is not None:
            self.update(entries)

    def __getitem__(self, key: KT) -> VT:
        self._check_key(key)
        index = self.index_of(key)
        if index == -1:
            raise KeyNotFoundError(key)
        return self._values[index]

    def __setitem__(self, key: KT, value: VT) -> None:
        self.put(key, value)

    def __delitem__(self, key: KT) -> None:
        self.remove(key)

    def __contains__(self, key: object) -> bool:
        return self.contains_key(cast(KT, key))

    def __iter__(self) -> Iterator[KT]:
        return (key for key, _ in self.entries())

    def __len__(self) -> int:
        return len(self._keys)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TypedMapping):
            return NotImplemented

        other_ = cast(TypedMapping[Any, Any], other)
        if (self._key_type, self._value_type) != (
            other_._key_type,
            other_._value_type,
        ):
            return False
        if len(self) != len(other_):
            return False

        for key, value in zip(self._keys, self._values):
            index = other_.index_of(key)
            if index == -1 or other_._values[index] != value:
                return False
        return True

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {v!r}" for k, v in zip(self._keys, self._values))
        return (
            f"{self.__class__.__name__}[{self._key_type.__qualname__}, "
            f"{self._value_type.__qualname__}]({{{items}}})"
        )

    @property
    def key_type(self) -> type[KT]:
        """
        Type which all keys must be instances of.
        """
        return self._key_type

    @property
    def value_type(self) -> type[VT]:
        """
        Type which all values must be instances of.
        """
        return self._value_type

    @property
    def positions(self) -> PositionView[KT, VT]:
        """
        View for accessing entries by their position.
        """
        return PositionView(self)

    def is_valid_key(self, obj: Any) -> bool:
        return isinstance(obj, self._key_type)

    def is_valid_value(self, obj: Any) -> bool:
        return isinstance(obj, self._value_type)

    def is_valid_key_class(self, cls: Any) -> bool:
        """
        Check whether `cls` is a strict subclass of the key type; the key type itself
        is not considered valid. `cls` may also be a dotted path to a class.
        """
        return is_strict_subclass(_resolve_class(cls), self._key_type)

    def is_valid_value_class(self, cls: Any) -> bool:
        """
        Check whether `cls` is a strict subclass of the value type; the value type
        itself is not considered valid.
        """
        return is_strict_subclass(_resolve_class(cls), self._value_type)

    def index_of(self, key: Any) -> int:
        """
        Get the position of the first key which compares equal to `key`, or -1 if
        there is none. Performs no type check.
        """
        try:
            return self._keys.index(key)
        except ValueError:
            return -1

    def contains_key(self, key: KT) -> bool:
        """
        Check whether the key is present.

        :raises InvalidKeyTypeError: If the key is of the wrong type
        """
        self._check_key(key)
        return self.index_of(key) != -1

    def put(self, key: KT, value: VT) -> None:
        """
        Associate `value` with `key`. If an equal key is already present, its key
        object and value are replaced in place; otherwise the entry is appended.

        :raises InvalidKeyTypeError: If the key is of the wrong type
        :raises InvalidValueTypeError: If the value is of the wrong type
        """
        self._check_key(key)
        self._check_value(value)

        index = self.index_of(key)
        if index == -1:
            self._keys.append(key)
            self._values.append(value)
            self._version += 1
        else:
            self._keys[index] = key
            self._values[index] = value

    def get(self, key: KT, default: VT | None = None) -> VT | None:
        """
        Get the value associated with `key`, or `default` if it's not present.

        :raises InvalidKeyTypeError: If the key is of the wrong type
        """
        self._check_key(key)
        index = self.index_of(key)
        return default if index == -1 else self._values[index]

    def remove(self, key: KT) -> VT:
        """
        Remove the entry for `key`, shifting subsequent entries down by one position.

        :raises InvalidKeyTypeError: If the key is of the wrong type
        :raises KeyNotFoundError: If the key is not present
        :return: The removed value
        """
        self._check_key(key)
        index = self.index_of(key)
        if index == -1:
            raise KeyNotFoundError(key)

        value = self._values[index]
        self._remove_at(index)
        return value

    def size(self) -> int:
        return len(self._keys)

    def is_empty(self) -> bool:
        return len(self._keys) == 0

    def key_set(self) -> tuple[KT, ...]:
        """
        Get a snapshot of the keys in storage order.
        """
        return tuple(self._keys)

    def value_list(self) -> tuple[VT, ...]:
        """
        Get a snapshot of the values in storage order.
        """
        return tuple(self._values)

    def entries(self) -> Iterator[tuple[KT, VT]]:
        """
        Iterate over `(key, value)` pairs in storage order.

        :raises MutationDuringIterationError: If the mapping is structurally \
        modified during iteration
        """
        version = self._version
        index = 0
        while index < len(self._keys):
            yield self._keys[index], self._values[index]
            if self._version != version:
                raise MutationDuringIterationError(
                    f"{self.__class__.__name__} changed size during iteration"
                )
            index += 1

    def cursor(self) -> EntryCursor[KT, VT]:
        """
        Create a cursor over the entries, positioned at the first one.
        """
        return EntryCursor(self)

    def serialize(self) -> list[dict[str, Any]]:
        """
        Get the structural projection of this mapping: one `{"key": ..., "value":
        ...}` dict per entry in storage order. Keys and values are passed through
        as-is; see `typedmap.serializing` for conversion to builtin types.
        """
        return [
            {"key": key, "value": value} for key, value in zip(self._keys, self._values)
        ]

    def clear(self) -> None:
        self._keys.clear()
        self._values.clear()
        self._version += 1

    def copy(self) -> Self:
        """
        Create a shallow copy with the same key and value types.
        """
        new = self.__class__.__new__(self.__class__)
        new.__dict__.update(self.__dict__)
        new._keys = list(self._keys)
        new._values = list(self._values)
        new._version = 0
        return new

    def _remove_at(self, index: int) -> None:
        """
        Remove the entry at `index`, shifting subsequent entries down by one position.
        """
        del self._keys[index]
        del self._values[index]
        self._version += 1

    def _check_key(self, key: Any) -> None:
        if not self.is_valid_key(key):
            raise InvalidKeyTypeError(key, self._key_type)

    def _check_value(self, value: Any) -> None:
        if not self.is_valid_value(value):
            raise InvalidValueTypeError(value, self._value_type)

    @classmethod
    def __declared_types(cls) -> tuple[Any, Any]:
        """
        Get key and value types declared by parameterizing this class in a
        subclass's bases, or `None` for those not declared.
        """
        if cls is TypedMapping:
            return None, None

        try:
            args = extract_args(cls, TypedMapping)
        except ValueError:
            return None, None

        key_type, value_type = (None if isinstance(a, TypeVar) else a for a in args)
        return key_type, value_type


class EntryCursor[KT, VT](Iterator[tuple[KT, VT]]):
    """
    Explicit cursor over a mapping's entries. Independent of other cursors on the
    same mapping; fails fast if the mapping is structurally modified after the
    cursor was created or last rewound.
    """

    _mapping: TypedMapping[KT, VT]
    _position: int
    _version: int

    def __init__(self, mapping: TypedMapping[KT, VT]):
        self._mapping = mapping
        self.rewind()

    def __next__(self) -> tuple[KT, VT]:
        if not self.valid():
            raise StopIteration
        entry = self.key(), self.current()
        self.advance()
        return entry

    @property
    def position(self) -> int:
        return self._position

    def rewind(self) -> None:
        """
        Move back to the first entry and resynchronize with the mapping.
        """
        self._position = 0
        self._version = self._mapping._version

    def valid(self) -> bool:
        """
        Check whether there is an entry at the current position.
        """
        self._check_version()
        return self._position < len(self._mapping)

    def current(self) -> VT:
        """
        Get the value at the current position.
        """
        self._check_valid()
        return self._mapping._values[self._position]

    def key(self) -> KT:
        """
        Get the key object at the current position.
        """
        self._check_valid()
        return self._mapping._keys[self._position]

    def advance(self) -> None:
        self._check_version()
        self._position += 1

    def _check_version(self):
        if self._version != self._mapping._version:
            raise MutationDuringIterationError(
                f"{self._mapping.__class__.__name__} was modified since cursor was "
                "created or rewound"
            )

    def _check_valid(self):
        if not self.valid():
            raise IndexError(
                f"Cursor position {self._position} is past the last entry "
                f"(size={len(self._mapping)})"
            )


class PositionView[KT, VT]:
    """
    Array-like access to a mapping's values by position. Positional writes are not
    supported since they can't bind a key; use `TypedMapping.put()`.
    """

    _mapping: TypedMapping[KT, VT]

    def __init__(self, mapping: TypedMapping[KT, VT]):
        self._mapping = mapping

    def __contains__(self, index: object) -> bool:
        return isinstance(index, int) and 0 <= index < len(self._mapping)

    def __getitem__(self, index: int) -> VT:
        return self._mapping._values[self._check_index(index)]

    def __setitem__(self, index: int, value: VT) -> None:
        raise TypeError(
            f"Setting a value by position is not supported: no key to bind at "
            f"position {index}, use put() instead"
        )

    def __delitem__(self, index: int) -> None:
        self._mapping._remove_at(self._check_index(index))

    def __iter__(self) -> Iterator[VT]:
        return (value for _, value in self._mapping.entries())

    def __len__(self) -> int:
        return len(self._mapping)

    def key_at(self, index: int) -> KT:
        return self._mapping._keys[self._check_index(index)]

    def _check_index(self, index: int) -> int:
        # negative positions don't wrap around, consistent with `in`
        if index not in self:
            raise IndexError(
                f"Position {index} out of range (size={len(self._mapping)})"
            )
        return index


def _resolve_class(cls: Any) -> Any:
    if not isinstance(cls, str):
        return cls
    try:
        return resolve_type(cls)
    except InvalidTypeError:
        return None


def _resolve(identity: Any, role: str) -> type:
    if identity is None:
        raise InvalidTypeError(
            f"No {role} type passed or declared via generic base class"
        )
    return resolve_type(identity)

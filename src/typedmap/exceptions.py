"""
Exception classes.
"""

from __future__ import annotations

from typing import Any

__all__ = [
    "TypedMappingError",
    "InvalidTypeError",
    "InvalidKeyTypeError",
    "InvalidValueTypeError",
    "KeyNotFoundError",
    "MutationDuringIterationError",
    "SerializationError",
]


class TypedMappingError(Exception):
    """
    Base class for errors raised by this package.
    """


class InvalidTypeError(TypedMappingError, TypeError):
    """
    A type identity passed as a key or value constraint could not be resolved to a
    class.
    """


class BaseConstraintError(TypedMappingError, TypeError):
    """
    An object didn't satisfy a key or value type constraint.
    """

    obj: Any
    """
    The offending object.
    """

    expected: Any
    """
    The type constraint which wasn't satisfied.
    """

    _role: str

    def __init__(self, obj: Any, expected: Any):
        self.obj = obj
        self.expected = expected
        super().__init__(
            f"Invalid {self._role} type: expected {_type_name(expected)}, "
            f"got {type(obj).__name__} ({obj!r})"
        )


class InvalidKeyTypeError(BaseConstraintError):
    """
    Key doesn't satisfy the mapping's key type.
    """

    _role = "key"


class InvalidValueTypeError(BaseConstraintError):
    """
    Value doesn't satisfy the mapping's value type.
    """

    _role = "value"


class KeyNotFoundError(TypedMappingError, KeyError):
    """
    Key isn't present in the mapping.
    """

    key: Any

    def __init__(self, key: Any):
        self.key = key
        super().__init__(key)


class MutationDuringIterationError(TypedMappingError, RuntimeError):
    """
    Mapping was modified while an iterator or cursor was traversing it.
    """


class SerializationError(TypedMappingError, ValueError):
    """
    Serialized data couldn't be converted back to a mapping.
    """


def _type_name(type_: Any) -> str:
    return getattr(type_, "__qualname__", None) or repr(type_)

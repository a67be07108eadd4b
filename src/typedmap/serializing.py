"""
Conversion of mappings to/from builtin types and TOML text.

Keys and values are converted recursively: dataclasses become dicts, tuples and
sets become lists, enums become their values and nested `TypedMapping`s become
lists of key/value records. When converting back, dataclass and enum types are
reconstructed based on the mapping's key and value types; other data is passed
through as-is and type-checked upon insertion.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, get_type_hints

import tomlkit
from tomlkit.exceptions import TOMLKitError

from .exceptions import SerializationError
from .mapping import TypedMapping

__all__ = [
    "SerializationParams",
    "to_builtins",
    "serialize",
    "deserialize",
    "dumps",
    "loads",
]

type JsonSerializableType = (
    dict[str, JsonSerializableType]
    | list[JsonSerializableType]
    | str
    | int
    | float
    | bool
    | None
)
"""
Type which can be serialized to JSON.
"""


@dataclass(kw_only=True, frozen=True)
class SerializationParams:
    """
    Serialization params passed by user.
    """

    key_field: str = "key"
    """
    Name of the field holding an entry's key.
    """

    value_field: str = "value"
    """
    Name of the field holding an entry's value.
    """

    table_name: str = "entries"
    """
    Name of the array of tables holding the entries in TOML documents.
    """


DEFAULT_PARAMS = SerializationParams()


def to_builtins(obj: Any, params: SerializationParams | None = None) -> Any:
    """
    Recursively convert object to builtin types.

    :param obj: Object to convert
    :param params: Parameters for converting nested mappings
    """
    if isinstance(obj, TypedMapping):
        return serialize(obj, params)
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            f.name: to_builtins(getattr(obj, f.name), params)
            for f in dataclasses.fields(obj)
        }
    if isinstance(obj, Enum):
        return to_builtins(obj.value, params)
    if isinstance(obj, Mapping):
        return {k: to_builtins(v, params) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, set, frozenset)):
        return [to_builtins(o, params) for o in obj]
    return obj


def serialize(
    mapping: TypedMapping[Any, Any], params: SerializationParams | None = None
) -> list[dict[str, Any]]:
    """
    Serialize mapping to a list of key/value records with keys and values converted
    to builtin types.

    :param mapping: Mapping to serialize
    :param params: Parameters to configure serialization behavior
    """
    params_ = params or DEFAULT_PARAMS
    return [
        {
            params_.key_field: to_builtins(record["key"], params),
            params_.value_field: to_builtins(record["value"], params),
        }
        for record in mapping.serialize()
    ]


def deserialize[KT, VT](
    data: Any,
    key_type: type[KT] | str,
    value_type: type[VT] | str,
    params: SerializationParams | None = None,
) -> TypedMapping[KT, VT]:
    """
    Create mapping from a list of key/value records.

    :param data: Records as created by `serialize()`
    :param key_type: Key type of the new mapping
    :param value_type: Value type of the new mapping
    :param params: Parameters to configure serialization behavior
    :raises SerializationError: If the records are malformed or can't be converted
    :raises InvalidKeyTypeError: If a converted key is of the wrong type
    :raises InvalidValueTypeError: If a converted value is of the wrong type
    """
    params_ = params or DEFAULT_PARAMS
    mapping: TypedMapping[KT, VT] = TypedMapping(key_type, value_type)

    if not isinstance(data, Sequence) or isinstance(data, (str, bytes)):
        raise SerializationError(
            f"Expected sequence of records, got {type(data).__name__}"
        )

    for i, record in enumerate(data):
        if not isinstance(record, Mapping):
            raise SerializationError(
                f"Record {i}: expected mapping, got {type(record).__name__}"
            )
        missing = [
            f for f in (params_.key_field, params_.value_field) if f not in record
        ]
        if missing:
            raise SerializationError(f"Record {i}: missing field(s) {missing}")

        key = _from_builtins(record[params_.key_field], mapping.key_type)
        value = _from_builtins(record[params_.value_field], mapping.value_type)
        mapping.put(key, value)

    return mapping


def dumps(
    mapping: TypedMapping[Any, Any], params: SerializationParams | None = None
) -> str:
    """
    Serialize mapping to a TOML document with entries in an array of tables.

    :raises SerializationError: If a key or value can't be represented in TOML
    """
    params_ = params or DEFAULT_PARAMS
    document = tomlkit.document()
    entries = tomlkit.aot()

    for record in serialize(mapping, params):
        table = tomlkit.table()
        try:
            for field, data in record.items():
                table.add(field, _toml_item(data))
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Record not representable in TOML: {e}") from e
        entries.append(table)

    document.add(params_.table_name, entries)
    return tomlkit.dumps(document)


def loads[KT, VT](
    text: str,
    key_type: type[KT] | str,
    value_type: type[VT] | str,
    params: SerializationParams | None = None,
) -> TypedMapping[KT, VT]:
    """
    Create mapping from a TOML document as created by `dumps()`. A document without
    the entries table yields an empty mapping.

    :raises SerializationError: If the document can't be parsed or is malformed
    """
    params_ = params or DEFAULT_PARAMS

    try:
        document = tomlkit.parse(text)
    except TOMLKitError as e:
        raise SerializationError(f"Invalid TOML document: {e}") from e

    records = document.unwrap().get(params_.table_name, [])
    return deserialize(records, key_type, value_type, params)


def _from_builtins(data: Any, type_: type) -> Any:
    """
    Reconstruct an object of `type_` from builtin data where the type is known to be
    constructible from it.
    """
    if isinstance(data, type_):
        return data

    if issubclass(type_, Enum):
        try:
            return type_(data)
        except ValueError as e:
            raise SerializationError(str(e)) from e

    if dataclasses.is_dataclass(type_) and isinstance(data, Mapping):
        try:
            hints = get_type_hints(type_)
        except (NameError, TypeError) as e:
            raise SerializationError(
                f"Failed to resolve field types of {type_.__qualname__}: {e}"
            ) from e
        kwargs = {
            name: (
                _from_builtins(value, hints[name])
                if _is_reconstructible(hints.get(name))
                else value
            )
            for name, value in data.items()
        }
        try:
            return type_(**kwargs)
        except TypeError as e:
            raise SerializationError(
                f"Failed to construct {type_.__qualname__} from {dict(data)}: {e}"
            ) from e

    return data


def _is_reconstructible(type_: Any) -> bool:
    return isinstance(type_, type) and (
        dataclasses.is_dataclass(type_) or issubclass(type_, Enum)
    )


def _toml_item(data: Any) -> Any:
    """
    Convert builtin data to a TOML item, using inline tables for mappings so
    records stay self-contained within their array of tables entry.
    """
    if isinstance(data, Mapping):
        table = tomlkit.inline_table()
        for k, v in data.items():
            table.append(k, _toml_item(v))
        return table
    if isinstance(data, list):
        array = tomlkit.array()
        for v in data:
            array.append(_toml_item(v))
        return array
    return tomlkit.item(data)

"""
Mappings from arbitrary objects to objects, with type constraints on keys and
values.
"""

from .exceptions import (
    InvalidKeyTypeError,
    InvalidTypeError,
    InvalidValueTypeError,
    KeyNotFoundError,
    MutationDuringIterationError,
    SerializationError,
    TypedMappingError,
)
from .mapping import EntryCursor, PositionView, TypedMapping

__all__ = [
    "TypedMapping",
    "EntryCursor",
    "PositionView",
    "TypedMappingError",
    "InvalidTypeError",
    "InvalidKeyTypeError",
    "InvalidValueTypeError",
    "KeyNotFoundError",
    "MutationDuringIterationError",
    "SerializationError",
]

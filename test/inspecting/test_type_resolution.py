"""
Tests for resolving type identities and extracting type parameters.
"""

from collections import OrderedDict
from typing import Protocol, TypeVar, runtime_checkable

from pytest import raises

from typedmap import InvalidTypeError, TypedMapping
from typedmap.inspecting.classes import extract_args, resolve_type


class BaseContainer[T]:
    """
    Base generic container.
    """


class IntContainer(BaseContainer[int]):
    pass


class MiddleContainer[T](BaseContainer[T]):
    pass


class IntMiddleContainer(MiddleContainer[int]):
    pass


class BaseTransformer[InputT, OutputT]:
    pass


class StringToIntTransformer(BaseTransformer[str, int]):
    pass


@runtime_checkable
class Named(Protocol):
    name: str


class NotRuntimeNamed(Protocol):
    name: str


def test_resolve_type():
    assert resolve_type(int) is int
    assert resolve_type("int") is int
    assert resolve_type("collections.OrderedDict") is OrderedDict
    assert resolve_type(Named) is Named


def test_resolve_nested_path():
    """
    Test resolving a class nested in another class.
    """
    cls = resolve_type(f"{__name__}.Outer.Inner")
    assert cls is Outer.Inner


class Outer:
    class Inner:
        pass


def test_resolve_type_errors():
    with raises(InvalidTypeError, match="Class 'Missing' does not exist"):
        resolve_type("Missing")

    with raises(InvalidTypeError, match="no importable module"):
        resolve_type("missing_module.Missing")

    with raises(InvalidTypeError, match="has no attribute path 'Missing'"):
        resolve_type("collections.Missing")

    with raises(InvalidTypeError, match="does not refer to a class"):
        resolve_type("len")

    with raises(InvalidTypeError, match="Not a class or class path"):
        resolve_type("")

    with raises(InvalidTypeError, match="Not a class or class path"):
        resolve_type(42)  # type: ignore

    with raises(InvalidTypeError, match="not runtime-checkable"):
        resolve_type(NotRuntimeNamed)


def test_extract_args():
    assert extract_args(IntContainer, BaseContainer) == (int,)
    assert extract_args(IntMiddleContainer, BaseContainer) == (int,)
    assert extract_args(StringToIntTransformer, BaseTransformer) == (str, int)


def test_extract_args_with_unresolved():
    """
    Test that unresolved TypeVars are included.
    """

    class GenericTransformer[T](BaseTransformer[T, int]):
        pass

    args = extract_args(GenericTransformer, BaseTransformer)

    assert len(args) == 2
    assert isinstance(args[0], TypeVar)
    assert args[1] is int


def test_extract_args_not_found():
    with raises(ValueError, match="not found in .*?'s inheritance hierarchy"):
        extract_args(IntContainer, BaseTransformer)


def test_protocol_key_type():
    """
    Test a runtime-checkable protocol as key type.
    """

    class Person:
        name: str

        def __init__(self, name: str):
            self.name = name

        def __eq__(self, other: object) -> bool:
            return isinstance(other, Person) and other.name == self.name

    mapping = TypedMapping(Named, int)
    mapping.put(Person("alice"), 1)

    assert mapping.get(Person("alice")) == 1
    assert not mapping.is_valid_key(object())
    assert mapping.is_valid_key_class(Person)

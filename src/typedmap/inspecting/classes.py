"""
Utilities to inspect and resolve classes.
"""

from __future__ import annotations

import builtins
from importlib import import_module
from typing import (
    Any,
    TypeVar,
    cast,
    get_args,
    get_origin,
)

from ..exceptions import InvalidTypeError

__all__ = [
    "extract_args",
    "resolve_type",
]


def resolve_type(identity: type | str, /) -> type:
    """
    Resolve a type identity to a class. The identity may be a class or a dotted path
    like `"package.module.Class"`; a bare name like `"int"` is looked up in
    builtins.

    :param identity: Class or dotted path to a class
    :raises InvalidTypeError: If the identity doesn't name an existing class
    :return: The resolved class
    """
    if isinstance(identity, str) and identity:
        obj = _lookup_path(identity)
        if not isinstance(obj, type):
            raise InvalidTypeError(
                f"Path '{identity}' does not refer to a class: {obj!r}"
            )
    elif isinstance(identity, type):
        obj = identity
    else:
        raise InvalidTypeError(f"Not a class or class path: {identity!r}")

    # isinstance() raises for protocols without @runtime_checkable
    if getattr(obj, "_is_protocol", False) and not getattr(
        obj, "_is_runtime_protocol", False
    ):
        raise InvalidTypeError(f"Protocol {obj.__qualname__} is not runtime-checkable")

    # special forms like typing.Any are classes but reject isinstance()
    try:
        isinstance(None, obj)
    except TypeError as e:
        raise InvalidTypeError(
            f"Class {obj!r} does not support instance checks: {e}"
        ) from e

    return obj


def extract_args(cls: type, base_cls: type) -> tuple[type | TypeVar, ...]:
    """
    Extract from `cls` the type parameters that were passed to `base_cls`.

    :param cls: The class to extract type parameters from
    :param base_cls: The base class whose type parameters should be extracted
    :raises ValueError: If `base_cls` is not in `cls`'s inheritance hierarchy
    :return: Tuple of resolved types or unresolved TypeVars, in parameter order
    """
    args = _find_args(cls, base_cls)
    if args is None:
        raise ValueError(
            f"Base class {base_cls} not found in {cls}'s inheritance hierarchy"
        )
    return tuple(args)


def _lookup_path(path: str) -> Any:
    parts = path.split(".")

    if not all(parts):
        raise InvalidTypeError(f"Class path '{path}' has an empty segment")

    if len(parts) == 1:
        try:
            return getattr(builtins, path)
        except AttributeError:
            raise InvalidTypeError(f"Class '{path}' does not exist") from None

    # import the longest prefix which is a module, then walk attributes
    for split in range(len(parts) - 1, 0, -1):
        module_name = ".".join(parts[:split])
        try:
            obj: Any = import_module(module_name)
        except (ImportError, ValueError, TypeError):
            continue

        for attr in parts[split:]:
            try:
                obj = getattr(obj, attr)
            except AttributeError:
                raise InvalidTypeError(
                    f"Class '{path}' does not exist: '{module_name}' has no "
                    f"attribute path '{'.'.join(parts[split:])}'"
                ) from None
        return obj

    raise InvalidTypeError(f"Class '{path}' does not exist: no importable module")


def _get_bases(cls: type, attr: str) -> list[type]:
    return list(cast(tuple[type], getattr(cls, attr, ())))


def _find_args(
    cls: type, base_cls: type, type_var_map: dict[TypeVar, Any] | None = None
) -> list[type | TypeVar] | None:
    tv_map = type_var_map if type_var_map is not None else {}
    origin, args = get_origin(cls), get_args(cls)

    # build type_var_map for this level first
    if origin and isinstance(origin, type):
        type_params = getattr(origin, "__parameters__", ())

        if type_params and args:
            new_tv_map = tv_map.copy()

            for type_param, arg in zip(type_params, args):
                if isinstance(type_param, TypeVar):
                    if isinstance(arg, TypeVar):
                        # chain TypeVar substitutions
                        if arg in tv_map:
                            new_tv_map[type_param] = tv_map[arg]
                    else:
                        new_tv_map[type_param] = arg

            tv_map = new_tv_map

    if origin is base_cls:
        base_type_params = cast(tuple[Any], getattr(base_cls, "__parameters__", ()))
        assert len(base_type_params) == len(
            args
        ), f"Type parameters of {origin} mismatched with args: parameters={base_type_params}, args={args}"

        args_list: list[type | TypeVar] = []
        for arg in args:
            # resolve TypeVar to concrete type if we have a substitution
            if isinstance(arg, TypeVar) and arg in tv_map:
                arg = tv_map[arg]
            args_list.append(arg)

        return args_list

    # recurse into bases - use origin's bases if we have a generic alias
    base_check = origin if isinstance(origin, type) else cls
    bases = _get_bases(base_check, "__orig_bases__") + _get_bases(
        base_check, "__bases__"
    )

    for base in bases:
        if (args := _find_args(base, base_cls, tv_map)) is not None:
            return args

    return None

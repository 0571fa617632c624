"""User-facing API entrypoints for objmap."""

import typing
from typing import TypeVar

from objmap.runtime import Mapper
from objmap.runtime import resolve_mapper

T = TypeVar("T")


def _normalize_declared_type(declared_type: object) -> type:
    """Reduce a declared type annotation to a class.

    :param declared_type: Class or parameterized generic such as ``tuple[str, int]``.
    :returns: Class used as the cache key.
    :raises TypeError: If ``declared_type`` is not a class.
    """
    origin: object = typing.get_origin(declared_type)
    if isinstance(origin, type) is True:
        return typing.cast(type, origin)
    if isinstance(declared_type, type) is False:
        raise TypeError(f"declared_type must be a class, got {declared_type!r}")
    return typing.cast(type, declared_type)


def mapper_for(declared_type: type[T]) -> Mapper:
    """Return the cached mapper for one declared type.

    :param declared_type: Declared type of the values to map.
    :returns: The same mapper object on every call for ``declared_type``.
    :raises TypeError: If ``declared_type`` is not a class.
    """
    return resolve_mapper(_normalize_declared_type(declared_type))


def map_of(value: T, declared_type: type[T] | None = None) -> dict[str, object]:
    """Map ``value`` to an ordered dict of its public instance members.

    Members are read from the runtime type of ``value``. Properties come first,
    then fields, each in declaration order. Enums, numbers, text, arrays and
    callables map to an empty dict.

    :param value: Value to map; must not be ``None``.
    :param declared_type: Type the caller knows ``value`` by. Defaults to ``type(value)``.
    :returns: New ``dict`` of member name to member value.
    :raises TypeError: If ``value`` is ``None`` or not an instance of ``declared_type``.
    :raises MapperConstructionError: If the members of the runtime type cannot be mapped.
    """
    if value is None:
        raise TypeError("map_of() requires a non-None value")

    resolved_type: type
    if declared_type is None:
        resolved_type = type(value)
    else:
        resolved_type = _normalize_declared_type(declared_type)
        if isinstance(value, resolved_type) is False:
            raise TypeError(
                f"value of type {type(value).__qualname__} is not an instance of {resolved_type.__qualname__}"
            )
    mapper: Mapper = resolve_mapper(resolved_type)
    return mapper(value)

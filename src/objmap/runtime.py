"""Process-wide mapper caches keyed by declared and runtime type."""

import copy
import logging
import threading
from collections.abc import Callable

from objmap.builder import build_exact_mapper
from objmap.errors import MapperConstructionError
from objmap.shapes import Shape
from objmap.shapes import allows_subclasses
from objmap.shapes import classify_shape
from objmap.shapes import is_opaque_type

Mapper = Callable[[object], dict[str, object]]
_LOGGER: logging.Logger = logging.getLogger(__name__)
_DECLARED_LOCK: threading.RLock = threading.RLock()
_MAPPERS_BY_DECLARED_TYPE: dict[type, Mapper] = {}


def map_nothing(instance: object) -> dict[str, object]:
    """Map an opaque value to an empty mapping.

    :param instance: Ignored value.
    :returns: A new empty dict.
    """
    _ = instance
    return {}


class _FailedMapper:
    """Mapper standing in for a type whose construction failed."""

    __slots__ = ("error",)

    error: MapperConstructionError

    def __init__(self, error: MapperConstructionError) -> None:
        """Initialize a failed mapper.

        :param error: Construction failure raised on every call.
        """
        self.error = error

    def __call__(self, instance: object) -> dict[str, object]:
        """Raise a fresh copy of the recorded construction failure.

        :param instance: Ignored value.
        :raises MapperConstructionError: Always.
        """
        _ = instance
        raise copy.copy(self.error)


def _build_or_fail(concrete_type: type) -> Mapper:
    """Build an exact mapper, recording construction failures as failed mappers.

    :param concrete_type: Concrete runtime type.
    :returns: Working mapper or a mapper that raises the construction failure.
    """
    try:
        return build_exact_mapper(concrete_type)
    except MapperConstructionError as error:
        return _FailedMapper(error)


def _build_for_runtime_type(runtime_type: type) -> Mapper:
    """Create the mapper used for instances of one runtime type.

    :param runtime_type: Concrete runtime type.
    :returns: Empty mapper for opaque types, otherwise an exact or failed mapper.
    """
    if is_opaque_type(runtime_type) is True:
        return map_nothing
    return _build_or_fail(runtime_type)


class DynamicDispatchCache:
    """Dispatch to exact mappers by runtime type for one extensible declared type."""

    declared_type: type
    _lock: threading.Lock
    _mappers_by_runtime_type: dict[type, Mapper]

    def __init__(self, declared_type: type) -> None:
        """Initialize an empty dispatch cache.

        :param declared_type: Declared type whose instances are dispatched here.
        """
        self.declared_type = declared_type
        self._lock = threading.Lock()
        self._mappers_by_runtime_type = {}

    def mapper_for_runtime_type(self, runtime_type: type) -> Mapper:
        """Return the stored exact mapper for ``runtime_type``, building it on first use.

        Two threads may build concurrently; the first stored mapper wins.

        :param runtime_type: Concrete runtime type.
        :returns: The stored mapper for that runtime type.
        """
        existing: Mapper | None = self._mappers_by_runtime_type.get(runtime_type)
        if existing is not None:
            return existing

        candidate: Mapper = _build_for_runtime_type(runtime_type)
        with self._lock:
            stored: Mapper = self._mappers_by_runtime_type.setdefault(runtime_type, candidate)
        if stored is candidate:
            _LOGGER.debug(
                "Cached mapper for runtime type %s under declared type %s",
                runtime_type.__qualname__,
                self.declared_type.__qualname__,
            )
        return stored

    def runtime_types(self) -> list[type]:
        """List the runtime types that have a stored mapper.

        :returns: Runtime types in first-seen order.
        """
        with self._lock:
            return list(self._mappers_by_runtime_type)

    def __call__(self, instance: object) -> dict[str, object]:
        """Map ``instance`` using the mapper of its runtime type.

        :param instance: Instance of the declared type or a subclass.
        :returns: Ordered member name to value mapping.
        """
        mapper: Mapper = self.mapper_for_runtime_type(type(instance))
        return mapper(instance)

    def __repr__(self) -> str:
        return f"<DynamicDispatchCache {self.declared_type.__qualname__} ({len(self._mappers_by_runtime_type)} runtime types)>"


class FinalTypeMapper:
    """Exact mapper for a class marked final that still dispatches stray subclasses.

    :func:`typing.final` is not enforced at runtime, so instances whose type is
    not exactly ``target_type`` go through a dispatch cache of their own.
    """

    __slots__ = ("target_type", "exact", "fallback")

    target_type: type
    exact: Mapper
    fallback: DynamicDispatchCache

    def __init__(self, target_type: type) -> None:
        """Build the exact mapper and an empty fallback dispatch cache.

        :param target_type: Class marked final.
        """
        self.target_type = target_type
        self.exact = _build_or_fail(target_type)
        self.fallback = DynamicDispatchCache(target_type)

    def __call__(self, instance: object) -> dict[str, object]:
        if type(instance) is self.target_type:
            return self.exact(instance)
        return self.fallback(instance)

    def __repr__(self) -> str:
        return f"<FinalTypeMapper {self.target_type.__qualname__}>"


def _create_mapper(declared_type: type) -> Mapper:
    """Classify ``declared_type`` and create its top-level mapper.

    :param declared_type: Declared type.
    :returns: Empty, exact, final-guarded, failed or dynamic mapper.
    """
    shape: Shape = classify_shape(declared_type)
    _LOGGER.debug("Resolving declared type %s as %s", declared_type.__qualname__, shape)
    if shape == "opaque":
        return map_nothing
    if shape == "exact":
        if allows_subclasses(declared_type) is True:
            return FinalTypeMapper(declared_type)
        return _build_or_fail(declared_type)
    return DynamicDispatchCache(declared_type)


def resolve_mapper(declared_type: type) -> Mapper:
    """Return the process-wide mapper for ``declared_type``.

    The first call classifies the type and builds its mapper; later calls
    return the same object without locking.

    :param declared_type: Declared type.
    :returns: Cached mapper.
    """
    existing: Mapper | None = _MAPPERS_BY_DECLARED_TYPE.get(declared_type)
    if existing is not None:
        return existing

    with _DECLARED_LOCK:
        existing = _MAPPERS_BY_DECLARED_TYPE.get(declared_type)
        if existing is not None:
            return existing
        mapper: Mapper = _create_mapper(declared_type)
        _MAPPERS_BY_DECLARED_TYPE[declared_type] = mapper
        return mapper


def cached_types() -> list[type]:
    """List the declared types that have a resolved mapper.

    :returns: Declared types in resolution order.
    """
    with _DECLARED_LOCK:
        return list(_MAPPERS_BY_DECLARED_TYPE)

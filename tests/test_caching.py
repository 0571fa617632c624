"""Cache and concurrency tests for objmap."""

import concurrent.futures
import logging
import threading

import pytest

import objmap.runtime
from objmap import DynamicDispatchCache
from objmap import ExactMapper
from objmap import UnsupportedMemberAccessError
from objmap import describe_members
from objmap import map_of
from objmap import mapper_for
from objmap.members import collect_members
from objmap.runtime import FinalTypeMapper
from objmap.runtime import cached_types
from objmap.runtime import map_nothing
from tests.fixtures.models import BrokenGetter
from tests.fixtures.models import Color
from tests.fixtures.models import Counting
from tests.fixtures.models import Derived
from tests.fixtures.models import Ordered
from tests.fixtures.models import Sealed
from tests.fixtures.models import StraySealed
from tests.fixtures.models import Virtual


def _fresh_type() -> type:
    """Create a class no other test has mapped yet.

    :returns: New extensible class with one property and one field.
    """

    class Fresh:
        """Function-local class used to observe first-use behavior."""

        label: str

        def __init__(self, label: str) -> None:
            """Initialize the label.

            :param label: Label text.
            """
            self.label = label

        @property
        def shout(self) -> str:
            return self.label.upper()

    return Fresh


def test_mapper_for_returns_same_object() -> None:
    """One mapper exists per declared type."""
    first: object = mapper_for(Ordered)
    second: object = mapper_for(Ordered)
    assert first is second
    assert Ordered in cached_types()


def test_parameterized_declared_type_shares_origin_cache() -> None:
    """Generic aliases resolve to the cache entry of their origin."""
    assert mapper_for(tuple[str, int]) is mapper_for(tuple)


def test_mapper_kinds_follow_shape() -> None:
    """Opaque, exact and dynamic declared types get matching mappers."""
    assert mapper_for(Color) is map_nothing
    assert isinstance(mapper_for(Sealed), FinalTypeMapper) is True
    assert isinstance(mapper_for(type(_fresh_type.__code__)), ExactMapper) is True
    assert isinstance(mapper_for(Virtual), DynamicDispatchCache) is True


def test_descriptor_list_is_stable_across_calls() -> None:
    """The descriptor tuple is derived once per runtime type."""
    first = describe_members(Derived)
    _ = map_of(Derived("Test"), Virtual)
    second = describe_members(Derived)
    assert first is second
    assert [descriptor.name for descriptor in first] == ["Text"]


def test_dispatch_cache_stores_one_mapper_per_runtime_type() -> None:
    """Runtime types are recorded once per declared type."""
    base_type: type = _fresh_type()
    derived_type: type = type("FreshDerived", (base_type,), {})
    _ = map_of(base_type("a"), base_type)
    _ = map_of(derived_type("b"), base_type)
    _ = map_of(derived_type("c"), base_type)
    dispatch = mapper_for(base_type)
    assert isinstance(dispatch, DynamicDispatchCache) is True
    assert dispatch.runtime_types() == [base_type, derived_type]


def test_declared_types_do_not_share_dispatch_storage() -> None:
    """Two declared types build separate mappers for the same runtime type."""
    base_type: type = _fresh_type()
    instance: object = base_type("x")
    via_own_type: dict[str, object] = map_of(instance, base_type)
    via_object: dict[str, object] = map_of(instance, object)
    assert via_own_type == via_object == {"shout": "X", "label": "x"}

    own_dispatch = mapper_for(base_type)
    object_dispatch = mapper_for(object)
    assert isinstance(own_dispatch, DynamicDispatchCache) is True
    assert isinstance(object_dispatch, DynamicDispatchCache) is True
    own_mapper: object = own_dispatch.mapper_for_runtime_type(base_type)
    object_mapper: object = object_dispatch.mapper_for_runtime_type(base_type)
    assert own_mapper is not object_mapper


def test_construction_failure_is_cached(monkeypatch: pytest.MonkeyPatch) -> None:
    """A type that failed to build is never rebuilt."""
    with pytest.raises(UnsupportedMemberAccessError):
        map_of(BrokenGetter())

    def _unexpected_build(concrete_type: type) -> ExactMapper:
        """Fail when a rebuild is attempted.

        :param concrete_type: Requested type.
        :raises AssertionError: Always.
        """
        raise AssertionError(f"rebuilt mapper for {concrete_type!r}")

    monkeypatch.setattr(objmap.runtime, "build_exact_mapper", _unexpected_build)
    with pytest.raises(UnsupportedMemberAccessError):
        map_of(BrokenGetter())


def test_getter_errors_propagate_and_are_not_cached() -> None:
    """Errors raised while reading an instance belong to that call only."""

    class Fragile:
        """Class whose getter fails for negative values."""

        raw: int

        def __init__(self, raw: int) -> None:
            """Initialize the raw value.

            :param raw: Raw value.
            """
            self.raw = raw

        @property
        def checked(self) -> int:
            if self.raw < 0:
                raise ValueError("negative")
            return self.raw

    with pytest.raises(ValueError):
        map_of(Fragile(-1))
    mapping: dict[str, object] = map_of(Fragile(2))
    assert mapping == {"checked": 2, "raw": 2}


def test_getters_run_once_per_call() -> None:
    """Each call reads every member exactly once."""
    before: int = Counting.calls
    mapping: dict[str, object] = map_of(Counting())
    assert Counting.calls == before + 1
    assert mapping == {"value": before + 1}


def test_concurrent_first_use_installs_one_mapper() -> None:
    """Racing first calls observe a single declared-type mapper."""
    base_type: type = _fresh_type()
    barrier: threading.Barrier = threading.Barrier(8)

    def _resolve(_: int) -> object:
        """Resolve the mapper after all workers are ready.

        :returns: Resolved mapper.
        """
        barrier.wait(timeout=10)
        return mapper_for(base_type)

    with concurrent.futures.ThreadPoolExecutor(max_workers=8) as executor:
        mappers: list[object] = list(executor.map(_resolve, range(8)))
    first: object = mappers[0]
    assert all(mapper is first for mapper in mappers) is True


def test_concurrent_runtime_type_population_is_consistent() -> None:
    """Racing dispatches for one runtime type all use the stored mapper."""
    base_type: type = _fresh_type()
    derived_type: type = type("FreshDerived", (base_type,), {})
    dispatch: DynamicDispatchCache = DynamicDispatchCache(base_type)
    barrier: threading.Barrier = threading.Barrier(8)

    def _lookup(_: int) -> object:
        """Look up the derived mapper after all workers are ready.

        :returns: Stored mapper.
        """
        barrier.wait(timeout=10)
        return dispatch.mapper_for_runtime_type(derived_type)

    with concurrent.futures.ThreadPoolExecutor(max_workers=8) as executor:
        mappers: list[object] = list(executor.map(_lookup, range(8)))
    first: object = mappers[0]
    assert all(mapper is first for mapper in mappers) is True
    assert dispatch.runtime_types() == [derived_type]


def test_concurrent_mapping_of_distinct_instances() -> None:
    """Concurrent calls with different instances do not interfere."""
    base_type: type = _fresh_type()
    labels: list[str] = [f"label-{index}" for index in range(64)]

    def _map(label: str) -> dict[str, object]:
        """Map one fresh instance.

        :param label: Instance label.
        :returns: Mapping.
        """
        return map_of(base_type(label), base_type)

    with concurrent.futures.ThreadPoolExecutor(max_workers=8) as executor:
        mappings: list[dict[str, object]] = list(executor.map(_map, labels))
    expected: list[dict[str, object]] = [{"shout": label.upper(), "label": label} for label in labels]
    assert mappings == expected


def test_cache_population_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    """Resolution of a new declared type emits debug records."""
    base_type: type = _fresh_type()
    with caplog.at_level(logging.DEBUG, logger="objmap"):
        _ = map_of(base_type("x"))
    assert "Resolving declared type" in caplog.text
    assert "Cached mapper for runtime type" in caplog.text


def test_subclass_of_final_class_uses_its_own_members() -> None:
    """An instance of a subclass of a final class is mapped by its runtime type."""
    stray = StraySealed("Test")
    mapping: dict[str, object] = map_of(stray, Sealed)
    assert mapping == {"Text": "sub", "extra": 7}

    exact_mapping: dict[str, object] = map_of(Sealed("Test"), Sealed)
    assert exact_mapping == {"Text": "Test"}

    final_mapper = mapper_for(Sealed)
    assert isinstance(final_mapper, FinalTypeMapper) is True
    assert final_mapper.fallback.runtime_types() == [StraySealed]


@pytest.mark.parametrize("value", [1, 1.5, True, 2 + 3j, "Test", Color.RED, [1, 2], len])
def test_opaque_runtime_types_stay_empty_through_a_base_type(value: object) -> None:
    """Opaque values map to nothing even when declared as ``object``."""
    mapping: dict[str, object] = map_of(value, object)
    assert mapping == {}


def test_cached_failure_is_raised_as_a_fresh_error() -> None:
    """Each call gets its own error without context from earlier callers."""
    try:
        raise KeyError("unrelated")
    except KeyError:
        with pytest.raises(UnsupportedMemberAccessError) as inside_info:
            map_of(BrokenGetter())

    with pytest.raises(UnsupportedMemberAccessError) as later_info:
        map_of(BrokenGetter())

    inside_error: UnsupportedMemberAccessError = inside_info.value
    later_error: UnsupportedMemberAccessError = later_info.value
    assert later_error is not inside_error
    assert later_error.__context__ is None
    assert later_error.__cause__ is None
    assert later_error.member_name == "broken"
    assert later_error.target_type is BrokenGetter
    assert str(later_error) == str(inside_error)


def test_collect_members_rebuilds_without_caching() -> None:
    """The uncached enumeration matches the cached descriptor names."""
    first = collect_members(Ordered)
    second = collect_members(Ordered)
    cached = describe_members(Ordered)
    assert first is not second
    assert [descriptor.name for descriptor in first] == [descriptor.name for descriptor in cached]

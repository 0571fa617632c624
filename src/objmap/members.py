"""Member descriptors and member enumeration for concrete types."""

import dataclasses
import functools
import inspect
import operator
import threading
import types
import typing
from collections.abc import Callable
from typing import Literal

from objmap.errors import UnsupportedMemberAccessError

MemberKind = Literal["property", "field", "item"]
Accessor = Callable[[object], object]
ITEM_NAME_PREFIX: str = "Item"
_PROPERTY_TYPES: tuple[type, ...] = (property, functools.cached_property, types.GetSetDescriptorType)
_DESCRIPTORS_LOCK: threading.Lock = threading.Lock()
_DESCRIPTORS_BY_TYPE: dict[type, tuple["MemberDescriptor", ...]] = {}
_ITEM_DESCRIPTORS_BY_ARITY: dict[int, tuple["MemberDescriptor", ...]] = {}


class MemberDescriptor:
    """One readable public instance member of a concrete type."""

    __slots__ = ("name", "kind", "owner", "accessor")

    name: str
    kind: MemberKind
    owner: type
    accessor: Accessor

    def __init__(self, name: str, kind: MemberKind, owner: type, accessor: Accessor) -> None:
        """Initialize a member descriptor.

        :param name: Member name, used as the mapping key.
        :param kind: Member kind.
        :param owner: Class that provides the effective definition of the member.
        :param accessor: Callable that reads the member from an instance.
        """
        self.name = name
        self.kind = kind
        self.owner = owner
        self.accessor = accessor

    def read(self, instance: object) -> object:
        """Read this member from ``instance``.

        :param instance: Instance of the described type.
        :returns: Current member value.
        """
        return self.accessor(instance)

    def __repr__(self) -> str:
        return f"MemberDescriptor({self.name!r}, {self.kind!r}, owner={self.owner.__qualname__})"


def is_public_name(name: str) -> bool:
    """Report whether ``name`` names a public member.

    :param name: Attribute name.
    :returns: ``True`` when the name has no leading underscore.
    """
    return name.startswith("_") is False


def _lookup_class_attribute(concrete_type: type, name: str) -> tuple[type | None, object]:
    """Find the effective class-level definition of ``name`` following the MRO.

    :param concrete_type: Type to search.
    :param name: Attribute name.
    :returns: Tuple of ``(owner, attribute)``; ``(None, None)`` when no class defines it.
    """
    for klass in concrete_type.__mro__:
        class_namespace: dict[str, object] = vars(klass)
        if name in class_namespace:
            return klass, class_namespace[name]
    return None, None


def _is_class_var(annotation: object) -> bool:
    """Report whether a class annotation marks a static (``ClassVar``) member.

    :param annotation: Annotation object or string.
    :returns: ``True`` for ``ClassVar`` annotations.
    """
    if annotation is typing.ClassVar:
        return True
    if typing.get_origin(annotation) is typing.ClassVar:
        return True
    if isinstance(annotation, str) is True:
        stripped: str = annotation.strip()
        return stripped.startswith("ClassVar") or stripped.startswith("typing.ClassVar")
    return False


def _declared_property_names(klass: type) -> list[str]:
    """List the public property-like names declared directly on ``klass``.

    :param klass: One class of an MRO.
    :returns: Names in declaration order.
    """
    names: list[str] = []
    for name, attribute in vars(klass).items():
        if is_public_name(name) is False:
            continue
        if isinstance(attribute, _PROPERTY_TYPES) is True:
            names.append(name)
    return names


def _declared_field_names(klass: type) -> list[str]:
    """List the public instance field names declared directly on ``klass``.

    Dataclass fields, named tuple fields, slots and member descriptors of
    builtin types, and non-``ClassVar`` annotations count as fields.

    :param klass: One class of an MRO.
    :returns: Names in declaration order, possibly with repeats.
    """
    names: list[str] = []
    class_namespace: dict[str, object] = vars(klass)
    if "__dataclass_fields__" in class_namespace:
        names.extend(field.name for field in dataclasses.fields(klass))

    tuple_fields: object = class_namespace.get("_fields")
    if isinstance(tuple_fields, tuple) is True and issubclass(klass, tuple) is True:
        names.extend(str(name) for name in tuple_fields)

    for name, attribute in class_namespace.items():
        if isinstance(attribute, types.MemberDescriptorType) is True:
            names.append(name)

    # Dataclass fields already exclude ClassVar and InitVar annotations.
    if "__dataclass_fields__" not in class_namespace:
        annotations: dict[str, object] = inspect.get_annotations(klass)
        for name, annotation in annotations.items():
            if _is_class_var(annotation) is True:
                continue
            names.append(name)

    return [name for name in names if is_public_name(name) is True]


def _ordered_unique(names_by_class: list[list[str]]) -> list[str]:
    """Flatten per-class name lists keeping the first position of each name.

    :param names_by_class: Name lists ordered base class first.
    :returns: Unique names in first-declaration order.
    """
    seen: set[str] = set()
    ordered: list[str] = []
    for names in names_by_class:
        for name in names:
            if name in seen:
                continue
            seen.add(name)
            ordered.append(name)
    return ordered


def _property_accessor(concrete_type: type, name: str, owner: type, attribute: object) -> Accessor | None:
    """Build the accessor for one property-like member.

    :param concrete_type: Type being described.
    :param name: Member name.
    :param owner: Class providing the effective definition.
    :param attribute: Effective class attribute.
    :returns: Accessor, or ``None`` when the member is not readable.
    :raises UnsupportedMemberAccessError: If the getter exists but cannot be called.
    """
    if isinstance(attribute, property) is True:
        getter: object = attribute.fget
        if getter is None:
            return None
        if callable(getter) is False:
            raise UnsupportedMemberAccessError(
                concrete_type,
                name,
                f"getter declared on {owner.__qualname__} is not callable",
            )
        return typing.cast(Accessor, getter)
    return operator.attrgetter(name)


def _describe_properties(concrete_type: type, mro: list[type]) -> list[MemberDescriptor]:
    """Describe the readable public properties of ``concrete_type``.

    :param concrete_type: Type being described.
    :param mro: Classes to scan, base class first.
    :returns: Property descriptors in declaration order.
    """
    descriptors: list[MemberDescriptor] = []
    names: list[str] = _ordered_unique([_declared_property_names(klass) for klass in mro])
    for name in names:
        owner, attribute = _lookup_class_attribute(concrete_type, name)
        if owner is None:
            continue
        # A subclass may replace an inherited property with a non-property.
        if isinstance(attribute, _PROPERTY_TYPES) is False:
            continue
        accessor: Accessor | None = _property_accessor(concrete_type, name, owner, attribute)
        if accessor is None:
            continue
        descriptors.append(MemberDescriptor(name, "property", owner, accessor))
    return descriptors


def _describe_fields(concrete_type: type, mro: list[type]) -> list[MemberDescriptor]:
    """Describe the public instance fields of ``concrete_type``.

    :param concrete_type: Type being described.
    :param mro: Classes to scan, base class first.
    :returns: Field descriptors in declaration order.
    """
    descriptors: list[MemberDescriptor] = []
    names: list[str] = _ordered_unique([_declared_field_names(klass) for klass in mro])
    for name in names:
        owner, attribute = _lookup_class_attribute(concrete_type, name)
        if owner is None:
            owner = _first_declaring_class(mro, name)
        elif isinstance(attribute, (staticmethod, classmethod, types.FunctionType)) is True:
            continue
        descriptors.append(MemberDescriptor(name, "field", owner, operator.attrgetter(name)))
    return descriptors


def _first_declaring_class(mro: list[type], name: str) -> type:
    """Return the most derived class that declares field ``name``.

    :param mro: Classes, base class first.
    :param name: Field name.
    :returns: Declaring class.
    """
    for klass in reversed(mro):
        if name in _declared_field_names(klass):
            return klass
    return mro[-1]


def collect_members(concrete_type: type) -> tuple[MemberDescriptor, ...]:
    """Enumerate properties then fields of ``concrete_type`` without caching.

    Every call walks the MRO again; :func:`describe_members` is the cached form.

    :param concrete_type: Type being described.
    :returns: New descriptor tuple.
    :raises UnsupportedMemberAccessError: If an eligible member cannot be read.
    """
    mro: list[type] = [klass for klass in reversed(concrete_type.__mro__) if klass is not object]
    properties: list[MemberDescriptor] = _describe_properties(concrete_type, mro)
    fields: list[MemberDescriptor] = _describe_fields(concrete_type, mro)
    return tuple(properties + fields)


def describe_members(concrete_type: type) -> tuple[MemberDescriptor, ...]:
    """Return the cached member descriptors of one concrete type.

    Properties come first in declaration order, then fields. Positional tuple
    items are not included; see :func:`describe_items`. Names are not checked
    for collisions here.

    :param concrete_type: Runtime type whose members are described.
    :returns: The same descriptor tuple on every call for ``concrete_type``.
    :raises UnsupportedMemberAccessError: If an eligible member cannot be read.
    """
    cached: tuple[MemberDescriptor, ...] | None = _DESCRIPTORS_BY_TYPE.get(concrete_type)
    if cached is not None:
        return cached

    descriptors: tuple[MemberDescriptor, ...] = collect_members(concrete_type)
    with _DESCRIPTORS_LOCK:
        return _DESCRIPTORS_BY_TYPE.setdefault(concrete_type, descriptors)


def describe_items(arity: int) -> tuple[MemberDescriptor, ...]:
    """Return the cached positional item descriptors for tuples of ``arity``.

    :param arity: Tuple length.
    :returns: Descriptors named ``Item1`` to ``Item<arity>``.
    """
    cached: tuple[MemberDescriptor, ...] | None = _ITEM_DESCRIPTORS_BY_ARITY.get(arity)
    if cached is not None:
        return cached

    descriptors: tuple[MemberDescriptor, ...] = tuple(
        MemberDescriptor(f"{ITEM_NAME_PREFIX}{index + 1}", "item", tuple, operator.itemgetter(index))
        for index in range(arity)
    )
    with _DESCRIPTORS_LOCK:
        return _ITEM_DESCRIPTORS_BY_ARITY.setdefault(arity, descriptors)


def has_positional_items(concrete_type: type) -> bool:
    """Report whether instances of ``concrete_type`` expose positional items.

    :param concrete_type: Runtime type.
    :returns: ``True`` for tuples that are not named tuples.
    """
    if issubclass(concrete_type, tuple) is False:
        return False
    return hasattr(concrete_type, "_fields") is False


def is_item_name(name: str) -> bool:
    """Report whether ``name`` has the form of a positional item name.

    :param name: Member name.
    :returns: ``True`` for ``Item1``, ``Item2`` and so on.
    """
    if name.startswith(ITEM_NAME_PREFIX) is False:
        return False
    suffix: str = name[len(ITEM_NAME_PREFIX):]
    return suffix.isdigit() is True and suffix.startswith("0") is False

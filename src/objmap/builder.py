"""Exact mapper construction for concrete types."""

import logging

from objmap.errors import DuplicateMemberNameError
from objmap.errors import UnsetFieldError
from objmap.members import MemberDescriptor
from objmap.members import describe_items
from objmap.members import describe_members
from objmap.members import has_positional_items
from objmap.members import is_item_name

_LOGGER: logging.Logger = logging.getLogger(__name__)


class ExactMapper:
    """Mapper specialized to one concrete type."""

    __slots__ = ("target_type", "descriptors")

    target_type: type
    descriptors: tuple[MemberDescriptor, ...]

    def __init__(self, target_type: type, descriptors: tuple[MemberDescriptor, ...]) -> None:
        """Initialize an exact mapper.

        :param target_type: Concrete type this mapper reads.
        :param descriptors: Members read on every call, in mapping order.
        """
        self.target_type = target_type
        self.descriptors = descriptors

    def __call__(self, instance: object) -> dict[str, object]:
        """Read every member of ``instance`` into a new mapping.

        :param instance: Instance of ``target_type``.
        :returns: Ordered member name to value mapping.
        :raises UnsetFieldError: If the instance never assigned a declared field.
        """
        mapping: dict[str, object] = {}
        for descriptor in self.descriptors:
            try:
                mapping[descriptor.name] = descriptor.accessor(instance)
            except AttributeError as error:
                if descriptor.kind != "field":
                    raise
                raise UnsetFieldError(self.target_type, descriptor.name) from error
        return mapping

    def __repr__(self) -> str:
        return f"<ExactMapper {self.target_type.__qualname__} ({len(self.descriptors)} members)>"


class PositionalExactMapper(ExactMapper):
    """Exact mapper for tuples, adding ``ItemN`` entries after named members."""

    __slots__ = ()

    def __call__(self, instance: object) -> dict[str, object]:
        mapping: dict[str, object] = super().__call__(instance)
        items: tuple[MemberDescriptor, ...] = describe_items(len(instance))  # type: ignore[arg-type]
        for descriptor in items:
            mapping[descriptor.name] = descriptor.accessor(instance)
        return mapping


def _check_unique_names(concrete_type: type, descriptors: tuple[MemberDescriptor, ...], positional: bool) -> None:
    """Reject descriptor lists where two members can produce the same key.

    :param concrete_type: Type being mapped.
    :param descriptors: Candidate descriptors.
    :param positional: Whether ``ItemN`` entries are appended for every instance.
    :raises DuplicateMemberNameError: If two descriptors share a name, or a
        member of a positional type is named like a tuple item.
    """
    seen: set[str] = set()
    for descriptor in descriptors:
        if descriptor.name in seen:
            raise DuplicateMemberNameError(concrete_type, descriptor.name)
        if positional is True and is_item_name(descriptor.name) is True:
            raise DuplicateMemberNameError(concrete_type, descriptor.name)
        seen.add(descriptor.name)


def build_exact_mapper(concrete_type: type) -> ExactMapper:
    """Build the mapper for instances whose runtime type is exactly ``concrete_type``.

    :param concrete_type: Concrete runtime type.
    :returns: New exact mapper.
    :raises DuplicateMemberNameError: If two members share a name.
    :raises UnsupportedMemberAccessError: If an eligible member cannot be read.
    """
    descriptors: tuple[MemberDescriptor, ...] = describe_members(concrete_type)
    positional: bool = has_positional_items(concrete_type)
    _check_unique_names(concrete_type, descriptors, positional)

    mapper: ExactMapper
    if positional is True:
        mapper = PositionalExactMapper(concrete_type, descriptors)
    else:
        mapper = ExactMapper(concrete_type, descriptors)
    _LOGGER.debug("Built %r", mapper)
    return mapper

"""Custom error types for objmap."""


class ObjectMapError(Exception):
    """Base class for all objmap errors."""


class MapperConstructionError(ObjectMapError):
    """Raised when a mapper cannot be built for a type."""

    target_type: type
    detail: str

    def __init__(self, target_type: type, detail: str) -> None:
        """Initialize a construction failure.

        :param target_type: Type whose mapper could not be built.
        :param detail: Human-readable failure description.
        """
        self.target_type = target_type
        self.detail = detail
        super().__init__(f"Cannot map {target_type.__module__}.{target_type.__qualname__}: {detail}")

    def __reduce__(self) -> tuple[type, tuple[object, ...]]:
        return type(self), (self.target_type, self.detail)


class DuplicateMemberNameError(MapperConstructionError):
    """Raised when two members of one type produce the same mapping key."""

    member_name: str

    def __init__(self, target_type: type, member_name: str) -> None:
        """Initialize a duplicate member failure.

        :param target_type: Type declaring the conflicting members.
        :param member_name: Name used by both members.
        """
        self.member_name = member_name
        super().__init__(target_type, f"member name {member_name!r} is declared more than once")

    def __reduce__(self) -> tuple[type, tuple[object, ...]]:
        return type(self), (self.target_type, self.member_name)


class UnsupportedMemberAccessError(MapperConstructionError):
    """Raised when an eligible member has an accessor that cannot be invoked."""

    member_name: str
    reason: str

    def __init__(self, target_type: type, member_name: str, reason: str) -> None:
        """Initialize an unsupported member failure.

        :param target_type: Type declaring the member.
        :param member_name: Name of the unreadable member.
        :param reason: Why the accessor cannot be used.
        """
        self.member_name = member_name
        self.reason = reason
        super().__init__(target_type, f"member {member_name!r} cannot be read ({reason})")

    def __reduce__(self) -> tuple[type, tuple[object, ...]]:
        return type(self), (self.target_type, self.member_name, self.reason)


class UnsetFieldError(ObjectMapError):
    """Raised when an instance has not assigned a declared field."""

    target_type: type
    member_name: str

    def __init__(self, target_type: type, member_name: str) -> None:
        """Initialize an unset field failure.

        :param target_type: Runtime type of the instance being mapped.
        :param member_name: Declared field missing from the instance.
        """
        self.target_type = target_type
        self.member_name = member_name
        super().__init__(
            f"{target_type.__module__}.{target_type.__qualname__} instance has no value for field {member_name!r}"
        )

"""Local store role value object."""

from enum import Enum


class LocalRole(str, Enum):
    """Roles a local user can hold, ordered from most to least privileged."""

    ADMINISTRATOR = "administrator"
    EDITOR = "editor"
    AUTHOR = "author"
    CONTRIBUTOR = "contributor"
    SUBSCRIBER = "subscriber"

    @classmethod
    def default(cls) -> "LocalRole":
        """Minimum-privilege role given to users created by the bridge."""
        return cls.SUBSCRIBER

    @classmethod
    def parse_many(cls, values) -> frozenset["LocalRole"]:
        """Parse role names, raising ValueError on unknown names."""
        return frozenset(
            v if isinstance(v, LocalRole) else cls(str(v).strip().lower())
            for v in values
        )

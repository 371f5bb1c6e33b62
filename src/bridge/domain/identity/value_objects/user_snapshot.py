"""Point-in-time copy of a local user's attributes."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from bridge.domain.identity.aggregates.local_user import LocalUser


@dataclass(frozen=True)
class UserSnapshot:
    """What gets written to the provider user's core fields and metadata."""

    email: str
    username: str
    display_name: str
    roles: tuple[str, ...]
    registered_at: datetime
    first_name: str | None = None
    last_name: str | None = None
    description: str | None = None
    locale: str | None = None
    nickname: str | None = None
    profile: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_local_user(cls, user: "LocalUser") -> "UserSnapshot":
        return cls(
            email=user.email,
            username=user.username,
            display_name=user.display_name,
            roles=tuple(sorted(role.value for role in user.roles)),
            registered_at=user.created_at,
            first_name=user.first_name,
            last_name=user.last_name,
            description=user.description,
            locale=user.locale,
            nickname=user.nickname,
            profile=user.profile,
        )

    def to_metadata(self) -> dict[str, Any]:
        return {
            "roles": list(self.roles),
            "display_name": self.display_name,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "description": self.description,
            "locale": self.locale,
            "nickname": self.nickname,
            "registered_at": self.registered_at.isoformat(),
            "profile": dict(self.profile),
        }

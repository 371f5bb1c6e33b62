"""Local store user aggregate."""

from datetime import datetime
from typing import Any, Iterable, Union
from uuid import UUID, uuid4

from bridge.domain.identity.value_objects.local_role import LocalRole
from bridge.domain.shared.time import utc_now

# Profile attributes held directly on the aggregate
CORE_PROFILE_FIELDS = (
    "display_name",
    "first_name",
    "last_name",
    "description",
    "locale",
    "nickname",
)

# Free-form profile entries kept in the profile mapping
EXTRA_PROFILE_FIELDS = (
    "avatar_url",
    "preferences",
    "last_login_at",
    "subscription_status",
    "subscription_plan",
)


class LocalUser:
    """
    User aggregate root of the local store.

    Owns identity (email, username), the role set and the profile fields
    that are mirrored to the auth provider.
    """

    def __init__(  # NOQA: PLR0913
        self,
        email: str,
        username: str,
        display_name: str | None = None,
        roles: Iterable[Union[str, LocalRole]] | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
        description: str | None = None,
        locale: str | None = None,
        nickname: str | None = None,
        profile: dict[str, Any] | None = None,
        id: UUID | None = None,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ):
        self._id = id or uuid4()
        self._email = email.strip().lower()
        self._username = username.strip()
        self._display_name = (display_name or "").strip() or self._username
        self._roles = LocalRole.parse_many(roles or [LocalRole.default()])
        self._first_name = first_name
        self._last_name = last_name
        self._description = description
        self._locale = locale
        self._nickname = nickname
        self._profile = dict(profile or {})
        self._created_at = created_at or utc_now()
        self._updated_at = updated_at or utc_now()

        self._validate()

    @property
    def id(self) -> UUID:
        return self._id

    @property
    def email(self) -> str:
        return self._email

    @property
    def username(self) -> str:
        return self._username

    @property
    def display_name(self) -> str:
        return self._display_name

    @property
    def roles(self) -> frozenset[LocalRole]:
        return self._roles

    @property
    def first_name(self) -> str | None:
        return self._first_name

    @property
    def last_name(self) -> str | None:
        return self._last_name

    @property
    def description(self) -> str | None:
        return self._description

    @property
    def locale(self) -> str | None:
        return self._locale

    @property
    def nickname(self) -> str | None:
        return self._nickname

    @property
    def profile(self) -> dict[str, Any]:
        return dict(self._profile)

    @property
    def is_admin(self) -> bool:
        return LocalRole.ADMINISTRATOR in self._roles

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    def has_any_role(self, roles: Iterable[LocalRole]) -> bool:
        return not self._roles.isdisjoint(roles)

    def assign_roles(self, roles: Iterable[Union[str, LocalRole]]) -> bool:
        """Replace the role set. Returns True if it changed."""
        new_roles = LocalRole.parse_many(roles) or frozenset({LocalRole.default()})
        if new_roles == self._roles:
            return False
        self._roles = new_roles
        self._updated_at = utc_now()
        return True

    def update_profile(self, fields: dict[str, Any]) -> list[str]:
        """Apply profile values and return the names of fields that changed.

        Unknown field names are ignored.
        """
        changed = []
        for name, value in fields.items():
            if name in CORE_PROFILE_FIELDS:
                if name == "display_name" and not value:
                    continue
                attr = f"_{name}"
                if getattr(self, attr) != value:
                    setattr(self, attr, value)
                    changed.append(name)
            elif name in EXTRA_PROFILE_FIELDS:
                if self._profile.get(name) != value:
                    self._profile[name] = value
                    changed.append(name)

        if changed:
            self._updated_at = utc_now()
        return changed

    def _validate(self) -> None:
        if "@" not in self._email:
            msg = f"Invalid email address: {self._email}"
            raise ValueError(msg)
        if not self._username:
            msg = "Username cannot be empty"
            raise ValueError(msg)

    @classmethod
    def create(
        cls,
        email: str,
        username: str,
        display_name: str | None = None,
        roles: Iterable[Union[str, LocalRole]] | None = None,
    ) -> "LocalUser":
        return cls(
            email=email,
            username=username,
            display_name=display_name,
            roles=roles,
        )

    @classmethod
    def reconstitute(cls, **kwargs: Any) -> "LocalUser":
        return cls(**kwargs)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LocalUser):
            return NotImplemented
        return self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __repr__(self) -> str:
        return f"LocalUser(id={self._id}, username={self._username})"

"""Auth provider user entity."""

from datetime import datetime
from typing import Any
from uuid import uuid4

from bridge.domain.identity.value_objects.user_snapshot import UserSnapshot
from bridge.domain.shared.time import utc_now


class ProviderUser:
    """
    A user record in the auth provider's store.

    Created lazily the first time a local user is synced. The metadata
    field holds the latest snapshot of the local user's attributes.
    """

    def __init__(
        self,
        email: str,
        username: str,
        name: str | None = None,
        metadata: dict[str, Any] | None = None,
        id: str | None = None,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ):
        self._id = id or uuid4().hex
        self._email = email.strip().lower()
        self._username = username
        self._name = name or username
        self._metadata = dict(metadata or {})
        self._created_at = created_at or utc_now()
        self._updated_at = updated_at or utc_now()

    @property
    def id(self) -> str:
        return self._id

    @property
    def email(self) -> str:
        return self._email

    @property
    def username(self) -> str:
        return self._username

    @property
    def name(self) -> str:
        return self._name

    @property
    def metadata(self) -> dict[str, Any]:
        return dict(self._metadata)

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    def apply_snapshot(self, snapshot: UserSnapshot) -> None:
        """Overwrite core fields and metadata from a local snapshot.

        The provider-side username is left alone, it may carry a collision
        suffix the local username does not.
        """
        self._email = snapshot.email
        self._name = snapshot.display_name
        self._metadata = snapshot.to_metadata()
        self._updated_at = utc_now()

    @classmethod
    def from_snapshot(cls, snapshot: UserSnapshot, username: str) -> "ProviderUser":
        return cls(
            email=snapshot.email,
            username=username,
            name=snapshot.display_name,
            metadata=snapshot.to_metadata(),
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ProviderUser):
            return NotImplemented
        return self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __repr__(self) -> str:
        return f"ProviderUser(id={self._id}, username={self._username})"

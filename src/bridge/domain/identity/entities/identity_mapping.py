"""Cross-store identity mapping entity."""

from datetime import datetime
from uuid import UUID, uuid4

from bridge.domain.shared.time import utc_now


class IdentityMapping:
    """
    Links one local user to one auth provider user.

    Mappings are append-only: there is no mutator, a mapping is only
    ever created or deleted (on explicit unsync).
    """

    def __init__(
        self,
        local_user_id: UUID,
        provider_user_id: str,
        id: UUID | None = None,
        created_at: datetime | None = None,
    ):
        if not provider_user_id:
            msg = "Provider user id cannot be empty"
            raise ValueError(msg)

        self._id = id or uuid4()
        self._local_user_id = local_user_id
        self._provider_user_id = provider_user_id
        self._created_at = created_at or utc_now()

    @property
    def id(self) -> UUID:
        return self._id

    @property
    def local_user_id(self) -> UUID:
        return self._local_user_id

    @property
    def provider_user_id(self) -> str:
        return self._provider_user_id

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @classmethod
    def create(cls, local_user_id: UUID, provider_user_id: str) -> "IdentityMapping":
        return cls(local_user_id=local_user_id, provider_user_id=provider_user_id)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IdentityMapping):
            return NotImplemented
        return self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __repr__(self) -> str:
        return (
            f"IdentityMapping(local={self._local_user_id}, "
            f"provider={self._provider_user_id})"
        )

"""Fixed translation tables between provider and local vocabularies."""

from typing import Any, Iterable

from bridge.domain.identity.value_objects.local_role import LocalRole

PROVIDER_ROLE_MAP: dict[str, LocalRole] = {
    "admin": LocalRole.ADMINISTRATOR,
    "editor": LocalRole.EDITOR,
    "author": LocalRole.AUTHOR,
    "subscriber": LocalRole.SUBSCRIBER,
}

# Provider metadata key -> local profile field
PROVIDER_FIELD_MAP: dict[str, str] = {
    "name": "display_name",
    "first_name": "first_name",
    "last_name": "last_name",
    "avatar_url": "avatar_url",
    "preferences": "preferences",
    "last_login_at": "last_login_at",
    "subscription_status": "subscription_status",
    "subscription_plan": "subscription_plan",
}


def translate_roles(provider_roles: Iterable[str]) -> frozenset[LocalRole]:
    """Map provider role names to local roles.

    Unknown names are dropped. An empty result falls back to the
    minimum-privilege role.
    """
    roles = frozenset(
        PROVIDER_ROLE_MAP[name]
        for name in (str(r).strip().lower() for r in provider_roles)
        if name in PROVIDER_ROLE_MAP
    )
    return roles or frozenset({LocalRole.default()})


def translate_fields(provider_metadata: dict[str, Any]) -> dict[str, Any]:
    return {
        PROVIDER_FIELD_MAP[key]: value
        for key, value in provider_metadata.items()
        if key in PROVIDER_FIELD_MAP
    }

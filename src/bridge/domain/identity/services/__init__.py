from bridge.domain.identity.services.translation import (
    PROVIDER_FIELD_MAP,
    PROVIDER_ROLE_MAP,
    translate_fields,
    translate_roles,
)
from bridge.domain.identity.services.username_allocator import (
    allocate_username,
    username_base,
    username_base_from_email,
)

__all__ = [
    "PROVIDER_FIELD_MAP",
    "PROVIDER_ROLE_MAP",
    "allocate_username",
    "translate_fields",
    "translate_roles",
    "username_base",
    "username_base_from_email",
]

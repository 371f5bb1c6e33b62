from bridge.infrastructure.persistence.sqlalchemy.repositories.provider.identity_mapping_repository import (  # NOQA: E501
    IdentityMappingRepositorySQLAlchemy,
)
from bridge.infrastructure.persistence.sqlalchemy.repositories.provider.provider_user_repository import (  # NOQA: E501
    ProviderUserRepositorySQLAlchemy,
)
from bridge.infrastructure.persistence.sqlalchemy.repositories.provider.session_repository import (  # NOQA: E501
    SessionRepositorySQLAlchemy,
)

__all__ = [
    "IdentityMappingRepositorySQLAlchemy",
    "ProviderUserRepositorySQLAlchemy",
    "SessionRepositorySQLAlchemy",
]

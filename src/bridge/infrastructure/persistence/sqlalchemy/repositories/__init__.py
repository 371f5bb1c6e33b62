from bridge.infrastructure.persistence.sqlalchemy.repositories.factory import (
    SQLAlchemyRepositoryFactory,
)
from bridge.infrastructure.persistence.sqlalchemy.repositories.local import (
    AutoSyncPolicyRepositorySQLAlchemy,
    LocalUserRepositorySQLAlchemy,
    SyncStateRepositorySQLAlchemy,
)
from bridge.infrastructure.persistence.sqlalchemy.repositories.provider import (
    IdentityMappingRepositorySQLAlchemy,
    ProviderUserRepositorySQLAlchemy,
    SessionRepositorySQLAlchemy,
)

__all__ = [
    "AutoSyncPolicyRepositorySQLAlchemy",
    "IdentityMappingRepositorySQLAlchemy",
    "LocalUserRepositorySQLAlchemy",
    "ProviderUserRepositorySQLAlchemy",
    "SQLAlchemyRepositoryFactory",
    "SessionRepositorySQLAlchemy",
    "SyncStateRepositorySQLAlchemy",
]

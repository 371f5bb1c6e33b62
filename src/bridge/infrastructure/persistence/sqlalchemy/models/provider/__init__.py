from bridge.infrastructure.persistence.sqlalchemy.models.provider.identity_mapping_model import (  # NOQA: E501
    IdentityMappingModel,
)
from bridge.infrastructure.persistence.sqlalchemy.models.provider.provider_user_model import (  # NOQA: E501
    ProviderUserMetaModel,
    ProviderUserModel,
)
from bridge.infrastructure.persistence.sqlalchemy.models.provider.session_model import (
    SessionModel,
)

__all__ = [
    "IdentityMappingModel",
    "ProviderUserMetaModel",
    "ProviderUserModel",
    "SessionModel",
]

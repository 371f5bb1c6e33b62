from bridge.application.ports.provider_api import (
    ProviderApiPort,
    ProviderDirectoryUser,
    ProviderSessionGrant,
)
from bridge.application.ports.transaction import TransactionScope

__all__ = [
    "ProviderApiPort",
    "ProviderDirectoryUser",
    "ProviderSessionGrant",
    "TransactionScope",
]

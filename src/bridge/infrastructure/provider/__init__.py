from bridge.infrastructure.provider.client import ProviderApiClient

__all__ = ["ProviderApiClient"]

from bridge.domain.identity.aggregates.local_user import LocalUser

__all__ = ["LocalUser"]

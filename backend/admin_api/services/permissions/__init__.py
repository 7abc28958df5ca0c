from .oracle import AuthorizationOracle

__all__ = ["AuthorizationOracle"]

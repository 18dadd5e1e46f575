"""Credential management for authenticated marketplace sources."""

from resale_estimator.auth.token_manager import (
    BROWSE_SCOPE,
    INSIGHTS_SCOPE,
    Token,
    TokenCache,
    TokenManager,
)

__all__ = [
    "BROWSE_SCOPE",
    "INSIGHTS_SCOPE",
    "Token",
    "TokenCache",
    "TokenManager",
]

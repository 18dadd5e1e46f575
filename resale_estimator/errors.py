"""Exception taxonomy for token acquisition and marketplace queries."""

from __future__ import annotations

from typing import Optional

BODY_PREVIEW_CHARS = 300


def truncate_body(body: Optional[str], limit: int = BODY_PREVIEW_CHARS) -> str:
    """Shorten a response body for error messages and notes."""
    if not body:
        return ""
    body = " ".join(body.split())
    if len(body) <= limit:
        return body
    return body[:limit] + "..."


class EstimatorError(RuntimeError):
    """Base class for all estimator errors."""
    pass


class AuthError(EstimatorError):
    """Raised when a bearer token cannot be obtained."""
    pass


class AuthConfigError(AuthError):
    """Raised when client credentials are missing."""
    pass


class AuthProviderError(AuthError):
    """Raised when the token endpoint rejects the exchange or returns no token."""

    def __init__(self, message: str, status: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status = status
        self.body = truncate_body(body)


class SourceError(EstimatorError):
    """Base class for errors raised by a source adapter."""

    def __init__(self, source: str, message: str):
        super().__init__(f"{source}: {message}")
        self.source = source
        self.detail = message


class SourceHttpError(SourceError):
    """Raised when a marketplace returns a non-success response."""

    def __init__(self, source: str, status: int, body: str = "", message: Optional[str] = None):
        self.status = status
        self.body = truncate_body(body)
        if message is None:
            message = f"HTTP {status}: {self.body}" if self.body else f"HTTP {status}"
        super().__init__(source, message)


class RateLimitedError(SourceHttpError):
    """Raised when a marketplace signals throttling."""
    pass


class ParseError(SourceError):
    """Raised when a response body is not in an expected shape."""
    pass


class SourceTimeoutError(SourceError):
    """Raised when a marketplace call exceeds the request timeout."""
    pass


class SourceTransportError(SourceError):
    """Raised when the transport fails before a response arrives."""
    pass


class NoSourcesConfiguredError(EstimatorError):
    """Raised when no marketplace source has usable configuration."""
    pass

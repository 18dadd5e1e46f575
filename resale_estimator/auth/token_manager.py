"""Bearer token minting and caching for client-credentials scopes."""

from __future__ import annotations

import asyncio
import logging
import time
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import httpx

from resale_estimator import metrics
from resale_estimator.errors import AuthConfigError, AuthProviderError, truncate_body

logger = logging.getLogger(__name__)

BROWSE_SCOPE = "https://api.ebay.com/oauth/api_scope/buy.browse"
INSIGHTS_SCOPE = "https://api.ebay.com/oauth/api_scope/buy.marketplace.insights"

DEFAULT_SAFETY_MARGIN_SECONDS = 60.0


@dataclass(frozen=True)
class Token:
    """A bearer token and its absolute expiry (epoch seconds)."""

    value: str
    expires_at: float

    def is_usable(self, now: float, safety_margin: float) -> bool:
        """True while the token is outside the safety margin before expiry."""
        return now < self.expires_at - safety_margin


class TokenCache:
    """Scope-keyed token store owned by a TokenManager."""

    def __init__(self):
        self._tokens: Dict[str, Token] = {}

    def get(self, scope: str) -> Optional[Token]:
        return self._tokens.get(scope)

    def set(self, scope: str, token: Token) -> None:
        self._tokens[scope] = token

    def clear(self) -> None:
        self._tokens.clear()

    def __len__(self) -> int:
        return len(self._tokens)


class TokenManager:
    """
    Mints and caches short-lived bearer tokens per authorization scope.

    Concurrent callers for the same scope share one in-flight exchange.
    The cache and clock are injectable so tests can control expiry.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        token_url: str,
        http_client: httpx.AsyncClient,
        cache: Optional[TokenCache] = None,
        clock: Callable[[], float] = time.time,
        safety_margin: float = DEFAULT_SAFETY_MARGIN_SECONDS,
    ):
        """
        Initialize the token manager.

        Args:
            client_id: OAuth client id
            client_secret: OAuth client secret
            token_url: Credential-issuing endpoint
            http_client: Shared httpx client used for the exchange
            cache: Token cache (a fresh one is created if omitted)
            clock: Returns the current time in epoch seconds
            safety_margin: Seconds before expiry at which a token is replaced
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.token_url = token_url
        self.http_client = http_client
        self.cache = cache if cache is not None else TokenCache()
        self.clock = clock
        self.safety_margin = safety_margin
        self._locks: dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    def has_credentials(self) -> bool:
        """Check whether both client id and secret are configured."""
        return bool(self.client_id and self.client_secret)

    async def get_token(self, scope: str) -> str:
        """
        Return a usable bearer token for a scope, minting one if needed.

        Args:
            scope: Authorization scope string

        Returns:
            Bearer token value

        Raises:
            AuthConfigError: If client credentials are missing
            AuthProviderError: If the exchange fails or returns no token
        """
        if not self.has_credentials():
            raise AuthConfigError("Missing EBAY_CLIENT_ID/EBAY_CLIENT_SECRET")

        cached = self.cache.get(scope)
        if cached and cached.is_usable(self.clock(), self.safety_margin):
            return cached.value

        async with self._locks[scope]:
            # Another caller may have minted while we waited
            cached = self.cache.get(scope)
            if cached and cached.is_usable(self.clock(), self.safety_margin):
                return cached.value

            try:
                token = await self._mint(scope)
            except AuthProviderError:
                metrics.record_token_mint(scope, success=False)
                raise

            metrics.record_token_mint(scope, success=True)
            self.cache.set(scope, token)
            return token.value

    async def _mint(self, scope: str) -> Token:
        """Perform the client-credentials exchange for one scope."""
        try:
            response = await self.http_client.post(
                self.token_url,
                auth=(self.client_id, self.client_secret),
                data={"grant_type": "client_credentials", "scope": scope},
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
        except httpx.HTTPError as e:
            raise AuthProviderError(f"Token request failed: {type(e).__name__}: {e}") from e

        if not response.is_success:
            body = truncate_body(response.text)
            logger.warning(f"Token exchange rejected for {scope}: {response.status_code} {body}")
            raise AuthProviderError(
                f"Token error {response.status_code} {body}".rstrip(),
                status=response.status_code,
                body=body,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise AuthProviderError("Token response is not JSON", status=response.status_code) from e

        value = str(data.get("access_token") or "") if isinstance(data, dict) else ""
        if not value:
            raise AuthProviderError("No access_token in token response", status=response.status_code)

        try:
            expires_in = float(data.get("expires_in") or 0)
        except (TypeError, ValueError):
            expires_in = 0.0

        logger.info(f"Minted token for {scope}, expires in {expires_in:.0f}s")
        return Token(value=value, expires_at=self.clock() + max(0.0, expires_in))

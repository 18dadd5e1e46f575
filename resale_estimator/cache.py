"""Cache-aside response cache in front of the orchestrator.

Stores the serialized estimate payload in Redis keyed by the normalized
search term. Estimates where a source failed or nothing was found are not
stored, so transient failures are retried on the next request. Cache failures
never fail a request; they are logged and the estimate is computed directly.
"""

import hashlib
import json
import logging
from typing import Any, Dict, Optional

import redis.asyncio as redis

from resale_estimator import metrics
from resale_estimator.assembler import EstimateResult
from resale_estimator.config import settings
from resale_estimator.orchestrator import EstimateOrchestrator

logger = logging.getLogger(__name__)


class CachedEstimator:
    """Wraps an orchestrator with a TTL response cache."""

    def __init__(
        self,
        orchestrator: EstimateOrchestrator,
        redis_url: Optional[str] = None,
        ttl_seconds: Optional[int] = None,
        redis_client: Optional[Any] = None,
    ):
        self.orchestrator = orchestrator
        self.redis_url = redis_url or settings.redis_url
        self.ttl = ttl_seconds if ttl_seconds is not None else settings.response_cache_ttl_seconds
        self._redis = redis_client

    async def _get_redis(self) -> redis.Redis:
        """Get or create Redis connection."""
        if self._redis is None:
            self._redis = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
        return self._redis

    async def close(self):
        """Close Redis connection."""
        if self._redis:
            await self._redis.aclose()
            self._redis = None

    def configured_sources(self) -> Dict[str, bool]:
        return self.orchestrator.configured_sources()

    @staticmethod
    def _get_cache_key(term: str) -> str:
        normalized = " ".join(term.lower().split())
        digest = hashlib.sha1(normalized.encode()).hexdigest()
        return f"estimate:{digest}"

    async def estimate_payload(self, term: str) -> Dict[str, Any]:
        """Return a cached payload for the term or compute and store one."""
        cache_key = self._get_cache_key(term)

        cached = await self._read(cache_key)
        if cached is not None:
            metrics.record_cache_lookup(hit=True)
            return cached
        metrics.record_cache_lookup(hit=False)

        result = await self.orchestrator.estimate(term)
        payload = result.to_dict()
        if self._should_store(result):
            await self._write(cache_key, payload)
        else:
            logger.debug(f"Not caching estimate for {term!r} (degraded or empty)")
        return payload

    def _should_store(self, result: EstimateResult) -> bool:
        if self.ttl <= 0 or result.degraded:
            return False
        return bool(result.items_current or result.items_sold)

    async def _read(self, cache_key: str) -> Optional[Dict[str, Any]]:
        try:
            redis_client = await self._get_redis()
            raw = await redis_client.get(cache_key)
        except Exception as e:
            logger.debug(f"Error reading response cache {cache_key}: {e}")
            return None

        if not raw:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.debug(f"Discarding corrupt cache entry {cache_key}")
            return None

    async def _write(self, cache_key: str, payload: Dict[str, Any]) -> None:
        try:
            redis_client = await self._get_redis()
            await redis_client.set(cache_key, json.dumps(payload), ex=self.ttl)
        except Exception as e:
            logger.debug(f"Error writing response cache {cache_key}: {e}")

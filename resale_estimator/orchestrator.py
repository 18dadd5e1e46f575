"""Fallback orchestration across marketplace sources.

Each request runs two independent branches concurrently, one for current
listings and one for sold comps. A branch walks its adapter chain in order
and only moves on to the next adapter when the previous one errored or
returned no items. Every decision is recorded as a note; no error escapes a
branch.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from resale_estimator import metrics
from resale_estimator.assembler import EstimateResult, assemble
from resale_estimator.auth.token_manager import TokenManager
from resale_estimator.errors import (
    AuthConfigError,
    AuthError,
    NoSourcesConfiguredError,
    RateLimitedError,
    SourceError,
)
from resale_estimator.sources.base import CanonicalItem, SourceAdapter
from resale_estimator.sources.registry import SourceChains

logger = logging.getLogger(__name__)


@dataclass
class BranchOutcome:
    """Final items of one branch and the notes produced while getting them."""

    items: List[CanonicalItem] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)
    source: Optional[str] = None
    degraded: bool = False


class EstimateOrchestrator:
    """
    Runs the current and sold branches and assembles the estimate.

    Stateless across requests; the token manager owns the only cache.
    """

    def __init__(
        self,
        current: Sequence[SourceAdapter],
        sold: Sequence[SourceAdapter],
        token_manager: Optional[TokenManager] = None,
        call_timeout: Optional[float] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            current: Current-listing adapters, primary first
            sold: Sold-comp adapters, primary first
            token_manager: Token source for adapters that declare a scope
            call_timeout: Upper bound in seconds for a single adapter call
        """
        self.chains = SourceChains(current=list(current), sold=list(sold))
        self.current = self.chains.current
        self.sold = self.chains.sold
        self.token_manager = token_manager
        self.call_timeout = call_timeout

    @classmethod
    def from_chains(
        cls,
        chains: SourceChains,
        token_manager: Optional[TokenManager] = None,
        call_timeout: Optional[float] = None,
    ) -> "EstimateOrchestrator":
        return cls(chains.current, chains.sold, token_manager, call_timeout)

    def configured_sources(self) -> Dict[str, bool]:
        return self.chains.configured_sources()

    async def estimate(self, term: str) -> EstimateResult:
        """
        Estimate prices for a search term.

        Args:
            term: Product code or keywords

        Returns:
            EstimateResult

        Raises:
            ValueError: If the term is empty after trimming
            NoSourcesConfiguredError: If no adapter in either branch is configured
        """
        term = term.strip()
        if not term:
            raise ValueError("Search term must not be empty")

        if not self.chains.any_configured():
            metrics.record_estimate("misconfigured")
            raise NoSourcesConfiguredError(
                "No marketplace source is configured; set EBAY_CLIENT_ID/EBAY_CLIENT_SECRET "
                "or ETSY_API_KEY"
            )

        current, sold = await asyncio.gather(
            self._run_branch("current", self.current, term),
            self._run_branch("sold", self.sold, term),
        )

        result = assemble(
            current.items,
            sold.items,
            current.notes + sold.notes,
            degraded=current.degraded or sold.degraded,
        )
        metrics.record_estimate("ok" if result.items_current or result.items_sold else "empty")
        logger.info(
            f"Estimate for {term!r}: {len(result.items_current)} current "
            f"({current.source or 'none'}), {len(result.items_sold)} sold ({sold.source or 'none'})"
        )
        return result

    async def estimate_payload(self, term: str) -> Dict[str, Any]:
        """Estimate and return the wire-format payload."""
        result = await self.estimate(term)
        return result.to_dict()

    async def _run_branch(
        self,
        branch: str,
        chain: Sequence[SourceAdapter],
        term: str,
    ) -> BranchOutcome:
        """Walk a branch's adapter chain until one yields items."""
        outcome = BranchOutcome()

        for position, adapter in enumerate(chain):
            if position > 0:
                # Secondaries only run when configured
                if not adapter.is_configured():
                    continue
                metrics.record_cascade(branch, adapter.source)
                logger.debug(f"[{branch}] falling back to {adapter.source}")

            items = await self._invoke(branch, adapter, term, outcome)
            if items:
                outcome.items = items
                outcome.source = adapter.source
                break

        return outcome

    async def _invoke(
        self,
        branch: str,
        adapter: SourceAdapter,
        term: str,
        outcome: BranchOutcome,
    ) -> List[CanonicalItem]:
        """
        Acquire a token if needed and run one adapter, converting failures to notes.

        Any failure other than missing credentials marks the outcome degraded.
        """
        label = f"{adapter.name} {adapter.listing_state.value}"

        token = None
        if adapter.scope:
            try:
                if self.token_manager is None:
                    raise AuthConfigError("No token manager configured")
                token = await self.token_manager.get_token(adapter.scope)
            except AuthConfigError as e:
                self._note(branch, outcome, f"{label} token error: {e}")
                return []
            except AuthError as e:
                self._note(branch, outcome, f"{label} token error: {e}", failed=True)
                return []

        start = time.monotonic()
        try:
            if self.call_timeout:
                result = await asyncio.wait_for(adapter.search(term, token=token), self.call_timeout)
            else:
                result = await adapter.search(term, token=token)
        except asyncio.TimeoutError:
            metrics.record_source_error(adapter.source, "timeout", time.monotonic() - start)
            self._note(branch, outcome, f"{label} error: timed out after {self.call_timeout:g}s", failed=True)
            return []
        except RateLimitedError as e:
            metrics.record_source_error(adapter.source, "rate_limited", time.monotonic() - start)
            self._note(branch, outcome, f"{label} rate-limited: {e.detail}", failed=True)
            return []
        except SourceError as e:
            metrics.record_source_error(adapter.source, type(e).__name__, time.monotonic() - start)
            self._note(branch, outcome, f"{label} error: {e.detail}", failed=True)
            return []
        except Exception as e:
            logger.exception(f"Unexpected failure in {adapter.source}")
            metrics.record_source_error(adapter.source, "unexpected", time.monotonic() - start)
            self._note(branch, outcome, f"{label} error: {type(e).__name__}: {e}", failed=True)
            return []

        metrics.record_source_success(adapter.source, time.monotonic() - start, len(result.items))
        self._note(branch, outcome, result.note)
        return result.items

    @staticmethod
    def _note(branch: str, outcome: BranchOutcome, note: str, failed: bool = False) -> None:
        outcome.notes.append(note)
        if failed:
            outcome.degraded = True
        logger.info(f"[{branch}] {note}")

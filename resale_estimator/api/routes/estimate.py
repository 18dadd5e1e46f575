"""Price estimate API endpoint."""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from resale_estimator import metrics
from resale_estimator.api.deps import get_estimator
from resale_estimator.errors import NoSourcesConfiguredError
from resale_estimator.service import Estimator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["estimate"])


# ============================================================================
# Response Models
# ============================================================================


class CanonicalItemModel(BaseModel):
    title: str
    price: float
    source: str
    condition: Optional[str] = None
    url: Optional[str] = None


class StatSummaryModel(BaseModel):
    """Price statistics; float fields are null when count is 0."""

    count: int
    min: Optional[float] = None
    max: Optional[float] = None
    avg: Optional[float] = None
    median: Optional[float] = None
    p25: Optional[float] = None
    p75: Optional[float] = None
    avg_trimmed: Optional[float] = None


class EstimateStats(BaseModel):
    current: StatSummaryModel
    sold: StatSummaryModel
    combined: StatSummaryModel


class EstimateResponse(BaseModel):
    """Estimate payload."""

    items_current: List[CanonicalItemModel]
    items_sold: List[CanonicalItemModel]
    stats: EstimateStats
    note: str


# ============================================================================
# Endpoints
# ============================================================================


@router.get("/estimate", response_model=EstimateResponse)
async def estimate(
    query: Optional[str] = Query(None, description="Product code (8-14 digits) or keywords"),
    estimator: Estimator = Depends(get_estimator),
) -> Any:
    """Estimate resale value from current listings and sold comps."""
    term = (query or "").strip()
    if not term:
        metrics.record_estimate("bad_request")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Missing query"},
        )

    try:
        payload: Dict[str, Any] = await estimator.estimate_payload(term)
    except NoSourcesConfiguredError as e:
        logger.error(f"Estimate refused: {e}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"error": str(e)},
        )

    return payload

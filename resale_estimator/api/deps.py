"""FastAPI dependencies."""

from fastapi import HTTPException, Request, status

from resale_estimator.service import Estimator


async def get_estimator(request: Request) -> Estimator:
    """
    Dependency returning the process-wide estimator built at startup.

    Raises:
        HTTPException: 503 if the application has not finished starting
    """
    estimator = getattr(request.app.state, "estimator", None)
    if estimator is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Estimator not initialized",
        )
    return estimator

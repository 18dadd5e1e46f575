"""Client diagnostic log sink.

Forwards log entries posted by the scanner front end into the service's
logging. Malformed payloads are logged and acknowledged anyway.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, ValidationError

from resale_estimator.logging_config import get_logger

logger = logging.getLogger(__name__)
client_logger = get_logger("resale_estimator.client", origin="client")

router = APIRouter(tags=["log"])

LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "log": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class ClientLogEntry(BaseModel):
    level: Optional[str] = "log"
    msg: Optional[str] = ""
    meta: Optional[Any] = None


def _emit(entry: ClientLogEntry) -> None:
    level = LEVELS.get((entry.level or "log").lower(), logging.INFO)
    client_logger.log(level, f"[client] {entry.msg or ''}", extra={"meta": entry.meta})


@router.post("/log", response_class=PlainTextResponse)
async def client_log(request: Request) -> str:
    """Accept one log entry or a batch of them."""
    try:
        body: Union[Dict[str, Any], List[Any]] = await request.json()
    except ValueError as e:
        logger.warning(f"[client] bad /log payload: {e}")
        return "ok"

    entries = body if isinstance(body, list) else [body]
    for position, raw in enumerate(entries):
        try:
            entry = ClientLogEntry.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"[client] skipping bad /log entry {position}: {e}")
            continue
        _emit(entry)
    return "ok"

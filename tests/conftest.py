"""Shared fixtures."""

import json
from typing import Callable, List

import httpx
import pytest


@pytest.fixture
def make_client() -> Callable[..., httpx.AsyncClient]:
    """Factory for an AsyncClient whose requests are answered by a handler."""

    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return factory


@pytest.fixture
def json_responder():
    """Build a handler that records requests and replies with a fixed JSON body."""

    def factory(body, status_code: int = 200):
        requests: List[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if isinstance(body, (dict, list)):
                return httpx.Response(status_code, content=json.dumps(body),
                                      headers={"content-type": "application/json"})
            return httpx.Response(status_code, text=body)

        handler.requests = requests
        return handler

    return factory

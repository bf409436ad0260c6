"""Unit test fixtures with HTTP mocking."""

from __future__ import annotations

from typing import Any

import pytest
import respx
from httpx import Response

from xrpnames.transport.base import RateLimitConfig, TransportConfig

# ============================================================================
# HTTP Mocking Fixtures
# ============================================================================


@pytest.fixture
def respx_mock():
    """Provide a respx mock router for HTTP mocking.

    Use this when you need fine-grained control over mocked responses.
    The mock is automatically started and stopped by respx.
    """
    with respx.mock(assert_all_called=False) as router:
        yield router


# ============================================================================
# Transport Configuration Fixtures
# ============================================================================


@pytest.fixture
def transport_config() -> TransportConfig:
    """Create a transport config for testing."""
    return TransportConfig(
        rpc_url="https://rpc.test",
        clio_url="https://clio.test",
        timeout=5.0,
        rate_limit=RateLimitConfig(
            requests_per_second=1000.0,  # High limit for tests
            burst_size=10,
            retry_on_429=True,
            max_429_retries=2,
        ),
    )


# ============================================================================
# Mock Response Helpers
# ============================================================================


def mock_rpc_result(result: dict[str, Any], status_code: int = 200) -> Response:
    """Create a JSON-RPC success response."""
    return Response(
        status_code=status_code,
        json={"result": {**result, "status": "success", "validated": True}},
    )


def mock_rpc_error(error: str, message: str | None = None) -> Response:
    """Create a JSON-RPC error response (rippled answers these with HTTP 200)."""
    result: dict[str, Any] = {"error": error, "status": "error"}
    if message:
        result["error_message"] = message
    return Response(status_code=200, json={"result": result})


def mock_json_response(data: Any, status_code: int = 200) -> Response:
    """Create a mock JSON response."""
    return Response(status_code=status_code, json=data)


def mock_rate_limit_response(retry_after: float = 0.01) -> Response:
    """Create a mock 429 rate limit response."""
    return Response(
        status_code=429,
        json={"error": "Rate limit exceeded"},
        headers={"Retry-After": str(retry_after)},
    )


@pytest.fixture
def mock_responses():
    """Provide helper functions for creating mock responses."""
    return {
        "rpc": mock_rpc_result,
        "rpc_error": mock_rpc_error,
        "json": mock_json_response,
        "rate_limit": mock_rate_limit_response,
    }

"""CORS headers and the JSON response envelope shared by all handlers."""

from __future__ import annotations

from typing import Any

from core.models import ProxyResponse

CORS_HEADERS: dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def json_response(status_code: int, body: dict[str, Any]) -> ProxyResponse:
    return ProxyResponse(
        status_code=status_code,
        body=body,
        headers={**CORS_HEADERS, "Content-Type": "application/json"},
    )


def error_response(status_code: int, message: str) -> ProxyResponse:
    return json_response(status_code, {"error": message})


def preflight_response() -> ProxyResponse:
    """Empty 204 answer to a browser CORS preflight."""
    return ProxyResponse(status_code=204, body=None, headers=dict(CORS_HEADERS))

"""Request pipeline shared by every handler.

receive -> validate -> build upstream request -> call upstream -> map response.
Every failure is converted into a JSON error response here; nothing escapes
unformatted and nothing is retried.
"""

from __future__ import annotations

import json
import logging
from urllib.parse import quote

import httpx

from core.config import ProxyConfig
from core.errors import ContractViolation, ProxyError, RoutingError, UpstreamError
from core.models import InboundRequest, ProxyRequest, ProxyResponse
from core.providers import UpstreamProvider, get_provider
from core.responses import error_response, json_response, preflight_response

logger = logging.getLogger(__name__)

ROUTES: dict[str, str] = {
    "/api": "gemini_image_edit",
    "/api/style": "style_advice",
    "/api/vertex": "vertex_imagen",
}


def dispatch(
    request: ProxyRequest,
    config: ProxyConfig,
    client: httpx.Client | None = None,
) -> ProxyResponse:
    """Select the handler for the request path and run it."""
    if request.method == "OPTIONS":
        return preflight_response()

    path = request.path.rstrip("/") or "/"
    name = ROUTES.get(path)
    if name is None:
        return error_response(
            RoutingError.status_code,
            "Method Not Allowed or Invalid Path. Only POST to "
            f"{', '.join(sorted(ROUTES))} is accepted.",
        )
    return handle_request(get_provider(name), request, config, client=client)


def handle_request(
    provider: UpstreamProvider,
    request: ProxyRequest,
    config: ProxyConfig,
    client: httpx.Client | None = None,
) -> ProxyResponse:
    """Run one request through a provider and return the client response."""
    if request.method == "OPTIONS":
        return preflight_response()

    try:
        if request.method != "POST":
            raise RoutingError("Method Not Allowed. Only POST is accepted.")

        config.require(*provider.required_credentials)
        inbound = InboundRequest.from_body(request.json(), provider.prompt_aliases)

        data = call_upstream(provider, inbound, config, client=client)
        payload = provider.extract(data)
        if not payload:
            logger.error(
                "Invalid response structure from %s - no payload found: %s",
                provider.provider_name, data,
            )
            raise ContractViolation(provider.missing_payload_message)

        return json_response(200, {provider.success_field: payload})

    except ProxyError as e:
        return error_response(e.status_code, str(e))
    except Exception as e:
        logger.exception("Unexpected error in %s handler", provider.provider_name)
        return error_response(500, f"An unexpected server error occurred: {e}")


def call_upstream(
    provider: UpstreamProvider,
    inbound: InboundRequest,
    config: ProxyConfig,
    client: httpx.Client | None = None,
) -> object:
    """POST the vendor payload once and return the parsed success body.

    The body is read as text before parsing so that non-JSON error bodies can
    still be reported.
    """
    url = provider.build_endpoint(config)
    payload = provider.build_payload(inbound, config)
    logger.info(
        "Calling upstream provider=%s model=%s url=%s",
        provider.provider_name, provider.model(config), redact(url, config),
    )

    try:
        if client is None:
            with httpx.Client(timeout=config.upstream_timeout) as http:
                resp = http.post(url, json=payload)
                response_text = resp.text
        else:
            resp = client.post(url, json=payload)
            response_text = resp.text
    except httpx.HTTPError as e:
        message = redact(str(e), config)
        logger.error("Upstream request to %s failed: %s", provider.provider_name, message)
        raise UpstreamError(f"Google API request failed. Details: {message}") from e

    if not resp.is_success:
        logger.error("Google API Error Response Text: %s", response_text)
        raise UpstreamError(
            f"Google API failed with status {resp.status_code}. "
            f"Details: {describe_upstream_error(response_text, provider.error_hint)}",
        )

    try:
        return json.loads(response_text)
    except json.JSONDecodeError as e:
        logger.error("Upstream %s returned a non-JSON success body: %s", provider.provider_name, response_text)
        raise ContractViolation(provider.missing_payload_message) from e


def describe_upstream_error(response_text: str, hint: str = "") -> str:
    """Human-readable detail for a non-success upstream body."""
    try:
        error_json = json.loads(response_text)
    except json.JSONDecodeError:
        return f"Google API returned a non-JSON error: {response_text}"

    error = error_json.get("error") if isinstance(error_json, dict) else None
    message = error.get("message") if isinstance(error, dict) else None
    if not message:
        return "An unknown error occurred with Google AI."
    detail = f"Google API Error: {message}"
    if hint:
        detail += f". {hint}"
    return detail


def redact(text: str, config: ProxyConfig) -> str:
    """Replace any configured API key in ``text`` with a placeholder."""
    for secret in (config.gemini_api_key, config.gcp_api_key):
        if secret:
            text = text.replace(quote(secret, safe=""), "***").replace(secret, "***")
    return text

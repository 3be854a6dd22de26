"""Serverless entrypoint for the glasses try-on proxy.

Route all traffic here. The path selects the upstream integration:

    /api         image edit via Gemini (``newImageBase64``)
    /api/style   style advice text via Gemini (``styleAdvice``)
    /api/vertex  image edit via Vertex AI Imagen (``newBase64``)

Configuration is read from the environment on every invocation.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from dotenv import load_dotenv

from core.config import ProxyConfig
from core.models import ProxyRequest
from core.pipeline import dispatch
from core.responses import error_response

load_dotenv()
logging.basicConfig(level=logging.INFO)

logger = logging.getLogger(__name__)


def handler(request: Mapping[str, Any], context: Any = None) -> dict[str, Any]:
    """Serverless function handler."""
    try:
        proxy_request = ProxyRequest.from_mapping(request)
        response = dispatch(proxy_request, ProxyConfig.from_env())
    except Exception as e:
        logger.exception("Unexpected error handling request")
        response = error_response(500, f"An unexpected server error occurred: {e}")
    return response.to_dict()

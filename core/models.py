"""Request-scoped data models for the proxy handlers."""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping
from urllib.parse import urlsplit

from core.errors import ClientInputError


class HarmCategory(str, Enum):
    HARASSMENT = "HARM_CATEGORY_HARASSMENT"
    HATE_SPEECH = "HARM_CATEGORY_HATE_SPEECH"
    SEXUALLY_EXPLICIT = "HARM_CATEGORY_SEXUALLY_EXPLICIT"
    DANGEROUS_CONTENT = "HARM_CATEGORY_DANGEROUS_CONTENT"


BLOCK_MEDIUM_AND_ABOVE = "BLOCK_MEDIUM_AND_ABOVE"


def safety_settings(threshold: str = BLOCK_MEDIUM_AND_ABOVE) -> list[dict[str, str]]:
    """Safety filter list applying one threshold to every harm category."""
    return [{"category": c.value, "threshold": threshold} for c in HarmCategory]


@dataclass
class ProxyRequest:
    """The runtime's request, normalized from the serverless event mapping."""

    method: str
    path: str
    body: str | bytes = ""
    is_base64_encoded: bool = False

    @classmethod
    def from_mapping(cls, request: Mapping[str, Any]) -> ProxyRequest:
        http_context = (request.get("requestContext") or {}).get("http") or {}
        method = (
            request.get("method")
            or request.get("httpMethod")
            or http_context.get("method")
            or "GET"
        )
        path = request.get("path") or request.get("rawPath")
        if not path:
            path = urlsplit(request.get("url") or "/").path or "/"

        body = request.get("body")
        if body is None:
            body = ""
        elif isinstance(body, (dict, list)):
            body = json.dumps(body)

        return cls(
            method=str(method).upper(),
            path=path,
            body=body,
            is_base64_encoded=bool(request.get("isBase64Encoded")),
        )

    def text(self) -> str:
        """The body as text, undoing any transport base64 encoding."""
        body = self.body
        if not isinstance(body, (str, bytes)):
            raise ClientInputError("Client Error: Request body must be a JSON string.")
        try:
            if self.is_base64_encoded and body:
                body = base64.b64decode(body, validate=True)
            if isinstance(body, bytes):
                body = body.decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise ClientInputError(f"Client Error: Request body could not be decoded: {e}") from e
        return body

    def json(self) -> dict[str, Any]:
        """Parse the body as a JSON object."""
        try:
            data = json.loads(self.text())
        except json.JSONDecodeError as e:
            raise ClientInputError(f"Client Error: Request body must be valid JSON ({e.msg}).") from e
        if not isinstance(data, dict):
            raise ClientInputError("Client Error: Request body must be a JSON object.")
        return data


@dataclass
class InboundRequest:
    image_base64: str
    mime_type: str
    prompt: str

    @classmethod
    def from_body(
        cls, body: Mapping[str, Any], prompt_aliases: tuple[str, ...] = ()
    ) -> InboundRequest:
        """Validate the client body; every field must be a non-empty string."""
        prompt = body.get("prompt")
        for alias in prompt_aliases:
            if _present(prompt):
                break
            prompt = body.get(alias)

        image_base64 = body.get("imageBase64")
        mime_type = body.get("mimeType")
        if not (_present(image_base64) and _present(mime_type) and _present(prompt)):
            raise ClientInputError(
                "Client Error: Missing required fields. "
                "imageBase64, mimeType, and prompt are required."
            )
        return cls(image_base64=image_base64, mime_type=mime_type, prompt=prompt)


def _present(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


@dataclass
class ProxyResponse:
    status_code: int
    body: dict[str, Any] | None = None
    headers: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Render in the serverless ``statusCode``/``headers``/``body`` shape."""
        return {
            "statusCode": self.status_code,
            "headers": dict(self.headers),
            "body": "" if self.body is None else json.dumps(self.body),
        }

"""Upstream provider interface and implementations.

Each provider knows how to build its vendor endpoint and payload from an
``InboundRequest`` and how to pull the result out of a successful response.
The shared request flow lives in ``core.pipeline``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any
from urllib.parse import quote

from core.config import ProxyConfig
from core.models import InboundRequest, safety_settings
from core.prompt_builder import build_style_advice_prompt


class UpstreamProvider(ABC):
    """Base interface for a single upstream AI integration."""

    provider_name: str = "base"
    success_field: str = "result"
    required_credentials: tuple[str, ...] = ()
    prompt_aliases: tuple[str, ...] = ()
    missing_payload_message: str = "Could not find the expected payload in the Google API response."
    error_hint: str = ""

    @abstractmethod
    def model(self, config: ProxyConfig) -> str:
        ...

    @abstractmethod
    def build_endpoint(self, config: ProxyConfig) -> str:
        ...

    @abstractmethod
    def build_payload(self, inbound: InboundRequest, config: ProxyConfig) -> dict[str, Any]:
        ...

    @abstractmethod
    def extract(self, data: Any) -> str | None:
        """Return the payload from a parsed success body, or None if absent."""
        ...


class GeminiProvider(UpstreamProvider):
    """Common request shape for Gemini ``generateContent`` calls."""

    provider_name = "gemini"
    required_credentials = ("gemini_api_key",)

    def build_endpoint(self, config: ProxyConfig) -> str:
        model = quote(self.model(config), safe="@.-_")
        return (
            f"{config.gemini_base_url}/models/{model}:generateContent"
            f"?key={quote(config.gemini_api_key, safe='')}"
        )

    def prompt_text(self, inbound: InboundRequest) -> str:
        return inbound.prompt

    def generation_config(self) -> dict[str, Any] | None:
        return None

    def build_payload(self, inbound: InboundRequest, config: ProxyConfig) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "contents": [{
                "parts": [
                    {"text": self.prompt_text(inbound)},
                    {
                        "inline_data": {
                            "mime_type": inbound.mime_type,
                            "data": inbound.image_base64,
                        },
                    },
                ],
            }],
            "safetySettings": safety_settings(),
        }
        generation_config = self.generation_config()
        if generation_config:
            payload["generationConfig"] = generation_config
        return payload

    @staticmethod
    def _first_candidate_parts(data: Any) -> list[Any]:
        if not isinstance(data, dict):
            return []
        candidates = data.get("candidates")
        if not isinstance(candidates, list) or not candidates:
            return []
        first = candidates[0]
        content = first.get("content") if isinstance(first, dict) else None
        parts = content.get("parts") if isinstance(content, dict) else None
        return parts if isinstance(parts, list) else []


class StyleAdviceProvider(GeminiProvider):
    """Image + glasses style in, stylist advice text out."""

    provider_name = "style_advice"
    success_field = "styleAdvice"
    prompt_aliases = ("glassesStyle",)
    missing_payload_message = "Could not find the style advice in the Google API response."

    def model(self, config: ProxyConfig) -> str:
        return config.style_advice_model

    def prompt_text(self, inbound: InboundRequest) -> str:
        return build_style_advice_prompt(inbound.prompt)

    def extract(self, data: Any) -> str | None:
        for part in self._first_candidate_parts(data):
            if isinstance(part, dict) and isinstance(part.get("text"), str) and part["text"]:
                return part["text"]
        return None


class GeminiImageEditProvider(GeminiProvider):
    """Image + edit prompt in, edited image out."""

    provider_name = "gemini_image_edit"
    success_field = "newImageBase64"
    missing_payload_message = "Could not find the edited image in the Google API response."

    def model(self, config: ProxyConfig) -> str:
        return config.image_edit_model

    def generation_config(self) -> dict[str, Any] | None:
        return {"responseModalities": ["IMAGE"]}

    def extract(self, data: Any) -> str | None:
        for part in self._first_candidate_parts(data):
            if not isinstance(part, dict):
                continue
            inline = part.get("inlineData") or part.get("inline_data")
            if isinstance(inline, dict) and inline.get("data"):
                return inline["data"]
        return None


class VertexImagenProvider(UpstreamProvider):
    """Image + prompt in, image out via Vertex AI Imagen ``:predict``."""

    provider_name = "vertex_imagen"
    success_field = "newBase64"
    required_credentials = ("gcp_api_key", "gcp_project_id")
    missing_payload_message = (
        "Could not find the edited image in the Google API response. "
        "The structure might have changed."
    )
    error_hint = (
        "This could mean the Vertex AI API is not enabled on your Google Cloud "
        "project or there is a billing issue."
    )

    def model(self, config: ProxyConfig) -> str:
        return config.vertex_model

    def build_endpoint(self, config: ProxyConfig) -> str:
        project = quote(config.gcp_project_id, safe="")
        location = quote(config.vertex_location, safe="")
        model = quote(self.model(config), safe="@.-_")
        return (
            f"{config.vertex_base_url}/projects/{project}/locations/{location}"
            f"/publishers/google/models/{model}:predict"
            f"?key={quote(config.gcp_api_key, safe='')}"
        )

    def build_payload(self, inbound: InboundRequest, config: ProxyConfig) -> dict[str, Any]:
        return {
            "instances": [{
                "prompt": inbound.prompt,
                "image": {"bytesBase64Encoded": inbound.image_base64},
            }],
            "parameters": {"sampleCount": 1},
        }

    def extract(self, data: Any) -> str | None:
        if not isinstance(data, dict):
            return None
        predictions = data.get("predictions")
        if not isinstance(predictions, list) or not predictions:
            return None
        first = predictions[0]
        if isinstance(first, dict) and first.get("bytesBase64Encoded"):
            return first["bytesBase64Encoded"]
        return None


PROVIDERS: dict[str, type[UpstreamProvider]] = {
    "style_advice": StyleAdviceProvider,
    "gemini_image_edit": GeminiImageEditProvider,
    "vertex_imagen": VertexImagenProvider,
}


def get_provider(name: str) -> UpstreamProvider:
    """Factory function to get a provider by name."""
    if name not in PROVIDERS:
        raise ValueError(f"Unknown provider: {name}. Available: {list(PROVIDERS.keys())}")
    return PROVIDERS[name]()

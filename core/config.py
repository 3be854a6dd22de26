"""Process-wide configuration injected into each handler invocation."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from core.errors import ConfigurationError

logger = logging.getLogger(__name__)

# Env var names for each credential field, in lookup order.
CREDENTIAL_ENV_VARS: dict[str, tuple[str, ...]] = {
    "gemini_api_key": ("GEMINI_API_KEY", "GOOGLE_API_KEY"),
    "gcp_api_key": ("GCP_API_KEY",),
    "gcp_project_id": ("GCP_PROJECT_ID",),
}


def resolve_api_key(explicit: str | None, *env_names: str) -> str:
    """Return the explicit value if set, otherwise the first non-empty env var."""
    if explicit and explicit.strip():
        return explicit.strip()
    for name in env_names:
        value = os.environ.get(name, "").strip()
        if value:
            return value
    return ""


@dataclass(frozen=True)
class ProxyConfig:
    gemini_api_key: str = ""
    gcp_api_key: str = ""
    gcp_project_id: str = ""
    style_advice_model: str = "gemini-2.5-flash"
    image_edit_model: str = "gemini-2.5-flash-image"
    vertex_model: str = "imagegeneration@006"
    vertex_location: str = "us-central1"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    upstream_timeout: float = 120.0

    @classmethod
    def from_env(cls) -> ProxyConfig:
        """Build a config from the current environment.

        Called on every invocation so that the hosting platform's variables
        are always read fresh.
        """
        defaults = cls()
        return cls(
            gemini_api_key=resolve_api_key(None, *CREDENTIAL_ENV_VARS["gemini_api_key"]),
            gcp_api_key=resolve_api_key(None, *CREDENTIAL_ENV_VARS["gcp_api_key"]),
            gcp_project_id=resolve_api_key(None, *CREDENTIAL_ENV_VARS["gcp_project_id"]),
            style_advice_model=os.environ.get("STYLE_ADVICE_MODEL") or defaults.style_advice_model,
            image_edit_model=os.environ.get("IMAGE_EDIT_MODEL") or defaults.image_edit_model,
            vertex_model=os.environ.get("VERTEX_MODEL") or defaults.vertex_model,
            vertex_location=os.environ.get("VERTEX_LOCATION") or defaults.vertex_location,
            gemini_base_url=os.environ.get("GEMINI_BASE_URL") or defaults.gemini_base_url,
            upstream_timeout=_float_env("UPSTREAM_TIMEOUT", defaults.upstream_timeout),
        )

    @property
    def vertex_base_url(self) -> str:
        return f"https://{self.vertex_location}-aiplatform.googleapis.com/v1"

    def require(self, *fields: str) -> None:
        """Raise ConfigurationError if any of the named credential fields is empty."""
        missing = [f for f in fields if not getattr(self, f)]
        if missing:
            names = " or ".join(CREDENTIAL_ENV_VARS.get(f, (f,))[0] for f in missing)
            raise ConfigurationError(
                f"CRITICAL: Missing {names} in environment variables."
            )


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using %s", name, raw, default)
        return default

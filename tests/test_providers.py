import pytest

from core.config import ProxyConfig
from core.models import InboundRequest
from core.providers import (
    GeminiImageEditProvider,
    StyleAdviceProvider,
    VertexImagenProvider,
    get_provider,
)

INBOUND = InboundRequest(image_base64="AAAA", mime_type="image/jpeg", prompt="aviator")


@pytest.fixture
def config() -> ProxyConfig:
    return ProxyConfig(gemini_api_key="g-key", gcp_api_key="v-key", gcp_project_id="proj-1")


def test_image_edit_endpoint_carries_model_and_key(config):
    url = GeminiImageEditProvider().build_endpoint(config)
    assert url == (
        "https://generativelanguage.googleapis.com/v1beta/models/"
        "gemini-2.5-flash-image:generateContent?key=g-key"
    )


def test_image_edit_payload_requests_image_output(config):
    payload = GeminiImageEditProvider().build_payload(INBOUND, config)

    parts = payload["contents"][0]["parts"]
    assert parts[0] == {"text": "aviator"}
    assert parts[1] == {"inline_data": {"mime_type": "image/jpeg", "data": "AAAA"}}
    assert payload["generationConfig"] == {"responseModalities": ["IMAGE"]}
    assert len(payload["safetySettings"]) == 4


def test_style_advice_payload_wraps_style(config):
    payload = StyleAdviceProvider().build_payload(INBOUND, config)

    text = payload["contents"][0]["parts"][0]["text"]
    assert "aviator glasses" in text
    assert "generationConfig" not in payload


def test_style_advice_uses_configured_model():
    url = StyleAdviceProvider().build_endpoint(ProxyConfig(gemini_api_key="k", style_advice_model="gemini-x"))
    assert "/models/gemini-x:generateContent" in url


def test_vertex_endpoint_and_payload(config):
    provider = VertexImagenProvider()

    assert provider.build_endpoint(config) == (
        "https://us-central1-aiplatform.googleapis.com/v1/projects/proj-1/locations/us-central1"
        "/publishers/google/models/imagegeneration@006:predict?key=v-key"
    )
    assert provider.build_payload(INBOUND, config) == {
        "instances": [{"prompt": "aviator", "image": {"bytesBase64Encoded": "AAAA"}}],
        "parameters": {"sampleCount": 1},
    }


def test_image_edit_extract_accepts_snake_case_inline_data():
    data = {"candidates": [{"content": {"parts": [{"inline_data": {"data": "IMG"}}]}}]}
    assert GeminiImageEditProvider().extract(data) == "IMG"


def test_image_edit_extract_skips_text_parts():
    data = {"candidates": [{"content": {"parts": [{"text": "sure"}]}}]}
    assert GeminiImageEditProvider().extract(data) is None


@pytest.mark.parametrize("data", [None, [], {}, {"candidates": [{}]}, {"candidates": [{"content": {}}]}])
def test_gemini_extract_handles_malformed_bodies(data):
    assert StyleAdviceProvider().extract(data) is None
    assert GeminiImageEditProvider().extract(data) is None


@pytest.mark.parametrize("data", [None, {}, {"predictions": []}, {"predictions": [{}]}, {"predictions": ["x"]}])
def test_vertex_extract_handles_malformed_bodies(data):
    assert VertexImagenProvider().extract(data) is None


def test_get_provider_unknown_name():
    with pytest.raises(ValueError, match="Unknown provider"):
        get_provider("dall-e")

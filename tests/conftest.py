from pathlib import Path
import json
import sys

import httpx
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from core.config import ProxyConfig
from core.models import ProxyRequest


class FakeUpstream:
    """Records outbound calls and answers them with a canned response."""

    def __init__(self) -> None:
        self.calls: list[httpx.Request] = []
        self.status_code = 200
        self.body: str = "{}"
        self.error: Exception | None = None

    def respond(self, status_code: int, body) -> None:
        self.status_code = status_code
        self.body = body if isinstance(body, str) else json.dumps(body)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, text=self.body)

    @property
    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self._handle))

    def last_json(self) -> dict:
        return json.loads(self.calls[-1].content)


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def config() -> ProxyConfig:
    return ProxyConfig(
        gemini_api_key="gemini-test-key",
        gcp_api_key="gcp-test-key",
        gcp_project_id="test-project",
    )


def make_request(method: str = "POST", path: str = "/api", body=None) -> ProxyRequest:
    if body is None:
        body = {"imageBase64": "AAAA", "mimeType": "image/png", "prompt": "aviator"}
    return ProxyRequest.from_mapping({"method": method, "path": path, "body": body})

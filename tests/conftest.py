import json

import httpx
import pytest

from poem_engine import PoemClient

ENDPOINT = "https://poems.test/generate"


class FakeGenerationAPI:
    """Records requests and answers them like the remote generation API."""

    def __init__(self, poem="على قدر أهل العزم تأتي العزائم"):
        self.poem = poem
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.body: bytes | None = None
        self.fail_with: Exception | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            raise self.fail_with
        content = self.body if self.body is not None else json.dumps(self.poem).encode()
        return httpx.Response(
            self.status_code,
            content=content,
            headers={"content-type": "application/json"},
        )

    def client(self) -> PoemClient:
        return PoemClient(endpoint=ENDPOINT, transport=httpx.MockTransport(self))


@pytest.fixture
def fake_api():
    return FakeGenerationAPI()

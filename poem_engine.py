"""
Client for the remote poem generation API.

GET {endpoint}?seed=<word>&length=<count>  ->  JSON string (the poem)
"""

from __future__ import annotations

import json
import logging
import time

import httpx

DEFAULT_ENDPOINT = "https://mutanabi-api.onrender.com/generate"

logger = logging.getLogger("mutanabi")


class GenerationError(Exception):
    """Base for failures talking to the generation API."""


class NetworkError(GenerationError):
    """The request failed in transport or came back with an error status."""


class ParseError(GenerationError):
    """The response body was not the expected JSON string."""


class PoemClient:
    def __init__(
        self,
        endpoint: str = DEFAULT_ENDPOINT,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.timeout = timeout
        self.transport = transport

    async def generate(self, seed: str, length: int) -> str:
        params = {"seed": seed, "length": length}
        logger.info("Requesting poem: seed=%s length=%d", seed, length)
        t0 = time.perf_counter()

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self.transport,
                follow_redirects=True,
            ) as client:
                resp = await client.get(self.endpoint, params=params)
                resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise NetworkError(
                f"Generation API returned {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise NetworkError(f"Generation API request failed: {exc}") from exc

        try:
            payload = resp.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ParseError(f"Generation API returned invalid JSON: {exc}") from exc

        if not isinstance(payload, str):
            raise ParseError(
                f"Expected a JSON string, got {type(payload).__name__}"
            )

        elapsed = round(time.perf_counter() - t0, 2)
        logger.info("Poem for %s received in %.2fs", seed, elapsed)
        return payload

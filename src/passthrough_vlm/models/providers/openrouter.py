from __future__ import annotations
from typing import Dict, Optional
import logging
import time

import httpx

from .base import Transport, TransportOutcome, Success, Failure

logger = logging.getLogger(__name__)

OPENROUTER_CHAT_URL = "https://openrouter.ai/api/v1/chat/completions"
JSON_CONTENT_TYPE = "application/json"


class OpenRouterTransport(Transport):
    """Single-attempt POST to an OpenRouter-compatible chat completions endpoint."""

    def __init__(self, url: str = OPENROUTER_CHAT_URL, referer: str = "", title: str = "", timeout: float = 60.0, client: Optional[httpx.AsyncClient] = None):
        self.url = url
        self.referer = referer
        self.title = title
        self.timeout = timeout
        self.client = client or httpx.AsyncClient(timeout=timeout)

    def build_headers(self, auth_token: str) -> Dict[str, str]:
        return {
            "Content-Type": JSON_CONTENT_TYPE,
            "Authorization": f"Bearer {auth_token}",
            "HTTP-Referer": self.referer,
            "X-Title": self.title,
        }

    async def send(self, wire_text: str, auth_token: str) -> TransportOutcome:
        logger.debug(f"Sending request to {self.url} ({len(wire_text)} bytes)")
        t0 = time.perf_counter()
        try:
            response = await self.client.post(
                self.url,
                content=wire_text.encode("utf-8"),
                headers=self.build_headers(auth_token),
            )
        except httpx.HTTPError as e:
            # connect/read failures surface the same way as a bad status
            logger.debug(f"Transport failure after {time.perf_counter() - t0:.2f}s: {e!r}")
            return Failure(status_description=f"{type(e).__name__}: {e}", raw_body="")

        dt = time.perf_counter() - t0
        body = response.text
        if response.is_success:
            logger.debug(f"Response received in {dt:.2f}s: {body}")
            return Success(raw_body=body)

        status = f"HTTP {response.status_code} {response.reason_phrase}".rstrip()
        logger.debug(f"Request failed in {dt:.2f}s with {status}")
        return Failure(status_description=status, raw_body=body)

    async def aclose(self) -> None:
        await self.client.aclose()

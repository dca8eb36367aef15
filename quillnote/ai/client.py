"""Upstream chat-completion client (OpenAI-compatible API).

One POST per call. ``complete`` waits for the whole answer;
``stream_lines`` yields the raw response body line by line and closes the
connection when the generator is closed, whichever way that happens.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator

import httpx

from quillnote.config import AIConfig
from quillnote.errors import ConfigurationError, UpstreamConnectionError, UpstreamError

logger = logging.getLogger(__name__)

# Cap on how much of an upstream error body ends up in messages/logs.
_ERROR_BODY_LIMIT = 300

# InvalidURL (bad ai.base_url) is not an HTTPError subclass.
_REQUEST_ERRORS = (httpx.HTTPError, httpx.InvalidURL)


class ChatCompletionClient:
    def __init__(
        self,
        settings: AIConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not settings.api_key:
            raise ConfigurationError("OpenAI API key not configured")
        self.settings = settings
        self._transport = transport

    def _http(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=self._transport,
            timeout=self.settings.timeout,
        )

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.settings.api_key}",
            "Content-Type": "application/json",
        }

    def _payload(self, prompt: str, stream: bool) -> dict:
        return {
            "model": self.settings.model,
            "messages": [{"role": "user", "content": prompt}],
            "stream": stream,
        }

    async def complete(self, prompt: str) -> str:
        """Send the prompt and return the first choice's message content."""
        logger.info(f"Upstream completion request: model={self.settings.model}")
        try:
            async with self._http() as client:
                resp = await client.post(
                    self.settings.completions_url,
                    json=self._payload(prompt, stream=False),
                    headers=self._headers(),
                )
        except _REQUEST_ERRORS as e:
            logger.error(f"Upstream request failed: {e}")
            raise UpstreamConnectionError(f"AI provider request failed: {e}") from e

        if resp.is_error:
            logger.warning(
                f"Upstream returned HTTP {resp.status_code}: "
                f"{resp.text[:_ERROR_BODY_LIMIT]}"
            )
            raise UpstreamError(resp.status_code, resp.text[:_ERROR_BODY_LIMIT])

        try:
            content = resp.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise UpstreamError(resp.status_code, f"malformed response body ({e})") from e
        # null for refusals and tool calls
        if not isinstance(content, str):
            raise UpstreamError(resp.status_code, "response carried no message content")
        return content

    async def stream_lines(self, prompt: str) -> AsyncIterator[str]:
        """Open a streaming completion and yield the body's lines as they arrive.

        A non-success status raises ``UpstreamError`` before the first line.
        """
        logger.info(f"Upstream stream request: model={self.settings.model}")
        try:
            async with self._http() as client:
                async with client.stream(
                    "POST",
                    self.settings.completions_url,
                    json=self._payload(prompt, stream=True),
                    headers=self._headers(),
                ) as resp:
                    if resp.is_error:
                        body = (await resp.aread()).decode("utf-8", errors="replace")
                        logger.warning(
                            f"Upstream returned HTTP {resp.status_code}: "
                            f"{body[:_ERROR_BODY_LIMIT]}"
                        )
                        raise UpstreamError(resp.status_code, body[:_ERROR_BODY_LIMIT])
                    async for line in resp.aiter_lines():
                        yield line
        except _REQUEST_ERRORS as e:
            logger.error(f"Upstream stream failed: {e}")
            raise UpstreamConnectionError(f"AI provider request failed: {e}") from e

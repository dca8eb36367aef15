"""AI relay — validates an enhancement request and republishes the upstream answer.

Flow:
    1. validate action/content          (ValidationError, no network)
    2. build the prompt
    3. require an API key               (ConfigurationError, no network)
    4a. stream=True  → lazy RelayEvent stream, one upstream connection
    4b. stream=False → one EnhancementResult after the full answer

Streams always end with exactly one terminal event (done or error) unless
the upstream closes early, in which case they simply end. No retries.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import aclosing

import httpx

from quillnote.ai.client import ChatCompletionClient
from quillnote.ai.prompts import build_prompt
from quillnote.ai.reframer import reframe
from quillnote.config import AIConfig
from quillnote.errors import UpstreamConnectionError, UpstreamError, ValidationError
from quillnote.schemas import EnhanceRequest, EnhancementResult, RelayEvent

logger = logging.getLogger(__name__)


class EnhancementRelay:
    def __init__(
        self,
        settings: AIConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings
        self._transport = transport

    def prepare(self, request: EnhanceRequest) -> tuple[str, ChatCompletionClient]:
        """Validate the request and return (prompt, client).

        Every check that can fail without touching the network happens here.
        """
        if not request.content.strip():
            raise ValidationError("Content must not be empty")
        prompt = build_prompt(request.action, request.content)
        client = ChatCompletionClient(self.settings, transport=self._transport)
        return prompt, client

    async def enhance(
        self, request: EnhanceRequest
    ) -> EnhancementResult | AsyncIterator[RelayEvent]:
        """Run one enhancement.

        Raises ValidationError / ConfigurationError before any connection.
        Returns an event stream when ``request.stream`` is set, otherwise the
        finished result.
        """
        prompt, client = self.prepare(request)
        logger.info(
            f"Enhance: action={request.action}, stream={request.stream}, "
            f"content_chars={len(request.content)}"
        )
        if request.stream:
            return self.relay(client, prompt)
        return await self.complete(client, prompt, request.action)

    async def complete(
        self, client: ChatCompletionClient, prompt: str, action: str
    ) -> EnhancementResult:
        try:
            text = await client.complete(prompt)
        except (UpstreamError, UpstreamConnectionError) as e:
            logger.warning(f"Enhancement failed: {e}")
            return EnhancementResult(action=action, error=str(e))
        return EnhancementResult(action=action, result=text)

    async def relay(
        self, client: ChatCompletionClient, prompt: str
    ) -> AsyncIterator[RelayEvent]:
        """Forward reframed upstream events as they arrive.

        Closing this generator early (client disconnect) closes the upstream
        response through the nested ``aclosing`` blocks.
        """
        forwarded = 0
        try:
            async with aclosing(client.stream_lines(prompt)) as lines:
                async with aclosing(reframe(lines)) as events:
                    async for event in events:
                        yield event
                        if event.is_terminal:
                            break
                        forwarded += 1
        except (UpstreamError, UpstreamConnectionError) as e:
            logger.warning(f"Enhancement stream failed after {forwarded} chunks: {e}")
            yield RelayEvent.failure(str(e))
            return
        except Exception as e:
            logger.error(f"Enhancement stream error after {forwarded} chunks: {e}", exc_info=True)
            yield RelayEvent.failure(f"Enhancement stream error: {e}")
            return
        logger.info(f"Enhancement stream finished: chunks={forwarded}")

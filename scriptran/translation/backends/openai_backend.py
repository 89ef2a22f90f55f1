"""OpenAI chat-completions backend."""

import logging
import time
from typing import Optional

import httpx
from openai import AsyncOpenAI, OpenAIError

from scriptran.core.exceptions import GatewayError
from scriptran.core.models import Provider
from ..base import CompletionBackend, CompletionRequest

logger = logging.getLogger(__name__)


class OpenAIBackend(CompletionBackend):
    """OpenAI GPT completion backend (provider A)."""

    provider = Provider.OPENAI

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = 60.0,
        max_retries: int = 2
    ):
        super().__init__(api_key, base_url, timeout, max_retries)
        if self.async_client and base_url:
            logger.info(f"Using custom OpenAI API endpoint: {base_url}")

    def _build_client(self) -> AsyncOpenAI:
        return AsyncOpenAI(
            api_key=self.api_key,
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout),
            max_retries=self.max_retries,
        )

    def _build_messages(self, request: CompletionRequest):
        """Build messages for the chat completions API."""
        messages = []
        if request.system_instruction:
            messages.append({"role": "system", "content": request.system_instruction})
        messages.append({"role": "user", "content": request.user_content})
        return messages

    async def complete(self, request: CompletionRequest) -> str:
        if not self.async_client:
            raise GatewayError("openai", "API key not configured")

        start_time = time.time()
        try:
            response = await self._client_for_running_loop().chat.completions.create(
                model=request.model,
                messages=self._build_messages(request),
                temperature=request.temperature,
                max_tokens=request.max_tokens,
            )
        except OpenAIError as e:
            raise GatewayError("openai", str(e), original_error=e) from e

        content = response.choices[0].message.content if response.choices else None
        logger.debug(f"OpenAI {request.model} answered in {time.time() - start_time:.2f}s")
        return (content or "").strip()

"""Anthropic Claude messages backend."""

import logging
import time
from typing import Optional

import httpx
from anthropic import AsyncAnthropic, AnthropicError

from scriptran.core.exceptions import GatewayError
from scriptran.core.models import Provider
from ..base import CompletionBackend, CompletionRequest

logger = logging.getLogger(__name__)


class AnthropicBackend(CompletionBackend):
    """Anthropic Claude completion backend (provider B)."""

    provider = Provider.ANTHROPIC

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = 60.0,
        max_retries: int = 2
    ):
        # The SDK appends /v1 itself
        if base_url:
            if base_url.endswith("/v1"):
                base_url = base_url[:-3]
            elif base_url.endswith("/v1/"):
                base_url = base_url[:-4]
        super().__init__(api_key, base_url, timeout, max_retries)
        if self.async_client and self.base_url:
            logger.info(f"Using custom Anthropic API endpoint: {self.base_url}")

    def _build_client(self) -> AsyncAnthropic:
        client_kwargs = {
            "api_key": self.api_key,
            "timeout": httpx.Timeout(self.timeout),
            "max_retries": self.max_retries,
        }
        if self.base_url:
            client_kwargs["base_url"] = self.base_url
        return AsyncAnthropic(**client_kwargs)

    def is_available(self) -> bool:
        return self.api_key is not None and self.async_client is not None

    async def complete(self, request: CompletionRequest) -> str:
        if not self.async_client:
            raise GatewayError("anthropic", "API key not configured")

        kwargs = {
            "model": request.model,
            "max_tokens": request.max_tokens,
            "temperature": request.temperature,
            "messages": [{"role": "user", "content": request.user_content}],
        }
        if request.system_instruction:
            kwargs["system"] = request.system_instruction

        start_time = time.time()
        try:
            response = await self._client_for_running_loop().messages.create(**kwargs)
        except AnthropicError as e:
            raise GatewayError("anthropic", str(e), original_error=e) from e

        text = ""
        for block in response.content:
            if block.type == "text":
                text = block.text
                break
        logger.debug(
            f"Anthropic {request.model} answered in {time.time() - start_time:.2f}s "
            f"(stop_reason={response.stop_reason})"
        )
        return text.strip()

"""
Base completion gateway interface.
All provider adapters must inherit from CompletionBackend.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
from dataclasses import dataclass

from scriptran.core.models import Provider

logger = logging.getLogger(__name__)


@dataclass
class CompletionRequest:
    """One system-instruction + user-content call to a model."""
    user_content: str
    model: str
    system_instruction: Optional[str] = None
    temperature: float = 0.2
    max_tokens: int = 900


class CompletionBackend(ABC):
    """Abstract base class for a single provider's completion API."""

    provider: Provider

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = 60.0,
        max_retries: int = 2
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self.max_retries = max_retries
        self.name = self.__class__.__name__
        self.async_client = self._build_client() if self.api_key else None
        self._client_loop: Optional[asyncio.AbstractEventLoop] = None

    def _build_client(self) -> Any:
        """Create the provider SDK's async client."""
        raise NotImplementedError

    def _client_for_running_loop(self) -> Any:
        """
        Async client bound to the running event loop.

        SDK clients pool connections on the loop they first ran on, and each
        sync call (asyncio.run) runs on a new loop, so the client is rebuilt
        whenever the loop changes.
        """
        loop = asyncio.get_running_loop()
        if self._client_loop is not None and self._client_loop is not loop:
            logger.debug(f"{self.name}: event loop changed, building a new client")
            self.async_client = self._build_client()
        self._client_loop = loop
        return self.async_client

    @abstractmethod
    async def complete(self, request: CompletionRequest) -> str:
        """
        Run one completion call.

        Args:
            request: Instruction, content and sampling parameters

        Returns:
            Raw response text, stripped

        Raises:
            GatewayError: on transport, auth, rate-limit or timeout failure
        """
        pass

    def is_available(self) -> bool:
        """Check if backend is configured with credentials."""
        return bool(self.api_key)

    def get_info(self) -> Dict:
        """Get backend information."""
        return {
            "name": self.name,
            "provider": self.provider.value,
            "base_url": self.base_url,
            "available": self.is_available()
        }


class CompletionGateway(ABC):
    """The capability the orchestrator consumes: route a call to a provider."""

    @abstractmethod
    async def complete(
        self,
        provider: Provider,
        model: str,
        system_instruction: Optional[str],
        user_content: str,
        temperature: float = 0.2,
        max_tokens: int = 900,
    ) -> str:
        pass

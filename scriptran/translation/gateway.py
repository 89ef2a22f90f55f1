"""Provider routing for the completion gateway."""

import logging
from typing import Any, Dict, Optional

from scriptran.core.exceptions import GatewayError
from scriptran.core.models import Provider
from .base import CompletionBackend, CompletionGateway, CompletionRequest
from .backends import AnthropicBackend, OpenAIBackend

logger = logging.getLogger(__name__)

BACKEND_CLASSES = {
    Provider.OPENAI: OpenAIBackend,
    Provider.ANTHROPIC: AnthropicBackend,
}


class ProviderGateway(CompletionGateway):
    """Dispatches each call to the backend registered for its provider.

    Backends are built once and passed in; the gateway owns no other state.
    """

    def __init__(self, backends: Dict[Provider, CompletionBackend]):
        self.backends = dict(backends)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "ProviderGateway":
        """Build one backend per configured provider.

        Args:
            config: Loaded configuration (see config_loader.get_default_config)
        """
        providers_cfg = config.get("providers", {})
        timeout = config.get("pipeline", {}).get("timeout", 60.0)
        backends = {}
        for provider, backend_class in BACKEND_CLASSES.items():
            settings = providers_cfg.get(provider.value, {})
            backends[provider] = backend_class(
                api_key=settings.get("api_key") or None,
                base_url=settings.get("base_url") or None,
                timeout=timeout,
                max_retries=settings.get("max_retries", 2),
            )
        return cls(backends)

    def backend_for(self, provider: Provider) -> CompletionBackend:
        backend = self.backends.get(provider)
        if backend is None:
            registered = ", ".join(p.value for p in self.backends) or "none"
            raise GatewayError(provider.value, f"no backend registered (registered: {registered})")
        return backend

    async def complete(
        self,
        provider: Provider,
        model: str,
        system_instruction: Optional[str],
        user_content: str,
        temperature: float = 0.2,
        max_tokens: int = 900,
    ) -> str:
        backend = self.backend_for(provider)
        request = CompletionRequest(
            user_content=user_content,
            model=model,
            system_instruction=system_instruction,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        return await backend.complete(request)

    def get_info(self) -> Dict[str, Dict]:
        return {provider.value: backend.get_info() for provider, backend in self.backends.items()}

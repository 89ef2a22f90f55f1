"""Pytest configuration and fixtures."""

import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Union

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import pytest

from scriptran.core.models import Provider, TranslationUnit
from scriptran.translation.base import CompletionGateway


@dataclass
class GatewayCall:
    """One recorded call to the fake gateway."""
    provider: Provider
    model: str
    system_instruction: Optional[str]
    user_content: str
    temperature: float
    max_tokens: int


Response = Union[str, Exception]


class FakeGateway(CompletionGateway):
    """Completion gateway returning canned responses.

    Either replays ``responses`` in call order (an Exception entry is raised),
    or answers every call with ``handler(system_instruction, user_content)``.
    """

    def __init__(
        self,
        responses: Optional[List[Response]] = None,
        handler: Optional[Callable[[Optional[str], str], Response]] = None
    ):
        self.responses = list(responses or [])
        self.handler = handler
        self.calls: List[GatewayCall] = []

    async def complete(
        self,
        provider,
        model,
        system_instruction,
        user_content,
        temperature=0.2,
        max_tokens=900,
    ):
        self.calls.append(GatewayCall(provider, model, system_instruction, user_content, temperature, max_tokens))
        if self.handler is not None:
            response = self.handler(system_instruction, user_content)
        elif self.responses:
            response = self.responses.pop(0)
        else:
            raise AssertionError(f"Unexpected gateway call #{len(self.calls)}: {user_content!r}")

        if isinstance(response, Exception):
            raise response
        return response


def detection_json(
    translated: str,
    detected: str = "English",
    mismatch: bool = False,
    suggested: str = ""
) -> str:
    """Serialize a detection response the way a well-behaved model would."""
    return json.dumps({
        "detectedLanguage": detected,
        "languageMismatch": mismatch,
        "suggestedText": suggested,
        "translatedText": translated,
    }, ensure_ascii=False)


@pytest.fixture
def make_unit():
    """Factory for translation units with sensible defaults."""
    def _make(
        text: str = "Hello",
        source_lang: str = "English",
        target_lang: str = "Spanish",
        provider: Provider = Provider.OPENAI,
        model: str = "gpt-3.5-turbo"
    ) -> TranslationUnit:
        return TranslationUnit(
            text=text,
            source_lang=source_lang,
            target_lang=target_lang,
            provider=provider,
            model=model,
        )
    return _make


@pytest.fixture
def sample_document():
    """Nested JSON document with every value kind."""
    return {
        "greeting": "Hello",
        "nested": {
            "message": "Bye",
            "array": ["First item", 2, None, True],
        },
        "number": 42,
        "ratio": 0.5,
        "boolean": False,
        "null_value": None,
        "blank": "   ",
    }


@pytest.fixture
def gateway():
    """Factory for scripted fake gateways."""
    return FakeGateway


@pytest.fixture
def detection():
    """Builder for detection-call JSON responses."""
    return detection_json

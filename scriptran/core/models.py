"""
Core data models for ScriptTrans-LLMs.

This module defines the value objects that flow through the detection,
correction and translation pipeline. All of them are immutable: a unit is
owned by exactly one orchestration run and nothing is shared across runs.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, List, Union


JsonValue = Union[str, int, float, bool, None, List[Any], Dict[str, Any]]


class Provider(Enum):
    """Completion providers the gateway can route to."""
    OPENAI = "openai"
    ANTHROPIC = "anthropic"

    @classmethod
    def parse(cls, value: Union[str, "Provider"]) -> "Provider":
        """Accept either a Provider or its case-insensitive string id."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(p.value for p in cls)
            raise ValueError(f"Unknown provider '{value}' (valid: {valid})") from None


@dataclass(frozen=True)
class TranslationUnit:
    """One piece of text to detect, correct and translate."""
    text: str
    source_lang: str      # Free-form language name, e.g. "English"
    target_lang: str
    provider: Provider
    model: str

    def with_text(self, text: str) -> TranslationUnit:
        """Copy of this unit carrying different text (used for JSON leaves)."""
        return replace(self, text=text)


@dataclass(frozen=True)
class DetectionResult:
    """Structured output of the detection-correction call."""
    detected_language: str
    language_mismatch: bool
    suggested_text: str   # Empty unless a genuine script/keyboard correction exists
    translated_text: str


@dataclass(frozen=True)
class TranslationOutcome:
    """Externally visible result of translating one unit."""
    translated_text: str
    detected_language: str
    language_mismatch: bool
    suggested_text: str
    provider: Provider

    @classmethod
    def from_detection(cls, detection: DetectionResult, provider: Provider) -> TranslationOutcome:
        return cls(
            translated_text=detection.translated_text,
            detected_language=detection.detected_language,
            language_mismatch=detection.language_mismatch,
            suggested_text=detection.suggested_text,
            provider=provider,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the camelCase keys the UI layer consumes."""
        return {
            "translatedText": self.translated_text,
            "detectedLanguage": self.detected_language,
            "languageMismatch": self.language_mismatch,
            "suggestedText": self.suggested_text,
            "provider": self.provider.value,
        }

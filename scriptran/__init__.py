"""
ScriptTrans-LLMs: script-aware translation with LLMs

Translates text, or every string inside a JSON document, after reconciling
what the user actually typed with the language they say they typed in:

1. Keyboard-layout mistakes are remapped (Hangul key presses of English text)
2. Wrong-script phonetic input is transliterated ("핼로" -> "Hello")
3. Genuinely foreign input is flagged as a language mismatch
4. Translations are verified, and retried when the model merely echoed the source

Usage:
    from scriptran import TranslationPipeline, TranslationUnit, Provider, load_config

    pipeline = TranslationPipeline.from_config(load_config())
    outcome = pipeline.translate_text(TranslationUnit(
        text="핼로",
        source_lang="English",
        target_lang="French",
        provider=Provider.OPENAI,
        model="gpt-3.5-turbo",
    ))
"""

__version__ = "1.0.0"
__author__ = "ScriptTrans Team"
__license__ = "MIT"

from scriptran.core.models import (
    Provider,
    TranslationUnit,
    DetectionResult,
    TranslationOutcome,
    JsonValue
)
from scriptran.core.exceptions import (
    ScripTransError,
    GatewayError,
    MalformedOutputError,
    TranslationError,
    TranslationErrorKind,
    InvalidJsonError,
    InvalidInputError,
    ConfigurationError
)
from scriptran.core.pipeline import (
    TranslationPipeline,
    PipelineConfig,
    RecoveryState
)
from scriptran.core.validator import validate_json
from scriptran.translation.base import CompletionGateway, CompletionBackend, CompletionRequest
from scriptran.translation.gateway import ProviderGateway
from scriptran.utils.config_loader import load_config

__all__ = [
    "__version__",
    "__author__",
    "__license__",
    "Provider", "TranslationUnit", "DetectionResult", "TranslationOutcome", "JsonValue",
    "ScripTransError", "GatewayError", "MalformedOutputError", "TranslationError",
    "TranslationErrorKind", "InvalidJsonError", "InvalidInputError", "ConfigurationError",
    "TranslationPipeline", "PipelineConfig", "RecoveryState",
    "validate_json",
    "CompletionGateway", "CompletionBackend", "CompletionRequest", "ProviderGateway",
    "load_config",
]

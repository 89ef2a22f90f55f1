"""
Exception hierarchy for ScriptTrans-LLMs.

Provides specific exception types so callers can tell an upstream provider
failure apart from "no usable translation was produced".
"""

from __future__ import annotations
from enum import Enum
from typing import Optional, Dict, Any, List


class ScripTransError(Exception):
    """Base exception for all ScriptTrans errors."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = False,
        suggestion: Optional[str] = None
    ):
        """
        Initialize error.

        Args:
            message: Human-readable error message
            details: Additional error details
            recoverable: Whether error can be recovered from
            suggestion: Suggested fix or workaround
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable
        self.suggestion = suggestion

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for JSON serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
            "suggestion": self.suggestion
        }

    def __str__(self) -> str:
        """String representation with suggestion if available."""
        result = self.message
        if self.suggestion:
            result += f"\nSuggestion: {self.suggestion}"
        return result


class GatewayError(ScripTransError):
    """Raised when a completion provider fails (transport, auth, rate limit, timeout)."""

    def __init__(
        self,
        backend: str,
        message: str,
        original_error: Optional[Exception] = None
    ):
        """
        Initialize gateway error.

        Args:
            backend: Provider name
            message: Error message
            original_error: Original exception if any
        """
        full_message = f"Provider '{backend}' failed: {message}"
        details = {
            "backend": backend,
            "original_error": str(original_error) if original_error else None,
        }
        suggestion = (
            f"Check the API key and base URL for {backend}. "
            "Set them via environment variables or configs/default.yaml."
        )
        super().__init__(full_message, details, recoverable=False, suggestion=suggestion)
        self.backend = backend
        self.original_error = original_error


class MalformedOutputError(ScripTransError):
    """Raised when provider output does not satisfy the detection output contract.

    The orchestrator recovers from this locally; it never reaches callers.
    """

    def __init__(self, message: str, raw_output: str = ""):
        details = {"raw_preview": raw_output[:200]}
        super().__init__(message, details, recoverable=True)
        self.raw_output = raw_output


class TranslationErrorKind(Enum):
    """Why a translation unit could not be completed."""
    GATEWAY_ERROR = "gateway_error"
    NO_TRANSLATION_PRODUCED = "no_translation_produced"


class TranslationError(ScripTransError):
    """Raised when no usable translation can be produced for a unit."""

    def __init__(
        self,
        kind: TranslationErrorKind,
        message: str,
        source_lang: Optional[str] = None,
        target_lang: Optional[str] = None
    ):
        details = {
            "kind": kind.value,
            "source_lang": source_lang,
            "target_lang": target_lang,
        }
        if kind is TranslationErrorKind.GATEWAY_ERROR:
            suggestion = "The provider call failed upstream. Check credentials, network and rate limits, then retry."
        else:
            suggestion = "The model returned nothing usable. Try another model or provider."
        super().__init__(message, details, recoverable=False, suggestion=suggestion)
        self.kind = kind


class InvalidJsonError(ScripTransError):
    """Raised when a caller-supplied JSON document does not parse."""

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        details = {"line": line, "column": column}
        super().__init__(
            message,
            details,
            recoverable=True,
            suggestion="Invalid JSON format. Please check your syntax."
        )
        self.line = line
        self.column = column


class InvalidInputError(ScripTransError):
    """Raised when there is no text to translate."""

    def __init__(self, message: str = "Please enter text to translate"):
        super().__init__(message, recoverable=True)


class ConfigurationError(ScripTransError):
    """Raised when configuration is invalid."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        invalid_value: Optional[Any] = None,
        valid_values: Optional[List[Any]] = None
    ):
        """
        Initialize configuration error.

        Args:
            message: Error message
            config_key: Configuration key that's invalid
            invalid_value: Invalid value provided
            valid_values: List of valid values
        """
        details = {
            "config_key": config_key,
            "invalid_value": invalid_value,
            "valid_values": valid_values
        }

        suggestion = None
        if config_key and valid_values:
            suggestion = f"Valid values for {config_key}: {', '.join(map(str, valid_values))}"
        elif config_key:
            suggestion = f"Check configuration for '{config_key}'"

        super().__init__(message, details, recoverable=True, suggestion=suggestion)
        self.config_key = config_key
        self.invalid_value = invalid_value
        self.valid_values = valid_values

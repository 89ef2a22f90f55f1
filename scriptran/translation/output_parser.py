"""
Output contract for the detection-correction call.

The model must answer with a JSON object carrying exactly the four fields of
a DetectionResult with the right primitive kinds. Anything else is a parse
failure; no field is ever defaulted and no partial result is accepted.
Semantic checks (is the translation really in the target language?) do not
belong here.
"""

import json
from typing import Any, Dict, Optional

from scriptran.core.exceptions import MalformedOutputError
from scriptran.core.models import DetectionResult
from .output_cleaner import strip_code_fence

REQUIRED_FIELDS = {
    "detectedLanguage": str,
    "languageMismatch": bool,
    "suggestedText": str,
    "translatedText": str,
}


def _check_fields(payload: Any) -> Optional[str]:
    """Return a description of the first contract violation, or None."""
    if not isinstance(payload, dict):
        return f"expected a JSON object, got {type(payload).__name__}"
    for field_name, kind in REQUIRED_FIELDS.items():
        if field_name not in payload:
            return f"missing field '{field_name}'"
        if not isinstance(payload[field_name], kind):
            return (
                f"field '{field_name}' must be {kind.__name__}, "
                f"got {type(payload[field_name]).__name__}"
            )
    return None


def parse_detection_output_strict(raw: str) -> DetectionResult:
    """
    Decode a detection response or raise.

    Args:
        raw: Raw gateway text

    Returns:
        DetectionResult

    Raises:
        MalformedOutputError: if the text is not a conforming JSON object
    """
    if raw is None or not raw.strip():
        raise MalformedOutputError("empty response", raw or "")

    try:
        payload: Dict[str, Any] = json.loads(strip_code_fence(raw))
    except json.JSONDecodeError as e:
        raise MalformedOutputError(f"response is not JSON: {e.msg}", raw) from e

    problem = _check_fields(payload)
    if problem:
        raise MalformedOutputError(f"response violates output contract: {problem}", raw)

    return DetectionResult(
        detected_language=payload["detectedLanguage"],
        language_mismatch=payload["languageMismatch"],
        suggested_text=payload["suggestedText"],
        translated_text=payload["translatedText"],
    )


def parse_detection_output(raw: str) -> Optional[DetectionResult]:
    """Decode a detection response; None signals a parse failure."""
    try:
        return parse_detection_output_strict(raw)
    except MalformedOutputError:
        return None

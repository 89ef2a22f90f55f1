"""
Output cleaning utilities for LLM completions.

Plain-text calls (fallback, verification, retry) are asked for the bare
translation, but models still wrap it in artifacts:
- <think>...</think> reasoning blocks
- "Translation:" style labels
- code fences
- quotes echoed from the prompt

normalize_detection applies the suggestion and mismatch rules to a parsed
detection result.
"""

import re
from dataclasses import replace

from scriptran.core.models import DetectionResult

_WHITESPACE_RUN = re.compile(r"\s+")
_CODE_FENCE = re.compile(r"^```(?:\w+)?\s*\n(.*?)\n?```\s*$", re.DOTALL)
_LABELS = ("Translation", "Translated text", "Corrected translation", "Output", "Result")
_QUOTE_PAIRS = {'"': '"', "'": "'", '“': '”'}


def normalize_whitespace(text: str) -> str:
    """Collapse internal whitespace runs to one space and trim both ends."""
    if not text:
        return ""
    return _WHITESPACE_RUN.sub(" ", text).strip()


def strip_code_fence(text: str) -> str:
    """Remove a single markdown code fence wrapping the whole text."""
    match = _CODE_FENCE.match(text.strip())
    if match:
        return match.group(1).strip()
    return text.strip()


def clean_translation_output(text: str) -> str:
    """
    Clean LLM output to extract only the translated text.

    Args:
        text: Raw LLM output

    Returns:
        Cleaned text; empty when nothing is left once reasoning blocks,
        fences, labels and quotes are removed
    """
    if not text or not text.strip():
        return ""

    text = re.sub(r'<think>.*?</think>', '', text, flags=re.DOTALL | re.IGNORECASE)
    text = re.sub(r'<thinking>.*?</thinking>', '', text, flags=re.DOTALL | re.IGNORECASE)

    text = strip_code_fence(text)

    for label in _LABELS:
        text = re.sub(rf'^{label}:\s*', '', text, flags=re.IGNORECASE)

    # Quotes wrapping the entire text
    text = text.strip()
    if len(text) >= 2 and _QUOTE_PAIRS.get(text[0]) == text[-1]:
        text = text[1:-1]

    return text.strip()


def normalize_detection(original_text: str, source_lang: str, result: DetectionResult) -> DetectionResult:
    """
    Enforce the detection invariants on a parsed result.

    Applied exactly once per unit. Idempotent: normalizing a normalized
    result returns an equal result.

    - a mismatch is only a mismatch if the detected language differs from
      the declared source language
    - a mismatch never carries a suggestion
    - a suggestion equal to the input (modulo whitespace) is no suggestion

    Args:
        original_text: Raw user input
        source_lang: Declared source language
        result: Parsed detection output

    Returns:
        Normalized DetectionResult
    """
    mismatch = result.language_mismatch
    if mismatch and result.detected_language.strip().casefold() == source_lang.strip().casefold():
        mismatch = False

    suggestion = normalize_whitespace(result.suggested_text)
    if mismatch or suggestion == normalize_whitespace(original_text):
        suggestion = ""

    return replace(result, language_mismatch=mismatch, suggested_text=suggestion)

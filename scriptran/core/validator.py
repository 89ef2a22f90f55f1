# -*- coding: utf-8 -*-
"""
Input validation for JSON documents.

Documents are rejected here, before any provider call, when they do not
parse. Parsed documents are handed to the pipeline untouched.
"""

import json
import logging

from scriptran.core.exceptions import InvalidJsonError
from scriptran.core.models import JsonValue

logger = logging.getLogger(__name__)


def validate_json(json_string: str) -> JsonValue:
    """
    Parse a caller-supplied JSON document.

    Args:
        json_string: Raw document text

    Returns:
        Parsed JSON value

    Raises:
        InvalidJsonError: if the text is empty or not valid JSON
    """
    if json_string is None or not json_string.strip():
        raise InvalidJsonError("Please enter JSON to translate")

    try:
        return json.loads(json_string)
    except json.JSONDecodeError as e:
        logger.warning(f"Rejected JSON document: {e.msg} at line {e.lineno} column {e.colno}")
        raise InvalidJsonError(
            f"Invalid JSON format: {e.msg} (line {e.lineno}, column {e.colno})",
            line=e.lineno,
            column=e.colno,
        ) from e

"""
Structure-preserving translation of JSON documents.

A document is walked twice: once to collect its translatable string leaves
in traversal order (insertion order for objects, index order for arrays),
and once to rebuild an identical structure with each leaf replaced by its
translation. Keys are copied verbatim and never translated; numbers,
booleans and null are returned as the same objects.
"""

from __future__ import annotations
import asyncio
import logging
from typing import Awaitable, Callable, Iterator, List

from scriptran.core.models import JsonValue

logger = logging.getLogger(__name__)

TranslateLeaf = Callable[[str], Awaitable[str]]


def is_translatable(text: str) -> bool:
    """Whitespace-only strings carry nothing to translate."""
    return bool(text.strip())


def collect_strings(value: JsonValue) -> List[str]:
    """Translatable string leaves of a JSON value, in traversal order."""
    leaves: List[str] = []
    _collect(value, leaves)
    return leaves


def _collect(value: JsonValue, leaves: List[str]) -> None:
    if isinstance(value, str):
        if is_translatable(value):
            leaves.append(value)
    elif isinstance(value, list):
        for item in value:
            _collect(item, leaves)
    elif isinstance(value, dict):
        for item in value.values():
            _collect(item, leaves)


def rebuild(value: JsonValue, translations: Iterator[str]) -> JsonValue:
    """
    Copy a JSON value, substituting translated leaves in traversal order.

    Args:
        value: Original JSON value
        translations: Iterator yielding one translation per collected leaf

    Returns:
        Structurally identical JSON value
    """
    if isinstance(value, str):
        return next(translations) if is_translatable(value) else value
    if isinstance(value, list):
        return [rebuild(item, translations) for item in value]
    if isinstance(value, dict):
        return {key: rebuild(item, translations) for key, item in value.items()}
    return value


async def _translate_leaves(
    leaves: List[str],
    translate_leaf: TranslateLeaf,
    max_concurrency: int,
) -> List[str]:
    if max_concurrency <= 1:
        return [await translate_leaf(text) for text in leaves]

    semaphore = asyncio.Semaphore(max_concurrency)

    async def bounded(text: str) -> str:
        async with semaphore:
            return await translate_leaf(text)

    tasks = [asyncio.ensure_future(bounded(text)) for text in leaves]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        # First failure aborts the document: stop the siblings still in flight
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def atranslate_tree(
    value: JsonValue,
    translate_leaf: TranslateLeaf,
    max_concurrency: int = 1,
) -> JsonValue:
    """
    Translate every string leaf of a JSON value.

    Each leaf is translated independently (identical strings included). Any
    leaf failure propagates and no partial structure is returned.

    Args:
        value: JSON value to translate
        translate_leaf: Coroutine translating one string
        max_concurrency: 1 for sequential traversal, >1 for bounded fan-out

    Returns:
        Translated copy of ``value``
    """
    leaves = collect_strings(value)
    logger.info(f"Translating {len(leaves)} string leaves (concurrency={max(1, max_concurrency)})")
    translations = await _translate_leaves(leaves, translate_leaf, max_concurrency)
    return rebuild(value, iter(translations))

"""
Translation pipeline for ScriptTrans-LLMs.

This module orchestrates one text unit through detection, correction,
translation, verification and no-op retry, and drives whole JSON documents
through the same path leaf by leaf.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum, auto
from typing import Any, Dict, List, Optional, Union
import asyncio
import logging

from scriptran.core.exceptions import (
    GatewayError, InvalidInputError, TranslationError, TranslationErrorKind
)
from scriptran.core.models import (
    DetectionResult, JsonValue, Provider, TranslationOutcome, TranslationUnit
)
from scriptran.core.tree import atranslate_tree
from scriptran.translation.base import CompletionGateway
from scriptran.translation.gateway import ProviderGateway
from scriptran.translation.output_cleaner import (
    clean_translation_output, normalize_detection, normalize_whitespace
)
from scriptran.translation.output_parser import parse_detection_output
from scriptran.translation.prompts import (
    DETECTION_PROMPT, FALLBACK_PROMPT, RETRY_PROMPT, VERIFICATION_PROMPT,
    PromptTemplate, build_system_prompt
)

logger = logging.getLogger(__name__)


@dataclass
class PipelineConfig:
    """Configuration for the translation pipeline."""

    # Default selections (the core accepts any language name)
    source_lang: str = "English"
    target_lang: str = "Spanish"
    provider: str = "openai"
    models: Dict[str, str] = field(default_factory=lambda: {
        "openai": "gpt-3.5-turbo",
        "anthropic": "claude-3-haiku-20240307",
    })

    # Sampling for the structured detection call
    detection_temperature: float = 0.2
    detection_max_tokens: int = 900

    # Sampling for plain-text fallback/verification/retry calls
    followup_temperature: float = 0.3
    followup_max_tokens: int = 1000

    # Recovery steps
    verify_translation: bool = True
    retry_no_op: bool = True

    # JSON documents: 1 = sequential traversal
    max_concurrency: int = 1

    def validate(self) -> List[str]:
        """Validate configuration and return any issues."""
        issues = []

        try:
            Provider.parse(self.provider)
        except ValueError as e:
            issues.append(str(e))

        for temperature in (self.detection_temperature, self.followup_temperature):
            if temperature < 0 or temperature > 2:
                issues.append("temperatures must be between 0 and 2")
                break

        if self.detection_max_tokens < 1 or self.followup_max_tokens < 1:
            issues.append("max_tokens must be at least 1")

        if self.max_concurrency < 1:
            issues.append("max_concurrency must be at least 1")

        return issues

    def model_for(self, provider: Union[str, Provider]) -> str:
        return self.models[Provider.parse(provider).value]

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> PipelineConfig:
        """Build from a loaded configuration dictionary (see config_loader)."""
        defaults = config.get("defaults", {})
        pipeline = config.get("pipeline", {})
        providers = config.get("providers", {})
        base = cls()

        models = dict(base.models)
        for name, settings in providers.items():
            if settings.get("default_model"):
                models[name] = settings["default_model"]

        return cls(
            source_lang=defaults.get("source_lang", base.source_lang),
            target_lang=defaults.get("target_lang", base.target_lang),
            provider=defaults.get("provider", base.provider),
            models=models,
            detection_temperature=pipeline.get("detection_temperature", base.detection_temperature),
            detection_max_tokens=pipeline.get("detection_max_tokens", base.detection_max_tokens),
            followup_temperature=pipeline.get("followup_temperature", base.followup_temperature),
            followup_max_tokens=pipeline.get("followup_max_tokens", base.followup_max_tokens),
            verify_translation=pipeline.get("verify_translation", base.verify_translation),
            retry_no_op=pipeline.get("retry_no_op", base.retry_no_op),
            max_concurrency=pipeline.get("max_concurrency", base.max_concurrency),
        )


class RecoveryState(Enum):
    """States of the per-unit recovery machine."""
    DETECT = auto()           # Structured detection call pending
    FALLBACK = auto()         # Detection output malformed, literal translation pending
    PARSED = auto()           # Detection parsed and normalized
    VERIFIED = auto()         # Verification pass done
    NO_OP_DETECTED = auto()   # Translation equals the corrected source
    FINAL = auto()


@dataclass
class UnitRun:
    """Mutable record of one unit moving through the recovery machine."""
    unit: TranslationUnit
    state: RecoveryState = RecoveryState.DETECT
    detection: Optional[DetectionResult] = None
    outcome: Optional[TranslationOutcome] = None
    history: List[RecoveryState] = field(default_factory=list)
    gateway_calls: int = 0


def _preview(text: str, limit: int = 40) -> str:
    text = normalize_whitespace(text)
    return text if len(text) <= limit else text[:limit] + "..."


class TranslationPipeline:
    """
    Detection-correction-translation orchestrator.

    The completion gateway is injected; the pipeline holds no state between
    calls. Each unit costs 2 to 4 strictly sequential gateway calls:
    1. structured detection + translation (or literal fallback if malformed)
    2. verification of the produced translation
    3. retry when the translation is just the corrected source
    """

    def __init__(self, gateway: CompletionGateway, config: Optional[PipelineConfig] = None):
        self.gateway = gateway
        self.config = config or PipelineConfig()
        self._handlers = {
            RecoveryState.DETECT: self._detect,
            RecoveryState.FALLBACK: self._fallback,
            RecoveryState.PARSED: self._verify,
            RecoveryState.VERIFIED: self._check_no_op,
            RecoveryState.NO_OP_DETECTED: self._retry,
        }

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> TranslationPipeline:
        """Build a pipeline and its provider gateway from a loaded configuration."""
        return cls(ProviderGateway.from_config(config), PipelineConfig.from_dict(config))

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def translate_text(self, unit: TranslationUnit) -> TranslationOutcome:
        """Translate one unit. Must not be called from a running event loop."""
        return asyncio.run(self.atranslate_text(unit))

    async def atranslate_text(self, unit: TranslationUnit) -> TranslationOutcome:
        if not unit.text or not unit.text.strip():
            raise InvalidInputError()
        return await self.atranslate_one(unit)

    def translate_one(self, unit: TranslationUnit) -> TranslationOutcome:
        return asyncio.run(self.atranslate_one(unit))

    async def atranslate_one(self, unit: TranslationUnit) -> TranslationOutcome:
        """
        Run one unit through the recovery machine.

        Raises:
            TranslationError: GATEWAY_ERROR if a required call failed upstream,
                NO_TRANSLATION_PRODUCED if every recovery path came back empty
        """
        run = UnitRun(unit=unit)
        logger.info(
            f"Translating '{_preview(unit.text)}' "
            f"({unit.source_lang} -> {unit.target_lang}, {unit.provider.value}/{unit.model})"
        )

        try:
            while run.state is not RecoveryState.FINAL:
                run.history.append(run.state)
                run.state = await self._handlers[run.state](run)
        except GatewayError as e:
            logger.error(f"Gateway failure after {run.gateway_calls} calls in state {run.state.name}: {e.message}")
            raise TranslationError(
                TranslationErrorKind.GATEWAY_ERROR,
                e.message,
                source_lang=unit.source_lang,
                target_lang=unit.target_lang,
            ) from e

        if run.outcome is None:
            run.outcome = TranslationOutcome.from_detection(run.detection, unit.provider)

        logger.info(
            f"Done in {run.gateway_calls} calls: detected={run.outcome.detected_language} "
            f"mismatch={run.outcome.language_mismatch} "
            f"path={' > '.join(state.name for state in run.history)}"
        )
        return run.outcome

    def translate_tree(
        self,
        value: JsonValue,
        source_lang: str,
        target_lang: str,
        provider: Union[str, Provider],
        model: Optional[str] = None,
    ) -> JsonValue:
        return asyncio.run(self.atranslate_tree(value, source_lang, target_lang, provider, model))

    async def atranslate_tree(
        self,
        value: JsonValue,
        source_lang: str,
        target_lang: str,
        provider: Union[str, Provider],
        model: Optional[str] = None,
    ) -> JsonValue:
        """
        Translate every string leaf of a JSON value, preserving its shape.

        Args:
            value: Parsed JSON document
            source_lang: Declared source language of the leaves
            target_lang: Target language
            provider: Provider id or Provider
            model: Model id (defaults to the configured model for the provider)

        Returns:
            Structurally identical JSON value with translated string leaves

        Raises:
            TranslationError: from the first failing leaf; no partial tree is returned
        """
        provider = Provider.parse(provider)
        template = TranslationUnit(
            text="",
            source_lang=source_lang,
            target_lang=target_lang,
            provider=provider,
            model=model or self.config.model_for(provider),
        )

        async def translate_leaf(text: str) -> str:
            outcome = await self.atranslate_one(template.with_text(text))
            return outcome.translated_text

        return await atranslate_tree(value, translate_leaf, self.config.max_concurrency)

    translate_json = translate_tree
    atranslate_json = atranslate_tree

    # ------------------------------------------------------------------
    # Recovery machine
    # ------------------------------------------------------------------

    async def _call(
        self,
        run: UnitRun,
        template: PromptTemplate,
        text: str,
        temperature: float,
        max_tokens: int,
    ) -> str:
        unit = run.unit
        values = {"source_lang": unit.source_lang, "target_lang": unit.target_lang, "text": text}
        run.gateway_calls += 1
        logger.debug(f"Gateway call #{run.gateway_calls} ({template.name})")
        return await self.gateway.complete(
            unit.provider,
            unit.model,
            build_system_prompt(template, **values),
            template.render(**values),
            temperature=temperature,
            max_tokens=max_tokens,
        )

    async def _call_plain(self, run: UnitRun, template: PromptTemplate, text: str) -> str:
        raw = await self._call(
            run, template, text,
            self.config.followup_temperature, self.config.followup_max_tokens,
        )
        return clean_translation_output(raw)

    async def _detect(self, run: UnitRun) -> RecoveryState:
        unit = run.unit
        raw = await self._call(
            run, DETECTION_PROMPT, unit.text,
            self.config.detection_temperature, self.config.detection_max_tokens,
        )
        detection = parse_detection_output(raw)
        if detection is None:
            logger.warning(f"Malformed detection output, falling back to literal translation: {_preview(raw, 80)!r}")
            return RecoveryState.FALLBACK
        if not detection.translated_text.strip():
            logger.warning("Detection output carried an empty translation, falling back to literal translation")
            return RecoveryState.FALLBACK

        run.detection = normalize_detection(unit.text, unit.source_lang, detection)
        return RecoveryState.PARSED

    async def _fallback(self, run: UnitRun) -> RecoveryState:
        unit = run.unit
        translated = await self._call_plain(run, FALLBACK_PROMPT, unit.text)
        if not translated:
            raise TranslationError(
                TranslationErrorKind.NO_TRANSLATION_PRODUCED,
                "No translation received from the API",
                source_lang=unit.source_lang,
                target_lang=unit.target_lang,
            )
        run.outcome = TranslationOutcome(
            translated_text=translated,
            detected_language=unit.source_lang,
            language_mismatch=False,
            suggested_text="",
            provider=unit.provider,
        )
        return RecoveryState.FINAL

    async def _verify(self, run: UnitRun) -> RecoveryState:
        if not self.config.verify_translation:
            return RecoveryState.VERIFIED

        verified = await self._call_plain(run, VERIFICATION_PROMPT, run.detection.translated_text)
        if verified:
            run.detection = replace(run.detection, translated_text=verified)
        else:
            logger.warning("Verification returned nothing, keeping first-pass translation")
        return RecoveryState.VERIFIED

    async def _check_no_op(self, run: UnitRun) -> RecoveryState:
        suggestion = normalize_whitespace(run.detection.suggested_text)
        translated = normalize_whitespace(run.detection.translated_text)
        if self.config.retry_no_op and suggestion and suggestion.casefold() == translated.casefold():
            logger.warning(f"Translation repeats the corrected source '{_preview(suggestion)}', retrying")
            return RecoveryState.NO_OP_DETECTED
        return RecoveryState.FINAL

    async def _retry(self, run: UnitRun) -> RecoveryState:
        # Best-effort: the verified translation stands if this fails
        try:
            retried = await self._call_plain(run, RETRY_PROMPT, run.unit.text)
        except GatewayError as e:
            logger.warning(f"No-op retry failed, keeping previous translation: {e.message}")
            return RecoveryState.FINAL

        if retried:
            run.detection = replace(run.detection, translated_text=retried)
        else:
            logger.warning("No-op retry returned nothing, keeping previous translation")
        return RecoveryState.FINAL

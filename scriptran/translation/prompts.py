"""
Prompt templates for the detection-correction-translation pipeline.

The detection instruction is the contract the orchestrator relies on: the
model must walk the checks in a fixed order (keyboard remap, phonetic
wrong-script, true language, gibberish) and answer with a four-key JSON object.
The remaining templates are plain-text single-purpose calls used for
fallback, verification and no-op retry.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class PromptTemplate:
    """System instruction plus a user-content template."""
    name: str
    system_prompt: Optional[str]
    user_prompt_template: str
    system_is_template: bool = True  # False when the prompt holds literal braces

    def render(self, **values: str) -> str:
        """Fill the user-content template."""
        return self.user_prompt_template.format(**values).strip()


DETECTION_INSTRUCTION = """
You are a language detector, script corrector and strict translation pipeline.

You receive a selected source language, a target language and the user's input.
Work through the following checks IN ORDER. Stop at the first check that applies.

STEP 1 - Keyboard layout remap:
If the input characters look like literal key presses on a keyboard layout of a
different script than the selected source language, remap each key position
onto the source language's standard layout. If the remapped string is coherent
text in the source language:
  detectedLanguage = source language, languageMismatch = false,
  suggestedText = the remapped string. Stop.
Example: source English, input "ㅎㄷㅅ ㅡㄷ ㅐㅕㅅ ㅐㄹ ㅗㄷㄱㄷ" -> suggestedText "get me out of here".
Example: source English, input "좀ㅅ ㅑㄴ ㅕㅔ" -> suggestedText "what is up".

STEP 2 - Phonetic wrong script (only if step 1 did not apply):
If the input is written in the wrong script for the source language but its
pronunciation resembles the source language, transliterate it by SOUND (not by
meaning) into the source language's normal writing system and spell it
correctly. If the result is plausible:
  detectedLanguage = source language, languageMismatch = false,
  suggestedText = the transliteration. Stop.
Example: source English, input "핼로" -> suggestedText "Hello".
Example: source English, input "하이" -> suggestedText "Hi".
Example: source Japanese, input "콘니치와" -> suggestedText "こんにちは".

STEP 3 - Different language (only if steps 1-2 did not apply):
If the input is valid, meaningful text in a language OTHER than the source language:
  detectedLanguage = that language, languageMismatch = true, suggestedText = "". Stop.
Never put a correction in suggestedText in this case.
Example: source Japanese, input "안녕하세요" -> detectedLanguage "Korean", languageMismatch true.

STEP 4 - Gibberish (only if none of the above apply):
  detectedLanguage = source language, languageMismatch = false, suggestedText = "".

If the input is already correct text in the source language and script,
detectedLanguage = source language, languageMismatch = false, suggestedText = "".

TRANSLATION (always, whatever step applied):
Translate suggestedText if it is non-empty, otherwise the original input, from
the source language to the target language. When languageMismatch is true,
translate the original input as-is. translatedText MUST be written in the
target language and its normal script. Never return the input unchanged unless
source and target language are the same.

Output MUST be valid JSON only, with EXACTLY these keys and no commentary:
{
  "detectedLanguage": string,
  "languageMismatch": boolean,
  "suggestedText": string,
  "translatedText": string
}

Rules:
- "detectedLanguage" is a human language name such as "English", "Korean", "Japanese".
- "languageMismatch" is true only if detectedLanguage differs from the source language.
- "suggestedText" is "" unless step 1 or step 2 produced a correction that differs from the input.
- Do NOT include any extra keys, markdown or explanations.
""".strip()


DETECTION_PROMPT = PromptTemplate(
    name="detection",
    system_prompt=DETECTION_INSTRUCTION,
    user_prompt_template="""
Selected source language: {source_lang}
Target language: {target_lang}

User input:
{text}
""",
    system_is_template=False,
)

FALLBACK_PROMPT = PromptTemplate(
    name="fallback",
    system_prompt=(
        "You are a professional translator. Translate text accurately and naturally. "
        "Translate literally and return only the translation without any additional text."
    ),
    user_prompt_template='Translate from {source_lang} to {target_lang}. Text: "{text}"',
)

VERIFICATION_PROMPT = PromptTemplate(
    name="verification",
    system_prompt=(
        "You verify translations into {target_lang}. "
        "Output ONLY the corrected translation written in {target_lang} and its normal script. "
        "If the text is already a correct {target_lang} translation, output it unchanged. "
        "If any part is not in {target_lang}, translate that part into {target_lang}. "
        "No labels, no quotes, no explanations."
    ),
    user_prompt_template="{text}",
)

RETRY_PROMPT = PromptTemplate(
    name="retry",
    system_prompt=(
        "You are a professional translator. The previous attempt returned the input "
        "instead of translating it. Translate the text from {source_lang} into {target_lang}. "
        "Do NOT repeat the input. Return only the {target_lang} translation."
    ),
    user_prompt_template="{text}",
)


def build_system_prompt(template: PromptTemplate, **values: str) -> Optional[str]:
    """Fill placeholders in a template's system prompt, if it has any."""
    if template.system_prompt is None:
        return None
    if not template.system_is_template:
        return template.system_prompt
    return template.system_prompt.format(**values)

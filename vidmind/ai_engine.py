"""
vidmind — AI Engine
===================
Builds the jsMind mindmap from an analyzed video:
  1. Prompt composition (example schema + colour rules + inputs)
  2. One chat-completion call to the configured provider (DeepSeek / Groq / Gemini)
  3. Multi-strategy JSON recovery + structural validation
  4. Deterministic fallback tree whenever 2 or 3 fail

Features:
  - Missing inputs or API key fail fast; everything after that degrades
  - No retries: a failed call goes straight to the fallback tree
"""

import asyncio
import json
import logging
from typing import Any, List, Optional, Protocol

import google.generativeai as genai
from groq import AsyncGroq
from openai import AsyncOpenAI

from vidmind.core.config import Settings
from vidmind.core.errors import (
    ConfigurationError,
    GenerationError,
    MindmapParseError,
    MissingParameterError,
)
from vidmind.schemas.mindmap import DEFAULT_MINDMAP_NAME, MindmapDocument
from vidmind.services.fallback_tree import build_fallback_mindmap
from vidmind.services.json_recovery import parse_mindmap_response
from vidmind.services.text_utils import normalize_timepoints, sanitize_string

logger = logging.getLogger(__name__)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# PROMPT
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

EXAMPLE_MINDMAP = {
    "meta": {"name": DEFAULT_MINDMAP_NAME, "author": "AI Assistant", "version": "1.0"},
    "format": "node_tree",
    "data": {
        "id": "root",
        "topic": "Video topic",
        "children": [
            {
                "id": "topic1",
                "topic": "Main topic 1",
                "direction": "right",
                "expanded": True,
                "background-color": "#FF9500",
                "foreground-color": "#FFFFFF",
                "children": [
                    {
                        "id": "topic1_1",
                        "topic": "Sub-topic 1-1",
                        "direction": "right",
                        "background-color": "#FFB870",
                        "foreground-color": "#333333",
                    },
                    {
                        "id": "topic1_2",
                        "topic": "Sub-topic 1-2",
                        "direction": "right",
                        "background-color": "#FFB870",
                        "foreground-color": "#333333",
                    },
                ],
            },
            {
                "id": "topic2",
                "topic": "Main topic 2",
                "direction": "left",
                "expanded": True,
                "background-color": "#3DA0FF",
                "foreground-color": "#FFFFFF",
                "children": [
                    {
                        "id": "topic2_1",
                        "topic": "Sub-topic 2-1",
                        "direction": "left",
                        "background-color": "#70BBFF",
                        "foreground-color": "#333333",
                    }
                ],
            },
        ],
    },
}

COLOR_GUIDE = (
    "   - Blue:   #3DA0FF, #70BBFF, #A3D8FF\n"
    "   - Green:  #44D7B6, #7AEACD, #ABFFEB\n"
    "   - Orange: #FF9500, #FFB870, #FFDAB3\n"
    "   - Purple: #B36DFF, #CFA2FF, #E6D3FF\n"
    "   - Red:    #FF6B6B, #FFA8A8, #FFD1D1\n"
    "   - Yellow: #FFCB45, #FFDB83, #FFECB0\n"
)

MINDMAP_RULES = (
    "Rules:\n"
    "1. Return ONLY the JSON document, no explanation or other text.\n"
    "2. Use the jsMind format with exactly the top-level fields meta, format and data.\n"
    "3. Every node id must be unique; short meaningful strings are fine.\n"
    "4. topic is the text displayed on the node.\n"
    '5. Alternate "left" and "right" directions on first-level topics to balance the layout.\n'
    '6. The root node id must be "root".\n'
    "7. Every topic needs a background-color and a foreground-color.\n"
    "8. Related topics share a colour family; sub-topics use lighter shades.\n"
    "9. Suggested colour families:\n" + COLOR_GUIDE +
    "10. Topics must be in the SAME language as the video information.\n"
)


def build_mindmap_prompt(keywords: List[str], summary: str, timepoints: List[dict]) -> str:
    """Compose the single user message sent to the provider."""
    return (
        "Build a mind map of a video from its keywords, its summary and its key "
        "timepoints. The result must be a JSON document in the format required "
        "by the jsMind library. Here is an example:\n"
        f"{json.dumps(EXAMPLE_MINDMAP, ensure_ascii=False, indent=2)}\n\n"
        "Now generate the mind map JSON for the following information:\n\n"
        f"Keywords: {json.dumps(keywords, ensure_ascii=False)}\n"
        f"Summary: {json.dumps(summary, ensure_ascii=False)}\n"
        f"Key timepoints: {json.dumps(timepoints, ensure_ascii=False, indent=2)}\n\n"
        + MINDMAP_RULES
    )


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# PROVIDERS
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class TextGenerator(Protocol):
    name: str

    async def complete(self, prompt: str) -> str:
        ...


class DeepSeekGenerator:
    """DeepSeek chat completions through its OpenAI-compatible endpoint."""

    name = "DeepSeek"

    def __init__(self, settings: Settings):
        self._settings = settings
        self._client = AsyncOpenAI(api_key=settings.DEEPSEEK_API_KEY, base_url=settings.DEEPSEEK_BASE_URL)

    async def complete(self, prompt: str) -> str:
        logger.info(f"[AI-ENGINE] Calling DeepSeek ({self._settings.DEEPSEEK_MODEL})...")
        try:
            completion = await self._client.chat.completions.create(
                model=self._settings.DEEPSEEK_MODEL,
                messages=[{"role": "user", "content": prompt}],
                temperature=self._settings.GENERATION_TEMPERATURE,
                max_tokens=self._settings.GENERATION_MAX_TOKENS,
            )
        except Exception as e:
            logger.error(f"[AI-ENGINE] ✗ DeepSeek failed: {e.__class__.__name__}: {e}")
            raise GenerationError(f"DeepSeek request failed: {e}") from e
        result = completion.choices[0].message.content or ""
        logger.info(f"[AI-ENGINE] ✓ DeepSeek call succeeded ({len(result)} chars)")
        return result


class GroqGenerator:
    name = "Groq"

    def __init__(self, settings: Settings):
        self._settings = settings
        self._client = AsyncGroq(api_key=settings.GROQ_API_KEY)

    async def complete(self, prompt: str) -> str:
        logger.info(f"[AI-ENGINE] Calling Groq ({self._settings.GROQ_MODEL})...")
        try:
            completion = await self._client.chat.completions.create(
                model=self._settings.GROQ_MODEL,
                messages=[{"role": "user", "content": prompt}],
                temperature=self._settings.GENERATION_TEMPERATURE,
                max_tokens=self._settings.GENERATION_MAX_TOKENS,
            )
        except Exception as e:
            logger.error(f"[AI-ENGINE] ✗ Groq failed: {e.__class__.__name__}: {e}")
            raise GenerationError(f"Groq request failed: {e}") from e
        result = completion.choices[0].message.content or ""
        logger.info(f"[AI-ENGINE] ✓ Groq call succeeded ({len(result)} chars)")
        return result


class GeminiGenerator:
    name = "Gemini"

    def __init__(self, settings: Settings):
        self._settings = settings
        genai.configure(api_key=settings.GOOGLE_API_KEY, transport="rest")

    async def complete(self, prompt: str) -> str:
        logger.info(f"[AI-ENGINE] Calling Gemini ({self._settings.GEMINI_MODEL})...")
        model = genai.GenerativeModel(
            model_name=self._settings.GEMINI_MODEL,
            generation_config={"temperature": self._settings.GENERATION_TEMPERATURE},
        )
        try:
            response = await asyncio.to_thread(model.generate_content, prompt)
            result = response.text
        except Exception as e:
            logger.error(f"[AI-ENGINE] ✗ Gemini failed: {e.__class__.__name__}: {e}")
            raise GenerationError(f"Gemini request failed: {e}") from e
        logger.info("[AI-ENGINE] ✓ Gemini call succeeded")
        return result


_PROVIDERS = {
    "deepseek": ("DEEPSEEK_API_KEY", DeepSeekGenerator),
    "groq": ("GROQ_API_KEY", GroqGenerator),
    "gemini": ("GOOGLE_API_KEY", GeminiGenerator),
}


def create_text_generator(settings: Settings) -> TextGenerator:
    """Provider selected by ``GENERATION_PROVIDER``; its key must be set."""
    key_name, generator_cls = _PROVIDERS[settings.GENERATION_PROVIDER]
    if not getattr(settings, key_name):
        raise ConfigurationError(f"{key_name} is not set")
    return generator_cls(settings)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# MINDMAP GENERATION
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

async def generate_mindmap_json(
    keywords: Any,
    summary: Any,
    key_timepoints: Any,
    *,
    settings: Settings,
    generator: Optional[TextGenerator] = None,
) -> MindmapDocument:
    """
    Ask the model for a jsMind document and return it validated.

    Raises only for missing inputs (``MissingParameterError``) or a missing
    API key (``ConfigurationError``). Provider, parse and validation
    failures all return the fallback tree.
    """
    if keywords is None or not summary or key_timepoints is None:
        raise MissingParameterError("keywords, summary and keyTimepoints are required")

    if generator is None:
        generator = create_text_generator(settings)

    safe_keywords = (
        [sanitize_string(k) for k in keywords]
        if isinstance(keywords, list)
        else [sanitize_string(keywords)]
    )
    safe_summary = sanitize_string(summary)
    safe_timepoints = [tp.model_dump() for tp in normalize_timepoints(key_timepoints)]
    logger.info(
        f"[MINDMAP] Inputs prepared: {len(safe_keywords)} keywords, "
        f"{len(safe_timepoints)} timepoints"
    )

    prompt = build_mindmap_prompt(safe_keywords, safe_summary, safe_timepoints)

    try:
        raw = await generator.complete(prompt)
    except Exception as e:
        logger.error(f"[MINDMAP] ✗ {generator.name} call failed: {e}")
        return build_fallback_mindmap(keywords, summary, key_timepoints, str(e))

    try:
        document = parse_mindmap_response(raw)
    except MindmapParseError as e:
        logger.error(f"[MINDMAP] ✗ {e}")
        return build_fallback_mindmap(keywords, summary, key_timepoints, str(e))

    logger.info(f"[MINDMAP] ✓ Generated ({len(document.node_ids())} nodes)")
    return document

"""
Turning a chat-completion reply into a validated mindmap document.

Each strategy is a pure ``str -> dict`` function that raises
``MindmapParseError``. ``parse_mindmap_response`` tries them in order and
returns the first result that also passes ``MindmapDocument`` validation.
"""

import json
import logging
import re
from typing import Any, Callable, Dict, List, Tuple

from pydantic import ValidationError

from vidmind.core.errors import MindmapParseError
from vidmind.schemas.mindmap import MindmapDocument

logger = logging.getLogger(__name__)

_BRACE_SPAN_RE = re.compile(r"(\{[\s\S]*\})")
_OUTER_TRIM_RE = re.compile(r"^[\s\S]*?(\{[\s\S]*\})[\s\S]*$")
_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?\s*```", re.DOTALL)


def _loads(candidate: str) -> Dict[str, Any]:
    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError as e:
        raise MindmapParseError(f"invalid JSON: {e}") from e
    except RecursionError as e:
        raise MindmapParseError("JSON is nested too deeply") from e
    if not isinstance(parsed, dict):
        raise MindmapParseError(f"expected a JSON object, got {type(parsed).__name__}")
    return parsed


def parse_brace_span(raw_text: str) -> Dict[str, Any]:
    """Greedy match from the first ``{`` to the last ``}``."""
    match = _BRACE_SPAN_RE.search(raw_text)
    if not match:
        raise MindmapParseError("no {...} span found")
    return _loads(match.group(1))


def parse_whole_text(raw_text: str) -> Dict[str, Any]:
    return _loads(raw_text)


def parse_trimmed_text(raw_text: str) -> Dict[str, Any]:
    """Drop everything around the outermost braces, then parse."""
    cleaned = _OUTER_TRIM_RE.sub(r"\1", raw_text).strip()
    return _loads(cleaned)


def parse_code_fence(raw_text: str) -> Dict[str, Any]:
    """Parse the body of the first Markdown code fence."""
    match = _FENCE_RE.search(raw_text)
    if not match:
        raise MindmapParseError("no code fence found")
    return _loads(match.group(1).strip())


ParseStrategy = Callable[[str], Dict[str, Any]]

PARSE_STRATEGIES: Tuple[Tuple[str, ParseStrategy], ...] = (
    ("brace-span", parse_brace_span),
    ("whole-text", parse_whole_text),
    ("trimmed-text", parse_trimmed_text),
    ("code-fence", parse_code_fence),
)


def validate_mindmap(candidate: Dict[str, Any]) -> MindmapDocument:
    try:
        return MindmapDocument.model_validate(candidate)
    except ValidationError as e:
        raise MindmapParseError(
            f"not a valid node_tree document ({e.error_count()} errors): "
            f"{e.errors()[0]['msg']}"
        ) from e
    except RecursionError as e:
        raise MindmapParseError("node tree is nested too deeply") from e


def parse_mindmap_response(
    raw_text: str,
    strategies: Tuple[Tuple[str, ParseStrategy], ...] = PARSE_STRATEGIES,
) -> MindmapDocument:
    """
    Return the first strategy result that parses and validates.
    Raises ``MindmapParseError`` listing every failed attempt.
    """
    if not raw_text or not raw_text.strip():
        raise MindmapParseError("Empty AI response received")

    failures: List[str] = []
    for name, strategy in strategies:
        try:
            document = validate_mindmap(strategy(raw_text))
        except MindmapParseError as e:
            logger.info(f"[MINDMAP] Strategy {name} failed: {e}")
            failures.append(f"{name}: {e}")
            continue
        logger.info(f"[MINDMAP] ✓ Strategy {name} produced a valid document")
        return document

    logger.error(f"[MINDMAP] All parse strategies failed. Raw (first 500 chars): {raw_text[:500]}")
    raise MindmapParseError("Failed to parse a jsMind node_tree document: " + "; ".join(failures))

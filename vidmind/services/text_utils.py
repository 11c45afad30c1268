"""Text sanitizing and chapter normalization."""

import json
import logging
import math
from collections.abc import Mapping, Sequence
from typing import Any, List

from pydantic import BaseModel

from vidmind.schemas.analysis import KeyTimepoint

logger = logging.getLogger(__name__)

_CONTROL_CHARS = str.maketrans({"\n": " ", "\r": None, "\t": " ", "\f": " "})


def sanitize_string(value: Any) -> str:
    """
    Flatten ``value`` to a single-line string: newlines, tabs and form feeds
    become spaces, carriage returns are dropped and double quotes become
    single quotes. ``None`` gives ``""``.
    """
    if value is None:
        return ""
    return str(value).translate(_CONTROL_CHARS).replace('"', "'")


def _to_number(value: Any) -> float:
    if not value:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def _field(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    if isinstance(record, BaseModel):
        return getattr(record, name, None)
    return None


def normalize_timepoint(record: Any) -> KeyTimepoint:
    return KeyTimepoint(
        title=sanitize_string(_field(record, "title") or ""),
        summary=sanitize_string(_field(record, "summary") or ""),
        start=_to_number(_field(record, "start")),
        end=_to_number(_field(record, "end")),
    )


def normalize_timepoints(chapters: Any) -> List[KeyTimepoint]:
    """
    Map raw chapter records onto ``KeyTimepoint``s.

    Accepts a list of dicts/objects or a JSON string holding such a list.
    Never raises: bad records degrade to defaults, bad containers to ``[]``.
    ``start > end`` is passed through untouched.
    """
    if isinstance(chapters, str):
        try:
            chapters = json.loads(chapters)
        except json.JSONDecodeError:
            logger.warning("[NORMALIZE] Chapter string is not valid JSON, ignoring it")
            return []

    if isinstance(chapters, Mapping) or not isinstance(chapters, Sequence) or isinstance(chapters, str):
        return []

    return [normalize_timepoint(record) for record in chapters]

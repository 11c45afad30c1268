from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class KeyTimepoint(BaseModel):
    """
    A titled, summarized interval of the video (seconds).

    ``start``/``end`` are whatever the summary API reported: negative values
    and ``start > end`` are kept as-is, not clamped or rejected.
    """

    model_config = ConfigDict(frozen=True)

    title: str = ""
    summary: str = ""
    start: float = 0
    end: float = 0


class AnalysisResult(BaseModel):
    """What the video analysis hands to the mindmap builder."""

    model_config = ConfigDict(populate_by_name=True)

    keywords: List[str] = Field(default_factory=list)
    summary: str = ""
    key_timepoints: List[KeyTimepoint] = Field(default_factory=list, alias="keyTimepoints")

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True)

"""
vidmind — Request / Response Schemas
====================================
Request bodies for the HTTP surface, render results shared by every
surface, and the error envelope every failed request is wrapped in.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from vidmind.schemas.mindmap import DEFAULT_MINDMAP_NAME


# ── Requests ─────────────────────────────────────────────────────────────────

class AnalyzeVideoRequest(BaseModel):
    """Request body for video analysis."""
    url: str = Field(..., min_length=1, description="Video page URL")


class MindmapJsonRequest(BaseModel):
    """Request body for mindmap generation."""
    model_config = ConfigDict(populate_by_name=True)

    keywords: List[str]
    summary: str
    # raw chapter records (or a JSON string of them); normalized downstream
    key_timepoints: Union[List[Dict[str, Any]], str] = Field(..., alias="keyTimepoints")


class MindmapImageRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    json_document: Dict[str, Any] = Field(..., alias="json")
    output_path: str = Field(default="./mindmap.png", alias="outputPath")


class MindmapHtmlRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    json_document: Dict[str, Any] = Field(..., alias="json")
    output_path: Optional[str] = Field(default="./mindmap.html", alias="outputPath")
    title: str = DEFAULT_MINDMAP_NAME


# ── Render results ───────────────────────────────────────────────────────────

class HtmlRenderResult(BaseModel):
    html: str
    path: Optional[Path] = None


class ImageRenderResult(BaseModel):
    """
    Where the rendered mindmap ended up.
    ``degraded`` is set when the browser failed and an HTML page was
    written instead of the PNG.
    """
    path: Path
    format: Literal["png", "html"] = "png"
    degraded: bool = False
    reason: Optional[str] = None


# ── Errors ───────────────────────────────────────────────────────────────────

class ErrorResponse(BaseModel):
    """Standard error envelope."""
    status: str = "error"
    message: str
    detail: Optional[str] = None

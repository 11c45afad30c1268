"""
Tool handlers behind every surface (MCP server, CLI).

Each handler returns the text payload of its tool and raises ``ToolError``
with a readable message when the operation fails, so the MCP layer can
report ``isError`` without ever crashing the server.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from mcp.server.fastmcp.exceptions import ToolError

from vidmind.ai_engine import TextGenerator, generate_mindmap_json
from vidmind.core.config import Settings
from vidmind.schemas.mindmap import DEFAULT_MINDMAP_NAME
from vidmind.services.renderer import generate_mindmap_html, generate_mindmap_image
from vidmind.services.video_analysis import VideoAnalysisService

logger = logging.getLogger(__name__)


def _dumps(payload: Any) -> str:
    return json.dumps(payload, ensure_ascii=False, indent=2)


class MindmapTools:
    """
    Usage:
        tools = MindmapTools(settings)
        text = await tools.analyze_video("https://www.bilibili.com/video/BV...")
    """

    def __init__(
        self,
        settings: Settings,
        analysis_service: Optional[VideoAnalysisService] = None,
        generator: Optional[TextGenerator] = None,
    ):
        self.settings = settings
        self.analysis_service = analysis_service or VideoAnalysisService(settings)
        self.generator = generator

    async def analyze_video(self, url: str) -> str:
        logger.info(f"[TOOL] analyzeVideo: {url}")
        try:
            result = await self.analysis_service.analyze_video(url)
        except Exception as e:
            logger.error(f"[TOOL] analyzeVideo failed: {e}")
            raise ToolError(f"Video analysis failed: {e}") from e
        return _dumps(result.to_payload())

    async def generate_mindmap_json(
        self,
        keywords: List[str],
        summary: str,
        key_timepoints: Any,
    ) -> str:
        logger.info("[TOOL] generateMindmapJson")
        try:
            document = await generate_mindmap_json(
                keywords,
                summary,
                key_timepoints,
                settings=self.settings,
                generator=self.generator,
            )
        except Exception as e:
            logger.error(f"[TOOL] generateMindmapJson failed: {e}")
            raise ToolError(f"Mindmap JSON generation failed: {e}") from e
        return _dumps(document.to_jsmind())

    async def generate_mindmap_image(
        self,
        document: Dict[str, Any],
        output_path: str = "./mindmap.png",
    ) -> str:
        logger.info(f"[TOOL] generateMindmapImage -> {output_path}")
        try:
            result = await generate_mindmap_image(document, output_path, settings=self.settings)
        except Exception as e:
            logger.error(f"[TOOL] generateMindmapImage failed: {e}")
            raise ToolError(f"Mindmap image generation failed: {e}") from e

        if result.degraded:
            return (
                f"Mindmap image could not be rendered ({result.reason}); "
                f"interactive HTML saved to: {result.path}"
            )
        return f"Mindmap image saved to: {result.path}"

    async def generate_mindmap_html(
        self,
        document: Dict[str, Any],
        output_path: Optional[str] = "./mindmap.html",
        title: str = DEFAULT_MINDMAP_NAME,
    ) -> str:
        logger.info(f"[TOOL] generateMindmapHtml -> {output_path}")
        try:
            result = generate_mindmap_html(document, output_path, title, settings=self.settings)
        except Exception as e:
            logger.error(f"[TOOL] generateMindmapHtml failed: {e}")
            raise ToolError(f"Mindmap HTML generation failed: {e}") from e

        if result.path is None:
            return result.html
        return f"Mindmap HTML saved to: {result.path}"

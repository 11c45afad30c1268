"""
vidmind — MCP Server
====================
Exposes the four video → mindmap tools over the Model Context Protocol
(stdio transport). stdout belongs to the protocol; all logging goes to
stderr.
"""

import logging
import sys
from typing import Any, Dict, List, Optional, Union

from mcp.server.fastmcp import FastMCP

from vidmind.core.config import Settings, get_settings
from vidmind.core.log_config import configure_logging
from vidmind.schemas.mindmap import DEFAULT_MINDMAP_NAME
from vidmind.tools import MindmapTools

logger = logging.getLogger(__name__)


def build_server(settings: Settings, tools: Optional[MindmapTools] = None) -> FastMCP:
    tools = tools or MindmapTools(settings)
    server = FastMCP("video-analysis-mcp")

    @server.tool(
        name="analyzeVideo",
        description="Analyze a video URL and extract keywords, summary and key timepoints",
    )
    async def analyze_video(url: str) -> str:
        return await tools.analyze_video(url)

    @server.tool(
        name="generateMindmapJson",
        description="Generate a jsMind node_tree mindmap from keywords, summary and key timepoints",
    )
    async def generate_mindmap_json(
        keywords: List[str],
        summary: str,
        keyTimepoints: Union[List[Dict[str, Any]], str],
    ) -> str:
        return await tools.generate_mindmap_json(keywords, summary, keyTimepoints)

    @server.tool(
        name="generateMindmapImage",
        description="Render a jsMind mindmap JSON to a PNG image",
    )
    async def generate_mindmap_image(json: dict, outputPath: str = "./mindmap.png") -> str:
        return await tools.generate_mindmap_image(json, outputPath)

    @server.tool(
        name="generateMindmapHtml",
        description="Render a jsMind mindmap JSON to an interactive HTML page",
    )
    async def generate_mindmap_html(
        json: dict,
        outputPath: str = "./mindmap.html",
        title: str = DEFAULT_MINDMAP_NAME,
    ) -> str:
        return await tools.generate_mindmap_html(json, outputPath, title)

    return server


def main() -> None:
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)
    try:
        server = build_server(settings)
        logger.info("[MCP] Video analysis MCP server starting on stdio")
        server.run(transport="stdio")
    except Exception as e:
        logger.error(f"[MCP] Failed to start MCP server: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()

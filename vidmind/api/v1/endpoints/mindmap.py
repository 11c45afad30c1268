import logging

from fastapi import APIRouter, Depends, HTTPException

from vidmind.ai_engine import generate_mindmap_json
from vidmind.core.config import Settings, get_settings
from vidmind.core.errors import AnalysisError, ConfigurationError, MissingParameterError, RenderError
from vidmind.schemas.envelope import (
    AnalyzeVideoRequest,
    HtmlRenderResult,
    ImageRenderResult,
    MindmapHtmlRequest,
    MindmapImageRequest,
    MindmapJsonRequest,
)
from vidmind.services.renderer import generate_mindmap_html, generate_mindmap_image
from vidmind.services.video_analysis import VideoAnalysisService

logger = logging.getLogger(__name__)

router = APIRouter()


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 1. VIDEO ANALYSIS
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def get_analysis_service(settings: Settings = Depends(get_settings)) -> VideoAnalysisService:
    return VideoAnalysisService(settings)


@router.post("/video/analyze")
async def analyze_video(
    request: AnalyzeVideoRequest,
    service: VideoAnalysisService = Depends(get_analysis_service),
):
    """Extract keywords, summary and key timepoints from a video URL."""
    try:
        result = await service.analyze_video(request.url)
    except MissingParameterError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ConfigurationError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except AnalysisError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return result.to_payload()


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 2. MIND MAP JSON
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@router.post("/mindmap/json")
async def create_mindmap_json(
    request: MindmapJsonRequest,
    settings: Settings = Depends(get_settings),
):
    """Generate a jsMind node_tree document (falls back to a local tree on model failure)."""
    try:
        document = await generate_mindmap_json(
            request.keywords,
            request.summary,
            request.key_timepoints,
            settings=settings,
        )
    except MissingParameterError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ConfigurationError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return document.to_jsmind()


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 3. RENDERING
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@router.post("/mindmap/image", response_model=ImageRenderResult)
async def create_mindmap_image(
    request: MindmapImageRequest,
    settings: Settings = Depends(get_settings),
):
    """Screenshot the mindmap to PNG (HTML artifact if the browser fails)."""
    try:
        return await generate_mindmap_image(
            request.json_document, request.output_path, settings=settings
        )
    except MissingParameterError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RenderError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/mindmap/html", response_model=HtmlRenderResult)
async def create_mindmap_html(
    request: MindmapHtmlRequest,
    settings: Settings = Depends(get_settings),
):
    """Build the interactive jsMind page and optionally write it to disk."""
    try:
        return generate_mindmap_html(
            request.json_document, request.output_path, request.title, settings=settings
        )
    except MissingParameterError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RenderError as e:
        raise HTTPException(status_code=500, detail=str(e))

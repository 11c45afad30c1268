"""
vidmind — HTTP API
==================
FastAPI entry point exposing the same operations as the MCP tools.
  • Every error, handled or not, is returned as an ErrorResponse
  • /api/v1/video/analyze: video URL → keywords + summary + timepoints
  • /api/v1/mindmap/{json,image,html}: mindmap generation and rendering
"""

import logging

import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from vidmind.api.v1.endpoints.mindmap import router as mindmap_router
from vidmind.core.config import Settings, get_settings
from vidmind.core.log_config import configure_logging
from vidmind.schemas.envelope import ErrorResponse

logger = logging.getLogger(__name__)

# ── App ──────────────────────────────────────────────────────────────────────
app = FastAPI(
    title="vidmind — Video Mindmap Service",
    description=(
        "Video summarization → keywords + chapters → jsMind mindmap.\n"
        "Renders the mindmap as an interactive page or a PNG screenshot."
    ),
    version="1.0.0",
    responses={
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)


# ── Exception Handlers ───────────────────────────────────────────────────────
@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    body = ErrorResponse(message=str(exc.detail))
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch-all: every unhandled exception returns a clean JSON envelope."""
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    body = ErrorResponse(
        status="error",
        message="An internal server error occurred.",
        detail=str(exc),
    )
    return JSONResponse(status_code=500, content=body.model_dump())


# ── Routes ───────────────────────────────────────────────────────────────────
app.include_router(mindmap_router, prefix="/api/v1", tags=["Mindmap"])


@app.get("/", tags=["System"])
async def health_check(settings: Settings = Depends(get_settings)):
    return {
        "status": "operational",
        "service": "vidmind",
        "version": app.version,
        "generation_provider": settings.GENERATION_PROVIDER,
    }


def main() -> None:
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)
    uvicorn.run("vidmind.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    main()

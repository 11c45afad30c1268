"""
Video analysis through the BibiGPT chapter-summary API.

The API returns ``{success, overallSummary, chapters: [{title, summary,
start, end}]}``; keywords are derived locally from the overall summary.
Any failure here is fatal to the request: there is nothing to fall back on
without the summary.
"""

import logging
import re
from typing import Any, Dict, Optional

import httpx

from vidmind.core.config import Settings
from vidmind.core.errors import AnalysisError, ConfigurationError, MissingParameterError
from vidmind.schemas.analysis import AnalysisResult
from vidmind.services.keywords import extract_keywords
from vidmind.services.text_utils import normalize_timepoints

logger = logging.getLogger(__name__)

# The API key is a path segment of the request URL; httpx logs every URL at INFO.
_KEY_SEGMENT_RE = re.compile(r"/[^/\s?]+/chapter-summary")


def redact_api_key(text: str) -> str:
    return _KEY_SEGMENT_RE.sub("/***/chapter-summary", text)


class ApiKeyRedactingFilter(logging.Filter):
    """Rewrites chapter-summary URLs in log records so the key never reaches a handler."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        if "chapter-summary" in message:
            record.msg = redact_api_key(message)
            record.args = ()
        return True


logging.getLogger("httpx").addFilter(ApiKeyRedactingFilter())


def build_analysis_result(data: Dict[str, Any]) -> AnalysisResult:
    """Map a successful API payload onto an ``AnalysisResult``."""
    summary = data.get("overallSummary") or ""
    return AnalysisResult(
        keywords=extract_keywords(summary),
        summary=summary,
        key_timepoints=normalize_timepoints(data.get("chapters") or []),
    )


class VideoAnalysisService:
    """
    Usage:
        service = VideoAnalysisService(settings)
        result = await service.analyze_video(url)

    ``client`` lets callers (and tests) supply their own ``httpx.AsyncClient``;
    otherwise one is opened per call.
    """

    def __init__(self, settings: Settings, client: Optional[httpx.AsyncClient] = None):
        self._settings = settings
        self._client = client

    async def _fetch(self, endpoint: str, url: str) -> httpx.Response:
        if self._client is not None:
            return await self._client.get(endpoint, params={"url": url})
        async with httpx.AsyncClient(timeout=self._settings.HTTP_TIMEOUT_SECONDS) as client:
            return await client.get(endpoint, params={"url": url})

    async def analyze_video(self, url: str) -> AnalysisResult:
        if not url:
            raise MissingParameterError("Video URL is required")

        api_key = self._settings.BIBIGPT_API_KEY
        if not api_key:
            raise ConfigurationError("BIBIGPT_API_KEY is not set")

        endpoint = f"{self._settings.BIBIGPT_BASE_URL.rstrip('/')}/{api_key}/chapter-summary"
        logger.info(f"[ANALYZE] Requesting chapter summary for {url}")

        try:
            response = await self._fetch(endpoint, url)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise AnalysisError(f"Summary API returned HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise AnalysisError(
                f"Summary API request failed: {e.__class__.__name__}: {redact_api_key(str(e))}"
            ) from e
        except ValueError as e:
            raise AnalysisError("Summary API returned a non-JSON body") from e

        if not isinstance(data, dict) or not data.get("success"):
            raise AnalysisError("Summary API reported failure")

        result = build_analysis_result(data)
        logger.info(
            f"[ANALYZE] ✓ {len(result.keywords)} keywords, "
            f"{len(result.key_timepoints)} timepoints"
        )
        return result

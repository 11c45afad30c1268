"""vidmind end-to-end pipeline runner.

Usage:
    vidmind-run <video-url> [-d output_dir] [--title TITLE]

Runs analyze → mindmap JSON → PNG → HTML and writes into the output directory:
    analysis-result.json, video-analysis.json, mindmap.png, mindmap.html
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from vidmind.ai_engine import TextGenerator, generate_mindmap_json
from vidmind.core.config import Settings, get_settings
from vidmind.core.log_config import configure_logging
from vidmind.core.errors import VidmindError
from vidmind.schemas.mindmap import DEFAULT_MINDMAP_NAME
from vidmind.services.renderer import generate_mindmap_html, generate_mindmap_image
from vidmind.services.video_analysis import VideoAnalysisService

logger = logging.getLogger(__name__)


def _save_json(path: Path, payload: dict) -> None:
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")


async def run_pipeline(
    url: str,
    output_dir: Path,
    title: str,
    settings: Settings,
    analysis_service: Optional[VideoAnalysisService] = None,
    generator: Optional[TextGenerator] = None,
) -> dict:
    """Run every stage and return the paths that were written."""
    output_dir.mkdir(parents=True, exist_ok=True)
    analysis_service = analysis_service or VideoAnalysisService(settings)

    print("[1/4] Analyzing video...")
    analysis = await analysis_service.analyze_video(url)
    analysis_path = output_dir / "analysis-result.json"
    _save_json(analysis_path, analysis.to_payload())
    print(f"  keywords ({len(analysis.keywords)}): {', '.join(analysis.keywords)}")
    print(f"  summary: {analysis.summary[:100]}...")
    print(f"  key timepoints: {len(analysis.key_timepoints)}")

    print("[2/4] Generating mindmap JSON...")
    document = await generate_mindmap_json(
        analysis.keywords,
        analysis.summary,
        [tp.model_dump() for tp in analysis.key_timepoints],
        settings=settings,
        generator=generator,
    )
    mindmap_path = output_dir / "video-analysis.json"
    _save_json(mindmap_path, document.to_jsmind())
    print(f"  root: {document.data.id} / {document.data.topic} ({len(document.node_ids())} nodes)")

    print("[3/4] Rendering PNG...")
    image = await generate_mindmap_image(document, output_dir / "mindmap.png", settings=settings)
    if image.degraded:
        print(f"  browser unavailable ({image.reason}), wrote {image.path} instead")

    print("[4/4] Writing interactive HTML...")
    page = generate_mindmap_html(document, output_dir / "mindmap.html", title, settings=settings)

    return {
        "analysis": analysis_path,
        "mindmap": mindmap_path,
        "image": image.path,
        "html": page.path,
    }


def main(argv: Optional[list[str]] = None) -> None:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        prog="vidmind-run",
        description="Analyze a video and render its mindmap",
    )
    parser.add_argument("url", help="Video page URL")
    parser.add_argument("-d", "--output-dir", type=Path, default=settings.OUTPUT_DIR,
                        help=f"Output directory (default: {settings.OUTPUT_DIR})")
    parser.add_argument("--title", default=DEFAULT_MINDMAP_NAME, help="HTML page title")
    args = parser.parse_args(argv)

    configure_logging(settings.LOG_LEVEL)

    try:
        written = asyncio.run(run_pipeline(args.url, args.output_dir, args.title, settings))
    except VidmindError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print("\nDone:")
    for name, path in written.items():
        print(f"  {name}: {path}")


if __name__ == "__main__":
    main()

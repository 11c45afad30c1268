"""
Mindmap rendering: a standalone jsMind page, and a PNG screenshot of that
page taken with headless Chromium (Playwright).

If the browser cannot be driven the page itself is written instead, so a
render request always leaves an artifact behind.
"""

import html
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from vidmind.core.config import Settings
from vidmind.core.errors import MissingParameterError, RenderError
from vidmind.schemas.envelope import HtmlRenderResult, ImageRenderResult
from vidmind.schemas.mindmap import DEFAULT_MINDMAP_NAME, MindmapDocument

logger = logging.getLogger(__name__)

READY_FLAG = "window.__mindmapReady === true"

JSMIND_THEMES = [
    "primary", "warning", "danger", "success", "info", "greensea", "nephrite",
    "belizehole", "wisteria", "asphalt", "orange", "pumpkin", "pomegranate",
    "clouds", "asbestos",
]

PAGE_STYLE = """
    body { margin: 0; padding: 0; font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, sans-serif; }
    .header {
      position: fixed; top: 0; left: 0; right: 0; height: 50px;
      background-color: #f8f9fa; border-bottom: 1px solid #e9ecef;
      display: flex; align-items: center; padding: 0 20px;
      box-shadow: 0 1px 3px rgba(0,0,0,0.1); z-index: 1000;
    }
    .title { flex: 1; font-size: 18px; font-weight: 500; color: #495057; margin: 0; }
    .toolbar { display: flex; gap: 8px; }
    .btn {
      background-color: #fff; border: 1px solid #ced4da; color: #495057;
      border-radius: 4px; padding: 5px 10px; font-size: 14px; cursor: pointer;
    }
    .btn:hover { background-color: #f1f3f5; border-color: #adb5bd; }
    #jsmind_container {
      position: absolute; top: 50px; left: 0; right: 0; bottom: 0;
      width: 100%; height: calc(100vh - 50px); background-color: #f5f5f5;
    }
    jmnode {
      border-radius: 5px !important; box-shadow: 1px 1px 3px rgba(0,0,0,0.15) !important;
      padding: 8px 12px !important; font-size: 14px !important;
    }
    jmnode.root { border-radius: 8px !important; font-size: 16px !important; font-weight: bold !important; }
"""

PAGE_SCRIPT = """
    let jm;
    const themes = __THEMES__;
    let currentThemeIndex = 0;

    function renderMindmap() {
      try {
        jm = new jsMind({
          container: 'jsmind_container',
          theme: themes[currentThemeIndex],
          editable: true,
          view: { engine: 'svg', hmargin: 130, vmargin: 80, line_width: 2, line_color: '#555' },
          layout: { hspace: 40, vspace: 25, pspace: 15 }
        });
        jm.show(__MINDMAP__);
        jm.expand_all();
      } catch (error) {
        console.error('Mindmap render failed:', error);
        const box = document.getElementById('jsmind_container');
        box.textContent = 'Mindmap render failed: ' + error.message;
        box.style.color = 'red';
      } finally {
        window.__mindmapReady = true;
      }
    }

    function initUI() {
      if (!jm) return;
      document.getElementById('btn-zoom-in').addEventListener('click', () => jm.view.zoom_in());
      document.getElementById('btn-zoom-out').addEventListener('click', () => jm.view.zoom_out());
      document.getElementById('btn-expand-all').addEventListener('click', () => jm.expand_all());
      document.getElementById('btn-collapse-all').addEventListener('click', () => jm.collapse_all());
      document.getElementById('btn-screenshot').addEventListener('click', () => {
        if (jm.screenshot) { jm.screenshot.shootDownload(); } else { alert('Screenshot is not supported by this jsMind build'); }
      });
      document.getElementById('btn-toggle-theme').addEventListener('click', () => {
        currentThemeIndex = (currentThemeIndex + 1) % themes.length;
        jm.set_theme(themes[currentThemeIndex]);
      });
      const header = document.querySelector('.header');
      const container = document.getElementById('jsmind_container');
      const toggle = document.getElementById('btn-toggle-toolbar');
      toggle.addEventListener('click', () => {
        const hidden = header.style.display === 'none';
        header.style.display = hidden ? 'flex' : 'none';
        container.style.top = hidden ? '50px' : '0';
        container.style.height = hidden ? 'calc(100vh - 50px)' : '100vh';
        toggle.textContent = hidden ? 'Hide toolbar' : 'Show toolbar';
      });
    }

    document.addEventListener('DOMContentLoaded', () => { renderMindmap(); initUI(); });
"""

MindmapInput = Union[MindmapDocument, Dict[str, Any]]


def _as_dict(document: MindmapInput) -> Dict[str, Any]:
    if isinstance(document, MindmapDocument):
        return document.to_jsmind()
    return document


def _script_json(value: Any) -> str:
    """JSON that is safe to inline inside a <script> element."""
    return (
        json.dumps(value, ensure_ascii=False)
        .replace("</", "<\\/")
        .replace("\u2028", "\\u2028")
        .replace("\u2029", "\\u2029")
    )


def _warn_on_structure(document: Dict[str, Any]) -> None:
    if document.get("format") != "node_tree":
        logger.warning(f"[RENDER] Document format is {document.get('format')!r}, expected 'node_tree'")
    data = document.get("data")
    if not isinstance(data, dict) or not data.get("id") or not data.get("topic"):
        logger.warning("[RENDER] Document has no usable data root (id/topic missing)")


def render_mindmap_html(document: MindmapInput, title: str, *, jsmind_cdn: str) -> str:
    """Standalone interactive page for ``document``."""
    payload = _as_dict(document)
    _warn_on_structure(payload)

    safe_title = html.escape(title)
    cdn = html.escape(jsmind_cdn.rstrip("/"), quote=True)
    script = (
        PAGE_SCRIPT
        .replace("__THEMES__", _script_json(JSMIND_THEMES))
        .replace("__MINDMAP__", _script_json(payload))
    )

    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{safe_title}</title>
  <style>{PAGE_STYLE}</style>
  <link rel="stylesheet" href="{cdn}/style/jsmind.css" />
  <script src="{cdn}/es6/jsmind.js"></script>
  <script src="{cdn}/es6/jsmind.draggable.js"></script>
</head>
<body>
  <div class="header">
    <h1 class="title">{safe_title}</h1>
    <div class="toolbar">
      <button class="btn" id="btn-zoom-in">Zoom in</button>
      <button class="btn" id="btn-zoom-out">Zoom out</button>
      <button class="btn" id="btn-expand-all">Expand all</button>
      <button class="btn" id="btn-collapse-all">Collapse all</button>
      <button class="btn" id="btn-screenshot">Save screenshot</button>
      <button class="btn" id="btn-toggle-theme">Switch theme</button>
      <button class="btn" id="btn-toggle-toolbar">Hide toolbar</button>
    </div>
  </div>
  <div id="jsmind_container"></div>
  <script>{script}</script>
</body>
</html>
"""


def _write_text(path: Path, content: str) -> Path:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise RenderError(f"Could not write {path}: {e}") from e
    return path


def generate_mindmap_html(
    document: Optional[MindmapInput],
    output_path: Optional[Union[str, Path]] = "./mindmap.html",
    title: str = DEFAULT_MINDMAP_NAME,
    *,
    settings: Settings,
) -> HtmlRenderResult:
    if not document:
        raise MissingParameterError("Mindmap JSON is required")

    page = render_mindmap_html(document, title, jsmind_cdn=settings.JSMIND_CDN)
    if not output_path:
        return HtmlRenderResult(html=page)

    path = _write_text(Path(output_path), page)
    logger.info(f"[RENDER] ✓ HTML written to {path}")
    return HtmlRenderResult(html=page, path=path)


async def _screenshot(page_html: str, path: Path, settings: Settings) -> None:
    """One browser per call, closed on every exit path."""
    async with async_playwright() as p:
        browser = await p.chromium.launch()
        try:
            page = await browser.new_page(
                viewport={
                    "width": settings.RENDER_VIEWPORT_WIDTH,
                    "height": settings.RENDER_VIEWPORT_HEIGHT,
                }
            )
            timeout_ms = settings.RENDER_TIMEOUT_SECONDS * 1000
            try:
                await page.set_content(page_html, wait_until="load", timeout=timeout_ms)
                await page.wait_for_function(READY_FLAG, timeout=timeout_ms)
            except PlaywrightTimeoutError:
                logger.warning(
                    f"[RENDER] Mindmap not ready after {settings.RENDER_TIMEOUT_SECONDS}s, "
                    "taking the screenshot anyway"
                )
            path.parent.mkdir(parents=True, exist_ok=True)
            await page.screenshot(path=str(path), full_page=True)
        finally:
            await browser.close()


async def generate_mindmap_image(
    document: Optional[MindmapInput],
    output_path: Union[str, Path] = "./mindmap.png",
    *,
    settings: Settings,
) -> ImageRenderResult:
    """
    Screenshot the rendered mindmap to ``output_path``.

    Browser failures do not propagate: the HTML page is written next to
    ``output_path`` (``.html`` suffix) and returned with ``degraded=True``.
    """
    if not document:
        raise MissingParameterError("Mindmap JSON is required")

    path = Path(output_path)
    page_html = render_mindmap_html(document, DEFAULT_MINDMAP_NAME, jsmind_cdn=settings.JSMIND_CDN)

    try:
        await _screenshot(page_html, path, settings)
    except OSError as e:
        raise RenderError(f"Could not write {path}: {e}") from e
    except PlaywrightError as e:
        html_path = _write_text(path.with_suffix(".html"), page_html)
        logger.error(f"[RENDER] ✗ Screenshot failed ({e}); wrote HTML to {html_path}")
        return ImageRenderResult(path=html_path, format="html", degraded=True, reason=str(e))

    logger.info(f"[RENDER] ✓ PNG written to {path}")
    return ImageRenderResult(path=path)

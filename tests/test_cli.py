"""Tests for the end-to-end pipeline runner."""

import asyncio
import json
from pathlib import Path

import httpx
import pytest

from conftest import FakeGenerator, make_settings
from vidmind import cli
from vidmind.schemas.envelope import ImageRenderResult
from vidmind.services.video_analysis import VideoAnalysisService

BODY = {
    "success": True,
    "overallSummary": "pipelines pipelines training evaluation",
    "chapters": [
        {"title": "Intro", "summary": "Why", "start": 0, "end": 20},
        {"title": "Training", "summary": "How", "start": 20, "end": 80},
    ],
}


def _analysis(settings, body=BODY) -> VideoAnalysisService:
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json=body))
    return VideoAnalysisService(settings, client=httpx.AsyncClient(transport=transport))


@pytest.fixture
def fake_image(monkeypatch: pytest.MonkeyPatch):
    async def render(document, output_path, *, settings):
        Path(output_path).write_bytes(b"png")
        return ImageRenderResult(path=output_path)

    monkeypatch.setattr(cli, "generate_mindmap_image", render)


class TestRunPipeline:
    def test_writes_all_artifacts(self, tmp_path: Path, fake_image, capsys) -> None:
        settings = make_settings()
        out = tmp_path / "run"
        written = asyncio.run(
            cli.run_pipeline(
                "https://example.com/v",
                out,
                "Demo",
                settings,
                analysis_service=_analysis(settings),
                generator=FakeGenerator(reply="not json at all"),
            )
        )

        assert written["analysis"] == out / "analysis-result.json"
        assert written["mindmap"] == out / "video-analysis.json"
        assert written["image"] == out / "mindmap.png"
        assert written["html"] == out / "mindmap.html"
        for path in written.values():
            assert path.exists()

        analysis = json.loads((out / "analysis-result.json").read_text(encoding="utf-8"))
        assert analysis["keywords"][0] == "pipelines"
        mindmap = json.loads((out / "video-analysis.json").read_text(encoding="utf-8"))
        assert mindmap["data"]["children"][0]["id"] == "error"
        assert "<title>Demo</title>" in (out / "mindmap.html").read_text(encoding="utf-8")

        stdout = capsys.readouterr().out
        for step in ("[1/4]", "[2/4]", "[3/4]", "[4/4]"):
            assert step in stdout

    def test_analysis_failure_stops_pipeline(self, tmp_path: Path, fake_image) -> None:
        settings = make_settings()
        with pytest.raises(Exception, match="reported failure"):
            asyncio.run(
                cli.run_pipeline(
                    "https://example.com/v",
                    tmp_path,
                    "Demo",
                    settings,
                    analysis_service=_analysis(settings, body={"success": False}),
                    generator=FakeGenerator(),
                )
            )
        assert not (tmp_path / "video-analysis.json").exists()


class TestMain:
    def test_error_exits_with_status_1(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
        monkeypatch.setattr(cli, "get_settings", lambda: make_settings(BIBIGPT_API_KEY=None))
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["https://example.com/v", "-d", str(tmp_path)])
        assert excinfo.value.code == 1
        assert "BIBIGPT_API_KEY" in capsys.readouterr().err

"""Tests for the HTTP surface using FastAPI's TestClient."""

import json
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

from conftest import FakeGenerator, make_settings
from vidmind.api.v1.endpoints.mindmap import get_analysis_service
from vidmind.core.config import get_settings
from vidmind.main import app
from vidmind.services.video_analysis import VideoAnalysisService

DOCUMENT = {
    "format": "node_tree",
    "data": {"id": "root", "topic": "Video", "children": [{"id": "a", "topic": "A"}]},
}


@pytest.fixture
def client():
    settings = make_settings()
    app.dependency_overrides[get_settings] = lambda: settings
    yield TestClient(app)
    app.dependency_overrides.clear()


def _use_analysis_handler(handler, settings=None) -> None:
    settings = settings or make_settings()
    transport = httpx.MockTransport(handler)
    app.dependency_overrides[get_analysis_service] = lambda: VideoAnalysisService(
        settings, client=httpx.AsyncClient(transport=transport)
    )


class TestSystem:
    def test_health(self, client: TestClient) -> None:
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "operational"
        assert response.json()["generation_provider"] == "deepseek"


class TestVideoAnalyze:
    def test_success(self, client: TestClient) -> None:
        body = {
            "success": True,
            "overallSummary": "python python testing",
            "chapters": [{"title": "Start", "summary": "s", "start": 0, "end": 5}],
        }
        _use_analysis_handler(lambda request: httpx.Response(200, json=body))
        response = client.post("/api/v1/video/analyze", json={"url": "https://example.com/v"})
        assert response.status_code == 200
        payload = response.json()
        assert payload["keywords"] == ["python", "testing"]
        assert payload["keyTimepoints"][0]["end"] == 5

    def test_upstream_failure_is_502(self, client: TestClient) -> None:
        _use_analysis_handler(lambda request: httpx.Response(503))
        response = client.post("/api/v1/video/analyze", json={"url": "https://example.com/v"})
        assert response.status_code == 502
        assert response.json()["status"] == "error"
        assert "HTTP 503" in response.json()["message"]

    def test_missing_key_is_500(self, client: TestClient) -> None:
        _use_analysis_handler(
            lambda request: httpx.Response(200, json={}),
            settings=make_settings(BIBIGPT_API_KEY=None),
        )
        response = client.post("/api/v1/video/analyze", json={"url": "https://example.com/v"})
        assert response.status_code == 500
        assert "BIBIGPT_API_KEY" in response.json()["message"]


class TestMindmapJson:
    def test_generated(self, client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
        generator = FakeGenerator(reply=json.dumps(DOCUMENT))
        monkeypatch.setattr("vidmind.ai_engine.create_text_generator", lambda settings: generator)
        response = client.post(
            "/api/v1/mindmap/json",
            json={
                "keywords": ["a"],
                "summary": "about a",
                "keyTimepoints": [{"title": "T", "summary": "S", "start": 0, "end": 1}],
            },
        )
        assert response.status_code == 200
        assert response.json()["data"]["children"][0]["id"] == "a"
        assert len(generator.prompts) == 1

    def test_empty_summary_is_400(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/mindmap/json",
            json={"keywords": [], "summary": "", "keyTimepoints": []},
        )
        assert response.status_code == 400
        assert response.json() == {
            "status": "error",
            "message": "keywords, summary and keyTimepoints are required",
            "detail": None,
        }

    def test_missing_provider_key_is_500(self, client: TestClient) -> None:
        app.dependency_overrides[get_settings] = lambda: make_settings(DEEPSEEK_API_KEY=None)
        response = client.post(
            "/api/v1/mindmap/json",
            json={"keywords": ["a"], "summary": "about a", "keyTimepoints": []},
        )
        assert response.status_code == 500
        assert "DEEPSEEK_API_KEY" in response.json()["message"]


class TestRender:
    def test_html_inline(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/mindmap/html",
            json={"json": DOCUMENT, "outputPath": None, "title": "Demo"},
        )
        assert response.status_code == 200
        assert response.json()["path"] is None
        assert "<title>Demo</title>" in response.json()["html"]

    def test_html_written(self, client: TestClient, tmp_path: Path) -> None:
        target = tmp_path / "m.html"
        response = client.post("/api/v1/mindmap/html", json={"json": DOCUMENT, "outputPath": str(target)})
        assert response.status_code == 200
        assert target.exists()

    def test_html_empty_document_is_400(self, client: TestClient) -> None:
        response = client.post("/api/v1/mindmap/html", json={"json": {}})
        assert response.status_code == 400

    def test_image_empty_document_is_400(self, client: TestClient) -> None:
        response = client.post("/api/v1/mindmap/image", json={"json": {}})
        assert response.status_code == 400


class TestMindmapJsonChapterRecords:
    @pytest.mark.parametrize(
        "key_timepoints",
        [
            [{"title": None, "summary": "x", "start": None, "end": "12"}],
            '[{"title": "A", "start": 3}]',
        ],
        ids=["null-fields", "json-string"],
    )
    def test_raw_records_are_normalized(
        self, client: TestClient, monkeypatch: pytest.MonkeyPatch, key_timepoints
    ) -> None:
        generator = FakeGenerator(reply=json.dumps(DOCUMENT))
        monkeypatch.setattr("vidmind.ai_engine.create_text_generator", lambda settings: generator)
        response = client.post(
            "/api/v1/mindmap/json",
            json={"keywords": ["a"], "summary": "about a", "keyTimepoints": key_timepoints},
        )
        assert response.status_code == 200
        assert response.json()["data"]["id"] == "root"
        assert '"start":' in generator.prompts[0]

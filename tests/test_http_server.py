"""
Tests for the HTTP API.
"""
import pytest
from unittest.mock import AsyncMock, MagicMock

from fastapi.testclient import TestClient

from reel_analyzer.errors import DownloadError, ExtractionError
from reel_analyzer.http_server import AnalysisServer
from reel_analyzer.models import FinalAnalysis


def _make_client(result=None, error=None):
    orchestrator = MagicMock()
    if error is not None:
        orchestrator.run = AsyncMock(side_effect=error)
    else:
        orchestrator.run = AsyncMock(return_value=result)
    orchestrator.get_stats.return_value = {'analyses_completed': 3}
    return TestClient(AnalysisServer(orchestrator).app), orchestrator


class TestAnalyzeVideo:
    """Tests for POST /api/analyze-video."""

    def test_returns_verdict(self):
        analysis = FinalAnalysis(
            type="landscape", activity=None, location="Iceland", confidence=0.8,
            source="metadata", thumbnail_url="data:image/jpeg;base64,AAA"
        )
        client, orchestrator = _make_client(result=analysis)

        response = client.post("/api/analyze-video", json={"postUrl": " https://www.instagram.com/reel/abc/ "})

        assert response.status_code == 200
        assert response.json() == {
            'success': True,
            'type': 'landscape',
            'activity': None,
            'location': 'Iceland',
            'confidence': 0.8,
            'source': 'metadata',
            'thumbnailUrl': 'data:image/jpeg;base64,AAA'
        }
        orchestrator.run.assert_awaited_once_with("https://www.instagram.com/reel/abc/")

    def test_timeout_verdict_is_a_success(self):
        client, _ = _make_client(result=FinalAnalysis.timed_out())

        response = client.post("/api/analyze-video", json={"postUrl": "https://www.tiktok.com/@a/video/1"})

        assert response.status_code == 200
        assert response.json()['source'] == 'error'

    @pytest.mark.parametrize("body", [{}, {"postUrl": ""}, {"postUrl": "   "}])
    def test_missing_url(self, body):
        client, orchestrator = _make_client()

        response = client.post("/api/analyze-video", json=body)

        assert response.status_code == 400
        assert response.json()['success'] is False
        orchestrator.run.assert_not_awaited()

    @pytest.mark.parametrize("error", [DownloadError("no provider"), ExtractionError("corrupt")])
    def test_cannot_analyze(self, error):
        client, _ = _make_client(error=error)

        response = client.post("/api/analyze-video", json={"postUrl": "https://www.instagram.com/reel/abc/"})

        assert response.status_code == 422
        body = response.json()
        assert body['success'] is False
        assert body['error'] == type(error).__name__
        assert body['message'] == str(error)

    def test_unexpected_error(self):
        client, _ = _make_client(error=RuntimeError("bug"))

        response = client.post("/api/analyze-video", json={"postUrl": "https://www.instagram.com/reel/abc/"})

        assert response.status_code == 500
        assert response.json()['success'] is False


def test_healthz():
    client, _ = _make_client()

    assert client.get("/healthz").json() == {"ok": True, "status": "healthy"}


def test_stats():
    client, _ = _make_client()

    assert client.get("/stats").json() == {'analyses_completed': 3}

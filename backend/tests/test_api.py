"""Tests for the HTTP API."""
from urllib.parse import urlparse

import pytest
from fastapi.testclient import TestClient

from app.api import routes
from app.main import app
from app.pipeline.batch_coordinator import ClipBatchCoordinator
from app.pipeline.models import RenderResult
from app.pipeline.source_resolver import SourceResolver
from app.storage.output_store import OutputStore
from app.services import source_service
from app.services.clip_service import ClipService
from app.services.source_service import SourceService
from app.utils.ytdlp import YtdlpError


class _FakeRender:
    def __init__(self, failures=()):
        self.failures = set(failures)
        self.calls = []

    async def __call__(self, source, spec, aspect):
        self.calls.append((source, spec, aspect))
        if spec.id in self.failures:
            return RenderResult.failed(spec.id, f"Clip {spec.id} failed: Conversion failed!")
        return RenderResult.success(spec.id, f"http://localhost:3001/generated/clip-{spec.id}.mp4")


@pytest.fixture
def upload_dir(tmp_path):
    uploads = tmp_path / "uploads"
    uploads.mkdir()
    (uploads / "abc-talk.mp4").write_bytes(b"video")
    return uploads


@pytest.fixture
def render():
    return _FakeRender()


@pytest.fixture
def client(upload_dir, render):
    async def no_metadata(url):
        raise YtdlpError("unavailable")

    app.dependency_overrides[routes.get_source_service] = lambda: SourceService(upload_dir=upload_dir)
    app.dependency_overrides[routes.get_clip_service] = lambda: ClipService(
        resolver=SourceResolver(upload_dir=upload_dir, fetch_metadata=no_metadata),
        coordinator=ClipBatchCoordinator(render=render),
    )
    yield TestClient(app)
    app.dependency_overrides.clear()


def _payload(**overrides):
    payload = {
        "sourceFilename": "abc-talk.mp4",
        "aspectRatio": "9:16",
        "clips": [
            {"id": "3", "startTime": 25, "endTime": 33, "title": "Third"},
            {"id": "1", "startTime": 0, "endTime": 15, "title": "First"},
            {"id": "2", "startTime": 15, "endTime": 25, "title": "Second"},
        ],
    }
    payload.update(overrides)
    return payload


def test_process_clips_success(client, render):
    response = client.post("/api/process-clips", json=_payload())

    assert response.status_code == 200
    clips = response.json()["clips"]
    assert [c["id"] for c in clips] == ["1", "2", "3"]
    assert clips[0]["title"] == "First"
    assert clips[0]["startTime"] == 0
    assert clips[0]["endTime"] == 15
    assert clips[0]["videoUrl"].endswith("clip-1.mp4")
    assert len(render.calls) == 3


def test_process_clips_batch_failure(client, render):
    render.failures.add("2")
    response = client.post("/api/process-clips", json=_payload())

    assert response.status_code == 500
    detail = response.json()["detail"]
    assert "Clip 2" in detail
    assert len(render.calls) == 3


def test_process_clips_missing_source(client, render):
    response = client.post("/api/process-clips", json=_payload(sourceFilename="nope.mp4"))
    assert response.status_code == 404
    assert render.calls == []


def test_process_clips_platform_unavailable(client, render):
    response = client.post(
        "/api/process-clips",
        json=_payload(sourceFilename="https://youtu.be/dQw4w9WgXcQ"),
    )
    assert response.status_code == 502
    assert render.calls == []


def test_process_clips_direct_url(client, render):
    response = client.post(
        "/api/process-clips",
        json=_payload(sourceFilename="https://cdn.example.com/talk.mp4"),
    )
    assert response.status_code == 200
    source = render.calls[0][0]
    assert source.uri == "https://cdn.example.com/talk.mp4"
    assert source.is_remote_stream is True


def test_process_clips_invalid_range(client, render):
    response = client.post(
        "/api/process-clips",
        json=_payload(clips=[{"id": "1", "startTime": 20, "endTime": 10}]),
    )
    assert response.status_code == 422
    assert render.calls == []


def test_process_clips_numeric_ids(client, render):
    response = client.post(
        "/api/process-clips",
        json=_payload(clips=[
            {"id": 10, "startTime": 30, "endTime": 40},
            {"id": 2, "startTime": 0, "endTime": 10},
        ]),
    )
    assert response.status_code == 200
    assert [c["id"] for c in response.json()["clips"]] == ["2", "10"]


def test_upload(client, upload_dir):
    response = client.post(
        "/api/upload",
        files={"video": ("talk.mp4", b"fake-video", "video/mp4")},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["type"] == "local"
    assert data["filename"].endswith("-talk.mp4")
    assert (upload_dir / data["filename"]).read_bytes() == b"fake-video"


def test_upload_without_file(client):
    response = client.post("/api/upload")
    assert response.status_code == 400


def test_import_plain_url(client):
    response = client.post("/api/import-url", json={"url": "https://cdn.example.com/v.mp4"})
    assert response.status_code == 200
    assert response.json() == {
        "filename": "https://cdn.example.com/v.mp4",
        "path": "https://cdn.example.com/v.mp4",
        "type": "url",
    }


def test_import_youtube_url(client, monkeypatch):
    async def fake_title(url):
        return "A Talk"

    monkeypatch.setattr(source_service, "extract_video_title", fake_title)
    response = client.post("/api/import-url", json={"url": "https://youtu.be/dQw4w9WgXcQ"})
    assert response.status_code == 200
    data = response.json()
    assert data["type"] == "youtube"
    assert data["metadata"] == {"title": "A Talk"}


def test_import_youtube_url_failure(client, monkeypatch):
    async def fake_title(url):
        raise YtdlpError("Video unavailable")

    monkeypatch.setattr(source_service, "extract_video_title", fake_title)
    response = client.post("/api/import-url", json={"url": "https://youtu.be/dQw4w9WgXcQ"})
    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to access video URL"


def test_import_requires_url(client):
    response = client.post("/api/import-url", json={})
    assert response.status_code == 400


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] in ("healthy", "degraded")


def test_generated_clip_is_served(client):
    allocation = OutputStore().allocate("9")
    allocation.path.write_bytes(b"rendered-clip")
    try:
        response = client.get(urlparse(allocation.locator).path)
        assert response.status_code == 200
        assert response.content == b"rendered-clip"
    finally:
        allocation.path.unlink(missing_ok=True)

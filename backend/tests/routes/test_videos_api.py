"""
HTTP surface tests. The app runs its real lifespan (worker included)
against mocked collaborators.
"""

import time
import uuid

import pytest
from fastapi.testclient import TestClient

from shortmaker.main import create_app
from shortmaker.models import JobStatus, RenderConfig, SceneInput


@pytest.fixture
def client(settings, orchestrator):
    app = create_app(settings=settings, orchestrator=orchestrator)
    with TestClient(app) as test_client:
        yield test_client


def _wait_for_status(client, video_id, wanted, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        body = client.get(f"/api/short-video/{video_id}/status").json()
        if body["status"] == wanted:
            return body
        time.sleep(0.02)
    raise AssertionError(f"video {video_id} never reached {wanted}")


def _create(client, scenes=None, config=None):
    payload = {"scenes": scenes or [{"text": "Hello world", "searchTerms": ["earth"]}]}
    if config is not None:
        payload["config"] = config
    return client.post("/api/short-video", json=payload)


class TestCreate:

    def test_create_returns_video_id(self, client):
        response = _create(client, config={"paddingBack": 1500, "music": "chill"})

        assert response.status_code == 201
        assert set(response.json()) == {"videoId"}

    def test_empty_scenes_rejected(self, client):
        response = client.post("/api/short-video", json={"scenes": [], "config": {}})

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Validation failed"
        assert body["missingFields"] == ["scenes"]

    def test_malformed_body_rejected(self, client):
        response = client.post("/api/short-video", json={"scenes": "nope"})

        assert response.status_code == 400
        assert response.json()["error"] == "Validation failed"

    def test_scene_without_text_rejected(self, client):
        response = client.post("/api/short-video", json={"scenes": [{"searchTerms": ["x"]}]})

        assert response.status_code == 400
        assert "scenes.0.text" in response.json()["missingFields"]


class TestLifecycle:

    def test_video_becomes_ready_and_downloadable(self, client):
        video_id = _create(client).json()["videoId"]

        assert _wait_for_status(client, video_id, "ready") == {"status": "ready"}

        response = client.get(f"/api/short-video/{video_id}")
        assert response.status_code == 200
        assert response.headers["content-type"] == "video/mp4"
        assert response.content == b"rendered-mp4"
        assert f'filename="{video_id}.mp4"' in response.headers["content-disposition"]

    def test_failed_video_reports_stage(self, client, footage_search):
        footage_search.search.return_value = None
        video_id = _create(client).json()["videoId"]

        body = _wait_for_status(client, video_id, "failed")

        assert body["error"]["stage"] == "footage_search"
        assert client.get(f"/api/short-video/{video_id}").status_code == 404

    def test_list_videos(self, client):
        first = _create(client).json()["videoId"]
        second = _create(client).json()["videoId"]

        videos = client.get("/api/short-videos").json()["videos"]

        assert [v["id"] for v in videos] == [first, second]
        assert all(set(v) == {"id", "status"} for v in videos)

    def test_unknown_video(self, client):
        assert client.get("/api/short-video/missing/status").status_code == 404
        assert client.get("/api/short-video/missing").status_code == 404


class TestDelete:

    def test_delete_is_idempotent(self, client):
        video_id = _create(client).json()["videoId"]
        _wait_for_status(client, video_id, "ready")

        for _ in range(2):
            response = client.delete(f"/api/short-video/{video_id}")
            assert response.status_code == 200
            assert response.json() == {"success": True}

        assert client.get(f"/api/short-video/{video_id}/status").status_code == 404

    def test_delete_unknown(self, client):
        assert client.delete("/api/short-video/never-existed").json() == {"success": True}

    def test_delete_processing_conflicts(self, client, store):
        # created directly in the store so the worker never picks it up
        busy = uuid.uuid4().hex
        store.create(busy, [SceneInput(text="a")], RenderConfig().with_defaults("en-US-GuyNeural"))
        store.update_status(busy, JobStatus.PROCESSING)

        response = client.delete(f"/api/short-video/{busy}")

        assert response.status_code == 409

    def test_delete_traversal_leaves_data_intact(self, client, settings):
        kept = settings.videos_dir / "keep.mp4"
        kept.write_bytes(b"mp4")

        response = client.delete("/api/short-video/%2E%2E")

        assert response.json() == {"success": True}
        assert kept.exists()
        assert settings.temp_dir.is_dir()
        assert settings.job_data_dir.is_dir()

    def test_download_traversal_not_found(self, client):
        assert client.get("/api/short-video/%2E%2E").status_code == 404


class TestCatalogs:

    def test_music_tags(self, client):
        tags = client.get("/api/music-tags").json()

        assert len(tags) == 12
        assert "happy" in tags

    def test_voices(self, client):
        voices = client.get("/api/voices").json()

        assert any(v["id"] == "en-US-GuyNeural" for v in voices)


def test_health_reports_jobs(client):
    body = client.get("/health").json()

    assert body["jobs"] == {"queued": 0, "processing": 0, "ready": 0, "failed": 0}
    assert "runtime" in body


def test_request_id_echoed(client):
    response = client.get("/api/music-tags", headers={"X-Request-ID": "req-42"})

    assert response.headers["X-Request-ID"] == "req-42"

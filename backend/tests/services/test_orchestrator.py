"""
Tests for VideoOrchestrator: submission, the worker loop and artifacts
"""

import asyncio
import random
import uuid

import pytest

from shortmaker.core import JobConflictError, NotFoundError, ValidationError
from shortmaker.models import JobStatus, MusicMood, RenderConfig, SceneInput
from shortmaker.services.collaborators import SynthesizedSpeech
from shortmaker.services.music import MusicLibrary
from shortmaker.services.orchestration import StatusStore, VideoOrchestrator


async def _drain(orchestrator: VideoOrchestrator) -> None:
    orchestrator.start()
    try:
        await asyncio.wait_for(orchestrator.join(), timeout=5)
    finally:
        await orchestrator.stop()


class TestSubmit:

    def test_empty_scene_list_rejected(self, orchestrator):
        with pytest.raises(ValidationError) as exc_info:
            orchestrator.submit([])
        assert exc_info.value.missing_fields == ["scenes"]

    @pytest.mark.parametrize("scenes", [None, "a scene", {"text": "a"}])
    def test_non_list_rejected(self, orchestrator, scenes):
        with pytest.raises(ValidationError):
            orchestrator.submit(scenes)

    def test_scene_without_text_rejected(self, orchestrator):
        with pytest.raises(ValidationError) as exc_info:
            orchestrator.submit([{"text": "ok"}, {"searchTerms": ["x"]}, {"text": "   "}])

        assert exc_info.value.missing_fields == ["scenes[1].text", "scenes[2].text"]
        assert orchestrator.list() == []

    def test_scene_errors_name_the_offending_field(self, orchestrator):
        with pytest.raises(ValidationError) as exc_info:
            orchestrator.submit([{"text": "fine", "searchTerms": "sky"}, "just text"])

        assert exc_info.value.missing_fields == ["scenes[0].searchTerms", "scenes[1]"]

    def test_invalid_config_rejected(self, orchestrator):
        with pytest.raises(ValidationError) as exc_info:
            orchestrator.submit([{"text": "a"}], {"musicVolume": 4})
        assert exc_info.value.missing_fields == ["config.musicVolume"]

    def test_returns_queued_job_immediately(self, orchestrator, synthesizer):
        job_id = orchestrator.submit([{"text": "a"}])

        assert orchestrator.status(job_id).status == JobStatus.QUEUED
        assert orchestrator.queue_depth() == 1
        synthesizer.synthesize.assert_not_awaited()

    def test_ids_are_unique(self, orchestrator):
        ids = {orchestrator.submit([SceneInput(text="a")]) for _ in range(20)}
        assert len(ids) == 20

    def test_config_defaults_applied(self, orchestrator, settings):
        job_id = orchestrator.submit([{"text": "a"}], {"paddingBack": 1000})

        config = orchestrator.status(job_id).config
        assert config.voice == settings.default_voice
        assert config.transition_type == "fade"
        assert config.caption_background_color == "blue"
        assert config.padding_back == 1000


class TestQueries:

    def test_unknown_status(self, orchestrator):
        with pytest.raises(NotFoundError):
            orchestrator.status("missing")

    def test_list_in_submission_order(self, orchestrator):
        ids = [orchestrator.submit([{"text": str(i)}]) for i in range(3)]
        assert [job.id for job in orchestrator.list()] == ids

    def test_fetch_requires_ready(self, orchestrator):
        job_id = orchestrator.submit([{"text": "a"}])

        with pytest.raises(NotFoundError):
            orchestrator.fetch(job_id)
        with pytest.raises(NotFoundError):
            orchestrator.fetch("missing")


class TestProcessing:

    @pytest.mark.asyncio
    async def test_job_becomes_ready(self, orchestrator, renderer, settings):
        job_id = orchestrator.submit([{"text": "Hello", "searchTerms": ["sky"]}, {"text": "World"}])

        await _drain(orchestrator)

        job = orchestrator.status(job_id)
        assert job.status == JobStatus.READY
        assert job.error is None
        assert orchestrator.fetch(job_id) == b"rendered-mp4"
        assert (settings.videos_dir / f"{job_id}.mp4").exists()
        assert not (settings.temp_dir / job_id).exists()

        spec = renderer.render.call_args.args[0]
        assert spec.fps == 30
        assert len(spec.scenes) == 2
        assert spec.scenes[0].audio == [str(settings.temp_dir / job_id / "scene_0.mp3")]
        # 2s narration at 30fps, 15-frame cross-fade
        assert spec.total_frames == 60 + 60 - 15
        assert spec.scenes[0].captions[0].lines == ["hello world"]

    @pytest.mark.asyncio
    async def test_failure_is_isolated_to_one_job(self, orchestrator, footage_search):
        footage_search.search.side_effect = [None, "https://videos.example.com/ok.mp4"]
        failing = orchestrator.submit([{"text": "nothing matches", "searchTerms": ["zzz"]}])
        passing = orchestrator.submit([{"text": "fine", "searchTerms": ["sky"]}])

        await _drain(orchestrator)

        failed_job = orchestrator.status(failing)
        assert failed_job.status == JobStatus.FAILED
        assert failed_job.error["stage"] == "footage_search"
        assert orchestrator.status(passing).status == JobStatus.READY

    @pytest.mark.asyncio
    async def test_render_failure(self, orchestrator, renderer, settings):
        renderer.render.side_effect = RuntimeError("ffmpeg exited with 1")
        job_id = orchestrator.submit([{"text": "a"}])

        await _drain(orchestrator)

        job = orchestrator.status(job_id)
        assert job.status == JobStatus.FAILED
        assert job.error == {"stage": "render", "message": "ffmpeg exited with 1"}
        assert not (settings.temp_dir / job_id).exists()

    @pytest.mark.asyncio
    async def test_jobs_processed_fifo(self, orchestrator, synthesizer, store):
        order = []

        async def synthesize(text, voice):
            order.append(text)
            await asyncio.sleep(0)
            return SynthesizedSpeech(audio=b"x", duration_seconds=1.0)

        synthesizer.synthesize.side_effect = synthesize
        ids = [orchestrator.submit([{"text": f"job {i}"}]) for i in range(4)]

        await _drain(orchestrator)

        assert order == ["job 0", "job 1", "job 2", "job 3"]
        assert all(store.get(job_id).status == JobStatus.READY for job_id in ids)

    @pytest.mark.asyncio
    async def test_only_one_job_processing_at_a_time(self, orchestrator, synthesizer, store):
        observed = []

        async def synthesize(text, voice):
            observed.append(sum(1 for job in store.list() if job.status == JobStatus.PROCESSING))
            await asyncio.sleep(0)
            return SynthesizedSpeech(audio=b"x", duration_seconds=1.0)

        synthesizer.synthesize.side_effect = synthesize
        for i in range(3):
            orchestrator.submit([{"text": f"job {i}"}])

        await _drain(orchestrator)

        assert observed == [1, 1, 1]

    @pytest.mark.asyncio
    async def test_jobs_settle_when_status_writes_fail(self, orchestrator, synthesizer, store):
        observed = []
        save_job = store._save_job

        def failing_ready_write(job):
            if job.status == JobStatus.READY:
                raise OSError("disk full")
            save_job(job)

        async def synthesize(text, voice):
            observed.append(sum(1 for job in store.list() if job.status == JobStatus.PROCESSING))
            return SynthesizedSpeech(audio=b"x", duration_seconds=1.0)

        synthesizer.synthesize.side_effect = synthesize
        store._save_job = failing_ready_write
        first = orchestrator.submit([{"text": "first"}])
        second = orchestrator.submit([{"text": "second"}])

        await _drain(orchestrator)

        assert observed == [1, 1]
        assert orchestrator.status(first).status == JobStatus.READY
        assert orchestrator.status(second).status == JobStatus.READY

    @pytest.mark.asyncio
    async def test_failed_ready_transition_fails_job(self, orchestrator, store, monkeypatch):
        update_status = store.update_status

        def reject_ready(job_id, status, **kwargs):
            if status == JobStatus.READY:
                raise RuntimeError("status index unavailable")
            return update_status(job_id, status, **kwargs)

        monkeypatch.setattr(store, "update_status", reject_ready)
        job_id = orchestrator.submit([{"text": "a"}])

        await _drain(orchestrator)

        job = orchestrator.status(job_id)
        assert job.status == JobStatus.FAILED
        assert job.error == {"stage": "internal", "message": "status index unavailable"}

    @pytest.mark.asyncio
    async def test_deleted_queued_job_is_skipped(self, orchestrator, synthesizer):
        job_id = orchestrator.submit([{"text": "gone"}])
        orchestrator.delete(job_id)

        await _drain(orchestrator)

        synthesizer.synthesize.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_background_music_picked_by_mood(self, settings, store, pipeline, renderer):
        track = settings.music_dir / "happy" / "sunny.mp3"
        track.parent.mkdir(parents=True)
        track.write_bytes(b"mp3")
        orchestrator = VideoOrchestrator(
            settings, store, pipeline, renderer, MusicLibrary(settings.music_dir), random.Random(1),
        )

        orchestrator.submit([{"text": "a"}], {"music": MusicMood.HAPPY.value, "musicVolume": 0.2})
        await _drain(orchestrator)

        spec = renderer.render.call_args.args[0]
        assert spec.music.file == str(track)
        assert spec.music.volume == 0.2
        assert spec.music.end_frame == spec.total_frames


class TestDelete:

    @pytest.mark.asyncio
    async def test_delete_is_idempotent(self, orchestrator, settings):
        job_id = orchestrator.submit([{"text": "a"}])
        await _drain(orchestrator)

        orchestrator.delete(job_id)
        orchestrator.delete(job_id)

        assert not (settings.videos_dir / f"{job_id}.mp4").exists()
        with pytest.raises(NotFoundError):
            orchestrator.status(job_id)

    def test_delete_unknown_is_noop(self, orchestrator):
        orchestrator.delete("never-existed")
        orchestrator.delete(uuid.uuid4().hex)

    @pytest.mark.parametrize("job_id", ["..", ".", "", "../videos", "../../data"])
    def test_delete_never_touches_paths_outside_a_job(self, orchestrator, settings, job_id):
        kept = settings.videos_dir / "keep.mp4"
        kept.write_bytes(b"mp4")
        scratch = settings.temp_dir / "other"
        scratch.mkdir()

        orchestrator.delete(job_id)

        assert kept.exists()
        assert scratch.is_dir()
        assert settings.job_data_dir.is_dir()

    def test_fetch_rejects_malformed_ids(self, orchestrator):
        with pytest.raises(NotFoundError):
            orchestrator.fetch("..")

    def test_job_paths_stay_inside_their_directories(self, orchestrator, settings):
        job_id = uuid.uuid4().hex

        assert orchestrator.scratch_dir(job_id).parent == settings.temp_dir
        assert orchestrator.artifact_path(job_id).parent == settings.videos_dir
        with pytest.raises(ValueError):
            orchestrator.scratch_dir("..")
        with pytest.raises(ValueError):
            orchestrator.artifact_path("../escape")

    def test_delete_processing_rejected(self, orchestrator, store):
        job_id = orchestrator.submit([{"text": "a"}])
        store.update_status(job_id, JobStatus.PROCESSING)

        with pytest.raises(JobConflictError):
            orchestrator.delete(job_id)


class TestRecovery:

    def test_recover_requeues_pending_jobs(self, tmp_path, settings, pipeline, renderer):
        storage = tmp_path / "job_data"
        previous = StatusStore(storage)
        previous.create("interrupted", [SceneInput(text="a")], _configured())
        previous.update_status("interrupted", JobStatus.PROCESSING)
        previous.create("waiting", [SceneInput(text="b")], _configured())

        orchestrator = VideoOrchestrator(settings, StatusStore(storage), pipeline, renderer)

        assert orchestrator.recover() == 1
        assert orchestrator.queue_depth() == 1
        assert orchestrator.status("interrupted").status == JobStatus.FAILED

    @pytest.mark.asyncio
    async def test_recovered_job_completes(self, tmp_path, settings, pipeline, renderer):
        storage = tmp_path / "job_data"
        StatusStore(storage).create("waiting", [SceneInput(text="b")], _configured())
        orchestrator = VideoOrchestrator(settings, StatusStore(storage), pipeline, renderer)

        orchestrator.recover()
        await _drain(orchestrator)

        assert orchestrator.status("waiting").status == JobStatus.READY


def _configured():
    return RenderConfig().with_defaults("en-US-GuyNeural")

"""Tests for the batch resize orchestrator."""

import threading
import time

import pytest

from resizeplatform.app.batch import BatchResizeOrchestrator
from resizeplatform.app.enums import FileFormat, JobStatus, PNGColorType, Severity
from resizeplatform.app.exceptions import (
    BatchNotFoundError,
    JobNotFoundError,
    JobStateError,
    ValidationError,
)
from resizeplatform.app.layout import SmartResizeEngine
from resizeplatform.app.models import (
    Design,
    ExportSettings,
    Platform,
    PlatformDimension,
)
from resizeplatform.app.store import InMemoryDesignStore


class FailingEngine(SmartResizeEngine):
    """Raises for one specific target width."""

    def __init__(self, fail_width):
        super().__init__()
        self.fail_width = fail_width

    def resize(self, design, target_width, target_height):
        if target_width == self.fail_width:
            raise RuntimeError(f"boom at {target_width}")
        return super().resize(design, target_width, target_height)


class CountingEngine(SmartResizeEngine):
    """Records the peak number of concurrent resize calls."""

    def __init__(self, delay=0.05):
        super().__init__()
        self.delay = delay
        self.active = 0
        self.peak = 0
        self._lock = threading.Lock()

    def resize(self, design, target_width, target_height):
        with self._lock:
            self.active += 1
            self.peak = max(self.peak, self.active)
        try:
            time.sleep(self.delay)
            return super().resize(design, target_width, target_height)
        finally:
            with self._lock:
                self.active -= 1


class BlockingEngine(SmartResizeEngine):
    """Blocks every resize until released."""

    def __init__(self):
        super().__init__()
        self.started = threading.Event()
        self.release = threading.Event()

    def resize(self, design, target_width, target_height):
        self.started.set()
        assert self.release.wait(timeout=5)
        return super().resize(design, target_width, target_height)


class GatedStore(InMemoryDesignStore):
    """Blocks saves once armed, until released."""

    def __init__(self):
        super().__init__()
        self.armed = False
        self.saving = threading.Event()
        self.release = threading.Event()

    def save(self, design):
        if self.armed:
            self.saving.set()
            assert self.release.wait(timeout=5)
        super().save(design)


def _png8_platform():
    dimension = PlatformDimension(
        width=1080, height=1080, name="Square", max_file_size_kb=10_000,
        supported_formats=[FileFormat.PNG, FileFormat.PNG8],
    )
    return Platform(name="Pixels", dimensions=[dimension]), dimension


class TestCreateBatch:
    def setup_method(self):
        self.orchestrator = BatchResizeOrchestrator()

    def test_one_queued_job_per_target(self, sample_design):
        batch = self.orchestrator.create_batch(sample_design, [(1080, 1080), (300, 250)])
        assert len(batch.jobs) == 2
        assert all(j.status == JobStatus.QUEUED for j in batch.jobs)
        assert [j.description for j in batch.jobs] == ["1080x1080", "300x250"]
        assert batch.source_design_id == sample_design.id
        assert batch.status == JobStatus.QUEUED
        assert batch.progress == 0.0

    def test_unmatched_target_uses_web_default(self, sample_design):
        batch = self.orchestrator.create_batch(sample_design, [(500, 500)])
        job = batch.jobs[0]
        assert job.platform is None
        assert job.export_settings == ExportSettings.default_web_export()

    def test_matched_target_uses_minimum_size_preset(self, sample_design):
        dimension = PlatformDimension(
            width=300, height=250, name="MPU", supported_formats=[FileFormat.JPG, FileFormat.PNG],
        )
        platform = Platform(name="Ads", dimensions=[dimension])
        batch = self.orchestrator.create_batch(
            sample_design, [(300, 250), (728, 90)], platforms=[platform]
        )
        matched, unmatched = batch.jobs
        assert matched.platform is platform
        assert matched.platform_dimension is dimension
        assert matched.export_settings.format == FileFormat.JPG
        assert matched.export_settings.jpeg_quality == 60
        assert unmatched.platform is None

    def test_default_name(self, sample_design):
        batch = self.orchestrator.create_batch(sample_design, [(100, 100)])
        assert batch.name == "Spring Sale resize"

    def test_empty_targets_rejected(self, sample_design):
        with pytest.raises(ValidationError, match="At least one"):
            self.orchestrator.create_batch(sample_design, [])

    def test_invalid_target_rejected(self, sample_design):
        with pytest.raises(ValidationError, match="positive"):
            self.orchestrator.create_batch(sample_design, [(100, 100), (0, 50)])

    def test_invalid_concurrency_rejected(self):
        with pytest.raises(ValidationError):
            BatchResizeOrchestrator(max_concurrent_jobs=0)


class TestProcessBatch:
    def setup_method(self):
        self.store = InMemoryDesignStore()
        self.orchestrator = BatchResizeOrchestrator(store=self.store)

    def test_unbound_jobs_complete(self, simple_design):
        batch = self.orchestrator.create_batch(simple_design, [(1080, 1080), (300, 250)])
        assert [j.status for j in batch.jobs] == [JobStatus.QUEUED, JobStatus.QUEUED]

        self.orchestrator.process_batch(batch.id)

        assert all(j.status == JobStatus.COMPLETED for j in batch.jobs)
        assert batch.progress == 1.0
        assert batch.status == JobStatus.COMPLETED
        for job in batch.jobs:
            assert job.output_design.width == job.target_width
            assert job.output_design.height == job.target_height
            assert job.output_design_id == job.output_design.id
            assert job.completed_at is not None
            assert self.store.exists(job.output_design_id)

    def test_png8_violation_waits_for_adjustment(self, sample_design):
        platform, _ = _png8_platform()
        rgba = ExportSettings(format=FileFormat.PNG, png_color_type=PNGColorType.RGBA)
        batch = self.orchestrator.create_batch(
            sample_design, [(1080, 1080)], platforms=[platform], export_settings=rgba
        )

        self.orchestrator.process_batch(batch.id)

        job = batch.jobs[0]
        assert job.status == JobStatus.WAITING_FOR_ADJUSTMENT
        assert job.requires_manual_adjustment is True
        assert "PNG-8" in job.manual_adjustment_reason
        errors = [v for v in job.violations if v.severity == Severity.ERROR]
        assert [v.property_name for v in errors] == ["pngColorType"]
        assert job.output_design is None
        assert job.draft_design is not None
        assert not self.store.exists(job.draft_design.id)
        assert batch.status == JobStatus.WAITING_FOR_ADJUSTMENT

    def test_platform_preset_passes_png8(self, sample_design):
        platform, _ = _png8_platform()
        batch = self.orchestrator.create_batch(sample_design, [(1080, 1080)], platforms=[platform])
        self.orchestrator.process_batch(batch.id)
        assert batch.jobs[0].status == JobStatus.COMPLETED

    def test_failure_is_local_to_job(self, simple_design):
        orchestrator = BatchResizeOrchestrator(engine=FailingEngine(fail_width=300))
        batch = orchestrator.create_batch(simple_design, [(1080, 1080), (300, 250), (728, 90)])

        orchestrator.process_batch(batch.id)

        statuses = {j.description: j.status for j in batch.jobs}
        assert statuses == {
            "1080x1080": JobStatus.COMPLETED,
            "300x250": JobStatus.FAILED,
            "728x90": JobStatus.COMPLETED,
        }
        failed = next(j for j in batch.jobs if j.status == JobStatus.FAILED)
        assert failed.error_message == "boom at 300"
        assert batch.status == JobStatus.FAILED
        assert batch.progress == pytest.approx(2 / 3)

    def test_malformed_source_fails_jobs(self, make_element):
        design = Design(
            id="bad", name="Bad", width=1200, height=800,
            elements=[make_element("zero", width=0, height=10)],
        )
        batch = self.orchestrator.create_batch(design, [(100, 100), (200, 200)])
        self.orchestrator.process_batch(batch.id)
        assert all(j.status == JobStatus.FAILED for j in batch.jobs)
        assert all("zero" in j.error_message for j in batch.jobs)

    def test_source_copied_at_creation(self, simple_design):
        batch = self.orchestrator.create_batch(simple_design, [(600, 400)])
        simple_design.elements.clear()
        self.orchestrator.process_batch(batch.id)
        assert len(batch.jobs[0].output_design.elements) == 1

    def test_reprocessing_skips_finished_jobs(self, simple_design):
        batch = self.orchestrator.create_batch(simple_design, [(600, 400)])
        self.orchestrator.process_batch(batch.id)
        output_id = batch.jobs[0].output_design_id
        self.orchestrator.process_batch(batch.id)
        assert batch.jobs[0].output_design_id == output_id

    def test_submit_batch_runs_in_background(self, simple_design):
        batch = self.orchestrator.create_batch(simple_design, [(600, 400), (400, 600)])
        try:
            result = self.orchestrator.submit_batch(batch.id).result(timeout=10)
        finally:
            self.orchestrator.shutdown()
        assert result is batch
        assert batch.status == JobStatus.COMPLETED

    def test_unknown_batch(self):
        with pytest.raises(BatchNotFoundError):
            self.orchestrator.process_batch("missing")


class TestConcurrency:
    def test_concurrency_is_bounded(self, simple_design):
        engine = CountingEngine()
        orchestrator = BatchResizeOrchestrator(engine=engine, max_concurrent_jobs=2)
        targets = [(100 + i, 100 + i) for i in range(8)]
        batch = orchestrator.create_batch(simple_design, targets)

        orchestrator.process_batch(batch.id)

        assert batch.status == JobStatus.COMPLETED
        assert 1 <= engine.peak <= 2

    def test_shared_limiter_bounds_all_batches(self, simple_design):
        engine = CountingEngine(delay=0.02)
        limiter = threading.BoundedSemaphore(1)
        first = BatchResizeOrchestrator(engine=engine, limiter=limiter)
        second = BatchResizeOrchestrator(engine=engine, limiter=limiter)
        batch_a = first.create_batch(simple_design, [(100, 100), (200, 200), (300, 300)])
        batch_b = second.create_batch(simple_design, [(400, 400), (500, 500), (600, 600)])

        try:
            futures = [first.submit_batch(batch_a.id), second.submit_batch(batch_b.id)]
            for future in futures:
                future.result(timeout=10)
        finally:
            first.shutdown()
            second.shutdown()

        assert engine.peak == 1
        assert batch_a.status == JobStatus.COMPLETED
        assert batch_b.status == JobStatus.COMPLETED


class TestCancelBatch:
    def setup_method(self):
        self.orchestrator = BatchResizeOrchestrator()

    def test_cancel_queued_batch(self, simple_design):
        batch = self.orchestrator.create_batch(simple_design, [(100, 100), (200, 200)])
        assert self.orchestrator.cancel_batch(batch.id) == 2
        assert batch.status == JobStatus.CANCELLED

        self.orchestrator.process_batch(batch.id)
        assert all(j.status == JobStatus.CANCELLED for j in batch.jobs)
        assert all(j.output_design is None for j in batch.jobs)

    def test_cancel_completed_batch_is_noop(self, simple_design):
        batch = self.orchestrator.create_batch(simple_design, [(100, 100)])
        self.orchestrator.process_batch(batch.id)
        assert self.orchestrator.cancel_batch(batch.id) == 0
        assert batch.status == JobStatus.COMPLETED

    def test_running_job_is_not_preempted(self, simple_design):
        engine = BlockingEngine()
        orchestrator = BatchResizeOrchestrator(engine=engine, max_concurrent_jobs=1)
        batch = orchestrator.create_batch(simple_design, [(100, 100), (200, 200), (300, 300)])

        try:
            future = orchestrator.submit_batch(batch.id)
            assert engine.started.wait(timeout=5)
            assert batch.status == JobStatus.PROCESSING

            assert orchestrator.cancel_batch(batch.id) == 2
            engine.release.set()
            future.result(timeout=10)
        finally:
            engine.release.set()
            orchestrator.shutdown()

        statuses = [j.status for j in batch.jobs]
        assert statuses == [JobStatus.COMPLETED, JobStatus.CANCELLED, JobStatus.CANCELLED]

    def test_cancel_unknown_batch(self):
        with pytest.raises(BatchNotFoundError):
            self.orchestrator.cancel_batch("missing")


class TestManualAdjustment:
    def setup_method(self):
        self.store = InMemoryDesignStore()
        self.orchestrator = BatchResizeOrchestrator(store=self.store)

    def _waiting_batch(self, design):
        platform, _ = _png8_platform()
        rgba = ExportSettings(format=FileFormat.PNG, png_color_type=PNGColorType.RGBA)
        batch = self.orchestrator.create_batch(
            design, [(1080, 1080), (500, 500)], platforms=[platform], export_settings=rgba
        )
        self.orchestrator.process_batch(batch.id)
        return batch

    def test_approve_completes_job(self, sample_design):
        batch = self._waiting_batch(sample_design)
        job = batch.jobs[0]
        assert batch.status == JobStatus.WAITING_FOR_ADJUSTMENT

        adjusted = job.draft_design
        approved = self.orchestrator.approve_manual_adjustment(job.id, adjusted)

        assert approved is job
        assert job.status == JobStatus.COMPLETED
        assert job.output_design_id == adjusted.id
        assert job.requires_manual_adjustment is False
        assert job.completed_at is not None
        assert self.store.exists(adjusted.id)
        assert batch.status == JobStatus.COMPLETED
        assert batch.progress == 1.0

    def test_approve_requires_waiting_state(self, sample_design):
        batch = self._waiting_batch(sample_design)
        completed = batch.jobs[1]
        assert completed.status == JobStatus.COMPLETED
        with pytest.raises(JobStateError, match="not waiting"):
            self.orchestrator.approve_manual_adjustment(completed.id, sample_design)

    def test_approve_unknown_job(self, sample_design):
        with pytest.raises(JobNotFoundError):
            self.orchestrator.approve_manual_adjustment("missing", sample_design)

    def test_approve_saves_without_holding_lock(self, sample_design):
        store = GatedStore()
        self.orchestrator = BatchResizeOrchestrator(store=store)
        batch = self._waiting_batch(sample_design)
        job = batch.jobs[0]
        store.armed = True

        approver = threading.Thread(
            target=self.orchestrator.approve_manual_adjustment, args=(job.id, job.draft_design)
        )
        approver.start()
        try:
            assert store.saving.wait(timeout=5)
            reader = threading.Thread(target=self.orchestrator.cancel_batch, args=(batch.id,))
            reader.start()
            reader.join(timeout=2)
            assert not reader.is_alive()
            assert job.status == JobStatus.WAITING_FOR_ADJUSTMENT
        finally:
            store.release.set()
            approver.join(timeout=5)

        assert job.status == JobStatus.COMPLETED
        assert store.exists(job.output_design_id)

    def test_second_approval_rejected(self, sample_design):
        batch = self._waiting_batch(sample_design)
        job = batch.jobs[0]
        self.orchestrator.approve_manual_adjustment(job.id, job.draft_design)
        with pytest.raises(JobStateError):
            self.orchestrator.approve_manual_adjustment(job.id, sample_design)


class TestBatchListing:
    def setup_method(self):
        self.orchestrator = BatchResizeOrchestrator()

    def test_active_and_completed(self, simple_design):
        done = self.orchestrator.create_batch(simple_design, [(100, 100)])
        pending = self.orchestrator.create_batch(simple_design, [(200, 200)])
        cancelled = self.orchestrator.create_batch(simple_design, [(300, 300)])
        self.orchestrator.process_batch(done.id)
        self.orchestrator.cancel_batch(cancelled.id)

        assert [b.id for b in self.orchestrator.active_batches] == [pending.id]
        assert {b.id for b in self.orchestrator.completed_batches} == {done.id, cancelled.id}

    def test_get_batch_and_job(self, simple_design):
        batch = self.orchestrator.create_batch(simple_design, [(100, 100)])
        assert self.orchestrator.get_batch(batch.id) is batch
        assert self.orchestrator.get_job(batch.jobs[0].id) is batch.jobs[0]

    def test_delete_batch(self, simple_design):
        batch = self.orchestrator.create_batch(simple_design, [(100, 100)])
        assert self.orchestrator.delete_batch(batch.id) is True
        assert self.orchestrator.delete_batch(batch.id) is False
        with pytest.raises(BatchNotFoundError):
            self.orchestrator.get_batch(batch.id)

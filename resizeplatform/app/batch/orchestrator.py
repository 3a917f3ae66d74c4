"""Batch resize orchestration with bounded concurrency."""

from __future__ import annotations

import copy
import logging
import threading
from collections.abc import Iterable
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import replace

from ..config import Config
from ..constraints import PlatformConstraintChecker, find_platform_dimension
from ..enums import JobStatus, Severity
from ..exceptions import (
    BatchError,
    BatchNotFoundError,
    JobNotFoundError,
    JobStateError,
    ValidationError,
)
from ..layout import SmartResizeEngine
from ..models import (
    ConstraintViolation,
    Design,
    ExportSettings,
    Platform,
    ResizeBatch,
    ResizeJob,
    utcnow,
)
from ..store import BaseDesignStore
from ..validators import validate_dimensions

logger = logging.getLogger("resizeplatform.batch")

# Shared by every orchestrator that is not given its own limit.
_PROCESS_LIMITER = threading.BoundedSemaphore(Config.MAX_CONCURRENT_JOBS)


class BatchResizeOrchestrator:
    """Fan one source design out to many target sizes.

    Each target becomes a ResizeJob with its own state machine::

        queued -> processing -> completed | failed | waitingForAdjustment
        queued -> cancelled
        waitingForAdjustment -> completed   (approve_manual_adjustment)

    Jobs run on worker threads, at most ``max_concurrent_jobs`` at a time.
    All job mutations happen under a single lock; batch status and progress
    are derived from the jobs on every read.
    """

    def __init__(
        self,
        engine: SmartResizeEngine | None = None,
        checker: PlatformConstraintChecker | None = None,
        store: BaseDesignStore | None = None,
        max_concurrent_jobs: int | None = None,
        limiter: threading.Semaphore | None = None,
    ) -> None:
        if max_concurrent_jobs is not None and max_concurrent_jobs < 1:
            raise ValidationError(
                f"max_concurrent_jobs must be at least 1, got {max_concurrent_jobs}"
            )

        self.engine = engine or SmartResizeEngine()
        self.checker = checker or PlatformConstraintChecker()
        self.store = store
        self.max_concurrent_jobs = max_concurrent_jobs or Config.MAX_CONCURRENT_JOBS

        if limiter is not None:
            self._limiter = limiter
        elif max_concurrent_jobs is not None:
            self._limiter = threading.BoundedSemaphore(max_concurrent_jobs)
        else:
            self._limiter = _PROCESS_LIMITER

        self._lock = threading.RLock()
        self._batches: dict[str, ResizeBatch] = {}
        self._sources: dict[str, Design] = {}
        self._dispatcher: ThreadPoolExecutor | None = None

    # ------------------------------------------------------------------
    # Batch lifecycle
    # ------------------------------------------------------------------

    def create_batch(
        self,
        design: Design,
        target_dimensions: Iterable[tuple[float, float]],
        name: str | None = None,
        platforms: list[Platform] | None = None,
        export_settings: ExportSettings | None = None,
        created_by: str | None = None,
    ) -> ResizeBatch:
        """Create a batch with one queued job per target size.

        Args:
            design: Source design. A private copy is kept for processing.
            target_dimensions: (width, height) pairs.
            name: Batch name (defaults to the design name).
            platforms: Platforms to match targets against. A target that
                matches a platform slot is validated against it after resize.
            export_settings: Settings for every job, overriding the
                per-platform minimum-size preset and the web default.
            created_by: Optional owner name.

        Returns:
            The new batch, all jobs queued.

        Raises:
            ValidationError: If no targets are given or a target is invalid.
        """
        targets = list(target_dimensions)
        if not targets:
            raise ValidationError("At least one target dimension is required")
        for width, height in targets:
            validate_dimensions(width, height)

        jobs: list[ResizeJob] = []
        for width, height in targets:
            match = find_platform_dimension(platforms, width, height) if platforms else None

            if export_settings is not None:
                settings = replace(export_settings)
            elif match is not None:
                formats = match[0].formats_for(match[1])
                settings = (
                    ExportSettings.minimum_size_settings(formats[0])
                    if formats else ExportSettings.default_web_export()
                )
            else:
                settings = ExportSettings.default_web_export()

            jobs.append(
                ResizeJob(
                    source_design_id=design.id,
                    target_width=width,
                    target_height=height,
                    platform=match[0] if match else None,
                    platform_dimension=match[1] if match else None,
                    export_settings=settings,
                )
            )

        batch = ResizeBatch(
            name=name or f"{design.name} resize",
            source_design_id=design.id,
            jobs=jobs,
            created_by=created_by,
        )

        with self._lock:
            self._batches[batch.id] = batch
            self._sources[batch.id] = copy.deepcopy(design)

        logger.info(
            "Created batch %s (%s) with %d jobs: %s",
            batch.id, batch.name, len(jobs), ", ".join(j.description for j in jobs),
        )
        return batch

    def process_batch(self, batch_id: str) -> ResizeBatch:
        """Run every queued job of a batch and block until they finish.

        Args:
            batch_id: Id of the batch.

        Returns:
            The batch, with jobs in their final states.

        Raises:
            BatchNotFoundError: If the batch is unknown.
        """
        with self._lock:
            batch = self._get(batch_id)
            source = self._sources[batch_id]
            pending = [j for j in batch.jobs if j.status == JobStatus.QUEUED]

        if not pending:
            logger.info("Batch %s has no queued jobs", batch_id)
            return batch

        logger.info("Processing batch %s: %d queued jobs", batch_id, len(pending))

        workers = min(len(pending), self.max_concurrent_jobs)
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="resize-job") as pool:
            futures = [pool.submit(self._run_job, batch, job, source) for job in pending]
            for future in as_completed(futures):
                future.result()

        logger.info(
            "Batch %s finished: status=%s progress=%.0f%%",
            batch_id, batch.status.value, batch.progress * 100,
        )
        return batch

    def submit_batch(self, batch_id: str) -> Future[ResizeBatch]:
        """Process a batch in the background.

        Returns:
            A future resolving to the batch once all its jobs finish.
        """
        with self._lock:
            self._get(batch_id)
            if self._dispatcher is None:
                self._dispatcher = ThreadPoolExecutor(thread_name_prefix="resize-batch")
            dispatcher = self._dispatcher
        return dispatcher.submit(self.process_batch, batch_id)

    def cancel_batch(self, batch_id: str) -> int:
        """Cancel every still-queued job. Running jobs are not interrupted.

        Returns:
            Number of jobs cancelled.
        """
        with self._lock:
            batch = self._get(batch_id)
            cancelled = 0
            for job in batch.jobs:
                if job.status == JobStatus.QUEUED:
                    job.status = JobStatus.CANCELLED
                    job.touch()
                    cancelled += 1
            if cancelled:
                batch.touch()

        logger.info("Cancelled %d queued jobs in batch %s", cancelled, batch_id)
        return cancelled

    def approve_manual_adjustment(self, job_id: str, adjusted_design: Design) -> ResizeJob:
        """Complete a job that was held for manual adjustment.

        Args:
            job_id: Id of a job in ``waitingForAdjustment``.
            adjusted_design: The manually corrected design.

        Returns:
            The completed job.

        Raises:
            JobNotFoundError: If no batch contains the job.
            JobStateError: If the job is not waiting for adjustment.
        """
        with self._lock:
            self._require_waiting(self._find_job(job_id)[1])

        # Store writes happen outside the lock
        if self.store is not None:
            self.store.save(adjusted_design)

        with self._lock:
            batch, job = self._find_job(job_id)
            # May have been approved while saving
            self._require_waiting(job)

            now = utcnow()
            job.status = JobStatus.COMPLETED
            job.output_design = adjusted_design
            job.output_design_id = adjusted_design.id
            job.draft_design = None
            job.requires_manual_adjustment = False
            job.completed_at = now
            job.updated_at = now
            batch.touch()

        logger.info("Approved manual adjustment for job %s (%s)", job_id, job.description)
        return job

    def delete_batch(self, batch_id: str) -> bool:
        """Forget a batch. Batches with running jobs cannot be deleted.

        Returns:
            True if the batch existed.
        """
        with self._lock:
            batch = self._batches.get(batch_id)
            if batch is None:
                return False
            if batch.status == JobStatus.PROCESSING:
                raise BatchError(f"Batch {batch_id} is still processing")
            del self._batches[batch_id]
            self._sources.pop(batch_id, None)
        return True

    def shutdown(self, wait: bool = True) -> None:
        with self._lock:
            dispatcher, self._dispatcher = self._dispatcher, None
        if dispatcher is not None:
            dispatcher.shutdown(wait=wait)

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    def get_batch(self, batch_id: str) -> ResizeBatch:
        with self._lock:
            return self._get(batch_id)

    def get_job(self, job_id: str) -> ResizeJob:
        with self._lock:
            return self._find_job(job_id)[1]

    @property
    def active_batches(self) -> list[ResizeBatch]:
        with self._lock:
            batches = [b for b in self._batches.values() if not b.is_finished]
        return sorted(batches, key=lambda b: b.updated_at, reverse=True)

    @property
    def completed_batches(self) -> list[ResizeBatch]:
        with self._lock:
            batches = [b for b in self._batches.values() if b.is_finished]
        return sorted(batches, key=lambda b: b.updated_at, reverse=True)

    # ------------------------------------------------------------------
    # Job execution
    # ------------------------------------------------------------------

    def _run_job(self, batch: ResizeBatch, job: ResizeJob, source: Design) -> None:
        """Resize, validate and finalize one job. Never raises."""
        with self._limiter:
            with self._lock:
                # Cancelled while waiting for a slot
                if job.status != JobStatus.QUEUED:
                    return
                job.status = JobStatus.PROCESSING
                job.touch()
                batch.touch()

            logger.info("Job %s (%s) processing", job.id, job.description)

            try:
                output, violations = self._execute(job, source)
                errors = [v for v in violations if v.severity == Severity.ERROR]
                if not errors and self.store is not None:
                    self.store.save(output)
            except Exception as e:
                logger.error("Job %s (%s) failed: %s", job.id, job.description, e, exc_info=True)
                with self._lock:
                    job.status = JobStatus.FAILED
                    job.error_message = str(e) or type(e).__name__
                    job.touch()
                    batch.touch()
                return

            with self._lock:
                job.violations = violations
                if errors:
                    job.status = JobStatus.WAITING_FOR_ADJUSTMENT
                    job.requires_manual_adjustment = True
                    job.manual_adjustment_reason = ", ".join(v.message for v in errors)
                    job.draft_design = output
                    job.touch()
                else:
                    now = utcnow()
                    job.status = JobStatus.COMPLETED
                    job.output_design = output
                    job.output_design_id = output.id
                    job.completed_at = now
                    job.updated_at = now
                batch.touch()

            if errors:
                logger.warning(
                    "Job %s (%s) needs manual adjustment: %s",
                    job.id, job.description, job.manual_adjustment_reason,
                )
            else:
                logger.info("Job %s (%s) completed -> design %s", job.id, job.description, output.id)

    def _execute(
        self, job: ResizeJob, source: Design
    ) -> tuple[Design, list[ConstraintViolation]]:
        output = self.engine.resize(source, job.target_width, job.target_height)

        if job.platform is None or job.platform_dimension is None:
            return output, []

        violations = self.checker.validate(
            output,
            job.platform,
            job.platform_dimension,
            job.export_settings or ExportSettings.default_web_export(),
        )
        return output, violations

    # ------------------------------------------------------------------
    # Lookups (caller holds the lock)
    # ------------------------------------------------------------------

    def _get(self, batch_id: str) -> ResizeBatch:
        batch = self._batches.get(batch_id)
        if batch is None:
            raise BatchNotFoundError(f"Batch not found: {batch_id}")
        return batch

    def _find_job(self, job_id: str) -> tuple[ResizeBatch, ResizeJob]:
        for batch in self._batches.values():
            job = batch.job(job_id)
            if job is not None:
                return batch, job
        raise JobNotFoundError(f"Job not found: {job_id}")

    @staticmethod
    def _require_waiting(job: ResizeJob) -> None:
        if job.status != JobStatus.WAITING_FOR_ADJUSTMENT:
            raise JobStateError(
                f"Job {job.id} is {job.status.value}, not waiting for adjustment"
            )

"""Background pipeline launch with a bounded worker pool."""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, Optional

from .exceptions import CapacityExceededError, PipelineAlreadyRunningError
from .ids import new_trace_id
from .pipelines import RenderPipeline, SessionPipeline

logger = logging.getLogger(__name__)


class Dispatcher:
    """
    Launches pipelines as independent asyncio tasks.

    Each launch:
    - returns to the caller before any step runs
    - waits on a semaphore so at most ``max_concurrency`` pipelines execute
    - is tracked in an id -> task map until it finishes

    With ``max_queued`` > 0, a launch that would leave more than that many
    pipelines waiting for a slot is rejected. v1 exposes no per-entity
    cancellation; ``shutdown`` cancels everything at process exit.
    """

    def __init__(
        self,
        session_pipeline: SessionPipeline,
        render_pipeline: RenderPipeline,
        max_concurrency: int = 50,
        max_queued: int = 0,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.session_pipeline = session_pipeline
        self.render_pipeline = render_pipeline
        self.max_concurrency = max_concurrency
        self.max_queued = max_queued
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._tasks: Dict[str, asyncio.Task[None]] = {}
        self._started: Dict[str, datetime] = {}
        self._running = 0

    def dispatch_session_pipeline(self, session_id: str) -> None:
        """Start the agent workflow for ``session_id`` in the background."""
        self._launch(session_id, self.session_pipeline.deploy, "agent")

    def dispatch_render_pipeline(self, job_id: str) -> None:
        """Start the render workflow for ``job_id`` in the background."""
        self._launch(job_id, self.render_pipeline.render, "render")

    def _launch(
        self,
        entity_id: str,
        pipeline: Callable[[str], Awaitable[None]],
        kind: str,
    ) -> None:
        if entity_id in self._tasks:
            raise PipelineAlreadyRunningError(entity_id)
        if not self.has_capacity():
            raise CapacityExceededError(self.max_queued)

        trace_id = new_trace_id()
        task = asyncio.create_task(
            self._run(entity_id, pipeline, kind, trace_id),
            name=f"{kind}:{entity_id}",
        )
        self._tasks[entity_id] = task
        self._started[entity_id] = datetime.now(timezone.utc)
        task.add_done_callback(lambda t: self._on_done(entity_id, t))
        logger.info(f"[{trace_id}] Dispatched {kind} pipeline for {entity_id}")

    async def _run(
        self,
        entity_id: str,
        pipeline: Callable[[str], Awaitable[None]],
        kind: str,
        trace_id: str,
    ) -> None:
        async with self._semaphore:
            self._running += 1
            logger.debug(f"[{trace_id}] {kind} pipeline for {entity_id} acquired a worker slot")
            try:
                await pipeline(entity_id)
            finally:
                self._running -= 1

    def _on_done(self, entity_id: str, task: "asyncio.Task[None]") -> None:
        """Drop the handle; log anything that escaped the pipeline boundary."""
        if self._tasks.get(entity_id) is task:
            self._tasks.pop(entity_id, None)
            self._started.pop(entity_id, None)

        if task.cancelled():
            logger.info(f"Pipeline for {entity_id} cancelled")
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Pipeline for {entity_id} failed: {exc}", exc_info=exc)

    def has_capacity(self) -> bool:
        """True if one more launch would fit within the queue bound."""
        # Tasks acquire slots in launch order, so everything past the first
        # max_concurrency tracked tasks is waiting.
        if not self.max_queued:
            return True
        return len(self._tasks) < self.max_concurrency + self.max_queued

    def is_active(self, entity_id: str) -> bool:
        """True while a pipeline for this id is queued or executing."""
        return entity_id in self._tasks

    def active_count(self) -> int:
        """Pipelines currently holding a worker slot."""
        return self._running

    def pending_count(self) -> int:
        """Pipelines launched but still waiting for a worker slot."""
        return len(self._tasks) - self._running

    def list_active(self) -> Dict[str, dict]:
        """Return tracked pipelines with metadata."""
        return {
            entity_id: {
                "task": task.get_name(),
                "started": self._started[entity_id].isoformat() if entity_id in self._started else None,
            }
            for entity_id, task in self._tasks.items()
        }

    async def join(self, entity_id: str) -> None:
        """Wait for one pipeline to finish; returns at once if none is tracked."""
        task: Optional[asyncio.Task[None]] = self._tasks.get(entity_id)
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)

    async def drain(self) -> None:
        """Wait until every tracked pipeline has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks.values()), return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel all tracked pipelines (process shutdown only)."""
        tasks = list(self._tasks.values())
        if not tasks:
            return
        logger.info(f"Cancelling {len(tasks)} running pipeline(s)...")
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

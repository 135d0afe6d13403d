"""Entry points shared by the HTTP layer and any other caller."""

import asyncio
import logging
from typing import Optional

from .config import Settings
from .dispatcher import Dispatcher
from .exceptions import (
    CapacityExceededError,
    InvalidRequestError,
    JobNotFoundError,
    SessionNotFoundError,
)
from .models import Job, Session
from .pipelines import RenderPipeline, ScriptedStepRunner, SessionPipeline
from .pipelines.render import RandomSource
from .pipelines.runner import SleepFn
from .store import MemoryStore

logger = logging.getLogger(__name__)


class Orchestrator:
    """
    Owns the store and dispatcher for one process.

    Built once at startup and handed to every caller; creation and reads
    go to the store, background work goes through the dispatcher.
    """

    def __init__(self, store: MemoryStore, dispatcher: Dispatcher) -> None:
        self.store = store
        self.dispatcher = dispatcher

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        rng: Optional[RandomSource] = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> "Orchestrator":
        store = MemoryStore()
        runner = ScriptedStepRunner(sleep=sleep, delay_scale=settings.STEP_DELAY_SCALE)
        dispatcher = Dispatcher(
            session_pipeline=SessionPipeline(store, runner),
            render_pipeline=RenderPipeline(store, runner, rng=rng),
            max_concurrency=settings.MAX_CONCURRENCY,
            max_queued=settings.MAX_QUEUED_PIPELINES,
        )
        logger.info(
            f"Orchestrator ready (max concurrency: {settings.MAX_CONCURRENCY}, "
            f"delay scale: {settings.STEP_DELAY_SCALE})"
        )
        return cls(store, dispatcher)

    async def create_session(self, goal: str) -> str:
        if not goal or not goal.strip():
            raise InvalidRequestError("Goal required")
        session = await self.store.create_session(goal)
        return session.id

    def dispatch_session_pipeline(self, session_id: str) -> None:
        self.dispatcher.dispatch_session_pipeline(session_id)

    async def get_session(self, session_id: str) -> Session:
        session = await self.store.get_session(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    async def create_job(self, prompt: str) -> str:
        if not prompt or not prompt.strip():
            raise InvalidRequestError("Prompt required")
        job = await self.store.create_job(prompt)
        return job.id

    def dispatch_render_pipeline(self, job_id: str) -> None:
        self.dispatcher.dispatch_render_pipeline(job_id)

    async def get_job(self, job_id: str) -> Job:
        job = await self.store.get_job(job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        return job

    def _require_capacity(self) -> None:
        # Checked before creation so a rejected submit leaves nothing behind
        if not self.dispatcher.has_capacity():
            raise CapacityExceededError(self.dispatcher.max_queued)

    async def submit_session(self, goal: str) -> str:
        """Create a session and start its agent workflow."""
        self._require_capacity()
        session_id = await self.create_session(goal)
        self.dispatch_session_pipeline(session_id)
        return session_id

    async def submit_job(self, prompt: str) -> str:
        """Create a render job and start its workflow."""
        self._require_capacity()
        job_id = await self.create_job(prompt)
        self.dispatch_render_pipeline(job_id)
        return job_id

    async def shutdown(self) -> None:
        await self.dispatcher.shutdown()

"""Video forge workflow: scripted phases around a randomized diffusion loop."""

import logging
import random
from typing import Iterator, Optional, Protocol

from ..models import JobStatus
from ..store import MemoryStore
from .runner import RenderPhase, ScriptedStepRunner

logger = logging.getLogger(__name__)

INTAKE_PHASES = (
    RenderPhase(JobStatus.LOADING_ASSETS, 5, 0.0),
    RenderPhase(JobStatus.TOKENIZING_PROMPT, 15, 2.0),  # after asset load
)
FINISH_PHASES = (
    RenderPhase(JobStatus.UPSCALING_4K, 90, 0.0),
    RenderPhase(JobStatus.COMPLETED, 100, 2.0),  # after upscale
)

TOKENIZE_HOLD = 1.0
DIFFUSION_START = 20
DIFFUSION_CEILING = 80
DIFFUSION_MAX_INCREMENT = 14
DIFFUSION_STEP_DELAY = 1.2


class RandomSource(Protocol):
    def randint(self, a: int, b: int) -> int: ...


def diffusion_schedule(
    rng: RandomSource,
    start: int = DIFFUSION_START,
    ceiling: int = DIFFUSION_CEILING,
    max_increment: int = DIFFUSION_MAX_INCREMENT,
) -> Iterator[int]:
    """
    Yield successive diffusion progress values.

    Each value adds ``rng.randint(0, max_increment)`` to the previous one
    and is clamped to ``ceiling``; the schedule ends once it reaches it.
    """
    progress = start
    while progress < ceiling:
        progress = min(ceiling, progress + rng.randint(0, max_increment))
        yield progress


class RenderPipeline:
    """Moves a render job through its five phases."""

    def __init__(
        self,
        store: MemoryStore,
        runner: ScriptedStepRunner,
        rng: Optional[RandomSource] = None,
    ) -> None:
        self.store = store
        self.runner = runner
        self.rng = rng or random.Random()

    async def _apply(self, job_id: str, phase: RenderPhase) -> None:
        await self.store.update_job(job_id, phase.progress, phase.status)
        logger.info(f"Job {job_id} :: {phase.status.value} :: {phase.progress}%")

    async def diffuse(self, job_id: str) -> int:
        """Run the diffusion loop; returns the number of iterations."""
        iterations = 0
        for progress in diffusion_schedule(self.rng):
            await self.store.update_job(job_id, progress, JobStatus.DIFFUSING_LATENT_NOISE)
            logger.info(f"Job {job_id} :: Diffusion Step :: {progress}%")
            iterations += 1
            await self.runner.pause(DIFFUSION_STEP_DELAY)
        return iterations

    async def render(self, job_id: str) -> None:
        """Run every phase; a failure marks the job FAILED instead of raising."""
        logger.info(f"Initializing render pipeline: {job_id}")
        try:
            await self.runner.run(job_id, INTAKE_PHASES, self._apply)
            await self.runner.pause(TOKENIZE_HOLD)
            await self.diffuse(job_id)
            await self.runner.run(job_id, FINISH_PHASES, self._apply)
        except Exception as e:
            logger.error(f"Render pipeline crashed for job {job_id}: {e}", exc_info=True)
            try:
                await self._mark_failed(job_id)
            except Exception as write_error:
                logger.error(
                    f"Could not mark job {job_id} FAILED: {write_error}", exc_info=True
                )
            return

        logger.info(f"Job {job_id} :: RENDER COMPLETE")

    async def _mark_failed(self, job_id: str) -> None:
        job = await self.store.get_job(job_id)
        if job is None:
            return
        await self.store.update_job(job_id, job.progress, JobStatus.FAILED)

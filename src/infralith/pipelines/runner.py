"""Generic executor for fixed, delay-paced step scripts."""

import asyncio
import logging
from typing import Awaitable, Callable, NamedTuple, Protocol, Sequence, TypeVar, Union

from ..models import AgentRole, JobStatus

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[None]]


class ScriptedStep(NamedTuple):
    """One line of an agent script."""
    role: Union[AgentRole, str]
    message: str
    delay: float


class RenderPhase(NamedTuple):
    """One fixed render phase."""
    status: JobStatus
    progress: int
    delay: float


class _Paced(Protocol):
    @property
    def delay(self) -> float: ...


StepT = TypeVar("StepT", bound=_Paced)


class ScriptedStepRunner:
    """
    Replays steps strictly in order against one target entity.

    For each step: wait ``step.delay * delay_scale`` seconds, then await
    ``apply(target_id, step)`` exactly once. An exception from ``apply``
    stops the run and propagates to the caller.
    """

    def __init__(self, sleep: SleepFn = asyncio.sleep, delay_scale: float = 1.0) -> None:
        self._sleep = sleep
        self.delay_scale = delay_scale

    async def pause(self, delay: float) -> None:
        """Simulated processing time, scaled like every step delay."""
        await self._sleep(delay * self.delay_scale)

    async def run(
        self,
        target_id: str,
        steps: Sequence[StepT],
        apply: Callable[[str, StepT], Awaitable[None]],
    ) -> int:
        applied = 0
        for step in steps:
            await self.pause(step.delay)
            await apply(target_id, step)
            applied += 1
        logger.debug(f"Applied {applied} scripted steps to {target_id}")
        return applied

"""Agent swarm workflow: a fixed narrative replayed into a session's log."""

import logging
from typing import Optional, Sequence

from ..models import AgentRole
from ..models.session import role_tag
from ..store import MemoryStore
from .runner import ScriptedStep, ScriptedStepRunner

logger = logging.getLogger(__name__)

CRASH_MESSAGE = "❌ CRITICAL FAILURE: AGENT CRASHED"

# plan -> scaffold -> implement -> test (fails) -> debug -> re-test -> containerize -> live
AGENT_SCRIPT = (
    ScriptedStep(AgentRole.PLANNER, "Reading system constraints...", 0.8),
    ScriptedStep(AgentRole.PLANNER, "Analyzing directive against security policies...", 1.2),
    ScriptedStep(AgentRole.PLANNER, "Strategy formulated: Microservices Architecture.", 1.0),
    ScriptedStep(AgentRole.ARCHITECT, "Initializing scaffold (React/Vite + Node/Express)...", 1.5),
    ScriptedStep(AgentRole.ARCHITECT, "Defining API Schema (OpenAPI 3.0)...", 1.2),
    ScriptedStep(AgentRole.CODER, "Writing gateway.js logic...", 2.0),
    ScriptedStep(AgentRole.CODER, "Implementing RateLimiter middleware...", 1.5),
    ScriptedStep(AgentRole.TESTER, "Running Unit Tests (Jest)...", 1.0),
    ScriptedStep(AgentRole.TESTER, "❌ CRITICAL: Race Condition detected in DB module.", 1.0),
    ScriptedStep(AgentRole.DEBUGGER, "Analyzing Stack Trace...", 1.5),
    ScriptedStep(AgentRole.DEBUGGER, "Applying Hotfix (Mutex Lock applied).", 1.2),
    ScriptedStep(AgentRole.TESTER, "Re-running Tests...", 1.0),
    ScriptedStep(AgentRole.TESTER, "✅ All Tests Passed (Coverage: 98%).", 0.8),
    ScriptedStep(AgentRole.DEVOPS, "Building Docker Container...", 1.5),
    ScriptedStep(AgentRole.SYSTEM, "🚀 Deployment Successful. Service Live.", 0.8),
)


class SessionPipeline:
    """Drives the agent script into a session's log trail."""

    def __init__(
        self,
        store: MemoryStore,
        runner: ScriptedStepRunner,
        script: Optional[Sequence[ScriptedStep]] = None,
    ) -> None:
        self.store = store
        self.runner = runner
        self.script = tuple(script) if script is not None else AGENT_SCRIPT

    async def _apply(self, session_id: str, step: ScriptedStep) -> None:
        await self.store.append_log(session_id, step.role, step.message)
        logger.info(f"[{role_tag(step.role)}] {step.message}")

    async def deploy(self, session_id: str) -> None:
        """
        Replay the script against ``session_id``.

        Any failure ends the run with a SYSTEM crash entry; nothing is
        raised to the dispatcher.
        """
        logger.info(f"Deploying agent swarm for session: {session_id}")
        try:
            await self.runner.run(session_id, self.script, self._apply)
        except Exception as e:
            logger.error(f"Agent swarm crashed for session {session_id}: {e}", exc_info=True)
            try:
                await self.store.append_log(session_id, AgentRole.SYSTEM, CRASH_MESSAGE)
            except Exception as write_error:
                logger.error(
                    f"Could not record crash for session {session_id}: {write_error}",
                    exc_info=True,
                )
            return

        logger.info(f"Agent swarm finished for session: {session_id}")

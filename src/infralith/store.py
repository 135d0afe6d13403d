"""In-memory store for agent sessions and render jobs."""

import asyncio
import logging
from typing import Dict, Optional, Union

from .exceptions import ProgressRegressionError
from .ids import new_job_id, new_session_id
from .models import AgentRole, Job, JobStatus, LogEntry, Session
from .models.session import role_tag, utcnow

logger = logging.getLogger(__name__)


class MemoryStore:
    """
    Process-lifetime repository of Session and Job entities.

    Entities are frozen pydantic models. A mutation builds a new instance
    and swaps it in under that entity's own lock, so:
    - readers get a consistent snapshot without taking a lock
    - writes to one entity never wait on writes to another
    - nothing is ever deleted or persisted
    """

    def __init__(self) -> None:
        self._sessions: Dict[str, Session] = {}
        self._jobs: Dict[str, Job] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    async def create_session(self, goal: str) -> Session:
        """Allocate a new session in INITIALIZING state."""
        now = utcnow()
        session = Session(id=new_session_id(), goal=goal, created_at=now, updated_at=now)
        self._locks[session.id] = asyncio.Lock()
        self._sessions[session.id] = session
        logger.info(f"Session created: {session.id}")
        return session

    async def append_log(self, session_id: str, role: Union[AgentRole, str], msg: str) -> None:
        """
        Append a log entry and refresh updated_at.

        Unknown session ids are a silent no-op: a pipeline whose session
        has vanished keeps running instead of crashing.
        """
        lock = self._locks.get(session_id)
        if lock is None or session_id not in self._sessions:
            return

        async with lock:
            current = self._sessions[session_id]
            entry = LogEntry(role=role_tag(role), msg=msg)
            self._sessions[session_id] = current.model_copy(
                update={"logs": current.logs + (entry,), "updated_at": entry.ts}
            )

    async def create_job(self, prompt: str) -> Job:
        """Allocate a new render job in QUEUED state."""
        job = Job(id=new_job_id(), prompt=prompt)
        self._locks[job.id] = asyncio.Lock()
        self._jobs[job.id] = job
        logger.info(f"Job created: {job.id}")
        return job

    async def update_job(self, job_id: str, progress: int, status: Union[JobStatus, str]) -> None:
        """
        Replace progress and status together.

        Unknown job ids are a silent no-op. A progress value below the
        stored one raises ProgressRegressionError; one outside 0-100 fails
        model validation.
        """
        lock = self._locks.get(job_id)
        if lock is None or job_id not in self._jobs:
            return

        async with lock:
            current = self._jobs[job_id]
            if progress < current.progress:
                raise ProgressRegressionError(job_id, current.progress, progress)
            # Validate through the constructor; model_copy would skip the 0-100 bounds
            self._jobs[job_id] = Job(
                **{**current.model_dump(), "progress": progress, "status": status}
            )

    async def get_session(self, session_id: str) -> Optional[Session]:
        """Latest committed snapshot, or None if never created."""
        return self._sessions.get(session_id)

    async def get_job(self, job_id: str) -> Optional[Job]:
        """Latest committed snapshot, or None if never created."""
        return self._jobs.get(job_id)

    def session_count(self) -> int:
        return len(self._sessions)

    def job_count(self) -> int:
        return len(self._jobs)

"""Data models for Infralith Core."""

from .job import Job, JobStatus
from .session import AgentRole, LogEntry, Session, SessionMetrics, SessionStatus

__all__ = [
    "AgentRole",
    "Job",
    "JobStatus",
    "LogEntry",
    "Session",
    "SessionMetrics",
    "SessionStatus",
]

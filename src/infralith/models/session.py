"""Agent session state models."""

from datetime import datetime, timezone
from enum import Enum
from typing import Tuple, Union
from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionStatus(str, Enum):
    """Session lifecycle status."""
    INITIALIZING = "INITIALIZING"


class AgentRole(str, Enum):
    """Phase tag attached to every session log entry."""
    PLANNER = "PLANNER"
    ARCHITECT = "ARCHITECT"
    CODER = "CODER"
    TESTER = "TESTER"
    DEBUGGER = "DEBUGGER"
    DEVOPS = "DEVOPS"
    SYSTEM = "SYSTEM"


def role_tag(role: Union[AgentRole, str]) -> str:
    """Plain string form of a role, whether given as AgentRole or free text."""
    return role.value if isinstance(role, AgentRole) else role


class LogEntry(BaseModel):
    """One line of a session's log trail."""

    model_config = ConfigDict(frozen=True)

    role: str = Field(..., description="Free-form phase tag, usually an AgentRole value")
    msg: str = Field(..., description="Log message")
    ts: datetime = Field(default_factory=utcnow, description="Append time")


class SessionMetrics(BaseModel):
    """Counters kept for schema compatibility; no pipeline step fills them."""

    model_config = ConfigDict(frozen=True)

    steps: int = 0
    errors: int = 0


class Session(BaseModel):
    """
    Snapshot of one agent workflow.

    Instances are frozen. The store replaces the whole instance on every
    append, so a reader holding a snapshot never sees a later write.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique session identifier")
    goal: str = Field(..., description="Caller-supplied directive")
    status: SessionStatus = Field(
        SessionStatus.INITIALIZING, description="Set at creation, not advanced by the pipeline"
    )
    logs: Tuple[LogEntry, ...] = Field(default_factory=tuple, description="Ordered log trail")
    created_at: datetime = Field(default_factory=utcnow, description="Session creation time")
    updated_at: datetime = Field(default_factory=utcnow, description="Last append time")
    metrics: SessionMetrics = Field(default_factory=SessionMetrics)

    @property
    def is_terminal(self) -> bool:
        """True once the pipeline has written its final SYSTEM entry."""
        return bool(self.logs) and self.logs[-1].role == AgentRole.SYSTEM

"""Render job state models."""

from datetime import datetime
from enum import Enum
from typing import Tuple
from pydantic import BaseModel, ConfigDict, Field

from .session import utcnow


class JobStatus(str, Enum):
    """Render pipeline phase."""
    QUEUED = "QUEUED"
    LOADING_ASSETS = "LOADING_ASSETS"
    TOKENIZING_PROMPT = "TOKENIZING_PROMPT"
    DIFFUSING_LATENT_NOISE = "DIFFUSING_LATENT_NOISE"
    UPSCALING_4K = "UPSCALING_4K"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class Job(BaseModel):
    """Snapshot of one render workflow."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique job identifier")
    prompt: str = Field(..., description="Caller-supplied render prompt")
    status: JobStatus = Field(JobStatus.QUEUED, description="Current phase")
    progress: int = Field(0, ge=0, le=100, description="Percent complete, never decreases")
    artifacts: Tuple[str, ...] = Field(
        default_factory=tuple, description="Output references (not produced yet)"
    )
    created_at: datetime = Field(default_factory=utcnow, description="Job creation time")

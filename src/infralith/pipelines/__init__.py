"""Background workflows that mutate one entity over time."""

from .render import RenderPipeline, diffusion_schedule
from .runner import RenderPhase, ScriptedStep, ScriptedStepRunner
from .session import AGENT_SCRIPT, SessionPipeline

__all__ = [
    "AGENT_SCRIPT",
    "RenderPhase",
    "RenderPipeline",
    "ScriptedStep",
    "ScriptedStepRunner",
    "SessionPipeline",
    "diffusion_schedule",
]

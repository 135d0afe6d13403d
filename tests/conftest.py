"""Shared fixtures: every simulated delay collapses to a bare event-loop yield."""

import pytest

from infralith.config import Settings
from infralith.orchestrator import Orchestrator
from infralith.pipelines import ScriptedStepRunner
from infralith.store import MemoryStore


@pytest.fixture
def fast_settings():
    return Settings(STEP_DELAY_SCALE=0.0, MAX_CONCURRENCY=50, MAX_QUEUED_PIPELINES=0)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def runner():
    return ScriptedStepRunner(delay_scale=0.0)


@pytest.fixture
def orchestrator(fast_settings):
    return Orchestrator.from_settings(fast_settings)

"""Tests for the six entry points."""

import pytest

from infralith.config import Settings
from infralith.exceptions import (
    CapacityExceededError,
    InvalidRequestError,
    JobNotFoundError,
    NotFoundError,
    SessionNotFoundError,
)
from infralith.ids import JOB_ID_PATTERN, SESSION_ID_PATTERN, new_trace_id
from infralith.models import AgentRole, JobStatus
from infralith.orchestrator import Orchestrator


@pytest.mark.asyncio
async def test_create_session_returns_formatted_id(orchestrator):
    session_id = await orchestrator.create_session("Build a payment microservice")

    assert SESSION_ID_PATTERN.match(session_id)
    assert (await orchestrator.get_session(session_id)).goal == "Build a payment microservice"


@pytest.mark.asyncio
async def test_create_job_returns_formatted_id(orchestrator):
    job_id = await orchestrator.create_job("neon cyberpunk city")

    assert JOB_ID_PATTERN.match(job_id)
    assert (await orchestrator.get_job(job_id)).status == JobStatus.QUEUED


@pytest.mark.asyncio
@pytest.mark.parametrize("value", ["", "   ", "\n\t"])
async def test_blank_inputs_are_rejected(orchestrator, value):
    with pytest.raises(InvalidRequestError):
        await orchestrator.create_session(value)
    with pytest.raises(InvalidRequestError):
        await orchestrator.create_job(value)

    assert orchestrator.store.session_count() == 0
    assert orchestrator.store.job_count() == 0


@pytest.mark.asyncio
async def test_unknown_ids_raise_not_found(orchestrator):
    with pytest.raises(SessionNotFoundError) as session_exc:
        await orchestrator.get_session("sess_1234567890abcdef")
    with pytest.raises(JobNotFoundError) as job_exc:
        await orchestrator.get_job("job_1234567890abcdef")

    assert isinstance(session_exc.value, NotFoundError)
    assert session_exc.value.code == "session_not_found"
    assert job_exc.value.code == "job_not_found"


@pytest.mark.asyncio
async def test_noop_mutations_leave_ids_not_found(orchestrator):
    await orchestrator.store.append_log("sess_1234567890abcdef", AgentRole.SYSTEM, "x")
    await orchestrator.store.update_job("job_1234567890abcdef", 100, JobStatus.COMPLETED)

    with pytest.raises(SessionNotFoundError):
        await orchestrator.get_session("sess_1234567890abcdef")
    with pytest.raises(JobNotFoundError):
        await orchestrator.get_job("job_1234567890abcdef")


@pytest.mark.asyncio
async def test_submit_runs_both_workflows_to_completion(orchestrator):
    session_id = await orchestrator.submit_session("Build a payment microservice")
    job_id = await orchestrator.submit_job("neon cyberpunk city")

    await orchestrator.dispatcher.drain()

    session = await orchestrator.get_session(session_id)
    job = await orchestrator.get_job(job_id)
    assert len(session.logs) == 15
    assert session.is_terminal
    assert (job.progress, job.status) == (100, JobStatus.COMPLETED)


def test_from_settings_wires_worker_pool():
    orchestrator = Orchestrator.from_settings(
        Settings(MAX_CONCURRENCY=3, MAX_QUEUED_PIPELINES=7, STEP_DELAY_SCALE=0.5)
    )

    assert orchestrator.dispatcher.max_concurrency == 3
    assert orchestrator.dispatcher.max_queued == 7
    assert orchestrator.dispatcher.session_pipeline.store is orchestrator.store
    assert orchestrator.dispatcher.render_pipeline.store is orchestrator.store
    assert orchestrator.dispatcher.session_pipeline.runner.delay_scale == 0.5


def test_trace_ids_are_short_and_prefixed():
    trace_id = new_trace_id()

    assert trace_id.startswith("trc_")
    assert len(trace_id) == 12


@pytest.mark.asyncio
async def test_submit_over_capacity_creates_nothing():
    orchestrator = Orchestrator.from_settings(
        Settings(STEP_DELAY_SCALE=1.0, MAX_CONCURRENCY=1, MAX_QUEUED_PIPELINES=1)
    )
    await orchestrator.submit_session("one")
    await orchestrator.submit_job("two")

    with pytest.raises(CapacityExceededError):
        await orchestrator.submit_session("three")
    with pytest.raises(CapacityExceededError):
        await orchestrator.submit_job("four")

    await orchestrator.shutdown()

    assert orchestrator.store.session_count() == 1
    assert orchestrator.store.job_count() == 1

"""Tests for the agent swarm workflow."""

import logging

import pytest

from infralith.models import AgentRole
from infralith.pipelines import AGENT_SCRIPT, ScriptedStep, SessionPipeline
from infralith.pipelines.session import CRASH_MESSAGE
from infralith.store import MemoryStore


class OutageOnTesterStore(MemoryStore):
    """Rejects every TESTER append, like a store that fails mid-run."""

    async def append_log(self, session_id, role, msg):
        if role == AgentRole.TESTER:
            raise RuntimeError("log volume unavailable")
        await super().append_log(session_id, role, msg)


class ReadOnlyStore(MemoryStore):
    """Rejects every append, including the crash entry."""

    async def append_log(self, session_id, role, msg):
        raise RuntimeError("log volume is read-only")


def test_agent_script_shape():
    assert len(AGENT_SCRIPT) == 15
    assert AGENT_SCRIPT[0].role == AgentRole.PLANNER
    assert AGENT_SCRIPT[-1] == ScriptedStep(
        AgentRole.SYSTEM, "🚀 Deployment Successful. Service Live.", 0.8
    )
    # scripted failure always precedes the fix and the passing re-run
    messages = [step.message for step in AGENT_SCRIPT]
    failure = messages.index("❌ CRITICAL: Race Condition detected in DB module.")
    passing = messages.index("✅ All Tests Passed (Coverage: 98%).")
    assert failure < messages.index("Applying Hotfix (Mutex Lock applied).") < passing
    assert all(step.delay > 0 for step in AGENT_SCRIPT)


@pytest.mark.asyncio
async def test_deploy_writes_full_script_in_order(store, runner):
    session = await store.create_session("Build a payment microservice")

    await SessionPipeline(store, runner).deploy(session.id)

    current = await store.get_session(session.id)
    assert [(e.role, e.msg) for e in current.logs] == [
        (step.role, step.message) for step in AGENT_SCRIPT
    ]
    assert current.logs[-1].role == AgentRole.SYSTEM
    assert "Deployment Successful" in current.logs[-1].msg
    assert current.is_terminal


@pytest.mark.asyncio
async def test_deploy_leaves_status_and_metrics_untouched(store, runner):
    session = await store.create_session("goal")

    await SessionPipeline(store, runner).deploy(session.id)

    current = await store.get_session(session.id)
    assert current.status == session.status
    assert current.metrics == session.metrics


@pytest.mark.asyncio
async def test_deploy_records_crash_and_does_not_raise(runner):
    store = OutageOnTesterStore()
    session = await store.create_session("goal")

    await SessionPipeline(store, runner).deploy(session.id)

    current = await store.get_session(session.id)
    expected_prefix = [(s.role, s.message) for s in AGENT_SCRIPT[:7]]
    assert [(e.role, e.msg) for e in current.logs[:-1]] == expected_prefix
    assert current.logs[-1].role == AgentRole.SYSTEM
    assert current.logs[-1].msg == CRASH_MESSAGE
    assert len(current.logs) == 8


@pytest.mark.asyncio
async def test_deploy_against_unknown_session_is_harmless(store, runner):
    await SessionPipeline(store, runner).deploy("sess_ffffffffffffffff")

    assert await store.get_session("sess_ffffffffffffffff") is None


@pytest.mark.asyncio
async def test_custom_script(store, runner):
    script = [
        ScriptedStep(AgentRole.PLANNER, "plan", 0.1),
        ScriptedStep(AgentRole.SYSTEM, "done", 0.1),
    ]
    session = await store.create_session("goal")

    await SessionPipeline(store, runner, script=script).deploy(session.id)

    current = await store.get_session(session.id)
    assert [e.msg for e in current.logs] == ["plan", "done"]


@pytest.mark.asyncio
async def test_custom_script_with_free_form_role(store, runner):
    script = [
        ScriptedStep("REVIEWER", "Reviewing pull request...", 0.1),
        ScriptedStep(AgentRole.SYSTEM, "done", 0.1),
    ]
    session = await store.create_session("goal")

    await SessionPipeline(store, runner, script=script).deploy(session.id)

    current = await store.get_session(session.id)
    assert [e.role for e in current.logs] == ["REVIEWER", "SYSTEM"]
    assert current.is_terminal


@pytest.mark.asyncio
async def test_deploy_survives_store_rejecting_crash_entry(runner, caplog):
    store = ReadOnlyStore()
    session = await store.create_session("goal")

    with caplog.at_level(logging.ERROR, logger="infralith.pipelines.session"):
        await SessionPipeline(store, runner).deploy(session.id)

    assert (await store.get_session(session.id)).logs == ()
    assert f"Could not record crash for session {session.id}" in caplog.text

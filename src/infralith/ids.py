"""Identifier generation for sessions, jobs and dispatch traces."""

import re
import secrets

SESSION_PREFIX = "sess_"
JOB_PREFIX = "job_"
TRACE_PREFIX = "trc_"

SESSION_ID_PATTERN = re.compile(r"^sess_[0-9a-f]{16}$")
JOB_ID_PATTERN = re.compile(r"^job_[0-9a-f]{16}$")


def new_session_id() -> str:
    return f"{SESSION_PREFIX}{secrets.token_hex(8)}"


def new_job_id() -> str:
    return f"{JOB_PREFIX}{secrets.token_hex(8)}"


def new_trace_id() -> str:
    """Short id that tags one dispatch in the logs."""
    return f"{TRACE_PREFIX}{secrets.token_hex(4)}"

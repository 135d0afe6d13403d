"""Custom exception classes for Infralith Core."""


class InfralithError(Exception):
    """Base exception for Infralith errors."""

    def __init__(self, message: str, code: str = "internal", detail: str = ""):
        self.message = message
        self.code = code
        self.detail = detail
        super().__init__(message)


class InvalidRequestError(InfralithError):
    """Caller supplied an unusable input."""

    def __init__(self, message: str):
        super().__init__(message, code="invalid_request")


class NotFoundError(InfralithError):
    """Entity id was never created."""

    pass


class SessionNotFoundError(NotFoundError):
    """Session not found."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session not found: {session_id}", code="session_not_found")


class JobNotFoundError(NotFoundError):
    """Render job not found."""

    def __init__(self, job_id: str):
        self.job_id = job_id
        super().__init__(f"Job not found: {job_id}", code="job_not_found")


class StoreError(InfralithError):
    """Errors raised by the entity store when it rejects a mutation."""

    pass


class ProgressRegressionError(StoreError):
    """A job update tried to move progress backwards."""

    def __init__(self, job_id: str, current: int, requested: int):
        super().__init__(
            f"Progress for {job_id} cannot go from {current} to {requested}",
            code="progress_regression",
        )


class DispatchError(InfralithError):
    """Errors related to launching background pipelines."""

    pass


class CapacityExceededError(DispatchError):
    """Worker pool queue is full."""

    def __init__(self, limit: int):
        super().__init__(
            f"Pipeline queue full: {limit} pipelines already waiting",
            code="capacity_exceeded",
        )


class PipelineAlreadyRunningError(DispatchError):
    """A pipeline for this entity is still in flight."""

    def __init__(self, entity_id: str):
        super().__init__(
            f"Pipeline already running for {entity_id}",
            code="already_running",
        )

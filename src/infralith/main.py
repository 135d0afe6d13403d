"""Main FastAPI application exposing the agent and render workflows."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from .config import Settings, settings
from .exceptions import DispatchError, InvalidRequestError, NotFoundError
from .logging_config import setup_logging
from .models import Job, Session
from .orchestrator import Orchestrator

logger = logging.getLogger(__name__)


class AgentRequest(BaseModel):
    goal: str = Field(..., min_length=1, description="Directive for the agent swarm")


class VideoRequest(BaseModel):
    prompt: str = Field(..., min_length=1, description="Render prompt")


class SubmitResponse(BaseModel):
    success: bool = True
    id: str
    message: str


def create_app(
    orchestrator: Optional[Orchestrator] = None,
    settings_override: Optional[Settings] = None,
) -> FastAPI:
    """
    Build the API application.

    Without ``orchestrator`` one is built from settings in the lifespan.
    An injected orchestrator is attached immediately so test clients that
    skip the lifespan still work.
    """
    app_settings = settings_override or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan: startup and shutdown."""
        logger.info(f"Starting {app_settings.PROJECT_NAME} (env: {app_settings.ENV})...")
        if not hasattr(app.state, "orchestrator"):
            app.state.orchestrator = Orchestrator.from_settings(app_settings)
        logger.info(f"{app_settings.PROJECT_NAME} started successfully")

        yield

        logger.info("Shutting down gracefully...")
        await app.state.orchestrator.shutdown()
        logger.info("Shutdown complete")

    app = FastAPI(
        title=app_settings.PROJECT_NAME,
        version="0.1.0",
        lifespan=lifespan,
    )
    if orchestrator is not None:
        app.state.orchestrator = orchestrator

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.ALLOWED_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        client = request.client.host if request.client else "-"
        logger.info(f"{request.method} {request.url.path} [{client}]")
        return await call_next(request)

    def _orchestrator(request: Request) -> Orchestrator:
        return request.app.state.orchestrator

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint."""
        core = _orchestrator(request)
        return {
            "status": "ok",
            "service": app_settings.PROJECT_NAME,
            "sessions": core.store.session_count(),
            "jobs": core.store.job_count(),
            "active_pipelines": core.dispatcher.active_count(),
            "queued_pipelines": core.dispatcher.pending_count(),
            "pipelines": core.dispatcher.list_active(),
        }

    @app.post("/api/agent", response_model=SubmitResponse)
    async def deploy_agent(payload: AgentRequest, request: Request) -> SubmitResponse:
        """Create a session and start the agent swarm (fire and forget)."""
        try:
            session_id = await _orchestrator(request).submit_session(payload.goal)
        except InvalidRequestError as e:
            raise HTTPException(status_code=400, detail=e.message)
        except DispatchError as e:
            logger.warning(f"Agent dispatch rejected: {e.message}")
            raise HTTPException(status_code=503, detail=e.message)
        return SubmitResponse(id=session_id, message="Swarm Deployed")

    @app.get("/api/agent/{session_id}", response_model=Session)
    async def poll_agent(session_id: str, request: Request) -> Session:
        try:
            return await _orchestrator(request).get_session(session_id)
        except NotFoundError:
            raise HTTPException(status_code=404, detail="Session Not Found")

    @app.post("/api/video", response_model=SubmitResponse)
    async def queue_video(payload: VideoRequest, request: Request) -> SubmitResponse:
        """Create a render job and start the forge (fire and forget)."""
        try:
            job_id = await _orchestrator(request).submit_job(payload.prompt)
        except InvalidRequestError as e:
            raise HTTPException(status_code=400, detail=e.message)
        except DispatchError as e:
            logger.warning(f"Render dispatch rejected: {e.message}")
            raise HTTPException(status_code=503, detail=e.message)
        return SubmitResponse(id=job_id, message="Render Queued")

    @app.get("/api/video/{job_id}", response_model=Job)
    async def poll_video(job_id: str, request: Request) -> Job:
        try:
            return await _orchestrator(request).get_job(job_id)
        except NotFoundError:
            raise HTTPException(status_code=404, detail="Job Not Found")

    return app


# Setup logging
setup_logging(level=settings.LOG_LEVEL, debug=settings.DEBUG)

app = create_app()

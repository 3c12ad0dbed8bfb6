"""FastAPI application with lifespan, error mapping and health endpoint."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from notezero import __version__
from notezero.api.router import router
from notezero.config import get_settings
from notezero.errors import CycleDetected, InvalidTransition, NotFound, PersistenceFailure
from notezero.logging_config import configure_logging
from notezero.persistence.client import close_client
from notezero.workspace import Workspace


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging, build the workspace and load its pages.

    With a backend the workspace is reloaded from it; without one it starts
    from the seeded starter pages held in memory.
    """
    settings = get_settings()
    configure_logging(settings.log_level)
    app.state.settings = settings

    workspace = Workspace.from_settings(settings, auto_flush=False)
    if settings.backend_url:
        await workspace.reload()
    else:
        workspace.seed()
        await workspace.flush()
    app.state.workspace = workspace
    yield
    await close_client()


app = FastAPI(
    title="NoteZero",
    lifespan=lifespan,
)
app.include_router(router)


@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(CycleDetected)
@app.exception_handler(InvalidTransition)
async def conflict_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(PersistenceFailure)
async def persistence_failure_handler(request: Request, exc: PersistenceFailure) -> JSONResponse:
    """Local state is kept; the client may retry the flush or reload."""
    return JSONResponse(
        status_code=502,
        content={"detail": str(exc), "operation": exc.operation, "entityId": exc.entity_id},
    )


@app.get("/health")
async def health():
    """Liveness check for deployments and local development."""
    return {
        "status": "ok",
        "service": "notezero",
        "version": __version__,
    }


def main() -> None:
    """Serve the app with uvicorn on the configured port."""
    import uvicorn

    uvicorn.run("notezero.app:app", host="0.0.0.0", port=get_settings().port)

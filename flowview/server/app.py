"""FastAPI application serving pattern views to renderers."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from flowview import __version__
from flowview.config import configure_logging, get_settings
from flowview.server import state
from flowview.server.routes import router

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Connect to the event channel on startup when enabled."""
    session = None
    if settings.connect_on_startup:
        session = state.get_session()
        session.start()
    yield
    if session is not None:
        await session.stop()


app = FastAPI(
    title="Flowview API",
    description="Execution state and topology layout for multi-agent pattern runs",
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router, prefix="/api")


@app.get("/")
def root():
    """Health check endpoint."""
    return {
        "status": "ok",
        "version": __version__,
        "connected": state.is_connected(),
        "event_count": len(state.event_log),
        "endpoints": {
            "events": "/api/events",
            "views": "/api/views/{pattern_id}",
        },
    }


if __name__ == "__main__":
    import uvicorn

    configure_logging(settings.log_level)
    uvicorn.run(app, host="0.0.0.0", port=8000)

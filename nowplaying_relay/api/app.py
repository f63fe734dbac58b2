"""FastAPI app, CORS, and route registration."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from nowplaying_relay.config import LOG_LEVEL

# Configure logging in the worker process (uvicorn does not touch app loggers)
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(levelname)s: %(name)s: %(message)s",
)

from nowplaying_relay.api.state import AppState, get_state

# Import routes after state to avoid circular imports
from nowplaying_relay.api.routes import auth, now_playing

__all__ = ["app", "AppState", "get_state"]

_state = get_state()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.getLogger(__name__).info("Now playing relay started")
    yield
    await _state.close()
    logging.getLogger(__name__).info("Now playing relay stopped")


app = FastAPI(
    title="Now Playing Relay",
    description="Spotify OAuth and stabilized currently-playing relay for overlays",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router, tags=["auth"])
app.include_router(now_playing.router, tags=["now-playing"])


@app.get("/", response_class=PlainTextResponse)
def root():
    """Liveness check."""
    return "NowPlayingOverlay backend running"

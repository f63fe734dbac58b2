"""Configuration: env, Spotify credentials, guard thresholds."""
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Base paths (project root = parent of nowplaying_relay package)
BASE_DIR = Path(__file__).resolve().parent.parent

# Load .env from project root so SPOTIFY_CLIENT_ID etc. are set
load_dotenv(BASE_DIR / ".env")

# API
API_HOST = os.getenv("HOST", "0.0.0.0")
API_PORT = int(os.getenv("PORT", "8888"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Spotify (OAuth; tokens are handed to the overlay, nothing stored here)
SPOTIFY_CLIENT_ID = os.getenv("SPOTIFY_CLIENT_ID", "")
SPOTIFY_CLIENT_SECRET = os.getenv("SPOTIFY_CLIENT_SECRET", "")
SPOTIFY_REDIRECT_URI = os.getenv(
    "SPOTIFY_REDIRECT_URI", os.getenv("REDIRECT_URI", "http://localhost:8888/callback")
)
SPOTIFY_SCOPES = "user-read-playback-state user-read-currently-playing"
SPOTIFY_CURRENTLY_PLAYING_URL = "https://api.spotify.com/v1/me/player/currently-playing"
# After OAuth callback, redirect here (the overlay web app)
FRONTEND_URI = os.getenv("FRONTEND_URI", "http://localhost:3000")

UPSTREAM_TIMEOUT_SEC = float(os.getenv("UPSTREAM_TIMEOUT_SEC", "8"))


@dataclass(frozen=True)
class GuardSettings:
    """Thresholds for the now-playing stabilization guard."""
    stale_tolerance_ms: int = 1000
    near_end_ratio: float = 0.92
    young_progress_ms: int = 1200


GUARD_SETTINGS = GuardSettings(
    stale_tolerance_ms=int(os.getenv("STALE_TOLERANCE_MS", "1000")),
    near_end_ratio=float(os.getenv("NEAR_END_RATIO", "0.92")),
    young_progress_ms=int(os.getenv("YOUNG_PROGRESS_MS", "1200")),
)

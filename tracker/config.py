"""
Runtime configuration and logging setup.

Values come from environment variables, with a .env file in the working
directory loaded first:

    TRACKER_BACKEND_URL      base URL of the course-tracking REST API
    TRACKER_USER_ID          placeholder identity until a real login exists
    TRACKER_REQUEST_TIMEOUT  seconds per HTTP request
    TRACKER_REDIRECT_DELAY   seconds between a successful submit and the
                             redirect back to the list
    TRACKER_LOG_DIR          where tracker.log is written

Logs go to stdout and logs/tracker.log (rotating, 5 MB max, 3 backups).
"""

import logging
import logging.handlers
import os
import sys
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

PROJECT_ROOT = Path(__file__).parent.parent

DEFAULT_BACKEND_URL = "http://localhost:5000"
# Demo account id. Swap for a real auth collaborator in production.
DEFAULT_USER_ID = "681f5e03a1e2df137b1f3330"
DEFAULT_TIMEOUT = 15.0
DEFAULT_REDIRECT_DELAY = 2.0
DEFAULT_LOG_DIR = PROJECT_ROOT / "logs"

LOG_FORMAT = "%(asctime)s  %(levelname)s  %(message)s"
LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUPS = 3


@dataclass(frozen=True)
class Settings:
    backend_url: str
    user_id: str
    request_timeout: float
    redirect_delay: float
    log_dir: Path


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {raw!r}")
    return value


def load_settings() -> Settings:
    """Read settings from the environment. Raises ValueError on bad numbers."""
    backend_url = os.getenv("TRACKER_BACKEND_URL", DEFAULT_BACKEND_URL).strip()
    return Settings(
        backend_url=backend_url.rstrip("/") or DEFAULT_BACKEND_URL,
        user_id=os.getenv("TRACKER_USER_ID", DEFAULT_USER_ID).strip(),
        request_timeout=_float_env("TRACKER_REQUEST_TIMEOUT", DEFAULT_TIMEOUT),
        redirect_delay=_float_env("TRACKER_REDIRECT_DELAY", DEFAULT_REDIRECT_DELAY),
        log_dir=Path(os.getenv("TRACKER_LOG_DIR") or DEFAULT_LOG_DIR),
    )


_LOGGING_READY = False


def setup_logging(log_dir: Path = DEFAULT_LOG_DIR, level: int = logging.INFO) -> None:
    """Attach stdout + rotating file handlers to the root logger once.

    Streamlit re-executes the app script on every interaction, so repeat
    calls are ignored.
    """
    global _LOGGING_READY
    if _LOGGING_READY:
        return

    log_dir.mkdir(parents=True, exist_ok=True)
    fmt = logging.Formatter(LOG_FORMAT)

    stream = logging.StreamHandler(sys.stdout)
    stream.setFormatter(fmt)

    rotating = logging.handlers.RotatingFileHandler(
        log_dir / "tracker.log", maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8"
    )
    rotating.setFormatter(fmt)

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(stream)
    root.addHandler(rotating)
    _LOGGING_READY = True

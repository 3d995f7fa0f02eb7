from __future__ import annotations
import os


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return tuple(part.strip() for part in raw.split(",") if part.strip())


DATA_DIR: str = "data"

SUPPORTED_LANGS: tuple[str, ...] = ("en", "ru", "uz")
DEFAULT_LANG: str = "en"

FREE_RESPONSE_TYPES: tuple[str, ...] = ("writing", "speaking")
TRUE_FALSE_CHOICES: tuple[str, ...] = ("True", "False")

BAND_MAX: float = 9.0

TICK_SECONDS: float = 1.0
COUNTDOWN_ENABLED: bool = True

DASHBOARD_ROUTE: str = "/dashboard"
AUTH_ROUTE: str = "/login"

RECENT_RESULTS: int = 5
SEED_ON_START: bool = False
LOG_LEVEL: str = "INFO"

ALLOWED_ORIGINS: tuple[str, ...] = (
    "http://localhost:3000",
    "http://localhost:5173",
)
# // env overrides for deployments; defaults suit local dev.
DATA_DIR = os.getenv("DATA_DIR", DATA_DIR)
TICK_SECONDS = _env_float("TICK_SECONDS", TICK_SECONDS)
COUNTDOWN_ENABLED = _env_bool("COUNTDOWN_ENABLED", COUNTDOWN_ENABLED)
RECENT_RESULTS = _env_int("RECENT_RESULTS", RECENT_RESULTS)
SEED_ON_START = _env_bool("SEED_ON_START", SEED_ON_START)
LOG_LEVEL = os.getenv("LOG_LEVEL", LOG_LEVEL).upper()
ALLOWED_ORIGINS = _env_list("ALLOWED_ORIGINS", ALLOWED_ORIGINS)

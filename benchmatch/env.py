import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_API_URL = "http://localhost:8080"
DEFAULT_TIMEOUT = 15.0
DEFAULT_MAX_RETRIES = 3


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration, resolved once at startup and passed down."""

    api_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT
    max_retries: int = DEFAULT_MAX_RETRIES
    log_level: str = "INFO"
    log_dir: Path = Path("logs")

    def with_overrides(self, **overrides) -> "Settings":
        """Return a copy with every non-None override applied."""
        values = {k: v for k, v in overrides.items() if v is not None}
        if "api_url" in values:
            values["api_url"] = values["api_url"].rstrip("/")
        return replace(self, **values)


def load_env(env_path: Optional[Path] = None) -> None:
    """Load .env from the working directory if present.

    Existing environment variables are never overridden.
    """
    env_path = env_path or Path.cwd() / ".env"
    if not env_path.exists():
        return
    load_dotenv(dotenv_path=env_path, override=False)


def _float_env(key: str, default: float) -> float:
    raw = os.getenv(key, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise SystemExit(f"{key} must be a number, got {raw!r}")


def _int_env(key: str, default: int) -> int:
    raw = os.getenv(key, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise SystemExit(f"{key} must be an integer, got {raw!r}")


def settings_from_env() -> Settings:
    """Build Settings from BENCHMATCH_* environment variables."""
    api_url = os.getenv("BENCHMATCH_API_URL", "").strip() or DEFAULT_API_URL
    return Settings(
        api_url=api_url.rstrip("/"),
        timeout=_float_env("BENCHMATCH_TIMEOUT", DEFAULT_TIMEOUT),
        max_retries=_int_env("BENCHMATCH_MAX_RETRIES", DEFAULT_MAX_RETRIES),
        log_level=os.getenv("BENCHMATCH_LOG_LEVEL", "").strip().upper() or "INFO",
        log_dir=Path(os.getenv("BENCHMATCH_LOG_DIR", "").strip() or "logs"),
    )

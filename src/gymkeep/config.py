"""Runtime configuration for gymkeep."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

# Default data directory
DATA_DIR = Path(__file__).parent.parent.parent / "data"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass
class Settings:
    """Settings resolved from the environment.

    Every field can be overridden with a ``GYMKEEP_*`` variable, e.g.
    ``GYMKEEP_DATA_DIR=/var/lib/gymkeep``.
    """

    data_dir: Path = DATA_DIR
    log_level: str = "INFO"
    session_ttl_hours: int = 24
    default_page_size: int = 20
    max_page_size: int = 100

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from ``GYMKEEP_*`` environment variables."""
        env = os.environ
        return cls(
            data_dir=Path(env.get("GYMKEEP_DATA_DIR", str(DATA_DIR))),
            log_level=env.get("GYMKEEP_LOG_LEVEL", "INFO").upper(),
            session_ttl_hours=int(env.get("GYMKEEP_SESSION_TTL_HOURS", "24")),
            default_page_size=int(env.get("GYMKEEP_DEFAULT_PAGE_SIZE", "20")),
            max_page_size=int(env.get("GYMKEEP_MAX_PAGE_SIZE", "100")),
        )


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def reset_settings() -> None:
    """Forget cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None


def configure_logging(level: str | None = None) -> None:
    """Install a single stream handler on the root logger."""
    level = level or get_settings().log_level
    root = logging.getLogger()
    if not any(getattr(h, "_gymkeep", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._gymkeep = True
        root.addHandler(handler)
    root.setLevel(level)

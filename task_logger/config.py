from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DATA_DIR_NAME = ".task-logger"
TASK_FILE_NAME = "tasks.json"


def _resolve_project_root() -> Path:
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    return Path(__file__).resolve().parents[1]


PROJECT_ROOT = _resolve_project_root()


def load_env() -> None:
    env_name = os.getenv("APP_ENV", "development")
    candidates = [Path.cwd(), PROJECT_ROOT]
    for base in candidates:
        env_path = base / ".env"
        if env_path.exists():
            load_dotenv(env_path)
            break

    for base in candidates:
        env_specific = base / f".env.{env_name}"
        if env_specific.exists():
            load_dotenv(env_specific, override=True)
            break


def resolve_data_dir(override: str | os.PathLike[str] | None = None) -> Path:
    """Pick the storage directory: explicit override, env override, then home."""
    if override is not None:
        return Path(override)

    env_override = os.getenv("TASK_LOGGER_DATA_DIR", "").strip()
    if env_override:
        return Path(env_override).expanduser()

    home = os.getenv("HOME") or os.getenv("USERPROFILE") or "."
    return Path(home) / DATA_DIR_NAME


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    log_dir: Path
    log_level: str = "INFO"


def load_settings() -> Settings:
    data_dir = resolve_data_dir()
    log_dir = os.getenv("LOG_DIR", "").strip()
    return Settings(
        data_dir=data_dir,
        log_dir=Path(log_dir).expanduser() if log_dir else data_dir / "logs",
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )


load_env()

SETTINGS = load_settings()

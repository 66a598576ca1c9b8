"""Runtime settings, read from the environment.

A ``.env`` file in the working directory (or any parent) is loaded first, so
local overrides never need to be exported by hand.  Real environment
variables win over the file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

# Resolve the default data directory relative to the project root.
# When installed in editable mode the project root is the repo root.
PROJECT_ROOT = Path(__file__).resolve().parents[3]

ENVIRONMENTS = ("development", "production", "test")

_DEFAULT_LOG_LEVELS = {
    "production": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    environment: str
    log_level: str

    @property
    def store_path(self) -> Path:
        return self.data_dir / "heavyims.json"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


def get_env(name: str, default: str | None = None) -> str | None:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def load_settings(dotenv: bool = True) -> Settings:
    if dotenv:
        load_dotenv(find_dotenv(usecwd=True), override=False)

    environment = (get_env("HEAVYIMS_ENV", "development") or "development").lower()
    if environment not in ENVIRONMENTS:
        raise ValueError(
            f"HEAVYIMS_ENV must be one of {', '.join(ENVIRONMENTS)}, got {environment!r}"
        )

    data_dir = Path(get_env("HEAVYIMS_DATA_DIR", str(PROJECT_ROOT / "data"))).expanduser()
    log_level = (get_env("HEAVYIMS_LOG_LEVEL") or _DEFAULT_LOG_LEVELS[environment]).upper()

    return Settings(data_dir=data_dir, environment=environment, log_level=log_level)

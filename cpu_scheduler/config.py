"""
Runtime configuration using pydantic-settings.

Every field can be overridden with a CPU_SCHEDULER_-prefixed environment
variable (e.g. CPU_SCHEDULER_DEFAULT_QUANTUM=4) or a .env file in the working
directory. Command-line flags take precedence over both.
"""

from pathlib import Path
from typing import Union

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── Simulation defaults ─────────────────────────────────────
    DEFAULT_ALGORITHM: str = "fcfs"
    DEFAULT_QUANTUM: Union[int, float] = 2  # time units per Round Robin turn
    STEP_DELAY: float = 0.3        # seconds between frames of --step

    # ── History ─────────────────────────────────────────────────
    HISTORY_FILE: Path = Path.home() / ".cpu_scheduler" / "history.json"
    HISTORY_LIMIT: int = 10        # most recent runs kept per session
    SESSION_ID: str = "local"

    # ── App ─────────────────────────────────────────────────────
    LOG_LEVEL: str = "WARNING"

    model_config = {
        "env_prefix": "CPU_SCHEDULER_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


settings = Settings()

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

DEFAULT_DATA_DIR = "~/.stellar-habits"
DEFAULT_WEEK_STARTS_ON = 1
DEFAULT_LOG_LEVEL = "WARNING"


@dataclass
class Settings:
    """Process-wide settings, fixed at startup."""

    data_dir: Path
    week_starts_on: int = DEFAULT_WEEK_STARTS_ON
    log_level: str = DEFAULT_LOG_LEVEL
    log_file: Optional[Path] = None


def _week_starts_on(value: Optional[str]) -> int:
    # Only an explicit "sunday" switches away from Monday.
    if (value or "").strip().lower() == "sunday":
        return 0
    return 1


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if environ is None else environ
    log_file = env.get("STELLAR_HABITS_LOG_FILE")
    return Settings(
        data_dir=Path(os.path.expanduser(env.get("STELLAR_HABITS_DIR") or DEFAULT_DATA_DIR)),
        week_starts_on=_week_starts_on(env.get("STELLAR_HABITS_WEEK_STARTS_ON")),
        log_level=(env.get("STELLAR_HABITS_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
        log_file=Path(os.path.expanduser(log_file)) if log_file else None,
    )

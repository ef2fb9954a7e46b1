import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(
    level: str = "WARNING",
    log_file: Optional[Path] = None,
    max_bytes: int = 1_000_000,
    backup_count: int = 3,
) -> logging.Logger:
    logger = logging.getLogger("stellar_habits")
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
    formatter = logging.Formatter(LOG_FORMAT)
    if not logger.handlers:
        stream = logging.StreamHandler()
        stream.setFormatter(formatter)
        logger.addHandler(stream)
        if log_file is not None:
            Path(log_file).parent.mkdir(exist_ok=True, parents=True)
            handler = RotatingFileHandler(
                log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
            )
            handler.setFormatter(formatter)
            logger.addHandler(handler)
    return logger

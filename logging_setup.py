import sys
from pathlib import Path

from loguru import logger

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level:<8} | {name}:{function}:{line} - {message}"


def setup_logging(logs_dir: Path, level: str = "INFO") -> Path:
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_path = logs_dir / "micscribe.log"

    # Remove default handler to avoid duplicate logs if called twice
    logger.remove()
    logger.add(
        log_path,
        rotation="10 MB",
        retention=10,
        backtrace=True,
        diagnose=False,
        level=level,
        enqueue=True,
        format=LOG_FORMAT,
    )
    logger.add(sys.stderr, level=level, format=LOG_FORMAT)
    return log_path

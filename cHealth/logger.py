import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from cHealth.config import ConfigError

LOG_FORMAT = "%(message)s"
FILE_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def resolve_log_level(level_name: str) -> int:
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        raise ConfigError(f"Unknown log level: {level_name}")
    return level


def configure_logging(level_name: str = "WARNING", log_file: Optional[str] = None) -> None:
    """
    Sends log records to stderr through rich, keeping stdout for the report. An additional plain file handler is
    installed when `log_file` is given.
    """
    level = resolve_log_level(level_name)

    handlers = [RichHandler(console=Console(stderr=True), show_path=False, markup=False)]
    handlers[0].setFormatter(logging.Formatter(LOG_FORMAT))
    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Cannot open log file {log_file} ({e})") from e
        file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
        handlers.append(file_handler)

    logging.basicConfig(level=level, handlers=handlers, force=True)

    # docker-py logs every HTTP request at DEBUG
    logging.getLogger("urllib3").setLevel(max(level, logging.INFO))
    logging.getLogger("docker").setLevel(max(level, logging.INFO))

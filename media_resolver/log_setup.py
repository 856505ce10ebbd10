import logging
import sys
from pathlib import Path
from datetime import datetime, timezone
from typing import Optional, Union

LOGGER_NAME = "media_resolver"
LEVEL_NAMES = ('DEBUG', 'INFO', 'WARNING', 'ERROR')

COMPACT_FORMAT = '%(levelname)-8s: %(message)s'
VERBOSE_FORMAT = '%(asctime)s %(levelname)-8s [%(name)s:%(lineno)d] %(message)s'


def level_from_name(name: Optional[str], fallback: int = logging.INFO) -> int:
    """Maps 'debug', 'INFO', ... to a logging level; unknown names give `fallback`."""
    if not name or str(name).upper() not in LEVEL_NAMES:
        return fallback
    return logging.getLevelName(str(name).upper())


def _file_handler(log_file_path: Path) -> logging.FileHandler:
    log_file_path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file_path, mode='a', encoding='utf-8')
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(VERBOSE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S%z'))
    return handler


def setup_logging(log_level_console: int = logging.INFO, log_file: Optional[Union[str, Path]] = None) -> logging.Logger:
    """
    Configures the package logger. Module loggers propagate to it, so one call
    covers the whole package. Calling it again replaces the previous handlers.
    """
    pkg_log = logging.getLogger(LOGGER_NAME)
    pkg_log.setLevel(logging.DEBUG)
    for old in pkg_log.handlers[:]:
        pkg_log.removeHandler(old)
        old.close()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(log_level_console)
    console.setFormatter(logging.Formatter(VERBOSE_FORMAT if log_level_console <= logging.DEBUG else COMPACT_FORMAT, datefmt='%H:%M:%S'))
    pkg_log.addHandler(console)

    if not log_file:
        return pkg_log

    try:
        pkg_log.addHandler(_file_handler(Path(log_file).resolve()))
    except OSError as e:
        pkg_log.error(f"Failed to configure file logging to '{log_file}': {e}")
        return pkg_log

    pkg_log.info(f"--- Log session started: {datetime.now(timezone.utc).isoformat()} ---")
    pkg_log.info(f"Command: {' '.join(sys.argv)}")
    return pkg_log

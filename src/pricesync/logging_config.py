"""
Centralized logging configuration.

``setup_logging`` configures the root logger once per process with:
- Console output on stdout
- Optional file output to logs/{service_name}.log
- A fresh log file on each start unless LOG_APPEND=1
"""

import logging
import logging.handlers
import sys
import threading
from pathlib import Path
from typing import Optional, Union

from .config import env_bool, env_str

# Thread-safe lock for logging configuration
_config_lock = threading.Lock()
_MODULE_LOGGER = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s%(msecs)03d - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_NOISY_LOGGERS = ("urllib3", "asyncio", "aiohttp", "redis", "redis.connection", "redis.asyncio")


def _formatter() -> logging.Formatter:
    return logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT)


def _already_configured(root_logger: logging.Logger, service_name: Optional[str]) -> bool:
    if not root_logger.handlers:
        return False
    has_console = any(
        isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler)
        for handler in root_logger.handlers
    )
    if not service_name:
        return has_console
    has_file = any(isinstance(handler, logging.FileHandler) for handler in root_logger.handlers)
    return has_console and has_file


def _reset_handlers(root_logger: logging.Logger) -> None:
    for handler in list(root_logger.handlers):
        try:
            handler.close()
        except OSError as exc:
            _MODULE_LOGGER.debug("Handler close failed: %s", exc)
        root_logger.removeHandler(handler)


def _build_console_handler(level: int) -> logging.Handler:
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(_formatter())
    console_handler.setLevel(level)
    return console_handler


def _resolve_log_directory(log_directory: Optional[Union[str, Path]]) -> Path:
    if log_directory is not None:
        return Path(log_directory).expanduser()
    configured = env_str("PRICESYNC_LOG_DIR")
    if configured:
        return Path(configured).expanduser()
    return Path.cwd() / "logs"


def _build_file_handler(service_name: str, logs_dir: Path) -> logging.Handler:
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_path = logs_dir / f"{service_name}.log"
    file_mode = "a" if env_bool("LOG_APPEND", or_value=False) else "w"

    file_handler = logging.handlers.WatchedFileHandler(log_path, mode=file_mode)
    file_handler.setFormatter(_formatter())
    file_handler.setLevel(logging.INFO)
    return file_handler


def _suppress_noisy_third_parties() -> None:
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def _apply_level(root_logger: logging.Logger, level: int) -> None:
    for handler in root_logger.handlers:
        if isinstance(handler, logging.StreamHandler) and getattr(handler, "stream", None) is sys.stdout:
            handler.setLevel(level)
    root_logger.setLevel(min(level, logging.INFO))


def setup_logging(
    service_name: Optional[str] = None,
    *,
    level: Optional[int] = None,
    log_directory: Optional[Union[str, Path]] = None,
) -> None:
    """
    Configure logging for the application.

    Handlers are installed once; an explicit ``level`` is still applied when
    the root logger already carries them.
    """

    with _config_lock:
        root_logger = logging.getLogger()
        if _already_configured(root_logger, service_name):
            if level is not None:
                _apply_level(root_logger, level)
            return

        _reset_handlers(root_logger)

        console_level = logging.INFO if level is None else level
        root_logger.addHandler(_build_console_handler(console_level))

        if service_name:
            root_logger.addHandler(_build_file_handler(service_name, _resolve_log_directory(log_directory)))

        _apply_level(root_logger, console_level)
        _suppress_noisy_third_parties()


__all__ = ["LOG_DATE_FORMAT", "LOG_FORMAT", "setup_logging"]

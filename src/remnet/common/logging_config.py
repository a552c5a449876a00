"""
Logging setup for remnet.

Every module logs through ``get_logger(__name__)``, so all records flow into
the ``remnet`` logger. :func:`setup_logging` attaches console and rotating
file handlers to it, optionally with JSON output, and each setting can also
come from a ``REMNET_LOG_*`` environment variable. Long-running steps
(control sampling, Newton-Raphson) are timed with :class:`LoggingTimer`,
which reports to ``remnet.performance``.
"""

import json
import logging
import logging.handlers
import os
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional


ROOT_LOGGER_NAME = "remnet"
PERFORMANCE_LOGGER_NAME = f"{ROOT_LOGGER_NAME}.performance"

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s.%(funcName)s:%(lineno)d | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_LOG_FILENAME = "remnet.log"
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024
DEFAULT_BACKUP_COUNT = 5

ENV_LOG_LEVEL = "REMNET_LOG_LEVEL"
ENV_LOG_FILE = "REMNET_LOG_FILE"
ENV_LOG_DIR = "REMNET_LOG_DIR"
ENV_LOG_FORMAT = "REMNET_LOG_FORMAT"
ENV_LOG_CONSOLE = "REMNET_LOG_CONSOLE"
ENV_LOG_JSON = "REMNET_LOG_JSON"

_TRUE_VALUES = ("true", "yes", "1", "on")
_FALSE_VALUES = ("false", "no", "0", "off")

# Attributes every LogRecord has; anything else was passed through ``extra``
_STANDARD_RECORD_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message", "asctime", "taskName"
}


class JSONFormatter(logging.Formatter):
    """
    Format records as one JSON object per line.

    Fields passed with ``extra=`` (such as the duration and stratum counts
    reported by :class:`LoggingTimer`) are included as top-level keys.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        payload.update({key: value for key, value in vars(record).items()
                        if key not in _STANDARD_RECORD_ATTRS})
        return json.dumps(payload, default=str)


def get_logger(name: str) -> logging.Logger:
    """
    Logger for a remnet module.

    Examples
    --------
    >>> logger = get_logger(__name__)
    >>> logger.info(f"Replaying {1200} events")
    """
    return logging.getLogger(name)


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name, "").lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    return default


def _resolve_logging_config(**overrides: Any) -> Dict[str, Any]:
    """
    Merge explicit settings, environment variables and defaults, in that order.
    """
    def pick(key: str, env_var: Optional[str], default: Any) -> Any:
        explicit = overrides.get(key)
        if explicit:
            return explicit
        return os.getenv(env_var, default) if env_var else default

    log_file = pick("log_file", ENV_LOG_FILE, None)
    log_dir = pick("log_dir", ENV_LOG_DIR, None)
    if not log_file and log_dir:
        log_file = os.path.join(log_dir, DEFAULT_LOG_FILENAME)

    console = overrides.get("console")
    json_format = overrides.get("json_format")

    return {
        "level": pick("level", ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL),
        "log_file": log_file,
        "console": _env_flag(ENV_LOG_CONSOLE, True) if console is None else console,
        "json_format": _env_flag(ENV_LOG_JSON, False) if json_format is None else json_format,
        "format_string": pick("format_string", ENV_LOG_FORMAT, DEFAULT_LOG_FORMAT),
        "date_format": pick("date_format", None, DEFAULT_DATE_FORMAT),
        "max_file_size": pick("max_file_size", None, DEFAULT_MAX_FILE_SIZE),
        "backup_count": pick("backup_count", None, DEFAULT_BACKUP_COUNT),
    }


def _build_handlers(config: Dict[str, Any]) -> List[logging.Handler]:
    if config["json_format"]:
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(fmt=config["format_string"], datefmt=config["date_format"])

    handlers: List[logging.Handler] = []
    if config["console"]:
        handlers.append(logging.StreamHandler(sys.stdout))
    if config["log_file"]:
        log_path = Path(config["log_file"])
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.handlers.RotatingFileHandler(
            filename=log_path,
            maxBytes=config["max_file_size"],
            backupCount=config["backup_count"],
            encoding="utf-8"
        ))

    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    log_dir: Optional[str] = None,
    console: Optional[bool] = None,
    json_format: Optional[bool] = None,
    format_string: Optional[str] = None,
    date_format: Optional[str] = None,
    max_file_size: Optional[int] = None,
    backup_count: Optional[int] = None,
    force_setup: bool = False
) -> logging.Logger:
    """
    Configure the ``remnet`` logger.

    Each argument left as None falls back to its environment variable
    (``REMNET_LOG_LEVEL``, ``REMNET_LOG_FILE``, ``REMNET_LOG_DIR``,
    ``REMNET_LOG_CONSOLE``, ``REMNET_LOG_JSON``, ``REMNET_LOG_FORMAT``) and
    then to the default: INFO, console output only, plain text.

    Parameters
    ----------
    level : str, optional
        Level name, e.g. "DEBUG" to see every Newton-Raphson iteration
    log_file : str, optional
        File for a rotating file handler
    log_dir : str, optional
        Directory in which ``remnet.log`` is written when log_file is not given
    console : bool, optional
        Log to standard output
    json_format : bool, optional
        Emit one JSON object per record
    format_string, date_format : str, optional
        Text format settings, ignored for JSON output
    max_file_size : int, optional
        Rotation size of the log file in bytes (10 MB by default)
    backup_count : int, optional
        Number of rotated files kept (5 by default)
    force_setup : bool, default False
        Replace existing handlers. Without it, an already configured logger
        is returned unchanged

    Returns
    -------
    logging.Logger
        The ``remnet`` logger

    Raises
    ------
    ValueError
        If the level name is unknown

    Examples
    --------
    >>> logger = setup_logging(level="DEBUG", console=True)
    >>> logger = setup_logging(log_dir="/var/log/remnet", json_format=True, force_setup=True)
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    if logger.handlers and not force_setup:
        return logger

    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

    config = _resolve_logging_config(
        level=level,
        log_file=log_file,
        log_dir=log_dir,
        console=console,
        json_format=json_format,
        format_string=format_string,
        date_format=date_format,
        max_file_size=max_file_size,
        backup_count=backup_count
    )

    numeric_level = logging.getLevelName(str(config["level"]).upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid logging level: {config['level']}")
    logger.setLevel(numeric_level)

    for handler in _build_handlers(config):
        logger.addHandler(handler)
    # Records stop at the package logger so they are not printed twice
    logger.propagate = False

    logger.info(f"Logging configured: level={config['level']}, console={config['console']}, "
                f"file={config['log_file']}, json={config['json_format']}")
    return logger


def log_performance_metric(
    operation: str,
    duration: float,
    details: Optional[Dict[str, Any]] = None
) -> None:
    """
    Report how long an operation took on ``remnet.performance``.

    ``details`` are appended to the message and attached to the record as
    extra fields.

    Examples
    --------
    >>> log_performance_metric("case_control_sampling", 2.5, {"strata": 1000})
    """
    details = details or {}
    message = f"Performance: {operation} completed in {duration:.3f}s"
    if details:
        message += " (" + ", ".join(f"{k}={v}" for k, v in details.items()) + ")"

    get_logger(PERFORMANCE_LOGGER_NAME).info(
        message, extra={"operation": operation, "duration": duration, **details}
    )


class LoggingTimer:
    """
    Time a block and report it with :func:`log_performance_metric`.

    The duration is reported even if the block raises.

    Examples
    --------
    >>> with LoggingTimer("stratified_clogit_fit", {"parameters": 4}) as timer:
    ...     pass
    >>> timer.duration >= 0
    True
    """

    def __init__(self, operation: str, details: Optional[Dict[str, Any]] = None) -> None:
        self.operation = operation
        self.details = details or {}
        self.start_time: Optional[float] = None
        self.duration: Optional[float] = None

    def __enter__(self) -> "LoggingTimer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.start_time is None:
            return
        self.duration = time.perf_counter() - self.start_time
        log_performance_metric(self.operation, self.duration, self.details)

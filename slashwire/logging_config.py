"""Logging configuration for slashwire.

Provides subsystem-level log file routing, secret sanitization,
and structlog + stdlib integration.

Subsystem hierarchy (stdlib dotted names, structlog wraps them):
    root                   → ConsoleHandler (terminal)
      └─ slashwire         → RotatingFileHandler → slashwire.log (combined)
           ├─ slashwire.registry → RFH → registry.log
           ├─ slashwire.dispatch → RFH → dispatch.log
           ├─ slashwire.sync     → RFH → sync.log
           └─ slashwire.client   → RFH → client.log
"""

import logging
import logging.handlers
import re
import sys
from pathlib import Path
from typing import Any, Dict

import structlog

# Subsystem names, each with its own RotatingFileHandler
SUBSYSTEMS = ("registry", "dispatch", "sync", "client")

# stdlib logger name prefix for hierarchy-based propagation
LOGGER_PREFIX = "slashwire"

# ---------------------------------------------------------------------------
# Secret sanitization
# ---------------------------------------------------------------------------

_SECRET_PATTERNS = [
    # Authorization header values
    re.compile(r"(?<=Bot )[A-Za-z0-9_.-]{20,}"),
    re.compile(r"(?<=Bearer )[A-Za-z0-9_./-]{20,}"),
    # Bot tokens: base64 user id . timestamp . hmac
    re.compile(r"[MNO][A-Za-z\d_-]{23,27}\.[A-Za-z\d_-]{6}\.[A-Za-z\d_-]{27,40}"),
    # Interaction tokens ("interaction:" base64-encoded prefix)
    re.compile(r"aW50ZXJhY3Rpb246[A-Za-z0-9_.-]+"),
]

# Webhook / interaction callback paths carry the token as a path segment
_TOKEN_PATH = re.compile(r"(/(?:webhooks|interactions)/\d+/)[^/\s]+")

_REDACTED = "***REDACTED***"


def _scrub_value(value: str) -> str:
    """Scrub tokens from a single string value."""
    for pattern in _SECRET_PATTERNS:
        value = pattern.sub(_REDACTED, value)
    return _TOKEN_PATH.sub(lambda m: m.group(1) + _REDACTED, value)


def sanitize_secrets(
    logger: Any, method_name: str, event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """structlog processor that scrubs bot and interaction tokens.

    Walks all string values in the event dict (one level into lists,
    tuples and dicts) and replaces matches with a redacted placeholder.
    """
    for key, value in event_dict.items():
        if isinstance(value, str):
            event_dict[key] = _scrub_value(value)
        elif isinstance(value, (list, tuple)):
            event_dict[key] = type(value)(
                _scrub_value(v) if isinstance(v, str) else v
                for v in value
            )
        elif isinstance(value, dict):
            event_dict[key] = {
                k: _scrub_value(v) if isinstance(v, str) else v
                for k, v in value.items()
            }
    return event_dict


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

_DEFAULT_MAX_FILE_SIZE_MB = 10
_DEFAULT_BACKUP_COUNT = 5


def _level(name: str, default: int = logging.INFO) -> int:
    return getattr(logging, name.upper(), default) if name else default


def _file_handler(path: Path, level: int, max_bytes: int, backup_count: int,
                  formatter: logging.Formatter) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def _reset(logger: logging.Logger, level: int) -> logging.Logger:
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
    logger.setLevel(level)
    logger.propagate = True
    return logger


def setup_logging(config=None) -> None:
    """Route slashwire's structlog events to the console and log files.

    ``slashwire-sync`` calls this twice. The first call runs before the
    config directory is read, so validation warnings still reach the
    console and ``./logs``. The second call applies the configured
    directory, levels and rotation, and lets structlog cache loggers.
    Applications embedding the library may call it once with their
    Config, or not at all and configure logging themselves.

    Args:
        config: Config instance, or None for the defaults.
    """
    if config is not None:
        log_dir = config.log_dir
        level = _level(config.logging_level)
        subsystem_levels = config.logging_subsystem_levels
        max_bytes = config.logging_max_file_size_mb * 1024 * 1024
        backup_count = config.logging_backup_count
    else:
        log_dir = Path.cwd() / "logs"
        level = logging.INFO
        subsystem_levels = {}
        max_bytes = _DEFAULT_MAX_FILE_SIZE_MB * 1024 * 1024
        backup_count = _DEFAULT_BACKUP_COUNT

    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        write_files = True
    except OSError as exc:
        print(
            f"WARNING: Cannot create log directory {log_dir}: {exc}. "
            "Falling back to console-only logging.",
            file=sys.stderr,
        )
        write_files = False

    # Events arrive pre-rendered by structlog; files get the plain variant
    file_formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
    )

    # Console sits on root so the embedding application's loggers share it
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(logging.DEBUG)
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
    root.addHandler(console)

    package_logger = _reset(logging.getLogger(LOGGER_PREFIX), logging.DEBUG)
    if write_files:
        package_logger.addHandler(_file_handler(
            log_dir / f"{LOGGER_PREFIX}.log", level, max_bytes, backup_count, file_formatter,
        ))

    for subsystem in SUBSYSTEMS:
        sub_level = _level(subsystem_levels.get(subsystem, ""), level)
        sub_logger = _reset(logging.getLogger(f"{LOGGER_PREFIX}.{subsystem}"), sub_level)
        if write_files:
            sub_logger.addHandler(_file_handler(
                log_dir / f"{subsystem}.log", sub_level, max_bytes, backup_count, file_formatter,
            ))

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            sanitize_secrets,
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=config is not None,
    )

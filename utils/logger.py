"""
Structured logging module using structlog

Features
--------
• Structured logging with automatic context
• Console output, pretty (coloured when supported) or JSON
• Optional file logging with rotation
• Per-library log levels
"""
from __future__ import annotations
import logging
import os
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Any, Dict

import structlog

from utils.load_config import read_config_dict


def _supports_colour() -> bool:
    """True if stdout seems to handle ANSI colour codes."""
    if os.getenv("NO_COLOR"):
        return False
    if sys.platform == "win32" and os.getenv("TERM") != "xterm":
        return False
    return sys.stdout.isatty()


def _read_cfg(path: str | Path | None) -> Dict[str, Any]:
    if not path:
        return {}
    p = Path(path)
    if not p.is_file():
        raise FileNotFoundError(f"Logging config file not found: {p}")
    return read_config_dict(p).get("logging", {})


def _level(name: str | None, default: int) -> int:
    return getattr(logging, str(name or "").upper(), default)


_SHARED_PROCESSORS = [
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.TimeStamper(fmt="ISO"),
    structlog.processors.StackInfoRenderer(),
]

_RENDERERS = {"json", "pretty"}


def init_logger(config_path: str | Path | None = None) -> None:
    """Configure structlog with console and optional file output."""
    cfg = _read_cfg(config_path)
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.setLevel(_level(cfg.get("level"), logging.INFO))

    console_cfg = cfg.get("console", {})
    if console_cfg.get("enabled", True):
        renderer_name = (os.getenv("LOG_CONSOLE_RENDERER") or console_cfg.get("renderer", "pretty")).lower()
        if renderer_name not in _RENDERERS:
            raise ValueError(
                f"Invalid console logging renderer option: '{renderer_name}'. Allowed: {', '.join(sorted(_RENDERERS))}"
            )
        if renderer_name == "json":
            renderer: Any = structlog.processors.JSONRenderer()
        else:
            renderer = structlog.dev.ConsoleRenderer(colors=_supports_colour())

        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                foreign_pre_chain=_SHARED_PROCESSORS,
                processors=[
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    structlog.processors.format_exc_info,
                    renderer,
                ],
            )
        )
        root.addHandler(console)

    # Setup file logging if enabled
    file_cfg = cfg.get("file", {})
    if file_cfg.get("enabled", False):
        path = Path(file_cfg.get("path", "logs/app.log"))
        path.parent.mkdir(parents=True, exist_ok=True)

        if file_cfg.get("file_rotation", True):
            handler: logging.Handler = RotatingFileHandler(
                path,
                maxBytes=file_cfg.get("max_bytes", 10_000_000),
                backupCount=file_cfg.get("backup_count", 5),
            )
        else:
            handler = logging.FileHandler(path)

        handler.setLevel(_level(file_cfg.get("level"), logging.DEBUG))
        handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                foreign_pre_chain=_SHARED_PROCESSORS,
                processors=[
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    structlog.processors.format_exc_info,
                    structlog.processors.JSONRenderer(),
                ],
            )
        )
        root.addHandler(handler)

    for lib_name, level in cfg.get("libraries", {}).items():
        logging.getLogger(lib_name).setLevel(_level(level, logging.WARNING))

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str):
    """Get a structlog logger instance."""
    return structlog.get_logger(name)

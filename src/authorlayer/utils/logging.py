"""Logging helpers for hosts embedding the authorship tracker.

Modules log through ``logging.getLogger(__name__)`` and never configure
handlers themselves. Hosts that want the tracker's diagnostics on disk call
:func:`setup_logging` once; only the ``authorlayer`` logger tree is touched so
the host's own root configuration stays intact.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - import only used for annotations
    from ..services.settings import AuthorshipSettings

__all__ = ["PACKAGE_LOGGER", "configure_from_settings", "get_logger", "get_log_path", "setup_logging"]

PACKAGE_LOGGER = "authorlayer"
_DEFAULT_LOG_DIR = Path.home() / ".authorlayer" / "logs"
_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_CONFIGURED = False
_LOG_PATH: Path | None = None


def setup_logging(
    level: int = logging.INFO,
    *,
    log_dir: Path | str | None = None,
    console: bool = False,
    max_bytes: int = 1_000_000,
    backup_count: int = 3,
    force: bool = False,
) -> Path:
    """Attach a rotating file handler (and optionally a console one) to the package logger."""

    global _CONFIGURED, _LOG_PATH
    if _CONFIGURED and not force and _LOG_PATH is not None:
        return _LOG_PATH

    target_dir = _resolve_log_dir(log_dir)
    target_dir.mkdir(parents=True, exist_ok=True)
    log_path = target_dir / "authorlayer.log"
    formatter = logging.Formatter(fmt=_LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    file_handler = logging.handlers.RotatingFileHandler(
        log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )
    file_handler.setFormatter(formatter)
    package_logger.addHandler(file_handler)
    if console:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        package_logger.addHandler(console_handler)
    package_logger.setLevel(level)

    _CONFIGURED = True
    _LOG_PATH = log_path
    return log_path


def configure_from_settings(settings: AuthorshipSettings, *, log_dir: Path | str | None = None) -> Path:
    return setup_logging(settings.log_level, log_dir=log_dir, force=True)


def get_logger(name: str) -> logging.Logger:
    """Return a module-specific logger."""

    return logging.getLogger(name)


def get_log_path() -> Path | None:
    return _LOG_PATH


def _resolve_log_dir(log_dir: Path | str | None) -> Path:
    env_override = os.environ.get("AUTHORLAYER_LOG_DIR")
    return Path(log_dir or env_override or _DEFAULT_LOG_DIR).expanduser()

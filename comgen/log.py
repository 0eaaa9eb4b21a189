"""Log-file setup for comgen."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional

from .exceptions import ConfigError

LOG_FILE_NAME = "comgen.log"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def state_dir() -> Path:
    """Directory holding the log file (``$COMGEN_HOME`` or ``~/.comgen``)."""
    override = os.environ.get("COMGEN_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".comgen"


def setup_logging(debug: bool = False, directory: Optional[Path] = None) -> logging.Logger:
    """Attach a file handler to the ``comgen`` logger and return it.

    With ``debug`` set, DEBUG records are echoed to stderr as well.
    """
    log_dir = Path(directory) if directory else state_dir()
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_dir / LOG_FILE_NAME, encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Logging error: {exc}") from exc

    logger = logging.getLogger("comgen")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(file_handler)
    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    logger.propagate = False

    if debug:
        stream = logging.StreamHandler(sys.stderr)
        stream.setFormatter(logging.Formatter("DEBUG(%(name)s): %(message)s"))
        stream.setLevel(logging.DEBUG)
        logger.addHandler(stream)
    return logger

"""visualedit - Parsoid dispatch and save protocol for a rich-text wiki editor.

Server side, ``visualedit.parsoid`` routes HTML/wikitext conversions to a
backend and keeps edit sessions on the backend that served them.
Client side, ``visualedit.saver`` prepares edited documents and posts
them to the wiki's edit API.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

__version__ = "0.1.0"


def _setup_logging(log_dir: Path = Path("logs")) -> None:
    """Configure logging to both console and rotating file."""
    log_dir.mkdir(exist_ok=True)
    log_file = log_dir / f"visualedit.{os.getpid()}.log"

    # Root logger config
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # File handler - detailed logging with rotation (10MB, keep 5 backups)
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    file_handler.setFormatter(file_formatter)

    # Console handler - warnings only, the CLI prints its own output
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    logging.getLogger(__name__).debug("Logging configured. Log file: %s", log_file)

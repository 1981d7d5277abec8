"""
Utility functions for the GitLab to Azure DevOps migration tool.
"""

from __future__ import annotations

import logging
from typing import Final

LOG_FILE: Final[str] = "migration.log"
LOG_FORMAT: Final[str] = "%(asctime)s - %(levelname)s - %(message)s"

# Third-party loggers that are chatty at INFO/DEBUG
_NOISY_LOGGERS: Final[tuple[str, ...]] = ("msrest", "urllib3", "azure")


def setup_logging(*, verbosity: int = 0, log_file: str | None = LOG_FILE) -> None:
    """Configure logging for the migration process.

    The console shows INFO and above by default and DEBUG from ``-v`` on. The log
    file always receives DEBUG output.
    """
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG if verbosity > 0 else logging.INFO)
    handlers: list[logging.Handler] = [console_handler]
    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a")
        file_handler.setLevel(logging.DEBUG)
        handlers.append(file_handler)

    logging.basicConfig(level=logging.DEBUG, format=LOG_FORMAT, handlers=handlers)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if verbosity > 1 else logging.WARNING)

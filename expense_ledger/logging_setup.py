"""Stream logging for the CLI and the HTTP app."""

from __future__ import annotations

import logging
import sys
from typing import IO, Union


def configure_logging(level: Union[int, str] = logging.INFO, stream: IO[str] = sys.stderr) -> None:
    logger = logging.getLogger("expense_ledger")
    if isinstance(level, str):
        level = level.strip().upper()
    logger.setLevel(level)
    if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter("%(asctime)s %(name)s %(levelname)s %(message)s"))
        logger.addHandler(handler)

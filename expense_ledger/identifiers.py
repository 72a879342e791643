"""Unique identifier minting for new expense records."""

from __future__ import annotations

import logging
import time
import uuid
from typing import Callable


logger = logging.getLogger(__name__)


class IdGenerator:
    """Mint record ids from a strong random source.

    When the random source is unavailable the generator switches to a
    degraded ``<time_ns>-<counter>`` scheme. The counter keeps ids distinct
    within one generator even when the clock does not advance, but ids are
    no longer unpredictable or globally unique.
    """

    def __init__(
        self,
        strong: Callable[[], uuid.UUID] = uuid.uuid4,
        clock: Callable[[], int] = time.time_ns,
    ) -> None:
        self._strong = strong
        self._clock = clock
        self._counter = 0
        self._degraded = False

    @property
    def degraded(self) -> bool:
        return self._degraded

    def __call__(self) -> str:
        try:
            return str(self._strong())
        except (NotImplementedError, OSError) as exc:
            if not self._degraded:
                logger.warning("Random id source unavailable, using timestamp ids: %s", exc)
                self._degraded = True
        self._counter += 1
        return f"{self._clock()}-{self._counter}"

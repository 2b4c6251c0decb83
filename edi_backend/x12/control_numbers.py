"""Control number generation for the ISA, GS and ST envelopes.

The generators take any object with a ``next(width)`` method so callers
can inject a deterministic source (tests, replayable batches) instead of
the random default.
"""

from __future__ import annotations

import logging
import random
import threading
from dataclasses import dataclass
from typing import Protocol

from .. import config
from .segments import zero_pad

logger = logging.getLogger(__name__)

ISA_CONTROL_WIDTH = 9
GS_CONTROL_WIDTH = 6
ST_CONTROL_WIDTH = 4


class ControlNumberGenerator(Protocol):
    """Source of zero-padded numeric control numbers."""

    def next(self, width: int) -> str:
        """Return a control number of exactly ``width`` digits."""
        ...


class RandomControlNumbers:
    """Draws control numbers from the OS random source.

    Unique within a document with overwhelming probability, but not
    reproducible across runs.
    """

    def __init__(self) -> None:
        self._random = random.SystemRandom()

    def next(self, width: int) -> str:
        return zero_pad(self._random.randint(1, 10**width - 1), width)


class SequentialControlNumbers:
    """Monotonic counter shared across documents.

    Safe to share between threads. When the counter passes the largest
    value a field can hold it wraps back to 1.
    """

    def __init__(self, start: int = 1):
        if start < 1:
            raise ValueError("Control numbers start at 1")
        self._value = start
        self._lock = threading.Lock()

    def next(self, width: int) -> str:
        with self._lock:
            value = self._value
            self._value += 1
        limit = 10**width - 1
        return zero_pad((value - 1) % limit + 1, width)


@dataclass(frozen=True)
class ControlNumbers:
    """Control numbers for one interchange."""

    isa: str
    gs: str
    st: str

    @classmethod
    def allocate(cls, generator: ControlNumberGenerator) -> "ControlNumbers":
        """Draw the three envelope control numbers from ``generator``."""
        return cls(
            isa=generator.next(ISA_CONTROL_WIDTH),
            gs=generator.next(GS_CONTROL_WIDTH),
            st=generator.next(ST_CONTROL_WIDTH),
        )

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary."""
        return {"isa": self.isa, "gs": self.gs, "st": self.st}


_default_generator: ControlNumberGenerator | None = None
_default_lock = threading.Lock()


def default_control_numbers() -> ControlNumberGenerator:
    """Return the process-wide generator selected by EDI_CONTROL_NUMBER_MODE."""
    global _default_generator
    with _default_lock:
        if _default_generator is None:
            mode = config.EDI_CONTROL_NUMBER_MODE.lower()
            if mode == "sequential":
                _default_generator = SequentialControlNumbers(
                    config.EDI_CONTROL_NUMBER_START
                )
            else:
                if mode != "random":
                    logger.warning(
                        f"Unknown EDI_CONTROL_NUMBER_MODE '{mode}', using random"
                    )
                _default_generator = RandomControlNumbers()
        return _default_generator

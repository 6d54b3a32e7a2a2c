"""
Bench Progress

Live status line for long-running bench waits.
"""

import logging
import sys
from typing import Callable, TextIO

logger = logging.getLogger(__name__)


class BenchProgress:
    """
    Sink for the status line rendered on every poll tick.

    The line is logged when it changes. If a terminal stream is given,
    it is also redrawn in place there.

    Usage:
        progress = BenchProgress(stream=sys.stderr)
        progress.set_status("[prep] mem: 1.0G ...")
        progress.finish()
    """

    def __init__(
        self,
        stream: TextIO | None = None,
        on_status: Callable[[str], None] | None = None
    ):
        self.stream = stream
        self.on_status = on_status
        self.last_status: str | None = None
        self.updates = 0

    @classmethod
    def for_terminal(cls) -> "BenchProgress":
        """Redraw on stderr when it's a terminal, otherwise just log."""
        return cls(stream=sys.stderr if sys.stderr.isatty() else None)

    def set_status(self, status: str) -> None:
        self.updates += 1
        if status != self.last_status:
            logger.info(status)
        self.last_status = status

        if self.stream is not None:
            self.stream.write(f"\r\x1b[K{status}")
            self.stream.flush()

        if self.on_status:
            self.on_status(status)

    def finish(self) -> None:
        """End the in-place line."""
        if self.stream is not None and self.last_status is not None:
            self.stream.write("\n")
            self.stream.flush()

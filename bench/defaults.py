"""
Default Sizing Profile

Process-wide defaults for the hashd-params job: the agent's default command
values and the rd-hashd sizing profile derived from total system memory.
These are passed explicitly into both estimation paths.
"""

from dataclasses import dataclass

import psutil


@dataclass(frozen=True)
class Defaults:
    """
    Immutable default command and sizing profile.

    Usage:
        defaults = Defaults.detect()
        defaults = Defaults.for_memory(16 << 30)
    """

    # Default agent command
    balloon_size: int = 0
    log_bps: int = 1 << 20

    # Default hashd args (bytes)
    mem_size: int = 0
    size: int = 0
    log_size: int = 0
    preload_cache_size: int = 0

    # Default hashd params
    file_size_mean: int = 1 << 20
    chunk_pages: int = 25
    mem_frac: float = 0.8
    file_frac: float = 0.25

    # Max RPS used when approximating without a CPU bench
    fake_cpu_rps_max: int = 2000

    SIZE_MULT = 4

    @classmethod
    def for_memory(cls, total_memory: int) -> "Defaults":
        """Build the default profile for a machine with `total_memory` bytes."""
        size = total_memory * cls.SIZE_MULT
        return cls(
            mem_size=total_memory,
            size=size,
            log_size=total_memory // 2,
            preload_cache_size=min(size, total_memory // 2),
        )

    @classmethod
    def detect(cls) -> "Defaults":
        """Build the default profile from this host's total memory."""
        return cls.for_memory(psutil.virtual_memory().total)

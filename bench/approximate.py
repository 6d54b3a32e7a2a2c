"""
Local Approximation

Estimates rd-hashd knobs from the default sizing profile without running
the load generator. This is an approximation, not a calibration: it is only
used when the job is explicitly configured with fake-cpu-load.
"""

import logging

from .config import JobConfig
from .defaults import Defaults
from .result import EstimationResult

logger = logging.getLogger(__name__)


class LocalApproximator:
    """
    Computes an EstimationResult from configuration and defaults alone.

    Usage:
        result = LocalApproximator(Defaults.detect()).estimate(config)
    """

    def __init__(self, defaults: Defaults):
        self.defaults = defaults

    def estimate(self, config: JobConfig) -> EstimationResult:
        dfl = self.defaults

        hash_size = config.hash_size if config.hash_size is not None else dfl.file_size_mean
        chunk_size = config.chunk_size if config.chunk_size is not None else dfl.chunk_pages
        rps_max = config.max_request_rate if config.max_request_rate is not None else dfl.fake_cpu_rps_max

        logger.info(
            f"Approximating hashd parameters without a CPU bench "
            f"(footprint={dfl.size}, file_frac={dfl.file_frac})"
        )

        return EstimationResult(
            hash_size=hash_size,
            max_request_rate=rps_max,
            memory_size=dfl.size,
            memory_fraction=dfl.mem_frac,
            chunk_size=chunk_size,
        )

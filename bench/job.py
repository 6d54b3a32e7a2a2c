"""
hashd-params Job

Estimates rd-hashd parameters either by delegating to the agent's hashd
bench or, with fake-cpu-load, by local approximation.
"""

import logging
from enum import Enum
from typing import Any, Mapping

from agent import SysReq

from .approximate import LocalApproximator
from .config import JobConfig
from .context import RunContext
from .defaults import Defaults
from .delegated import DelegatedEstimator
from .formatting import format_size
from .result import EstimationResult

logger = logging.getLogger(__name__)

JOB_KIND = "hashd-params"

HASHD_SYSREQS = frozenset({
    SysReq.ANON_BALLOON,
    SysReq.SWAP_ON_SCRATCH,
    SysReq.SWAP,
    SysReq.HOST_CRITICAL_SERVICES,
})


class Strategy(str, Enum):
    """How the knobs are produced."""
    LOCAL = "local"          # approximation from defaults
    DELEGATED = "delegated"  # agent-side hashd bench


class EstimationJob:
    """
    One hashd-params run.

    Usage:
        job = EstimationJob.from_props({"rps-max": "5000"}, defaults)
        result = await job.run(ctx)
        print(job.format(result))
    """

    def __init__(self, config: JobConfig, defaults: Defaults):
        self.config = config
        self.defaults = defaults

    @classmethod
    def from_props(cls, props: Mapping[str, str], defaults: Defaults) -> "EstimationJob":
        return cls(JobConfig.from_props(props, defaults), defaults)

    @property
    def strategy(self) -> Strategy:
        if self.config.use_local_approximation:
            return Strategy.LOCAL
        return Strategy.DELEGATED

    def sysreqs(self) -> frozenset[SysReq]:
        if self.strategy == Strategy.LOCAL:
            return frozenset()
        return HASHD_SYSREQS

    async def run(self, ctx: RunContext | None = None) -> EstimationResult:
        """
        Produce the estimate.

        Args:
            ctx: Agent access, required unless the job approximates locally

        Returns:
            EstimationResult
        """
        if self.strategy == Strategy.LOCAL:
            result = LocalApproximator(self.defaults).estimate(self.config)
        else:
            if ctx is None:
                raise ValueError("delegated estimation requires a RunContext")
            result = await DelegatedEstimator(ctx, self.sysreqs()).estimate(self.config)

        logger.info(f"{JOB_KIND} ({self.strategy.value}) finished: {result}")
        return result

    def format(self, result: EstimationResult) -> str:
        return (
            f"Params: balloon_size={format_size(self.config.balloon_size)} "
            f"log_bps={format_size(self.config.log_rate)}\n"
            f"Result: hash_size={format_size(result.hash_size)} "
            f"rps_max={result.max_request_rate} "
            f"mem_size={format_size(result.memory_size)} "
            f"mem_frac={result.memory_fraction:.3f} "
            f"chunk_pages={result.chunk_size}\n"
        )

    def record(self, result: EstimationResult) -> dict[str, Any]:
        """JSON-ready record for the harness to persist."""
        return {
            "kind": JOB_KIND,
            "props": self.config.to_props(),
            "result": result.to_dict(),
        }

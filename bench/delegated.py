"""
Delegated Estimation

Hands the calibration to the agent's hashd bench and waits for it to
converge, rendering live progress from the agent's report.
"""

import logging

from agent import SysReq

from .config import JobConfig
from .context import ConvergenceSnapshot, RunContext
from .formatting import format_duration_dashed, format_size, format_size_dashed
from .result import EstimationResult

logger = logging.getLogger(__name__)


def bench_args(config: JobConfig) -> list[str]:
    """Extra hashd bench arguments for the overridden knobs."""
    args = []
    if config.hash_size is not None:
        args.append(f"--bench-hash-size={config.hash_size}")
    if config.chunk_size is not None:
        args.append(f"--bench-chunk-pages={config.chunk_size}")
    if config.max_request_rate is not None:
        args.append(f"--bench-rps-max={config.max_request_rate}")
    return args


def converged(snapshot: ConvergenceSnapshot) -> bool:
    """The bench has completed the run we requested, not an earlier one."""
    return snapshot.bench_seq >= snapshot.cmd_seq


def render_status(snapshot: ConvergenceSnapshot) -> str:
    return (
        f"[{snapshot.phase}] mem: {format_size(snapshot.mem_probe_size):>5} "
        f"rw:{format_size_dashed(snapshot.io_rbps):>5}/{format_size_dashed(snapshot.io_wbps):>5} "
        f"p50/90/99: {format_duration_dashed(snapshot.read_lat_p50):>5}/"
        f"{format_duration_dashed(snapshot.read_lat_p90):>5}/"
        f"{format_duration_dashed(snapshot.read_lat_p99):>5}"
    )


class DelegatedEstimator:
    """
    Runs the agent's hashd bench and reads back the knobs it commits.

    Usage:
        estimator = DelegatedEstimator(ctx, sysreqs=HASHD_SYSREQS)
        result = await estimator.estimate(config)
    """

    def __init__(self, ctx: RunContext, sysreqs: frozenset[SysReq] = frozenset()):
        self.ctx = ctx
        self.sysreqs = sysreqs

    async def estimate(self, config: JobConfig) -> EstimationResult:
        """
        Raises:
            PreflightUnmet: If the agent lacks a required sysreq
            DelegatedFailure: If the bench fails or the agent can't be reached
            Cancelled: If the wait is interrupted
            Timeout: If the context's deadline passes
        """
        ctx = self.ctx

        if config.passive:
            ctx.set_passive_keep_crit_mem_prot()
        ctx.set_commit_bench()
        await ctx.start_agent(self.sysreqs)

        logger.info("hashd-params: Estimating rd-hashd parameters")

        seq = await ctx.start_hashd_bench(config.balloon_size, config.log_rate, bench_args(config))
        await ctx.wait_cond(converged, status=render_status)
        logger.info(f"hashd bench seq={seq} completed")

        knobs = await ctx.read_hashd_knobs()
        return EstimationResult.from_knobs(knobs)

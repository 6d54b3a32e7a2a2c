"""
Run Context

Host-side services for a bench run: agent startup, command submission
and the condition wait that drives an agent-side operation to completion.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable

from agent import AgentClient, AgentError, AgentOptions, FileAgent, HttpAgent, SysReq
from agent.models import BenchState, CmdState, HashdKnobs, Report, SvcState

from .errors import Cancelled, DelegatedFailure, PreflightUnmet, Timeout
from .progress import BenchProgress
from .settings import BenchSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConvergenceSnapshot:
    """One observation of the agent's command, bench and report state."""
    cmd_seq: int
    bench_seq: int
    phase: str
    mem_probe_size: int = 0
    io_rbps: int | None = None
    io_wbps: int | None = None
    read_lat_p50: float | None = None
    read_lat_p90: float | None = None
    read_lat_p99: float | None = None
    failure: str | None = None

    @classmethod
    def from_agent(cls, cmd: CmdState, bench: BenchState, report: Report) -> "ConvergenceSnapshot":
        usage = report.root_usage()
        svc = report.bench_hashd.svc

        failure = None
        if svc.state == SvcState.FAILED:
            failure = f"{svc.name} failed"
            if svc.detail:
                failure += f": {svc.detail}"

        return cls(
            cmd_seq=cmd.bench_hashd_seq,
            bench_seq=bench.hashd_seq,
            phase=report.bench_hashd.phase,
            mem_probe_size=report.bench_hashd.mem_probe_size,
            io_rbps=usage.io_rbps,
            io_wbps=usage.io_wbps,
            read_lat_p50=report.read_lat("50"),
            read_lat_p90=report.read_lat("90"),
            read_lat_p99=report.read_lat("99"),
            failure=failure,
        )


class RunContext:
    """
    Drives the agent on behalf of a job.

    Usage:
        ctx = RunContext(FileAgent("/var/lib/resctl-demo"))
        ctx.set_commit_bench()
        await ctx.start_agent()
        await ctx.start_hashd_bench(balloon_size, log_bps, [])
        snapshot = await ctx.wait_cond(lambda s: s.bench_seq >= s.cmd_seq)
    """

    def __init__(
        self,
        agent: AgentClient,
        poll_interval: float = 1.0,
        timeout: float | None = None,
        progress: BenchProgress | None = None
    ):
        self.agent = agent
        self.poll_interval = poll_interval
        self.timeout = timeout
        self.progress = progress or BenchProgress()
        self.options = AgentOptions()
        self._cancel_event = asyncio.Event()
        self._cancel_reason = "cancelled"

    @classmethod
    def from_settings(cls, settings: BenchSettings, progress: BenchProgress | None = None) -> "RunContext":
        """Build a context reaching the agent over HTTP if a URL is set, else via its directory."""
        if settings.agent_url:
            agent = HttpAgent(settings.agent_url, stale_after=settings.report_stale_after)
        else:
            agent = FileAgent(
                settings.agent_dir,
                agent_cmd=settings.agent_cmd,
                start_timeout=settings.agent_start_timeout,
                stale_after=settings.report_stale_after
            )
        return cls(agent, poll_interval=settings.poll_interval, timeout=settings.timeout, progress=progress)

    async def close(self):
        close = getattr(self.agent, "close", None)
        if close is not None:
            await close()

    # =========================================================================
    # Host Requests
    # =========================================================================

    def set_passive_keep_crit_mem_prot(self) -> "RunContext":
        """Let the agent run without enforcing memory protection on critical services."""
        logger.info("Relaxing critical memory protection for this run")
        self.options = self.options.model_copy(update={"passive_keep_crit_mem_prot": True})
        return self

    def set_commit_bench(self) -> "RunContext":
        """Commit this run's bench results as the baseline."""
        self.options = self.options.model_copy(update={"commit_bench": True})
        return self

    async def start_agent(self, sysreqs: frozenset[SysReq] = frozenset()) -> None:
        """
        Start the agent if needed and verify it meets `sysreqs`.

        Raises:
            PreflightUnmet: If the agent reports a required sysreq as missed
            DelegatedFailure: If the agent can't be started or read
        """
        try:
            await self.agent.start(self.options)
            report = await self.agent.read_sysreqs()
        except AgentError as e:
            raise DelegatedFailure(e) from e

        missed = report.unmet(sysreqs)
        if missed:
            raise PreflightUnmet(missed)

    async def start_hashd_bench(self, balloon_size: int, log_bps: int, extra_args: list[str]) -> int:
        """
        Request a new hashd bench run.

        The request sequence is placed past both the last request and the
        last completion, so an earlier completion never satisfies it.

        Returns:
            The bench sequence number the run will complete with
        """
        try:
            cmd = await self.agent.read_cmd()
            bench = await self.agent.read_bench()
            cmd = cmd.model_copy(update={
                "bench_hashd_seq": max(cmd.bench_hashd_seq, bench.hashd_seq) + 1,
                "bench_hashd_balloon_size": balloon_size,
                "bench_hashd_log_bps": log_bps,
                "bench_hashd_args": list(extra_args),
            })
            await self.agent.write_cmd(cmd)
        except AgentError as e:
            raise DelegatedFailure(e) from e

        logger.info(f"Requested hashd bench seq={cmd.bench_hashd_seq} args={extra_args}")
        return cmd.bench_hashd_seq

    async def read_hashd_knobs(self) -> HashdKnobs:
        try:
            bench = await self.agent.read_bench()
        except AgentError as e:
            raise DelegatedFailure(e) from e
        return bench.hashd

    # =========================================================================
    # Condition Wait
    # =========================================================================

    def cancel(self, reason: str = "cancelled") -> None:
        """Interrupt wait_cond at its next poll boundary. Safe to call from a signal handler."""
        self._cancel_reason = reason
        self._cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    async def snapshot(self) -> ConvergenceSnapshot:
        try:
            cmd = await self.agent.read_cmd()
            bench = await self.agent.read_bench()
            report = await self.agent.read_report()
        except AgentError as e:
            raise DelegatedFailure(e) from e
        return ConvergenceSnapshot.from_agent(cmd, bench, report)

    async def _sleep(self, seconds: float) -> None:
        """Sleep between polls, waking early on cancel()."""
        try:
            await asyncio.wait_for(self._cancel_event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass

    async def wait_cond(
        self,
        cond: Callable[[ConvergenceSnapshot], bool],
        status: Callable[[ConvergenceSnapshot], str] | None = None,
        timeout: float | None = None
    ) -> ConvergenceSnapshot:
        """
        Poll the agent until `cond` holds.

        Args:
            cond: Termination predicate, evaluated on every snapshot
            status: Renders the progress line for every snapshot
            timeout: Seconds before giving up, defaults to the context's timeout

        Returns:
            The snapshot that satisfied `cond`

        Raises:
            Cancelled: If cancel() was called
            Timeout: If the deadline passed
            DelegatedFailure: If the agent reports failure or can't be read
        """
        timeout = timeout if timeout is not None else self.timeout
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout if timeout is not None else None
        ticks = 0

        try:
            while True:
                if self.cancelled:
                    logger.warning(f"Wait cancelled after {ticks} polls: {self._cancel_reason}")
                    raise Cancelled(self._cancel_reason)

                snapshot = await self.snapshot()
                ticks += 1

                if status is not None:
                    self.progress.set_status(status(snapshot))

                if snapshot.failure:
                    raise DelegatedFailure(snapshot.failure)

                if cond(snapshot):
                    logger.debug(f"Condition met after {ticks} polls")
                    return snapshot

                if deadline is not None and loop.time() >= deadline:
                    raise Timeout(timeout)

                await self._sleep(self.poll_interval)
        finally:
            self.progress.finish()

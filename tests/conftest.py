"""Pytest fixtures for hashd-params testing."""
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Callable

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from agent.models import (
    AgentOptions,
    BenchHashdReport,
    BenchState,
    CmdState,
    HashdKnobs,
    Report,
    ROOT_SLICE,
    SvcReport,
    SvcState,
    SysReqsReport,
    Usage,
)
from bench import Defaults

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


# =============================================================================
# Pytest Marker Registration
# =============================================================================

def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line("markers", "config: Job property parsing tests")
    config.addinivalue_line("markers", "approximation: Local approximation tests")
    config.addinivalue_line("markers", "convergence: Convergence wait tests")
    config.addinivalue_line("markers", "agent: Agent client tests")
    config.addinivalue_line("markers", "job: Estimation job and report tests")
    config.addinivalue_line("markers", "formatting: Size and duration rendering tests")


# =============================================================================
# Fake Agent
# =============================================================================

class FakeAgent:
    """
    In-memory agent whose hashd bench completes on a given poll.

    Each wait tick reads cmd, bench and report once. Bench reads are counted
    once a command has been written, and the bench reports completion of the
    latest command from the `complete_on`-th counted read. `bench_seq` is the
    completed counter left by an earlier run and defaults to `initial_seq`.
    """

    def __init__(
        self,
        knobs: HashdKnobs,
        complete_on: int = 1,
        initial_seq: int = 3,
        bench_seq: int | None = None,
        report: Report | None = None,
        missed: list[str] | None = None
    ):
        self.knobs = knobs
        self.complete_on = complete_on
        self.cmd = CmdState(bench_hashd_seq=initial_seq)
        # Stale completion of an earlier run
        self.bench = BenchState(
            hashd_seq=initial_seq if bench_seq is None else bench_seq,
            hashd=HashdKnobs(hash_size=1, rps_max=1)
        )
        self.report = report or Report(timestamp=datetime.now())
        self.sysreqs = SysReqsReport(missed=missed or [])
        self.written: list[CmdState] = []
        self.started_with: list[AgentOptions] = []
        self.bench_reads = 0
        self.ticks = 0
        self.on_tick: Callable[[int], None] | None = None

    def _knobs_for(self, args: list[str]) -> HashdKnobs:
        overrides = {}
        for arg in args:
            key, _, value = arg.partition("=")
            field = {
                "--bench-hash-size": "hash_size",
                "--bench-chunk-pages": "chunk_pages",
                "--bench-rps-max": "rps_max",
            }[key]
            overrides[field] = int(value)
        return self.knobs.model_copy(update=overrides)

    async def read_cmd(self) -> CmdState:
        return self.cmd

    async def write_cmd(self, cmd: CmdState) -> None:
        self.written.append(cmd)
        self.cmd = cmd

    async def read_bench(self) -> BenchState:
        if not self.written:
            return self.bench
        self.bench_reads += 1
        if self.bench_reads >= self.complete_on:
            self.bench = BenchState(
                hashd_seq=self.cmd.bench_hashd_seq,
                hashd=self._knobs_for(self.cmd.bench_hashd_args)
            )
        return self.bench

    async def read_report(self) -> Report:
        self.ticks += 1
        if self.on_tick:
            self.on_tick(self.ticks)
        return self.report

    async def read_sysreqs(self) -> SysReqsReport:
        return self.sysreqs

    async def is_running(self) -> bool:
        return True

    async def start(self, options: AgentOptions) -> None:
        self.started_with.append(options)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def defaults() -> Defaults:
    """Defaults for a 16G machine."""
    return Defaults.for_memory(16 << 30)


@pytest.fixture
def bench_knobs() -> HashdKnobs:
    """Knobs the fake agent's bench commits."""
    return HashdKnobs(
        hash_size=2 << 20,
        rps_max=3400,
        mem_size=12 << 30,
        mem_frac=0.6532,
        chunk_pages=25,
    )


@pytest.fixture
def live_report() -> Report:
    """Report with full I/O and latency readings."""
    return Report(
        timestamp=datetime.now(),
        bench_hashd=BenchHashdReport(
            phase="bench-mem-up",
            mem_probe_size=6 << 30,
            svc=SvcReport(state=SvcState.RUNNING)
        ),
        usages={ROOT_SLICE: Usage(io_rbps=50 << 20, io_wbps=12 << 20)},
        iolat={"read": {"50": 0.0004, "90": 0.0021, "99": 0.015}},
    )


@pytest.fixture
def make_agent(bench_knobs):
    def _make_agent(**kwargs) -> FakeAgent:
        return FakeAgent(bench_knobs, **kwargs)
    return _make_agent

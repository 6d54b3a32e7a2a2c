"""
Agent State Models

Pydantic models for the state the resource-control agent exposes:
the command it is executing, the bench results it has committed,
its live report and its system requirement checks.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

ROOT_SLICE = "-.slice"
HASHD_BENCH_SVC_NAME = "rd-hashd-bench.service"


class SysReq(str, Enum):
    """System requirements checked by the agent."""
    CONTROLLERS = "Controllers"
    IO_COST = "IoCost"
    ANON_BALLOON = "AnonBalloon"
    SWAP_ON_SCRATCH = "SwapOnScratch"
    SWAP = "Swap"
    OOMD = "Oomd"
    HOST_CRITICAL_SERVICES = "HostCriticalServices"


class SvcState(str, Enum):
    """Lifecycle state of an agent-managed service."""
    RUNNING = "running"
    EXITED = "exited"
    FAILED = "failed"
    OTHER = "other"


class HashdKnobs(BaseModel):
    """rd-hashd parameters produced by a bench run."""
    hash_size: int = Field(0, ge=0)
    rps_max: int = Field(0, ge=0)
    mem_size: int = Field(0, ge=0)
    mem_frac: float = Field(0.0, ge=0.0, le=1.0)
    chunk_pages: int = Field(0, ge=0)


class CmdState(BaseModel):
    """The agent's command file. Fields this job doesn't touch are preserved."""
    model_config = ConfigDict(extra="allow")

    bench_hashd_seq: int = 0
    bench_hashd_balloon_size: int = 0
    bench_hashd_log_bps: int = 0
    bench_hashd_args: list[str] = Field(default_factory=list)


class BenchState(BaseModel):
    """Committed bench results."""
    model_config = ConfigDict(extra="allow")

    timestamp: datetime | None = None
    hashd_seq: int = 0
    hashd: HashdKnobs = Field(default_factory=HashdKnobs)


class SvcReport(BaseModel):
    """Status of the bench service."""
    name: str = HASHD_BENCH_SVC_NAME
    state: SvcState = SvcState.OTHER
    detail: str | None = None


class BenchHashdReport(BaseModel):
    """Live progress of the hashd bench."""
    phase: str = "prep"
    mem_probe_size: int = 0
    svc: SvcReport = Field(default_factory=SvcReport)


class Usage(BaseModel):
    """Resource usage of a slice. Missing readings are None."""
    io_rbps: int | None = None
    io_wbps: int | None = None


class Report(BaseModel):
    """The agent's live report, refreshed roughly every second."""
    model_config = ConfigDict(extra="allow")

    timestamp: datetime | None = None
    bench_hashd: BenchHashdReport = Field(default_factory=BenchHashdReport)
    usages: dict[str, Usage] = Field(default_factory=dict)
    iolat: dict[str, dict[str, float | None]] = Field(default_factory=dict)

    def root_usage(self) -> Usage:
        return self.usages.get(ROOT_SLICE, Usage())

    def read_lat(self, pct: str) -> float | None:
        return self.iolat.get("read", {}).get(pct)

    def is_fresh(self, stale_after: float) -> bool:
        """Check if the agent refreshed this report within `stale_after` seconds."""
        if self.timestamp is None:
            return False
        age = (datetime.now(self.timestamp.tzinfo) - self.timestamp).total_seconds()
        return age <= stale_after


class SysReqsReport(BaseModel):
    """System requirement check results."""
    satisfied: list[str] = Field(default_factory=list)
    missed: list[str] = Field(default_factory=list)

    def unmet(self, required: set[SysReq] | frozenset[SysReq]) -> list[str]:
        """Required sysreqs the agent reported as missed."""
        missed = set(self.missed)
        return sorted(req.value for req in required if req.value in missed)


class AgentOptions(BaseModel):
    """
    How the host asks the agent to run for this job.

    hashd-params always commits its bench. Callers that leave commit_bench
    unset, such as one-off probes of a host, get their bench results in a
    scratch file so the committed baseline stays untouched.
    """
    passive_keep_crit_mem_prot: bool = False
    commit_bench: bool = False

    def to_args(self, scratch_bench_file: str | None = None) -> list[str]:
        """Command-line arguments that apply these options to an agent process."""
        args = []
        if self.passive_keep_crit_mem_prot:
            args.append("--passive=keep-crit-mem-prot")
        if not self.commit_bench and scratch_bench_file:
            args.append(f"--bench-file={scratch_bench_file}")
        return args

"""
Agent Client Interface

The narrow surface through which the hashd-params job talks to the agent.
"""

from typing import Protocol

from .models import AgentOptions, BenchState, CmdState, Report, SysReqsReport


class AgentError(Exception):
    """Raised when agent state cannot be read or written."""
    pass


class AgentClient(Protocol):
    """Access to a running (or startable) resource-control agent."""

    async def read_cmd(self) -> CmdState: ...

    async def write_cmd(self, cmd: CmdState) -> None: ...

    async def read_bench(self) -> BenchState: ...

    async def read_report(self) -> Report: ...

    async def read_sysreqs(self) -> SysReqsReport: ...

    async def is_running(self) -> bool: ...

    async def start(self, options: AgentOptions) -> None: ...

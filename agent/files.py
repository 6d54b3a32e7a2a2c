"""
File Agent

Talks to an agent through its state directory:
cmd.json (written by us), bench.json, report.json and sysreqs.json
(written by the agent).
"""

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from .client import AgentError
from .models import AgentOptions, BenchState, CmdState, Report, SysReqsReport

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class FileAgent:
    """
    Agent reached through its JSON state files.

    Usage:
        agent = FileAgent("/var/lib/resctl-demo", agent_cmd=["rd-agent"])
        await agent.start(AgentOptions(commit_bench=True))
        cmd = await agent.read_cmd()
    """

    CMD_FILE = "cmd.json"
    BENCH_FILE = "bench.json"
    SCRATCH_BENCH_FILE = "bench-scratch.json"
    REPORT_FILE = "report.json"
    SYSREQS_FILE = "sysreqs.json"

    def __init__(
        self,
        agent_dir: str | Path,
        agent_cmd: list[str] | None = None,
        start_timeout: float = 30.0,
        stale_after: float = 5.0,
        poll_interval: float = 0.5
    ):
        self.agent_dir = Path(agent_dir)
        self.agent_cmd = agent_cmd
        self.start_timeout = start_timeout
        self.stale_after = stale_after
        self.poll_interval = poll_interval
        self.bench_file = self.BENCH_FILE
        self._proc: asyncio.subprocess.Process | None = None

    def _read(self, name: str, model: type[M]) -> M:
        path = self.agent_dir / name
        try:
            with open(path) as f:
                data = json.load(f)
            return model.model_validate(data)
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            raise AgentError(f"cannot read {path}: {e}") from e

    async def read_cmd(self) -> CmdState:
        if not (self.agent_dir / self.CMD_FILE).exists():
            return CmdState()
        return self._read(self.CMD_FILE, CmdState)

    async def write_cmd(self, cmd: CmdState) -> None:
        """Replace cmd.json atomically so the agent never sees a partial write."""
        path = self.agent_dir / self.CMD_FILE
        tmp = None
        try:
            fd, tmp = tempfile.mkstemp(dir=self.agent_dir, prefix=".cmd-", suffix=".json")
            with os.fdopen(fd, "w") as f:
                json.dump(cmd.model_dump(mode="json"), f, indent=2)
            os.replace(tmp, path)
            tmp = None
        except (OSError, TypeError, ValueError) as e:
            raise AgentError(f"cannot write {path}: {e}") from e
        finally:
            if tmp is not None:
                Path(tmp).unlink(missing_ok=True)
        logger.debug(f"Wrote {path} (bench_hashd_seq={cmd.bench_hashd_seq})")

    async def read_bench(self) -> BenchState:
        if not (self.agent_dir / self.bench_file).exists():
            return BenchState()
        return self._read(self.bench_file, BenchState)

    async def read_report(self) -> Report:
        return self._read(self.REPORT_FILE, Report)

    async def read_sysreqs(self) -> SysReqsReport:
        if not (self.agent_dir / self.SYSREQS_FILE).exists():
            return SysReqsReport()
        return self._read(self.SYSREQS_FILE, SysReqsReport)

    async def is_running(self) -> bool:
        """The agent is considered up while it keeps its report fresh."""
        if not (self.agent_dir / self.REPORT_FILE).exists():
            return False
        try:
            report = await self.read_report()
        except AgentError as e:
            logger.debug(f"Agent report unreadable: {e}")
            return False
        return report.is_fresh(self.stale_after)

    async def start(self, options: AgentOptions) -> None:
        """
        Start the agent unless it is already running.

        An agent spawned here that fails to come up, or whose startup is
        cancelled, is terminated before this returns.

        Raises:
            AgentError: If the agent is down and can't be started
        """
        self.bench_file = self.BENCH_FILE if options.commit_bench else self.SCRATCH_BENCH_FILE

        if await self.is_running():
            logger.info(f"Agent already running in {self.agent_dir}")
            return

        if not self.agent_cmd:
            raise AgentError(f"agent is not running in {self.agent_dir} and no agent command is configured")

        scratch = str(self.agent_dir / self.SCRATCH_BENCH_FILE)
        cmd = [*self.agent_cmd, "--dir", str(self.agent_dir), *options.to_args(scratch)]
        logger.info(f"Starting agent: {' '.join(cmd)}")

        try:
            self._proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL
            )
        except OSError as e:
            raise AgentError(f"cannot start agent: {e}") from e

        try:
            await self._wait_until_up()
        except BaseException:
            await self.stop()
            raise

    async def _wait_until_up(self) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.start_timeout
        while loop.time() < deadline:
            if self._proc.returncode is not None:
                raise AgentError(f"agent exited with status {self._proc.returncode}")
            if await self.is_running():
                logger.info("Agent is up")
                return
            await asyncio.sleep(self.poll_interval)

        raise AgentError(f"agent did not report within {self.start_timeout:.0f}s")

    async def stop(self) -> None:
        """Terminate the agent process this client spawned, if it is still alive."""
        proc = self._proc
        if proc is None or proc.returncode is not None:
            return

        logger.info(f"Stopping agent (pid {proc.pid})")
        proc.terminate()
        try:
            await asyncio.wait_for(proc.wait(), timeout=self.start_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Agent (pid {proc.pid}) ignored SIGTERM, killing it")
            proc.kill()
            await proc.wait()

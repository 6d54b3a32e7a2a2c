"""
HTTP Agent

Talks to an agent that exposes its state over HTTP:

    GET  /cmd, /bench, /report, /sysreqs
    PUT  /cmd
    POST /start
"""

import logging
from typing import TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from .client import AgentError
from .models import AgentOptions, BenchState, CmdState, Report, SysReqsReport

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class HttpAgent:
    """
    Agent reached over HTTP.

    Usage:
        agent = HttpAgent("http://localhost:8470")
        try:
            report = await agent.read_report()
        finally:
            await agent.close()
    """

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 10.0,
        stale_after: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout_seconds
        self.stale_after = stale_after
        self._transport = transport
        self._http_client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport
            )
        return self._http_client

    async def close(self):
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def _get(self, path: str, model: type[M]) -> M:
        client = await self._get_client()
        try:
            resp = await client.get(path)
            resp.raise_for_status()
            return model.model_validate(resp.json())
        except (httpx.HTTPError, ValueError, ValidationError) as e:
            raise AgentError(f"GET {path} failed: {e}") from e

    async def _send(self, method: str, path: str, payload: dict) -> None:
        client = await self._get_client()
        try:
            resp = await client.request(method, path, json=payload)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise AgentError(f"{method} {path} failed: {e}") from e

    async def read_cmd(self) -> CmdState:
        return await self._get("/cmd", CmdState)

    async def write_cmd(self, cmd: CmdState) -> None:
        await self._send("PUT", "/cmd", cmd.model_dump(mode="json"))

    async def read_bench(self) -> BenchState:
        return await self._get("/bench", BenchState)

    async def read_report(self) -> Report:
        return await self._get("/report", Report)

    async def read_sysreqs(self) -> SysReqsReport:
        return await self._get("/sysreqs", SysReqsReport)

    async def is_running(self) -> bool:
        try:
            report = await self.read_report()
        except AgentError as e:
            logger.debug(f"Agent not reachable: {e}")
            return False
        return report.is_fresh(self.stale_after)

    async def start(self, options: AgentOptions) -> None:
        """Ask the agent's host to bring it up with `options`; a no-op if it's already running."""
        if await self.is_running():
            logger.info(f"Agent already running at {self.base_url}")
            return
        logger.info(f"Requesting agent start at {self.base_url}")
        await self._send("POST", "/start", options.model_dump())

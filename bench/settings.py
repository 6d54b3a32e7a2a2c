"""
Bench Settings

Run-time configuration for the hashd-params job: where the agent lives,
how often to poll it and how long to wait.
"""

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator


class BenchSettings(BaseModel):
    """
    Host-side settings for reaching the agent and driving the wait loop.

    Usage:
        settings = BenchSettings.from_yaml("config/hashd-params.yaml")
        print(settings.poll_interval)
    """
    agent_dir: Path = Path("/var/lib/resctl-demo")
    agent_url: str | None = None
    agent_cmd: list[str] | None = None
    poll_interval: float = Field(1.0, gt=0)
    timeout: float | None = Field(None, gt=0)
    agent_start_timeout: float = Field(30.0, gt=0)
    report_stale_after: float = Field(5.0, gt=0)

    @field_validator("agent_cmd", mode="before")
    @classmethod
    def split_agent_cmd(cls, v):
        """Accept the agent command as a single string too."""
        if isinstance(v, str):
            return v.split()
        return v

    @classmethod
    def from_yaml(cls, path: str | Path) -> "BenchSettings":
        """Load settings from YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)

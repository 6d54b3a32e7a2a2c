#!/usr/bin/env python3
"""
Run the hashd-params Bench Job

Estimates rd-hashd parameters and prints the report.

Usage:
    python scripts/run_hashd_params.py --prop balloon=1048576 --prop fake-cpu-load
    python scripts/run_hashd_params.py --prop rps-max=5000 --config config/hashd-params.yaml --result /tmp/hashd-params.json
    python scripts/run_hashd_params.py --format /tmp/hashd-params.json
"""

import argparse
import asyncio
import json
import logging
import signal
import sys
from pathlib import Path
from typing import Any

import yaml

# Add project to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from bench import (
    BenchError,
    BenchProgress,
    BenchSettings,
    Defaults,
    EstimationJob,
    EstimationResult,
    RunContext,
)

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def _prop_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def load_props(props_file: Path | None, props: list[str]) -> dict[str, str]:
    """Merge a YAML property mapping with KEY[=VAL] arguments; arguments win."""
    merged: dict[str, str] = {}

    if props_file:
        with open(props_file) as f:
            data = yaml.safe_load(f) or {}
        merged.update({str(k): _prop_value(v) for k, v in data.items()})

    for prop in props:
        key, _, value = prop.partition("=")
        merged[key] = value

    return merged


def format_saved(path: Path, defaults: Defaults) -> str:
    """Re-render the report of a previously saved run."""
    with open(path) as f:
        record = json.load(f)
    job = EstimationJob.from_props(record["props"], defaults)
    return job.format(EstimationResult.from_dict(record["result"]))


async def run(args: argparse.Namespace) -> int:
    defaults = Defaults.detect()

    if args.format:
        print(format_saved(args.format, defaults), end="")
        return 0

    settings = BenchSettings.from_yaml(args.config) if args.config else BenchSettings()
    overrides = {}
    if args.agent_dir:
        overrides["agent_dir"] = args.agent_dir
    if args.agent_url:
        overrides["agent_url"] = args.agent_url
    if args.timeout:
        overrides["timeout"] = args.timeout
    if overrides:
        settings = settings.model_copy(update=overrides)

    job = EstimationJob.from_props(load_props(args.props_file, args.prop), defaults)
    ctx = RunContext.from_settings(settings, progress=BenchProgress.for_terminal())

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, ctx.cancel, f"interrupted by {sig.name}")

    try:
        result = await job.run(ctx)
    finally:
        await ctx.close()

    if args.result:
        args.result.parent.mkdir(parents=True, exist_ok=True)
        with open(args.result, "w") as f:
            json.dump(job.record(result), f, indent=2)
        logger.info(f"Saved result to {args.result}")

    print(job.format(result), end="")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Estimate rd-hashd parameters")
    parser.add_argument("--prop", action="append", default=[], metavar="KEY[=VAL]", help="Job property")
    parser.add_argument("--props-file", type=Path, help="YAML mapping of job properties")
    parser.add_argument("--config", type=Path, help="Settings file path")
    parser.add_argument("--agent-dir", type=Path, help="Agent state directory")
    parser.add_argument("--agent-url", type=str, help="Agent HTTP endpoint")
    parser.add_argument("--timeout", type=float, help="Give up after this many seconds")
    parser.add_argument("--result", type=Path, help="Write the JSON result record here")
    parser.add_argument("--format", type=Path, metavar="RESULT", help="Print the report of a saved result and exit")

    args = parser.parse_args()

    try:
        return asyncio.run(run(args))
    except BenchError as e:
        logger.error(f"hashd-params failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())

"""
hashd-params Bench Job

Estimates rd-hashd load generator knobs (hash size, max RPS, memory size,
memory fraction, chunk pages) either by running the agent's hashd bench
to convergence or by local approximation.
"""

__version__ = "1.0.0"

from .config import JobConfig
from .context import ConvergenceSnapshot, RunContext
from .defaults import Defaults
from .errors import (
    BenchError,
    UnknownProperty,
    MalformedValue,
    PreflightUnmet,
    DelegatedFailure,
    Cancelled,
    Timeout,
)
from .job import EstimationJob, Strategy, HASHD_SYSREQS
from .progress import BenchProgress
from .result import EstimationResult
from .settings import BenchSettings

__all__ = [
    "JobConfig",
    "ConvergenceSnapshot",
    "RunContext",
    "Defaults",
    "BenchError",
    "UnknownProperty",
    "MalformedValue",
    "PreflightUnmet",
    "DelegatedFailure",
    "Cancelled",
    "Timeout",
    "EstimationJob",
    "Strategy",
    "HASHD_SYSREQS",
    "BenchProgress",
    "EstimationResult",
    "BenchSettings",
]

"""
Resource-Control Agent Interface

State models and clients for the external agent that runs the
rd-hashd bench and reports live telemetry.
"""

__version__ = "1.0.0"

from .client import AgentClient, AgentError
from .files import FileAgent
from .remote import HttpAgent
from .models import (
    AgentOptions,
    BenchState,
    CmdState,
    HashdKnobs,
    Report,
    SysReq,
    SysReqsReport,
    ROOT_SLICE,
)

__all__ = [
    "AgentClient",
    "AgentError",
    "FileAgent",
    "HttpAgent",
    "AgentOptions",
    "BenchState",
    "CmdState",
    "HashdKnobs",
    "Report",
    "SysReq",
    "SysReqsReport",
    "ROOT_SLICE",
]

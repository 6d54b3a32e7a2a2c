"""
Bench Errors

Typed failures raised by the hashd-params job.
"""


class BenchError(Exception):
    """Base class for all hashd-params failures."""
    pass


class UnknownProperty(BenchError):
    """Raised when a job property key is not recognized."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"unknown property key {key!r}")


class MalformedValue(BenchError):
    """Raised when a recognized property fails to parse."""

    def __init__(self, key: str, cause: str):
        self.key = key
        self.cause = cause
        super().__init__(f"malformed value for {key!r}: {cause}")


class PreflightUnmet(BenchError):
    """Raised when the agent reports required system capabilities as missing."""

    def __init__(self, missed: list[str]):
        self.missed = sorted(missed)
        super().__init__(f"unmet system requirements: {', '.join(self.missed)}")


class DelegatedFailure(BenchError):
    """Raised when the external calibration run fails or the agent is unreachable."""

    def __init__(self, cause: str | Exception):
        self.cause = cause
        super().__init__(f"hashd bench failed: {cause}")


class Cancelled(BenchError):
    """Raised when the convergence wait is interrupted."""

    def __init__(self, reason: str = "cancelled"):
        self.reason = reason
        super().__init__(reason)


class Timeout(BenchError):
    """Raised when the optional convergence deadline expires."""

    def __init__(self, seconds: float):
        self.seconds = seconds
        super().__init__(f"hashd bench did not converge within {seconds:.0f}s")

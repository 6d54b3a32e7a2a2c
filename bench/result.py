"""
Estimation Result

The calibrated rd-hashd knobs, independent of how they were produced.
"""

from dataclasses import asdict, dataclass
from typing import Any

from agent.models import HashdKnobs


@dataclass(frozen=True)
class EstimationResult:
    """Estimated rd-hashd parameters."""
    hash_size: int  # bytes
    max_request_rate: int  # requests/sec
    memory_size: int  # bytes
    memory_fraction: float  # 0.0 - 1.0
    chunk_size: int  # pages

    @classmethod
    def from_knobs(cls, knobs: HashdKnobs) -> "EstimationResult":
        return cls(
            hash_size=knobs.hash_size,
            max_request_rate=knobs.rps_max,
            memory_size=knobs.mem_size,
            memory_fraction=knobs.mem_frac,
            chunk_size=knobs.chunk_pages,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON export."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EstimationResult":
        """
        Rebuild a result saved with to_dict().

        Raises:
            KeyError, TypeError, ValueError: If `data` doesn't have the result's shape
        """
        return cls(
            hash_size=int(data["hash_size"]),
            max_request_rate=int(data["max_request_rate"]),
            memory_size=int(data["memory_size"]),
            memory_fraction=float(data["memory_fraction"]),
            chunk_size=int(data["chunk_size"]),
        )

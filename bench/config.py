"""
Job Configuration

Parses and validates the hashd-params job properties.
"""

import re
from typing import Callable, Mapping

from pydantic import BaseModel, ConfigDict, Field

from .defaults import Defaults
from .errors import MalformedValue, UnknownProperty

U32_MAX = (1 << 32) - 1

_UINT_RE = re.compile(r"\+?[0-9]+")


def parse_bool(value: str) -> bool:
    """Parse a flag value. An empty value means the flag is set."""
    if value == "":
        return True
    if value == "true":
        return True
    if value == "false":
        return False
    raise ValueError(f"invalid boolean {value!r}, expected 'true' or 'false'")


def parse_uint(value: str, limit: int | None = None) -> int:
    """Parse a non-negative decimal integer, optionally bounded by `limit`."""
    if not _UINT_RE.fullmatch(value):
        raise ValueError(f"invalid unsigned integer {value!r}")
    parsed = int(value)
    if limit is not None and parsed > limit:
        raise ValueError(f"{parsed} exceeds maximum {limit}")
    return parsed


def _parse_u32(value: str) -> int:
    return parse_uint(value, U32_MAX)


# property key -> (JobConfig field, parser)
PROPERTIES: dict[str, tuple[str, Callable[[str], bool | int]]] = {
    "passive": ("passive", parse_bool),
    "balloon": ("balloon_size", parse_uint),
    "log-bps": ("log_rate", parse_uint),
    "fake-cpu-load": ("use_local_approximation", parse_bool),
    "hash-size": ("hash_size", parse_uint),
    "chunk-pages": ("chunk_size", parse_uint),
    "rps-max": ("max_request_rate", _parse_u32),
}


class JobConfig(BaseModel):
    """
    Validated hashd-params configuration.

    Usage:
        config = JobConfig.from_props({"balloon": "1048576", "fake-cpu-load": ""}, defaults)
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    passive: bool = False
    balloon_size: int = Field(0, ge=0)
    log_rate: int = Field(0, ge=0)
    use_local_approximation: bool = False
    hash_size: int | None = Field(None, ge=0)
    chunk_size: int | None = Field(None, ge=0)
    max_request_rate: int | None = Field(None, ge=0, le=U32_MAX)

    @classmethod
    def from_props(cls, props: Mapping[str, str], defaults: Defaults) -> "JobConfig":
        """
        Build a configuration from job properties.

        Args:
            props: Property key -> string value
            defaults: Default command values for unspecified keys

        Returns:
            JobConfig instance

        Raises:
            UnknownProperty: If a key is not recognized
            MalformedValue: If a value fails to parse
        """
        values: dict[str, bool | int] = {
            "balloon_size": defaults.balloon_size,
            "log_rate": defaults.log_bps,
        }

        for key, value in props.items():
            if key not in PROPERTIES:
                raise UnknownProperty(key)
            field_name, parser = PROPERTIES[key]
            try:
                values[field_name] = parser(value)
            except ValueError as e:
                raise MalformedValue(key, str(e)) from e

        return cls(**values)

    def to_props(self) -> dict[str, str]:
        """Render the non-default settings back into job properties."""
        props = {
            "balloon": str(self.balloon_size),
            "log-bps": str(self.log_rate),
        }
        if self.passive:
            props["passive"] = "true"
        if self.use_local_approximation:
            props["fake-cpu-load"] = "true"
        if self.hash_size is not None:
            props["hash-size"] = str(self.hash_size)
        if self.chunk_size is not None:
            props["chunk-pages"] = str(self.chunk_size)
        if self.max_request_rate is not None:
            props["rps-max"] = str(self.max_request_rate)
        return props

"""
Human-Readable Formatting

Compact byte-size and duration rendering for progress lines and reports.
The *_dashed variants render missing or zero readings as "-".
"""

DASH = "-"

_SIZE_UNITS = ("K", "M", "G", "T", "P", "E")

_DURATION_UNITS = (
    (1e-6, "us"),
    (1e-3, "ms"),
    (1.0, "s"),
    (60.0, "min"),
    (3600.0, "h"),
)


def _scaled(value: float, suffix: str) -> str:
    if round(value) < 10:
        return f"{value:.1f}{suffix}"
    return f"{value:.0f}{suffix}"


def format_size(size: int | float | None, zero: str = "0") -> str:
    """Format a byte count with binary unit suffixes, e.g. 1048576 -> "1.0M"."""
    if not size:
        return zero
    if size < 1024:
        return f"{size:.0f}"

    value = float(size)
    for unit in _SIZE_UNITS:
        value /= 1024
        if round(value) < 1024:
            return _scaled(value, unit)
    return f"{value:.0f}{_SIZE_UNITS[-1]}"


def format_size_dashed(size: int | float | None) -> str:
    return format_size(size, zero=DASH)


def format_duration(seconds: float | None, zero: str = "0") -> str:
    """Format a duration in seconds, e.g. 0.0123 -> "12ms"."""
    if not seconds:
        return zero

    scale, suffix = _DURATION_UNITS[0]
    for unit_scale, unit_suffix in _DURATION_UNITS:
        if seconds >= unit_scale:
            scale, suffix = unit_scale, unit_suffix
    return _scaled(seconds / scale, suffix)


def format_duration_dashed(seconds: float | None) -> str:
    return format_duration(seconds, zero=DASH)

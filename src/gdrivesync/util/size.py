from __future__ import annotations

_SI_UNITS: tuple[str, ...] = ("kB", "MB", "GB", "TB", "PB")


def format_size(size_bytes: int) -> str:
    """Format a byte count with SI units (1 kB = 1000 B)."""
    if size_bytes < 1000:
        return f"{size_bytes} B"

    value = float(size_bytes)
    for unit in _SI_UNITS:
        value /= 1000
        if value < 1000 or unit == _SI_UNITS[-1]:
            return f"{value:.1f} {unit}"

    return f"{value:.1f} {_SI_UNITS[-1]}"

"""Small integer helpers for alignment and rounding."""

from __future__ import annotations


def _require_power_of_two(value: int, name: str) -> None:
    if not is_power_of_two(value):
        raise ValueError(f"{name} must be a power of two, got {value}")


def div_ceil(x: int, y: int) -> int:
    """Return the ceiling of ``x / y`` for non-negative ``x``."""
    if x == 0:
        return 0
    return 1 + (x - 1) // y


def is_power_of_two(x: int) -> bool:
    """Return True if and only if ``x`` is a positive power of two."""
    return x > 0 and (x & (x - 1)) == 0


def is_aligned(x: int, a: int) -> bool:
    """Return True if ``x`` is a multiple of ``a`` (a power of two)."""
    _require_power_of_two(a, "alignment")
    return (x & (a - 1)) == 0


def round_down(x: int, y: int) -> int:
    """Round ``x`` down to a multiple of ``y`` (a power of two)."""
    _require_power_of_two(y, "alignment")
    return x & ~(y - 1)


def round_up(x: int, y: int) -> int:
    """Round ``x`` up to a multiple of ``y`` (a power of two)."""
    _require_power_of_two(y, "alignment")
    return round_down(x + (y - 1), y)
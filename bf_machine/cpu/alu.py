"""
Tape Machine — Delta Arithmetic

Cells are unsigned 8-bit and never wrap: incrementing 0xFF or
decrementing 0x00 is a fault, not modular arithmetic.
"""

from ..config import CELL_MIN, CELL_MAX


class DeltaOverflow(ArithmeticError):
    """Cell delta would leave 0..255. Carries the attempted delta."""
    def __init__(self, value: int, delta: int):
        self.value = value
        self.delta = delta
        super().__init__(f"{value} {delta:+d} is outside {CELL_MIN}..{CELL_MAX}")


def apply_delta(current: int, delta: int) -> int:
    """Return current + delta, or raise DeltaOverflow when it leaves a byte.

    Only single steps (+1 / -1) are valid deltas.
    """
    if delta not in (1, -1):
        raise ValueError(f"delta must be +1 or -1, got {delta}")
    result = current + delta
    if result < CELL_MIN or result > CELL_MAX:
        raise DeltaOverflow(current, delta)
    return result

"""
Tape Machine — Bounded Memory Tape

Fixed-capacity byte tape, every cell starts at 0x00. There is no
implicit growth and no wraparound: any address outside [0, capacity)
is a PtrOutOfBounds fault on both read and write.

The tape also remembers the highest address ever written. That mark is
only used for diagnostic dumps and has no effect on execution.
"""

from typing import Dict

from ..config import DEFAULT_TAPE_SIZE, CELL_MIN, CELL_MAX
from ..errors import PtrOutOfBounds


class Tape:
    """Byte-addressable tape with checked read/write."""

    def __init__(self, capacity: int = DEFAULT_TAPE_SIZE):
        if capacity < 1:
            raise ValueError(f"Tape capacity must be >= 1, got {capacity}")
        self._cells = bytearray(capacity)
        self._highest_written = 0

    @property
    def capacity(self) -> int:
        return len(self._cells)

    @property
    def highest_written(self) -> int:
        return self._highest_written

    def __len__(self) -> int:
        return len(self._cells)

    def _check(self, address: int):
        # Negative indexes would silently address the far end of a bytearray
        if not 0 <= address < len(self._cells):
            raise PtrOutOfBounds(address)

    # --- Core read/write ---

    def read(self, address: int) -> int:
        """Read the byte at address."""
        self._check(address)
        return self._cells[address]

    def write(self, address: int, value: int):
        """Store a byte at address. Values outside 0..255 are rejected."""
        self._check(address)
        if not CELL_MIN <= value <= CELL_MAX:
            raise ValueError(f"Cell value must be {CELL_MIN}..{CELL_MAX}, got {value}")
        self._cells[address] = value
        if address > self._highest_written:
            self._highest_written = address

    # --- Snapshots ---

    def snapshot(self) -> bytes:
        """Immutable copy of the whole tape."""
        return bytes(self._cells)

    @staticmethod
    def diff_snapshots(snap_a: bytes, snap_b: bytes) -> Dict[int, tuple]:
        """Compare two snapshots, return {addr: (old, new)} for changed cells."""
        changes = {}
        for i in range(min(len(snap_a), len(snap_b))):
            if snap_a[i] != snap_b[i]:
                changes[i] = (snap_a[i], snap_b[i])
        return changes

    def clear(self):
        """Zero every cell and forget the high-water mark."""
        self._cells[:] = bytes(len(self._cells))
        self._highest_written = 0

    # --- Dumps ---

    def dump(self) -> str:
        """Compact dump of cells up to the highest written address.

        Format: "[03.00.FF.]" (each cell is two hex digits and a dot).
        """
        cells = ''.join(f'{b:02X}.' for b in self._cells[:self._highest_written + 1])
        return f'[{cells}]'

    def hexdump(self, start: int = 0, length: int = 256) -> str:
        """Address / hex / ASCII listing, 16 cells per line."""
        end = min(start + length, len(self._cells))
        lines = []
        for addr in range(start, end, 16):
            row = self._cells[addr:min(addr + 16, end)]
            hex_bytes = ' '.join(f'{b:02X}' for b in row)
            ascii_bytes = ''.join(chr(b) if 0x20 <= b < 0x7F else '.' for b in row)
            lines.append(f'{addr:05d}  {hex_bytes:<47}  {ascii_bytes}')
        return '\n'.join(lines)

    def __repr__(self) -> str:
        return f'Tape(capacity={self.capacity}, cells={self.dump()})'

"""
Machine fault taxonomy.

Every failing machine operation raises exactly one MachineFault. The set
of fault kinds is closed:

  PTR_OUT_OF_BOUNDS     data pointer would leave the tape
  VAL_OUT_OF_BOUNDS     cell increment/decrement would leave 0..255
  INVALID_CHAR          no single-byte character available on input
  STACK_UNDERFLOW       loop end with no open loop
  HALTED_MACHINE        symbol fed to a halted machine
  MISMATCHED_BRACKETS   end of source while skipping a loop body
  UNPRINTABLE_BYTE      cell is not a standalone UTF-8 character

Faults carry their diagnostic payload as read-only attributes and are
never retried; str(fault) is the description shown to the user.
"""

from __future__ import annotations
import enum


class FaultKind(enum.Enum):
    PTR_OUT_OF_BOUNDS = "PtrOutOfBounds"
    VAL_OUT_OF_BOUNDS = "ValOutOfBounds"
    INVALID_CHAR = "InvalidChar"
    STACK_UNDERFLOW = "StackUnderflow"
    HALTED_MACHINE = "HaltedMachine"
    MISMATCHED_BRACKETS = "MismatchedBrackets"
    UNPRINTABLE_BYTE = "UnprintableByte"


class MachineFault(Exception):
    """Base class for all machine faults."""
    kind: FaultKind

    @property
    def payload(self) -> dict:
        """Diagnostic context as a plain dict (empty for payload-less kinds)."""
        return {}

    def __repr__(self) -> str:
        fields = ", ".join(f"{k}={v!r}" for k, v in self.payload.items())
        return f"{type(self).__name__}({fields})"


class PtrOutOfBounds(MachineFault):
    kind = FaultKind.PTR_OUT_OF_BOUNDS

    def __init__(self, pointer: int):
        self._pointer = pointer
        super().__init__(f"Data pointer out of bounds at {pointer}")

    @property
    def pointer(self) -> int:
        return self._pointer

    @property
    def payload(self) -> dict:
        return {"pointer": self._pointer}


class ValOutOfBounds(MachineFault):
    kind = FaultKind.VAL_OUT_OF_BOUNDS

    def __init__(self, address: int, delta: int):
        self._address = address
        self._delta = delta
        super().__init__(
            f"Cell value out of bounds at address {address} (delta {delta:+d})"
        )

    @property
    def address(self) -> int:
        return self._address

    @property
    def delta(self) -> int:
        return self._delta

    @property
    def payload(self) -> dict:
        return {"address": self._address, "delta": self._delta}


class InvalidChar(MachineFault):
    kind = FaultKind.INVALID_CHAR

    def __init__(self):
        super().__init__("Input is not a single-byte character")


class StackUnderflow(MachineFault):
    kind = FaultKind.STACK_UNDERFLOW

    def __init__(self):
        super().__init__("Loop end without a matching loop start")


class HaltedMachine(MachineFault):
    kind = FaultKind.HALTED_MACHINE

    def __init__(self):
        super().__init__("Machine is halted")


class MismatchedBrackets(MachineFault):
    kind = FaultKind.MISMATCHED_BRACKETS

    def __init__(self, instruction_ptr: int, missing_brackets: int):
        self._instruction_ptr = instruction_ptr
        self._missing_brackets = missing_brackets
        super().__init__(
            f"End of source at {instruction_ptr} with "
            f"{missing_brackets} unclosed loop(s)"
        )

    @property
    def instruction_ptr(self) -> int:
        return self._instruction_ptr

    @property
    def missing_brackets(self) -> int:
        return self._missing_brackets

    @property
    def payload(self) -> dict:
        return {
            "instruction_ptr": self._instruction_ptr,
            "missing_brackets": self._missing_brackets,
        }


class UnprintableByte(MachineFault):
    kind = FaultKind.UNPRINTABLE_BYTE

    def __init__(self, byte: int):
        self._byte = byte
        super().__init__(f"Byte 0x{byte:02X} is not a printable character")

    @property
    def byte(self) -> int:
        return self._byte

    @property
    def payload(self) -> dict:
        return {"byte": self._byte}

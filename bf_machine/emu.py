"""
Tape Machine — Execution Engine

Owns the tape, the data pointer, the instruction pointer, the
loop-return stack and the machine state. The engine is fed one decoded
Symbol at a time; it never reads the program itself. A driver polls
instruction_ptr, decodes the symbol there and calls interpret_symbol()
until the machine halts or a fault is raised (see runner.py).

State machine:

  HALTED       any symbol          -> HaltedMachine fault
  SKIPPING(d)  LOOP_END            -> d-1 (RUNNING at 0), ip += 1
  SKIPPING(d)  EOF                 -> MismatchedBrackets(ip, d)
  SKIPPING(d)  LOOP_START          -> SKIPPING(d+1), ip += 1
  SKIPPING(d)  anything else       -> ip += 1
  RUNNING      EOF                 -> HALTED
  RUNNING      OTHER               -> ip += 1
  RUNNING      instruction         -> execute

Every instruction except LOOP_END advances ip by one after it succeeds.
LOOP_END sets ip back to the LOOP_START it pops, so the loop guard is
evaluated again from scratch on the next cycle.

A fault leaves pointers, tape, stack and state exactly as they were.
"""

from __future__ import annotations
import enum
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from .config import DEFAULT_TAPE_SIZE
from .cpu.alu import apply_delta, DeltaOverflow
from .cpu.decoder import Instruction, Symbol, SymbolKind
from .errors import (
    PtrOutOfBounds, ValOutOfBounds, InvalidChar, StackUnderflow,
    HaltedMachine, MismatchedBrackets, UnprintableByte,
)
from .mem.memory import Tape
from .periph.console import Console, StdioConsole


class Mode(enum.Enum):
    RUNNING = 'RUNNING'
    SKIPPING = 'SKIPPING'
    HALTED = 'HALTED'


@dataclass(frozen=True)
class MachineState:
    """Running, Skipping(depth >= 1) or Halted."""
    mode: Mode
    depth: int = 0

    def __post_init__(self):
        if self.mode is Mode.SKIPPING:
            if self.depth < 1:
                raise ValueError(f"Skip depth must be >= 1, got {self.depth}")
        elif self.depth != 0:
            raise ValueError(f"{self.mode.value} state has no skip depth")

    @classmethod
    def skipping(cls, depth: int) -> MachineState:
        return cls(Mode.SKIPPING, depth)

    def __str__(self) -> str:
        if self.mode is Mode.SKIPPING:
            return f'SKIPPING({self.depth})'
        return self.mode.value


RUNNING = MachineState(Mode.RUNNING)
HALTED = MachineState(Mode.HALTED)


class Machine:
    """Tape machine executing the eight-instruction language.

    Usage:
        m = Machine(console=ScriptedConsole())
        m.interpret_symbol(decode_symbol('+'))
        m.tape.read(0)   # 1
    """

    def __init__(self, console: Optional[Console] = None,
                 tape_size: int = DEFAULT_TAPE_SIZE):
        self.console = console if console is not None else StdioConsole()
        self.tape = Tape(tape_size)
        self._data_ptr = 0
        self._instruction_ptr = 0
        self._loop_stack: List[int] = []
        self._state = RUNNING

        self._dispatch = self._build_dispatch()

    # ══════════════════════════════════════════════
    # Inspection
    # ══════════════════════════════════════════════

    @property
    def instruction_ptr(self) -> int:
        return self._instruction_ptr

    @property
    def data_ptr(self) -> int:
        return self._data_ptr

    @property
    def state(self) -> MachineState:
        return self._state

    @property
    def loop_stack(self) -> Tuple[int, ...]:
        """Open loop-start positions, innermost last."""
        return tuple(self._loop_stack)

    @property
    def is_halted(self) -> bool:
        return self._state.mode is Mode.HALTED

    @property
    def current_cell(self) -> int:
        return self.tape.read(self._data_ptr)

    # ══════════════════════════════════════════════
    # Transition function
    # ══════════════════════════════════════════════

    def interpret_symbol(self, symbol: Symbol):
        """Apply one symbol to the machine. Raises a MachineFault on failure."""
        mode = self._state.mode

        if mode is Mode.HALTED:
            raise HaltedMachine()

        if mode is Mode.SKIPPING:
            self._skip(symbol)
            return

        if symbol.kind is SymbolKind.EOF:
            self._state = HALTED
        elif symbol.kind is SymbolKind.OTHER:
            self._instruction_ptr += 1
        else:
            self._run_instruction(symbol.instruction)

    def _skip(self, symbol: Symbol):
        depth = self._state.depth
        if symbol.kind is SymbolKind.EOF:
            raise MismatchedBrackets(self._instruction_ptr, depth)

        if symbol.is_instruction(Instruction.LOOP_END):
            depth -= 1
            self._state = RUNNING if depth == 0 else MachineState.skipping(depth)
        elif symbol.is_instruction(Instruction.LOOP_START):
            self._state = MachineState.skipping(depth + 1)
        self._instruction_ptr += 1

    def _run_instruction(self, instruction: Instruction):
        self._dispatch[instruction]()
        if instruction is not Instruction.LOOP_END:
            self._instruction_ptr += 1

    def _build_dispatch(self) -> Dict[Instruction, Callable[[], None]]:
        return {
            Instruction.MOVE_RIGHT: self._op_move_right,
            Instruction.MOVE_LEFT:  self._op_move_left,
            Instruction.INCREMENT:  self._op_increment,
            Instruction.DECREMENT:  self._op_decrement,
            Instruction.PRINT:      self._op_print,
            Instruction.READ:       self._op_read,
            Instruction.LOOP_START: self._op_loop_start,
            Instruction.LOOP_END:   self._op_loop_end,
        }

    # ══════════════════════════════════════════════
    # Instruction handlers
    # ══════════════════════════════════════════════

    def _op_move_right(self):
        if self._data_ptr + 1 >= self.tape.capacity:
            raise PtrOutOfBounds(self._data_ptr)
        self._data_ptr += 1

    def _op_move_left(self):
        if self._data_ptr <= 0:
            raise PtrOutOfBounds(self._data_ptr)
        self._data_ptr -= 1

    def _delta_cell(self, delta: int):
        value = self.tape.read(self._data_ptr)
        try:
            value = apply_delta(value, delta)
        except DeltaOverflow as e:
            raise ValOutOfBounds(self._data_ptr, e.delta) from e
        self.tape.write(self._data_ptr, value)

    def _op_increment(self):
        self._delta_cell(1)

    def _op_decrement(self):
        self._delta_cell(-1)

    def _op_print(self):
        byte = self.tape.read(self._data_ptr)
        if self.console.print_char(byte) is None:
            raise UnprintableByte(byte)

    def _op_read(self):
        # Check the address before consuming a line of input
        self.tape.read(self._data_ptr)
        byte = self.console.read_byte()
        if byte is None:
            raise InvalidChar()
        self.tape.write(self._data_ptr, byte)

    def _op_loop_start(self):
        if self.tape.read(self._data_ptr) != 0:
            self._loop_stack.append(self._instruction_ptr)
        else:
            self._state = MachineState.skipping(1)

    def _op_loop_end(self):
        if not self._loop_stack:
            raise StackUnderflow()
        self._instruction_ptr = self._loop_stack.pop()

    # ══════════════════════════════════════════════
    # Reset
    # ══════════════════════════════════════════════

    def reset(self):
        """Back to the initial state: zeroed tape, pointers at 0, RUNNING."""
        self.tape.clear()
        self._data_ptr = 0
        self._instruction_ptr = 0
        self._loop_stack.clear()
        self._state = RUNNING

    def __repr__(self) -> str:
        return (f'Machine(ip={self._instruction_ptr}, ptr={self._data_ptr}, '
                f'state={self._state}, stack={self._loop_stack})')

"""
Bounded tape machine for the eight-instruction language
=======================================================
Executes > < + - . , [ ] programs over a fixed 30,000-cell byte tape.
Cells never wrap and the data pointer never leaves the tape: either
condition is a fault, not a silent correction.

Architecture:
    ┌──────────┐    ┌───────────┐    ┌──────────────┐
    │  Source  │───>│  Decoder  │───>│   Machine    │───> Console (I/O)
    │  (str)   │    │  (Symbol) │    │ tape + state │
    └──────────┘    └───────────┘    └──────────────┘
         ^                                  │
         └──────── runner.run_program ──────┘
                 (poll ip, decode, feed)

    - cpu/decoder.py:     character -> Symbol
    - cpu/alu.py:         checked +1/-1 on a cell
    - mem/memory.py:      bounded tape with checked read/write
    - errors.py:          MachineFault hierarchy
    - emu.py:             Machine state machine and instruction handlers
    - periph/console.py:  stdin/stdout and scripted I/O collaborators
    - runner.py:          program loader and driver loop
"""

__version__ = "0.2.0"

from .config import DEFAULT_TAPE_SIZE, MachineConfig
from .cpu.decoder import Instruction, Symbol, SymbolKind, decode_symbol, symbol_at
from .emu import Machine, MachineState, Mode
from .errors import (
    FaultKind, MachineFault, PtrOutOfBounds, ValOutOfBounds, InvalidChar,
    StackUnderflow, HaltedMachine, MismatchedBrackets, UnprintableByte,
)
from .mem.memory import Tape
from .periph.console import Console, StdioConsole, ScriptedConsole
from .runner import ProgramLoadError, RunResult, StopReason, load_program, run_program, run_file

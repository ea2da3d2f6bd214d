"""
Program loader and driver loop.

The driver owns control flow: it asks the machine for its instruction
pointer, decodes the symbol at that position and feeds it back, until
the machine halts or raises a fault. Faults are not caught here; they
reach the caller exactly as the machine raised them.

An optional step budget stops the loop early with STEP_LIMIT. That is a
driver decision only, the machine itself has no notion of a timeout.
"""

from __future__ import annotations
import enum
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Union

from .config import DEFAULT_TAPE_SIZE
from .cpu.decoder import symbol_at
from .emu import Machine
from .errors import MachineFault
from .periph.console import Console


log = logging.getLogger(__name__)


class ProgramLoadError(Exception):
    """Raised when a program file cannot be read."""
    def __init__(self, message: str, path: Union[str, Path]):
        self.path = Path(path)
        super().__init__(f"{self.path}: {message}")


class StopReason(enum.Enum):
    HALT = 'HALT'
    STEP_LIMIT = 'STEP_LIMIT'


@dataclass
class RunResult:
    reason: StopReason
    steps: int
    machine: Machine
    trace: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.reason is StopReason.HALT


def load_program(path: Union[str, Path]) -> str:
    """Read a program file as text (UTF-8)."""
    p = Path(path)
    try:
        return p.read_text(encoding='utf-8')
    except FileNotFoundError:
        raise ProgramLoadError("file not found", p) from None
    except UnicodeDecodeError as e:
        raise ProgramLoadError(f"not valid UTF-8 ({e.reason})", p) from e
    except OSError as e:
        raise ProgramLoadError(e.strerror or str(e), p) from e


def format_trace(machine: Machine, symbol) -> str:
    return (f"{machine.instruction_ptr:6d}: {str(symbol):6s} "
            f"{str(machine.state):12s} ptr={machine.data_ptr:<5d} "
            f"cell=${machine.current_cell:02X} depth={len(machine.loop_stack)}")


def run_program(source: Sequence[str],
                machine: Optional[Machine] = None,
                console: Optional[Console] = None,
                max_steps: Optional[int] = None,
                trace: bool = False,
                tape_size: int = DEFAULT_TAPE_SIZE) -> RunResult:
    """Run source on a machine until it halts.

    Args:
        source: Indexable character sequence (a str works).
        machine: Machine to drive; a fresh one is built if omitted.
        console: I/O collaborator for a fresh machine, or a replacement
            for the given machine's console.
        max_steps: Symbols to feed before giving up with STEP_LIMIT.
        trace: Record one line per step (also logged at DEBUG).
        tape_size: Tape capacity for a fresh machine.

    Returns:
        RunResult with the stop reason and step count.

    Raises:
        MachineFault: the first fault the machine raised.
    """
    if machine is None:
        machine = Machine(console=console, tape_size=tape_size)
    elif console is not None:
        machine.console = console

    log.info("Running %d-character program (tape %d cells)",
             len(source), machine.tape.capacity)

    steps = 0
    trace_lines: List[str] = []

    while not machine.is_halted:
        if max_steps is not None and steps >= max_steps:
            log.warning("Step limit reached after %d steps at ip=%d",
                        steps, machine.instruction_ptr)
            return RunResult(StopReason.STEP_LIMIT, steps, machine, trace_lines)

        symbol = symbol_at(source, machine.instruction_ptr)
        if trace:
            line = format_trace(machine, symbol)
            trace_lines.append(line)
            log.debug(line)

        try:
            machine.interpret_symbol(symbol)
        except MachineFault as e:
            log.info("Fault after %d steps: %r", steps, e)
            raise
        steps += 1

    log.info("Halted after %d steps", steps)
    return RunResult(StopReason.HALT, steps, machine, trace_lines)


def run_file(path: Union[str, Path], **kwargs) -> RunResult:
    """load_program() + run_program()."""
    return run_program(load_program(path), **kwargs)

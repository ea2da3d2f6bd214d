"""
Tape Machine — Symbol Decoder

Maps one source character (or its absence) to a Symbol. The mapping is
total and side-effect free:

  >  MOVE_RIGHT     <  MOVE_LEFT
  +  INCREMENT      -  DECREMENT
  .  PRINT          ,  READ
  [  LOOP_START     ]  LOOP_END

No character (instruction pointer past the end of source) decodes to
EOF. Every other character decodes to OTHER and is a comment.
"""

from __future__ import annotations
import enum
from dataclasses import dataclass
from typing import Dict, Optional, Sequence


class Instruction(enum.Enum):
    MOVE_RIGHT = "MOVE_RIGHT"
    MOVE_LEFT = "MOVE_LEFT"
    INCREMENT = "INCREMENT"
    DECREMENT = "DECREMENT"
    PRINT = "PRINT"
    READ = "READ"
    LOOP_START = "LOOP_START"
    LOOP_END = "LOOP_END"


class SymbolKind(enum.Enum):
    INSTRUCTION = "INSTRUCTION"
    EOF = "EOF"
    OTHER = "OTHER"


# ──────────────────────────────────────────────
# Instruction table
# ──────────────────────────────────────────────

INSTRUCTION_CHARS: Dict[str, Instruction] = {
    '>': Instruction.MOVE_RIGHT,
    '<': Instruction.MOVE_LEFT,
    '+': Instruction.INCREMENT,
    '-': Instruction.DECREMENT,
    '.': Instruction.PRINT,
    ',': Instruction.READ,
    '[': Instruction.LOOP_START,
    ']': Instruction.LOOP_END,
}

CHAR_OF: Dict[Instruction, str] = {ins: ch for ch, ins in INSTRUCTION_CHARS.items()}


@dataclass(frozen=True)
class Symbol:
    """Decoded view of the character at one instruction pointer position."""
    kind: SymbolKind
    instruction: Optional[Instruction] = None
    char: Optional[str] = None

    @property
    def is_eof(self) -> bool:
        return self.kind is SymbolKind.EOF

    def is_instruction(self, instruction: Instruction) -> bool:
        return self.kind is SymbolKind.INSTRUCTION and self.instruction is instruction

    def __str__(self) -> str:
        if self.kind is SymbolKind.INSTRUCTION:
            return CHAR_OF[self.instruction]
        if self.kind is SymbolKind.EOF:
            return "<EOF>"
        return repr(self.char)


EOF = Symbol(SymbolKind.EOF)

# One shared Symbol per instruction
_INSTRUCTION_SYMBOLS: Dict[str, Symbol] = {
    ch: Symbol(SymbolKind.INSTRUCTION, instruction=ins)
    for ch, ins in INSTRUCTION_CHARS.items()
}


def decode_symbol(char: Optional[str]) -> Symbol:
    """Decode one source character. None means end of source."""
    if char is None:
        return EOF
    if len(char) != 1:
        raise ValueError(f"Expected a single character, got {char!r}")
    symbol = _INSTRUCTION_SYMBOLS.get(char)
    if symbol is not None:
        return symbol
    return Symbol(SymbolKind.OTHER, char=char)


def symbol_at(source: Sequence[str], ip: int) -> Symbol:
    """Decode the symbol at instruction pointer ip; EOF once past the end."""
    if 0 <= ip < len(source):
        return decode_symbol(source[ip])
    return EOF

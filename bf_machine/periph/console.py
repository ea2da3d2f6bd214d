"""
Tape Machine — Console Peripheral (input/output collaborators)

The engine never touches stdin/stdout directly. It talks to a Console:

  read_byte()       -> Optional[int]   one byte for the READ instruction
  print_char(byte)  -> Optional[str]   text written for PRINT, or None

Input contract: read one line of text, take its first character, and
accept it only if it encodes to exactly one UTF-8 byte. End of input,
an empty line or a multi-byte first character all mean "unavailable".

Output contract: the byte must decode on its own as a UTF-8 scalar
(i.e. 0x00-0x7F). Anything else is reported as a failure and nothing
is written.

StdioConsole wires these to text streams (stdin/stdout by default).
ScriptedConsole replays queued input lines and captures output, the
same way a test harness injects RX bytes and inspects a TX buffer.
"""

import abc
import sys
from collections import deque
from typing import Iterable, Optional, TextIO


def byte_from_line(line: str) -> Optional[int]:
    """First character of line as a byte, if it is a single UTF-8 byte."""
    if not line:
        return None
    encoded = line[0].encode('utf-8')
    if len(encoded) != 1:
        return None
    return encoded[0]


def char_from_byte(byte: int) -> Optional[str]:
    """Decode a lone byte as UTF-8, None if it is not a complete scalar."""
    try:
        return bytes([byte]).decode('utf-8')
    except UnicodeDecodeError:
        return None


class Console(abc.ABC):
    """Byte-level I/O capability handed to the machine."""

    @abc.abstractmethod
    def read_byte(self) -> Optional[int]:
        """Return one input byte, or None when none can be obtained."""

    @abc.abstractmethod
    def print_char(self, byte: int) -> Optional[str]:
        """Emit byte as a character; return the written text or None."""


class StdioConsole(Console):
    """Console over text streams. Defaults to the process stdin/stdout."""

    def __init__(self, stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None):
        self._stdin = stdin
        self._stdout = stdout

    @property
    def stdin(self) -> TextIO:
        return self._stdin if self._stdin is not None else sys.stdin

    @property
    def stdout(self) -> TextIO:
        return self._stdout if self._stdout is not None else sys.stdout

    def read_byte(self) -> Optional[int]:
        return byte_from_line(self.stdin.readline())

    def print_char(self, byte: int) -> Optional[str]:
        text = char_from_byte(byte)
        if text is None:
            return None
        self.stdout.write(text)
        self.stdout.flush()
        return text


class ScriptedConsole(Console):
    """In-memory console: queued input lines, captured output.

    Example:
        con = ScriptedConsole(["A", "b"])
        con.read_byte()   # 0x41
        con.print_char(0x48)
        con.output        # "H"
    """

    def __init__(self, lines: Iterable[str] = ()):
        self._rx_queue: deque = deque(lines)
        self.tx_buffer: bytearray = bytearray()
        self.reads = 0

    def feed(self, *lines: str):
        """Queue more input lines."""
        self._rx_queue.extend(lines)

    @property
    def pending(self) -> int:
        return len(self._rx_queue)

    def read_byte(self) -> Optional[int]:
        if not self._rx_queue:
            return None
        self.reads += 1
        return byte_from_line(self._rx_queue.popleft())

    def print_char(self, byte: int) -> Optional[str]:
        text = char_from_byte(byte)
        if text is None:
            return None
        self.tx_buffer.append(byte)
        return text

    @property
    def output(self) -> str:
        """Everything printed so far, as text."""
        return self.tx_buffer.decode('utf-8')

    def reset(self):
        self._rx_queue.clear()
        self.tx_buffer.clear()
        self.reads = 0

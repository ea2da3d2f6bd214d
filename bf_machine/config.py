"""
Tape machine configuration.

Module constants describe the fixed machine geometry. MachineConfig
collects the per-run knobs and can be built from the environment:

  BFVM_TAPE_SIZE   Number of tape cells (default 30000)
  BFVM_MAX_STEPS   Driver step budget, 0 or unset = unbounded
  BFVM_TRACE       1/true/yes to record a step trace
  BFVM_LOG_LEVEL   Console log level name (default WARNING)

Command-line flags in bfrun.py override whatever the environment sets.
"""

from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional


DEFAULT_TAPE_SIZE = 30_000
CELL_MIN = 0x00
CELL_MAX = 0xFF

ENV_TAPE_SIZE = "BFVM_TAPE_SIZE"
ENV_MAX_STEPS = "BFVM_MAX_STEPS"
ENV_TRACE = "BFVM_TRACE"
ENV_LOG_LEVEL = "BFVM_LOG_LEVEL"

_TRUTHY = ("1", "true", "yes", "on")


def _parse_positive(name: str, raw: str) -> int:
    try:
        value = int(raw.strip())
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value < 1:
        raise ValueError(f"{name} must be >= 1, got {value}")
    return value


def parse_log_level(raw: str) -> int:
    """Turn 'debug' / 'INFO' / '10' into a logging level number."""
    raw = raw.strip()
    if raw.isdigit():
        return int(raw)
    level = logging.getLevelName(raw.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {raw!r}")
    return level


@dataclass
class MachineConfig:
    tape_size: int = DEFAULT_TAPE_SIZE
    max_steps: Optional[int] = None
    trace: bool = False
    log_level: int = logging.WARNING

    def __post_init__(self):
        if self.tape_size < 1:
            raise ValueError(f"tape_size must be >= 1, got {self.tape_size}")
        if self.max_steps is not None and self.max_steps < 1:
            raise ValueError(f"max_steps must be >= 1, got {self.max_steps}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> MachineConfig:
        """Build a config from BFVM_* variables, defaults for anything unset."""
        env = os.environ if environ is None else environ
        kwargs = {}

        if env.get(ENV_TAPE_SIZE):
            kwargs["tape_size"] = _parse_positive(ENV_TAPE_SIZE, env[ENV_TAPE_SIZE])

        steps = env.get(ENV_MAX_STEPS, "").strip()
        if steps and steps != "0":
            kwargs["max_steps"] = _parse_positive(ENV_MAX_STEPS, steps)

        if env.get(ENV_TRACE):
            kwargs["trace"] = env[ENV_TRACE].strip().lower() in _TRUTHY

        if env.get(ENV_LOG_LEVEL):
            kwargs["log_level"] = parse_log_level(env[ENV_LOG_LEVEL])

        return cls(**kwargs)

#!/usr/bin/env python3
"""
bfrun — run a program on the bounded tape machine

Usage:
    python bfrun.py <program.bf> [--tape-size N] [--max-steps N]
                                 [--trace] [--dump] [--log-file PATH] [-v]

Program input is read from stdin one line per ',' instruction; '.'
writes to stdout.

Exit codes:
    0  program halted normally
    1  machine fault (diagnostic printed)
    2  usage, configuration or file error
    3  --max-steps reached before the program halted

Examples:
    python bfrun.py hello.bf
    echo A | python bfrun.py echo.bf --dump
    python bfrun.py loop.bf --max-steps 100000 --trace --log-file run.log
"""

import argparse
import logging
import sys
from typing import List, Optional

from bf_machine import __version__
from bf_machine.config import MachineConfig
from bf_machine.errors import MachineFault
from bf_machine.log_setup import setup_logging
from bf_machine.runner import ProgramLoadError, StopReason, load_program, run_program
from bf_machine.emu import Machine
from bf_machine.periph.console import StdioConsole


EXIT_OK = 0
EXIT_FAULT = 1
EXIT_USAGE = 2
EXIT_STEP_LIMIT = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bfrun",
        description="Run a program on the bounded tape machine",
        epilog="Environment: BFVM_TAPE_SIZE, BFVM_MAX_STEPS, BFVM_TRACE, BFVM_LOG_LEVEL",
    )
    parser.add_argument("program", help="Program source file")
    parser.add_argument("--tape-size", type=int, default=None,
                        help="Number of tape cells (default: 30000)")
    parser.add_argument("--max-steps", type=int, default=None,
                        help="Stop after this many steps (default: unbounded)")
    parser.add_argument("--trace", action="store_true",
                        help="Log every step at DEBUG level")
    parser.add_argument("--dump", action="store_true",
                        help="Print the tape contents after the run")
    parser.add_argument("--log-file", default=None,
                        help="Also write the log (DEBUG and up) to this file")
    parser.add_argument("--verbose", "-v", action="count", default=0,
                        help="More console logging (-v info, -vv debug)")
    parser.add_argument("--version", action="version",
                        version=f"bfrun {__version__}")
    return parser


def resolve_config(args: argparse.Namespace) -> MachineConfig:
    """Environment first, then command-line overrides."""
    config = MachineConfig.from_env()
    if args.tape_size is not None:
        config.tape_size = args.tape_size
    if args.max_steps is not None:
        config.max_steps = args.max_steps
    if args.trace:
        config.trace = True
    if args.verbose == 1:
        config.log_level = logging.INFO
    elif args.verbose >= 2:
        config.log_level = logging.DEBUG
    # Re-run the dataclass checks on the overridden values
    return MachineConfig(config.tape_size, config.max_steps,
                         config.trace, config.log_level)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = resolve_config(args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE

    log = setup_logging(console_level=config.log_level, log_file=args.log_file)
    log.debug("Config: %s", config)

    try:
        source = load_program(args.program)
    except ProgramLoadError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE

    machine = Machine(console=StdioConsole(), tape_size=config.tape_size)
    try:
        result = run_program(source, machine=machine,
                             max_steps=config.max_steps, trace=config.trace)
    except MachineFault as e:
        print(f"Finished with error: {e}")
        if args.dump:
            print(machine.tape.dump())
        return EXIT_FAULT

    if args.dump:
        print(machine.tape.dump())

    if result.reason is StopReason.STEP_LIMIT:
        print(f"Stopped: step limit of {config.max_steps} reached")
        return EXIT_STEP_LIMIT

    print("Finished OK!")
    return EXIT_OK


def main_entry():
    sys.exit(main())


if __name__ == "__main__":
    main_entry()

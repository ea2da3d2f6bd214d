"""
Driver loop, program loader, configuration and the bfrun command.
"""

import io
import logging

import pytest

import bfrun
from bf_machine.config import (
    DEFAULT_TAPE_SIZE, MachineConfig, parse_log_level,
)
from bf_machine.emu import Machine
from bf_machine.errors import MismatchedBrackets, StackUnderflow, ValOutOfBounds
from bf_machine.log_setup import setup_logging
from bf_machine.periph.console import ScriptedConsole
from bf_machine.runner import (
    ProgramLoadError, StopReason, load_program, run_file, run_program,
)


# ─── Driver loop ─────────────────────

class TestRunProgram:
    def test_halts_and_counts_steps(self):
        con = ScriptedConsole()
        result = run_program("+++.", console=con)
        assert result.reason is StopReason.HALT
        assert result.ok
        assert result.steps == 5            # four instructions + EOF
        assert result.machine.tape.read(0) == 3
        assert con.tx_buffer == bytearray([3])

    def test_fault_propagates_unchanged(self):
        with pytest.raises(ValOutOfBounds) as exc:
            run_program("+>-", console=ScriptedConsole())
        assert exc.value.address == 1
        assert exc.value.delta == -1

    def test_scenario_faults_through_driver(self):
        with pytest.raises(StackUnderflow):
            run_program("]", console=ScriptedConsole())
        with pytest.raises(MismatchedBrackets):
            run_program("[", console=ScriptedConsole())

    def test_step_limit(self):
        result = run_program("+[]", console=ScriptedConsole(), max_steps=50)
        assert result.reason is StopReason.STEP_LIMIT
        assert not result.ok
        assert result.steps == 50
        assert not result.machine.is_halted

    def test_step_limit_not_hit(self):
        result = run_program("++", console=ScriptedConsole(), max_steps=3)
        assert result.reason is StopReason.HALT

    def test_uses_given_machine_and_console(self):
        m = Machine(console=ScriptedConsole(), tape_size=4)
        con = ScriptedConsole(["A"])
        result = run_program(",.", machine=m, console=con)
        assert result.machine is m
        assert m.console is con
        assert con.output == "A"

    def test_tape_size_for_fresh_machine(self):
        result = run_program("", console=ScriptedConsole(), tape_size=16)
        assert result.machine.tape.capacity == 16

    def test_trace_lines(self):
        result = run_program("+x", console=ScriptedConsole(), trace=True)
        assert len(result.trace) == 3
        assert result.trace[0].split()[:3] == ["0:", "+", "RUNNING"]
        assert "cell=$01" in result.trace[1]
        assert "<EOF>" in result.trace[2]

    def test_no_trace_by_default(self):
        assert run_program("+", console=ScriptedConsole()).trace == []

    def test_logs_start_and_halt(self, caplog):
        with caplog.at_level(logging.INFO, logger="bf_machine"):
            run_program("+", console=ScriptedConsole())
        messages = [r.getMessage() for r in caplog.records]
        assert any("Running 1-character program" in m for m in messages)
        assert any("Halted after 2 steps" in m for m in messages)


# ─── Loader ─────────────────────

class TestLoader:
    def test_load_program(self, tmp_path):
        path = tmp_path / "p.bf"
        path.write_text("+[-] comment ü", encoding="utf-8")
        assert load_program(path) == "+[-] comment ü"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ProgramLoadError) as exc:
            load_program(tmp_path / "nope.bf")
        assert "file not found" in str(exc.value)

    def test_invalid_utf8(self, tmp_path):
        path = tmp_path / "bad.bf"
        path.write_bytes(b"+\xff\xfe")
        with pytest.raises(ProgramLoadError):
            load_program(path)

    def test_run_file(self, tmp_path):
        path = tmp_path / "hi.bf"
        path.write_text("+" * 33 + ".", encoding="utf-8")
        con = ScriptedConsole()
        result = run_file(path, console=con)
        assert result.ok
        assert con.output == "!"


# ─── Configuration ─────────────────────

class TestConfig:
    def test_defaults(self):
        cfg = MachineConfig.from_env({})
        assert cfg.tape_size == DEFAULT_TAPE_SIZE
        assert cfg.max_steps is None
        assert cfg.trace is False
        assert cfg.log_level == logging.WARNING

    def test_from_env(self):
        cfg = MachineConfig.from_env({
            "BFVM_TAPE_SIZE": "128",
            "BFVM_MAX_STEPS": "1000",
            "BFVM_TRACE": "yes",
            "BFVM_LOG_LEVEL": "debug",
        })
        assert cfg.tape_size == 128
        assert cfg.max_steps == 1000
        assert cfg.trace is True
        assert cfg.log_level == logging.DEBUG

    def test_zero_steps_means_unbounded(self):
        assert MachineConfig.from_env({"BFVM_MAX_STEPS": "0"}).max_steps is None

    def test_bad_values(self):
        with pytest.raises(ValueError):
            MachineConfig.from_env({"BFVM_TAPE_SIZE": "lots"})
        with pytest.raises(ValueError):
            MachineConfig.from_env({"BFVM_TAPE_SIZE": "-5"})
        with pytest.raises(ValueError):
            MachineConfig.from_env({"BFVM_LOG_LEVEL": "chatty"})
        with pytest.raises(ValueError):
            MachineConfig(tape_size=0)

    def test_parse_log_level(self):
        assert parse_log_level("INFO") == logging.INFO
        assert parse_log_level("30") == 30


class TestLogSetup:
    def test_idempotent(self, tmp_path):
        log_file = tmp_path / "logs" / "run.log"
        logger = setup_logging(logging.ERROR, log_file=log_file)
        assert len(logger.handlers) == 2
        logger = setup_logging(logging.ERROR)
        assert len(logger.handlers) == 1
        assert log_file.exists()


# ─── bfrun command ─────────────────────

@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("BFVM_TAPE_SIZE", "BFVM_MAX_STEPS", "BFVM_TRACE", "BFVM_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


def _program(tmp_path, text: str) -> str:
    path = tmp_path / "prog.bf"
    path.write_text(text, encoding="utf-8")
    return str(path)


class TestCli:
    def test_success(self, tmp_path, capsys):
        code = bfrun.main([_program(tmp_path, "+" * 65 + ".")])
        out = capsys.readouterr().out
        assert code == bfrun.EXIT_OK
        assert out == "AFinished OK!\n"

    def test_fault(self, tmp_path, capsys):
        code = bfrun.main([_program(tmp_path, "<")])
        out = capsys.readouterr().out
        assert code == bfrun.EXIT_FAULT
        assert out.startswith("Finished with error: Data pointer out of bounds at 0")

    def test_missing_file(self, tmp_path, capsys):
        code = bfrun.main([str(tmp_path / "missing.bf")])
        assert code == bfrun.EXIT_USAGE
        assert "file not found" in capsys.readouterr().err

    def test_bad_tape_size(self, tmp_path, capsys):
        code = bfrun.main([_program(tmp_path, "+"), "--tape-size", "0"])
        assert code == bfrun.EXIT_USAGE

    def test_tape_size_flag(self, tmp_path, capsys):
        code = bfrun.main([_program(tmp_path, ">>"), "--tape-size", "2"])
        assert code == bfrun.EXIT_FAULT
        assert "out of bounds at 1" in capsys.readouterr().out

    def test_step_limit(self, tmp_path, capsys):
        code = bfrun.main([_program(tmp_path, "+[]"), "--max-steps", "10"])
        assert code == bfrun.EXIT_STEP_LIMIT
        assert "step limit of 10" in capsys.readouterr().out

    def test_env_step_limit(self, tmp_path, capsys, monkeypatch):
        monkeypatch.setenv("BFVM_MAX_STEPS", "10")
        assert bfrun.main([_program(tmp_path, "+[]")]) == bfrun.EXIT_STEP_LIMIT

    def test_dump(self, tmp_path, capsys):
        code = bfrun.main([_program(tmp_path, "+++>+"), "--dump"])
        out = capsys.readouterr().out
        assert code == bfrun.EXIT_OK
        assert out == "[03.01.]\nFinished OK!\n"

    def test_reads_stdin(self, tmp_path, capsys, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO("k\n"))
        code = bfrun.main([_program(tmp_path, ",.")])
        assert code == bfrun.EXIT_OK
        assert capsys.readouterr().out == "kFinished OK!\n"

    def test_log_file(self, tmp_path, capsys):
        log_file = tmp_path / "run.log"
        code = bfrun.main([_program(tmp_path, "+-"), "--trace",
                           "--log-file", str(log_file)])
        assert code == bfrun.EXIT_OK
        text = log_file.read_text(encoding="utf-8")
        assert "Halted after 3 steps" in text
        assert "RUNNING" in text

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc:
            bfrun.main(["--version"])
        assert exc.value.code == 0
        assert "bfrun" in capsys.readouterr().out

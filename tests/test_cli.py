"""
intcodekit CLI + logging setup tests.

The CLI is driven through main(argv) with programs written to tmp_path;
stdout/stderr are checked via capsys.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import io
import logging

import pytest
from rich.logging import RichHandler

import intcodekit
from intcode_vm.log_setup import setup_logging


QUINE = "109,1,204,-1,1001,100,1,100,1008,100,16,101,1006,101,0,99"


def _program(tmp_path, text):
    path = tmp_path / "prog.txt"
    path.write_text(text + "\n", encoding="utf-8")
    return str(path)


class TestRunCommand:

    def test_input_and_output(self, tmp_path, capsys):
        prog = _program(tmp_path, "3,9,8,9,10,9,4,9,99,-1,8")
        assert intcodekit.main(["run", prog, "--input", "8"]) == intcodekit.EXIT_OK
        assert capsys.readouterr().out == "1\n"

    def test_quiet_prints_comma_list(self, tmp_path, capsys):
        prog = _program(tmp_path, QUINE)
        assert intcodekit.main(["run", prog, "-q"]) == intcodekit.EXIT_OK
        assert capsys.readouterr().out.strip() == QUINE

    def test_multiple_inputs(self, tmp_path, capsys):
        prog = _program(tmp_path, "3,0,3,1,4,1,4,0,99")
        assert intcodekit.main(["run", prog, "-i", "5,6"]) == intcodekit.EXIT_OK
        assert capsys.readouterr().out.split() == ["6", "5"]

    def test_stalled(self, tmp_path, capsys):
        prog = _program(tmp_path, "3,0,4,0,99")
        assert intcodekit.main(["run", prog]) == intcodekit.EXIT_STALLED
        assert "waiting for input" in capsys.readouterr().err

    def test_interactive(self, tmp_path, capsys, monkeypatch):
        monkeypatch.setattr("builtins.input", lambda prompt="": "8")
        prog = _program(tmp_path, "3,9,8,9,10,9,4,9,99,-1,8")
        assert intcodekit.main(["run", prog, "--interactive"]) == intcodekit.EXIT_OK
        assert capsys.readouterr().out == "1\n"

    def test_patch_and_dump(self, tmp_path, capsys):
        prog = _program(tmp_path, "1,0,0,3,99")
        rc = intcodekit.main(["run", prog, "--patch", "1=4", "--patch", "2=4", "--dump"])
        assert rc == intcodekit.EXIT_OK
        assert capsys.readouterr().out.strip().split("\n")[-1] == "1,4,4,198,99"

    def test_program_error(self, tmp_path, capsys):
        prog = _program(tmp_path, "42")
        assert intcodekit.main(["run", prog]) == intcodekit.EXIT_PROGRAM_ERROR
        assert "Error: Unsupported operation 42 at 0" in capsys.readouterr().err

    def test_malformed_source(self, tmp_path, capsys):
        prog = _program(tmp_path, "hello")
        assert intcodekit.main(["run", prog]) == intcodekit.EXIT_PROGRAM_ERROR

    def test_missing_file(self, tmp_path, capsys):
        rc = intcodekit.main(["run", str(tmp_path / "nope.txt")])
        assert rc == intcodekit.EXIT_PROGRAM_ERROR
        assert "File not found" in capsys.readouterr().err

    def test_max_steps(self, tmp_path, capsys):
        prog = _program(tmp_path, "1105,1,0")
        assert intcodekit.main(["run", prog, "--max-steps", "5"]) == intcodekit.EXIT_TIMEOUT

    def test_stdin_source(self, capsys, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO("104,42,99\n"))
        assert intcodekit.main(["run", "-"]) == intcodekit.EXIT_OK
        assert capsys.readouterr().out == "42\n"

    def test_trace(self, tmp_path, capsys):
        prog = _program(tmp_path, "1101,2,3,0,99")
        assert intcodekit.main(["run", prog, "--trace"]) == intcodekit.EXIT_OK
        assert "000000: ADD" in capsys.readouterr().err


class TestDisasmCommand:

    def test_listing(self, tmp_path, capsys):
        prog = _program(tmp_path, "1002,4,3,4,33")
        assert intcodekit.main(["disasm", prog]) == intcodekit.EXIT_OK
        out = capsys.readouterr().out
        assert "MUL [4], #3, [4]" in out
        assert "DATA 33" in out

    def test_range(self, tmp_path, capsys):
        prog = _program(tmp_path, QUINE)
        assert intcodekit.main(["disasm", prog, "--range", "2-8"]) == intcodekit.EXIT_OK
        lines = capsys.readouterr().out.strip().split("\n")
        assert len(lines) == 2
        assert lines[0].startswith("000002:")


class TestArgHelpers:

    def test_parse_int_arg(self):
        assert intcodekit.parse_int_arg("0x10") == 16
        assert intcodekit.parse_int_arg(" -7 ") == -7

    def test_parse_input_values(self):
        assert intcodekit.parse_input_values(["1,2", "3"]) == [1, 2, 3]
        assert intcodekit.parse_input_values(None) == []

    def test_no_command_prints_help(self, capsys):
        assert intcodekit.main([]) == intcodekit.EXIT_OK
        assert "intcodekit" in capsys.readouterr().out


class TestLogSetup:

    def test_file_handler(self, tmp_path):
        logger = setup_logging("intcode_vm.test_file", log_dir=tmp_path,
                               rich_console=False)
        logger.debug("hello from test")
        for h in logger.handlers:
            h.flush()
        files = list(tmp_path.glob("intcode_vm.test_file_*.log"))
        assert len(files) == 1
        assert "hello from test" in files[0].read_text(encoding="utf-8")

    def test_rich_console_handler(self):
        logger = setup_logging("intcode_vm.test_rich")
        assert any(isinstance(h, RichHandler) for h in logger.handlers)

    def test_configured_once(self):
        first = setup_logging("intcode_vm.test_once", rich_console=False)
        count = len(first.handlers)
        second = setup_logging("intcode_vm.test_once", console_level=logging.DEBUG)
        assert second is first
        assert len(second.handlers) == count

"""
Tests for the command-line host.
"""

import pytest

from pseudostep import cli


def test_runs_literal_source(capsys):
    assert cli.run_cli(["-source", "x ← 2\nOUTPUT x * 21"]) == 0
    assert capsys.readouterr().out == "42\n"


def test_runs_file(tmp_path, capsys, fibonacci_source):
    path = tmp_path / "fib.txt"
    path.write_text(fibonacci_source, encoding="utf-8")
    assert cli.run_cli([str(path)]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out[0] == "Fibonacci: 1"
    assert out[-1] == "Done!"
    assert len(out) == 11


def test_missing_file(tmp_path, capsys):
    assert cli.run_cli([str(tmp_path / "nope.txt")]) == 1
    assert "Failed to read" in capsys.readouterr().err


def test_step_budget(capsys):
    assert cli.run_cli(["-source", "WHILE true\nENDWHILE", "--max-steps", "5"]) == 2
    assert "Stopped after 5 steps" in capsys.readouterr().err


def test_trace_goes_to_stderr(capsys):
    assert cli.run_cli(["-source", "x ← 1\nOUTPUT x", "--trace"]) == 0
    captured = capsys.readouterr()
    assert captured.out == "1\n"
    assert "x ← 1" in captured.err
    assert "x=1" in captured.err


def test_summary(capsys, factorial_source):
    assert cli.run_cli(["-source", factorial_source, "--summary"]) == 0
    out = capsys.readouterr().out
    assert "Statement counts" in out
    assert "RETURN" in out
    assert "FUNCTION  fact(n)" in out


def test_step_mode_stops_pausing_on_eof(monkeypatch, capsys):
    def eof(_prompt):
        raise EOFError

    monkeypatch.setattr("builtins.input", eof)
    assert cli.run_cli(["-source", "OUTPUT 1\nOUTPUT 2", "--step"]) == 0
    assert capsys.readouterr().out == "1\n2\n"


def test_console_input_on_eof(monkeypatch):
    def eof(_prompt):
        raise EOFError

    monkeypatch.setattr("builtins.input", eof)
    assert cli._console_input("?") is None


def test_max_call_depth_option(capsys):
    src = "FUNCTION f(n)\nRETURN f(n + 1)\nENDFUNCTION\nOUTPUT f(0)"
    assert cli.run_cli(["-source", src, "--max-call-depth", "3"]) == 0
    assert capsys.readouterr().out == "f(n + 1)\n"


def test_help_exits(capsys):
    with pytest.raises(SystemExit) as exc:
        cli.run_cli(["--help"])
    assert exc.value.code == 0
    assert "--max-steps" in capsys.readouterr().out

import builtins
import shutil

import pytest

from apipe.cli import main

pytestmark = pytest.mark.skipif(
    any(shutil.which(tool) is None for tool in ("echo", "tr", "sh", "cat")),
    reason="needs a POSIX userland",
)


def _run(argv: list[str]) -> int:
    with pytest.raises(SystemExit) as exc:
        main(argv)
    return exc.value.code


def test_cli_exec_outputs(capsys):
    assert _run(["exec", "echo hi | tr a-z A-Z"]) == 0
    captured = capsys.readouterr()
    assert captured.out == "HI\n"


def test_cli_exec_forwards_stage_stderr(capsys):
    assert _run(["exec", "sh -c 'echo warn >&2; echo ok' | cat"]) == 0
    captured = capsys.readouterr()
    assert captured.out == "ok\n"
    assert captured.err == "warn\n"


def test_cli_exec_uses_last_stage_status(capsys):
    assert _run(["exec", "sh -c 'exit 4' | cat"]) == 0
    assert _run(["exec", "echo hi | sh -c 'cat >/dev/null; exit 3'"]) == 3


def test_cli_exec_pipefail(capsys):
    assert _run(["exec", "--pipefail", "sh -c 'exit 4' | cat"]) == 4


def test_cli_exec_statuses(capsys):
    _run(["exec", "--statuses", "echo hi | sh -c 'cat; exit 2'"])
    captured = capsys.readouterr()
    assert "stage 0: exit code 0" in captured.err
    assert "stage 1: exit code 2" in captured.err


def test_cli_exec_parse_error(capsys):
    assert _run(["exec", "echo hi |"]) == 2
    assert captured_err(capsys).startswith("apipe: Missing command")


def test_cli_exec_missing_program(capsys):
    assert _run(["exec", "apipe-no-such-program | cat"]) == 127
    assert "stage 0" in captured_err(capsys)


def test_cli_exec_no_capture(capfd):
    assert _run(["exec", "--no-capture", "echo direct"]) == 0
    assert capfd.readouterr().out == "direct\n"


def test_cli_parse_prints_stages(capsys):
    assert _run(["parse", "grep 'a b' file | wc -l"]) == 0
    assert capsys.readouterr().out == "grep 'a b' file\nwc -l\n"


def test_cli_parse_reports_unmatched_quote(capsys):
    assert _run(["parse", "echo 'oops"]) == 2
    assert "Unmatched" in captured_err(capsys)


def test_cli_shell_repl(monkeypatch, capsys):
    inputs = iter(["echo hello | cat", "", "echo |", ":q"])

    def fake_input(_: str) -> str:
        return next(inputs)

    monkeypatch.setattr(builtins, "input", fake_input)
    assert _run(["shell"]) == 0
    captured = capsys.readouterr()
    assert "hello" in captured.out
    assert "apipe:" in captured.err


def test_cli_shell_stops_on_eof(monkeypatch):
    def fake_input(_: str) -> str:
        raise EOFError

    monkeypatch.setattr(builtins, "input", fake_input)
    assert _run(["shell"]) == 0


def captured_err(capsys) -> str:
    return capsys.readouterr().err

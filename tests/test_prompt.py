from __future__ import annotations

import io

import pytest

from relevant_specs.prompt import (
    ControllingTerminal,
    TerminalUnavailableError,
    confirm,
    confirm_proceed_after_failure,
    confirm_run,
)


@pytest.mark.parametrize(
    ("answer", "expected"),
    [("y\n", True), ("YES\n", True), ("  yes  \n", True), ("\n", False), ("n\n", False), ("maybe\n", False), ("", False)],
)
def test_proceed_after_failure_defaults_to_no(terminal, answer, expected):
    terminal.answers.append(answer)
    assert confirm_proceed_after_failure(terminal) is expected
    assert terminal.prompts == [
        "[relevant-specs] Do you want to proceed with the push anyway? [y/N] "
    ]


@pytest.mark.parametrize(
    ("answer", "expected"),
    [("\n", True), ("y\n", True), ("sure\n", True), ("n\n", False), (" No \n", False)],
)
def test_confirm_run_defaults_to_yes(terminal, answer, expected):
    terminal.answers.append(answer)
    assert confirm_run(terminal) is expected
    assert terminal.prompts == ["[relevant-specs] Run these specs now? [Y/n] "]


def test_unavailable_terminal_falls_back_to_default(terminal, capsys):
    terminal.error = TerminalUnavailableError("/dev/tty is not available")

    assert confirm(terminal, "Continue?", default=False, fallback="aborting") is False
    assert confirm(terminal, "Continue?", default=True, fallback="continuing") is True

    err = capsys.readouterr().err
    assert "Cannot prompt (/dev/tty is not available); aborting." in err
    assert "Cannot prompt (/dev/tty is not available); continuing." in err


def test_read_error_falls_back_to_default(terminal, capsys):
    terminal.error = OSError("Input/output error")
    assert confirm_proceed_after_failure(terminal) is False
    err = capsys.readouterr().err
    assert "[relevant-specs] Some specs failed." in err
    assert "Cannot prompt (Input/output error); aborting." in err


def test_controlling_terminal_reads_device_not_stdin(tmp_path, monkeypatch):
    device = tmp_path / "tty"
    device.write_text("yes\nignored\n", encoding="utf-8")
    monkeypatch.setattr("sys.stdin", io.StringIO("no\n"))
    stream = io.StringIO()

    answer = ControllingTerminal(device=device, stream=stream).ask("Proceed? ")

    assert answer == "yes\n"
    assert stream.getvalue() == "Proceed? "


def test_controlling_terminal_missing_device(tmp_path):
    terminal = ControllingTerminal(device=tmp_path / "missing-tty", stream=io.StringIO())
    with pytest.raises(TerminalUnavailableError):
        terminal.ask("Proceed? ")


def test_undecodable_answer_falls_back_to_default(tmp_path, capsys):
    device = tmp_path / "tty"
    device.write_bytes(b"\xff\xfe\n")
    terminal = ControllingTerminal(device=device, stream=io.StringIO())

    assert confirm_proceed_after_failure(terminal) is False
    assert confirm_run(ControllingTerminal(device=device, stream=io.StringIO())) is True

    err = capsys.readouterr().err
    assert "Cannot prompt ('utf-8' codec can't decode byte 0xff" in err
    assert "; aborting." in err
    assert "; proceeding with specs." in err

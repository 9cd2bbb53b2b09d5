"""Yes/no prompts answered through the controlling terminal.

Git feeds pre-push hooks their ref list on standard input, so prompts must
never read from it. Answers come from the terminal device instead, and a
missing device is a normal condition that resolves to the prompt's default.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Protocol, TextIO

from .reporting import PREFIX, warn

TTY_DEVICE = Path("/dev/tty")

AFFIRMATIVE = frozenset({"y", "yes"})
NEGATIVE = frozenset({"n", "no"})


class TerminalUnavailableError(OSError):
    """Raised when the controlling terminal cannot be opened."""


class Terminal(Protocol):
    def ask(self, prompt: str) -> str:
        """Show ``prompt`` and return one line of input."""


class ControllingTerminal:
    """Read answers from the terminal device, independent of stdin.

    The device is only read; the prompt itself goes to ``stream`` (stderr by
    default) so it shows up next to the other diagnostics.
    """

    def __init__(self, device: Path = TTY_DEVICE, stream: TextIO | None = None):
        self.device = device
        self.stream = stream

    def ask(self, prompt: str) -> str:
        if not self.device.exists():
            raise TerminalUnavailableError(f"{self.device} is not available")
        stream = self.stream or sys.stderr
        print(prompt, end="", file=stream, flush=True)
        with self.device.open("r", encoding="utf-8") as tty:
            return tty.readline()


def confirm(
    terminal: Terminal,
    question: str,
    *,
    default: bool,
    fallback: str,
) -> bool:
    """Ask ``question`` and interpret the answer against ``default``.

    Default-yes questions accept anything but an explicit no; default-no
    questions require an explicit yes. ``fallback`` describes what happens
    when the terminal cannot be used.
    """

    suffix = "[Y/n]" if default else "[y/N]"
    try:
        response = terminal.ask(f"{PREFIX} {question} {suffix} ")
    except (OSError, UnicodeDecodeError) as exc:
        warn(f"Cannot prompt ({exc}); {fallback}.")
        return default

    answer = response.strip().lower()
    if default:
        return answer not in NEGATIVE
    return answer in AFFIRMATIVE


def confirm_run(terminal: Terminal) -> bool:
    return confirm(
        terminal,
        "Run these specs now?",
        default=True,
        fallback="proceeding with specs",
    )


def confirm_proceed_after_failure(terminal: Terminal) -> bool:
    warn("Some specs failed.")
    return confirm(
        terminal,
        "Do you want to proceed with the push anyway?",
        default=False,
        fallback="aborting",
    )


__all__ = [
    "ControllingTerminal",
    "Terminal",
    "TerminalUnavailableError",
    "confirm",
    "confirm_proceed_after_failure",
    "confirm_run",
]

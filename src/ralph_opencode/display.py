"""Terminal display helpers — colors, timestamps, formatting."""

from __future__ import annotations

import sys
import time
from typing import TextIO

# ANSI colors — 256-color for consistent rendering in iTerm2 + tmux
DIM = "\033[90m"
BOLD = "\033[1m"
RED = "\033[38;5;203m"
GREEN = "\033[38;5;114m"
YELLOW = "\033[38;5;221m"
BLUE = "\033[38;5;75m"
CYAN = "\033[38;5;81m"
WHITE = "\033[38;5;255m"
RESET = "\033[0m"

PANEL_WIDTH = 70


def fmt_duration(secs: float) -> str:
    if secs < 60:
        return f"{secs:.0f}s"
    m, s = divmod(int(secs), 60)
    return f"{m}m{s:02d}s"


def log(msg: str) -> None:
    ts = time.strftime("%H:%M:%S")
    print(f"  {DIM}{ts}{RESET}  {msg}", flush=True)


def warn(msg: str) -> None:
    ts = time.strftime("%H:%M:%S")
    print(f"  {DIM}{ts}{RESET}  {YELLOW}{msg}{RESET}", file=sys.stderr, flush=True)


def error(msg: str) -> None:
    ts = time.strftime("%H:%M:%S")
    print(f"  {DIM}{ts}{RESET}  {RED}{msg}{RESET}", file=sys.stderr, flush=True)


def debug_log(msg: str, debug: bool) -> None:
    if debug:
        ts = time.strftime("%H:%M:%S")
        print(f"[{ts}] [DEBUG] {msg}", file=sys.stderr, flush=True)


def echo_line(line: str, stream: TextIO) -> None:
    """Mirror one line of agent output, undecorated."""
    stream.write(line + "\n")
    stream.flush()

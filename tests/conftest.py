"""Shared fixtures: throwaway agent executables."""

from __future__ import annotations

import sys
import textwrap
from pathlib import Path

import pytest


@pytest.fixture
def make_agent(tmp_path: Path):
    """Write an executable Python script that stands in for opencode.

    The script sees the same argv opencode would: ``run <prompt> [--model m]``.
    """

    def _make(body: str, name: str = "fake-opencode") -> str:
        script = tmp_path / name
        script.write_text(
            f"#!{sys.executable}\n"
            "import os, sys, time\n" + textwrap.dedent(body)
        )
        script.chmod(0o755)
        return str(script)

    return _make

"""Data models for ralph-opencode."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .prompt import COMPLETION_SIGNAL

DEFAULT_AGENT = "opencode"
STRICT_EXHAUSTED_EXIT = 2


@dataclass(frozen=True)
class RunConfig:
    """Settings for one supervised run, fixed at startup."""

    plan_file: Path
    max_iterations: int = 10
    completion: str = COMPLETION_SIGNAL
    sleep_secs: float = 2.0
    model: str | None = None
    agent: str = DEFAULT_AGENT
    strict_exit: bool = False
    debug: bool = False

    def __post_init__(self) -> None:
        if self.max_iterations < 1:
            raise ValueError(
                f"max iterations must be at least 1 (got {self.max_iterations})"
            )
        if not self.completion:
            raise ValueError("completion marker must not be empty")
        if not math.isfinite(self.sleep_secs) or self.sleep_secs < 0:
            raise ValueError(
                f"sleep seconds must be a finite, non-negative number "
                f"(got {self.sleep_secs})"
            )
        if not self.agent:
            raise ValueError("agent executable must not be empty")

    @property
    def attempt_budget(self) -> int:
        """Number of agent runs allowed.

        Iterations are numbered 1..max_iterations with the upper bound
        excluded, so a limit of N permits N - 1 runs and a limit of 1
        permits none.
        """
        return self.max_iterations - 1


@dataclass
class RunResult:
    """Result of a single agent invocation."""

    exit_code: int = -1
    output: str = ""
    duration: float = 0.0
    lines: int = 0


class LoopStatus(str, Enum):
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"


@dataclass
class LoopOutcome:
    """How the iteration loop ended."""

    status: LoopStatus
    iterations: int
    max_iterations: int
    completion: str
    elapsed: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.status is LoopStatus.SUCCEEDED

    def exit_code(self, strict: bool = False) -> int:
        # Exhaustion is a normal exit unless the caller opts into failing.
        if self.succeeded or not strict:
            return 0
        return STRICT_EXHAUSTED_EXIT

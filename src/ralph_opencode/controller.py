"""Iteration controller — reruns the agent until it prints the completion marker."""

from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable

from .display import (
    BLUE,
    BOLD,
    DIM,
    GREEN,
    RED,
    RESET,
    debug_log,
    fmt_duration,
    log,
    warn,
)
from .models import LoopOutcome, LoopStatus, RunConfig, RunResult
from .prompt import build_prompt, load_instructions
from .runner import run_agent

RunFn = Callable[..., Awaitable[RunResult]]
SleepFn = Callable[[float], Awaitable[None]]


def completion_detected(output: str, completion: str) -> bool:
    # Plain substring search over the merged output of both streams.
    return completion in output


async def run_loop(
    config: RunConfig,
    instructions: str | None = None,
    run: RunFn = run_agent,
    sleep: SleepFn = asyncio.sleep,
) -> LoopOutcome:
    """Run the agent repeatedly until it signals completion.

    Stops after ``config.attempt_budget`` runs. The plan file is read again
    before every run since the agent edits it; a read failure propagates
    and ends the loop. A non-zero agent exit is only a warning.
    """
    if instructions is None:
        instructions = load_instructions()

    run_start = time.monotonic()
    status = LoopStatus.EXHAUSTED
    iteration = 0

    while iteration < config.attempt_budget:
        iteration += 1
        print(
            f"\n  {BOLD}{BLUE}━━━ Iteration {iteration}/{config.max_iterations} ━━━{RESET}",
            flush=True,
        )

        plan = config.plan_file.read_text(encoding="utf-8")
        prompt = build_prompt(instructions, plan, config.completion)
        debug_log(
            f"Plan: {len(plan)} chars, prompt: {len(prompt)} chars", config.debug
        )

        result = await run(
            prompt, config.model, agent=config.agent, debug=config.debug
        )

        if result.exit_code == 0:
            icon = f"{GREEN}✓{RESET}"
        else:
            icon = f"{RED}✗{RESET}"
        log(
            f"{icon}  {DIM}exit {result.exit_code}  │  "
            f"{fmt_duration(result.duration)}  │  {result.lines} lines{RESET}"
        )

        if completion_detected(result.output, config.completion):
            status = LoopStatus.SUCCEEDED
            break

        if result.exit_code != 0:
            warn(f"{config.agent} exited with non-zero code: {result.exit_code}")

        await sleep(config.sleep_secs)

    outcome = LoopOutcome(
        status=status,
        iterations=iteration,
        max_iterations=config.max_iterations,
        completion=config.completion,
        elapsed=time.monotonic() - run_start,
    )

    if outcome.succeeded:
        print(f"\n  {BOLD}{GREEN}◉ Completion phrase detected: {config.completion}{RESET}")
        print(f"  {GREEN}All tasks are completed.{RESET}", flush=True)
    else:
        warn(
            f"Reached max iterations ({config.max_iterations}) without seeing "
            f"completion phrase '{config.completion}'"
        )

    return outcome

"""ralph-opencode CLI — supervised retry loop around `opencode run`."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from .controller import run_loop
from .display import (
    BOLD,
    CYAN,
    DIM,
    PANEL_WIDTH,
    RESET,
    WHITE,
    error,
    fmt_duration,
)
from .models import DEFAULT_AGENT, RunConfig
from .prompt import COMPLETION_PROFILES, load_instructions


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ralph-opencode",
        description=(
            "Run opencode in a loop until it prints the completion phrase "
            "or the iteration limit is reached."
        ),
    )
    parser.add_argument(
        "-p",
        "--plan",
        "--prompt",
        dest="plan",
        required=True,
        type=Path,
        help="Plan file, re-read before every iteration",
    )
    parser.add_argument(
        "-n",
        "--max-iterations",
        type=int,
        default=10,
        help="Iteration limit; at most N-1 agent runs are made (default: 10)",
    )
    parser.add_argument(
        "-c",
        "--completion",
        default=None,
        help="Completion phrase (default: taken from --profile)",
    )
    parser.add_argument(
        "--profile",
        choices=sorted(COMPLETION_PROFILES),
        default="tagged",
        help=(
            "Default completion phrase: tagged = <completion>DONE</completion>, "
            "plain = DONE (default: tagged)"
        ),
    )
    parser.add_argument(
        "-s",
        "--sleep-secs",
        type=float,
        default=2,
        help="Delay between iterations in seconds (default: 2)",
    )
    parser.add_argument(
        "-m", "--model", default=None, help="Model passed to opencode via --model"
    )
    parser.add_argument(
        "--agent",
        default=DEFAULT_AGENT,
        help=f"Agent executable to spawn (default: {DEFAULT_AGENT})",
    )
    parser.add_argument(
        "--strict-exit",
        action="store_true",
        help="Exit with status 2 when the iteration limit is reached",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug output")
    return parser


def parse_config(argv: list[str] | None = None) -> RunConfig:
    parser = build_parser()
    args = parser.parse_args(argv)
    completion = args.completion
    if completion is None:
        completion = COMPLETION_PROFILES[args.profile]
    try:
        return RunConfig(
            plan_file=args.plan,
            max_iterations=args.max_iterations,
            completion=completion,
            sleep_secs=args.sleep_secs,
            model=args.model,
            agent=args.agent,
            strict_exit=args.strict_exit,
            debug=args.debug,
        )
    except ValueError as e:
        parser.error(str(e))


def print_banner(config: RunConfig) -> None:
    print()
    print(f"  {BOLD}{CYAN}◉ RALPH OPENCODE{RESET}")
    print(f"  {DIM}{'─' * PANEL_WIDTH}{RESET}")
    col1 = f"{DIM}Iterations:{RESET} {WHITE}{config.max_iterations}{RESET}"
    col2 = f"{DIM}Sleep:{RESET} {WHITE}{fmt_duration(config.sleep_secs)}{RESET}"
    col3 = f"{DIM}Model:{RESET} {WHITE}{config.model or 'agent default'}{RESET}"
    print(f"  {col1}  {DIM}│{RESET}  {col2}  {DIM}│{RESET}  {col3}")
    print(f"  {DIM}Plan:{RESET}        {WHITE}{config.plan_file}{RESET}")
    print(f"  {DIM}Completion:{RESET}  {WHITE}{config.completion}{RESET}")
    print(f"  {DIM}Agent:{RESET}       {WHITE}{config.agent}{RESET}")
    print(f"  {DIM}{'─' * PANEL_WIDTH}{RESET}", flush=True)


async def async_main(argv: list[str] | None = None) -> int:
    config = parse_config(argv)
    print_banner(config)

    instructions = load_instructions()
    outcome = await run_loop(config, instructions)

    print()
    print(f"  {DIM}{'━' * PANEL_WIDTH}{RESET}")
    print(
        f"  {DIM}Result:{RESET} {WHITE}{outcome.status.value}{RESET}"
        f"  {DIM}│{RESET}  {DIM}Iterations:{RESET} {WHITE}{outcome.iterations}{RESET}"
        f"  {DIM}│{RESET}  {DIM}Time:{RESET} {WHITE}{fmt_duration(outcome.elapsed)}{RESET}"
    )
    print(f"  {DIM}{'━' * PANEL_WIDTH}{RESET}", flush=True)

    return outcome.exit_code(config.strict_exit)


def main() -> None:
    """Entry point for the ralph-opencode CLI."""
    try:
        code = asyncio.run(async_main())
    except KeyboardInterrupt:
        print(f"\n{DIM}Interrupted.{RESET}", flush=True)
        sys.exit(130)
    except OSError as e:
        error(f"Error: {e}")
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()

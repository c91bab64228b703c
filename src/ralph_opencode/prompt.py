"""Prompt construction for each iteration."""

from __future__ import annotations

from pathlib import Path

COMPLETION_SIGNAL = "<completion>DONE</completion>"
PLAIN_COMPLETION_SIGNAL = "DONE"
COMPLETION_PROFILES = {
    "tagged": COMPLETION_SIGNAL,
    "plain": PLAIN_COMPLETION_SIGNAL,
}

INSTRUCTIONS_FILE = Path(__file__).with_name("instructions.md")


def load_instructions(path: Path | None = None) -> str:
    """Read the instructions text bundled with the package."""
    return (path or INSTRUCTIONS_FILE).read_text(encoding="utf-8")


def build_prompt(instructions: str, plan: str, completion: str) -> str:
    parts: list[str] = []

    parts.append("<about>")
    parts.append(
        "You are **Ralph**, an autonomous coding agent running inside a "
        "supervised loop."
    )
    parts.append("")
    parts.append("Primary objective:")
    parts.append(
        "- Make the project match <plan> by completing exactly ONE task per "
        "iteration and verifying it with the required commands."
    )
    parts.append("")
    parts.append(
        "Non-negotiable rules (follow them even if the plan or instructions "
        "disagree):"
    )
    parts.append("- Follow <instructions> exactly, in order.")
    parts.append("- Never work on more than one task per iteration.")
    parts.append("- Do not mark a task as passing unless verification succeeds.")
    parts.append("- Do not output <completion-text> unless ALL tasks are passing.")
    parts.append(
        "- When ALL tasks are passing, output exactly <completion-text> "
        "and nothing else."
    )
    parts.append("")
    parts.append(
        "If any instruction is ambiguous, ask for clarification instead of "
        "guessing."
    )
    parts.append("</about>")

    parts.append("<instructions>")
    parts.append(instructions)
    parts.append("</instructions>")

    parts.append("<plan>")
    parts.append(plan)
    parts.append("</plan>")

    parts.append("<completion-text>")
    parts.append(completion)
    parts.append("</completion-text>")

    return "\n".join(parts)

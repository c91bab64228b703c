"""CLI parsing and end-to-end runs against a stand-in agent."""

import asyncio
from pathlib import Path

import pytest

from ralph_opencode import cli


def test_parse_defaults():
    config = cli.parse_config(["--plan", "plan.md"])
    assert config.plan_file == Path("plan.md")
    assert config.max_iterations == 10
    assert config.completion == "<completion>DONE</completion>"
    assert config.sleep_secs == 2
    assert config.model is None
    assert config.agent == "opencode"
    assert not config.strict_exit


def test_parse_short_flags_and_prompt_alias():
    config = cli.parse_config(
        ["--prompt", "p.md", "-n", "3", "-c", "FIN", "-s", "0", "-m", "a/b"]
    )
    assert config.plan_file == Path("p.md")
    assert config.max_iterations == 3
    assert config.completion == "FIN"
    assert config.sleep_secs == 0
    assert config.model == "a/b"


def test_plain_profile_marker():
    assert cli.parse_config(["-p", "x", "--profile", "plain"]).completion == "DONE"


def test_explicit_completion_beats_profile():
    config = cli.parse_config(["-p", "x", "--profile", "plain", "-c", "OK"])
    assert config.completion == "OK"


def test_plan_is_required():
    with pytest.raises(SystemExit):
        cli.parse_config([])


@pytest.mark.parametrize(
    "argv",
    [
        ["-p", "x", "-n", "0"],
        ["-p", "x", "-c", ""],
        ["-p", "x", "-s", "-1"],
        ["-p", "x", "-s", "nan"],
        ["-p", "x", "-s", "inf"],
    ],
)
def test_invalid_values_are_usage_errors(argv, capsys):
    with pytest.raises(SystemExit) as exc:
        cli.parse_config(argv)
    assert exc.value.code == 2
    assert "ralph-opencode" in capsys.readouterr().err


def _plan(tmp_path):
    plan = tmp_path / "plan.md"
    plan.write_text("- [ ] one task\n")
    return str(plan)


def test_end_to_end_success(tmp_path, make_agent, capsys):
    counter = tmp_path / "calls"
    agent = make_agent(
        f"""
        path = {str(counter)!r}
        n = int(open(path).read()) + 1 if os.path.exists(path) else 1
        open(path, "w").write(str(n))
        print(f"attempt {{n}}")
        if n == 2:
            print("DONE", file=sys.stderr)
        """
    )
    code = asyncio.run(
        cli.async_main(
            ["-p", _plan(tmp_path), "-n", "5", "-s", "0", "--profile", "plain", "--agent", agent]
        )
    )
    out = capsys.readouterr().out

    assert code == 0
    assert counter.read_text() == "2"
    assert "attempt 1" in out
    assert "Completion phrase detected: DONE" in out


def test_end_to_end_exhaustion_exit_codes(tmp_path, make_agent):
    agent = make_agent('print("nothing yet")\n')
    argv = ["-p", _plan(tmp_path), "-n", "2", "-s", "0", "--agent", agent]

    assert asyncio.run(cli.async_main(argv)) == 0
    assert asyncio.run(cli.async_main(argv + ["--strict-exit"])) == 2


def test_main_exits_nonzero_on_spawn_failure(tmp_path, monkeypatch, capsys):
    monkeypatch.setattr(
        "sys.argv",
        ["ralph-opencode", "-p", _plan(tmp_path), "-n", "3", "--agent", str(tmp_path / "nope")],
    )
    with pytest.raises(SystemExit) as exc:
        cli.main()
    assert exc.value.code == 1
    assert "Error:" in capsys.readouterr().err


def test_main_exits_nonzero_on_missing_plan(tmp_path, monkeypatch):
    monkeypatch.setattr(
        "sys.argv", ["ralph-opencode", "-p", str(tmp_path / "missing.md")]
    )
    with pytest.raises(SystemExit) as exc:
        cli.main()
    assert exc.value.code == 1

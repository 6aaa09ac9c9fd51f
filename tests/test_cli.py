## keyframe — CLI integration tests

import os, sys
import subprocess
from pathlib import Path


def repo_root() -> Path:
    return Path(__file__).resolve().parents[1]


def _env(env: dict | None) -> dict:
    merged_env = os.environ.copy()
    merged_env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(repo_root() / "src"), merged_env.get("PYTHONPATH")]))
    if env:
        merged_env.update(env)
    return merged_env


def run_cli(*cli_args: str | Path, env: dict | None = None, extra_args: list[str] | None = None) -> subprocess.CompletedProcess:
    args = [sys.executable, "-m", "keyframe", "--plain"]
    if extra_args:
        args.extend(extra_args)
    args.extend(str(arg) for arg in cli_args)
    return subprocess.run(args, capture_output=True, text=True, env=_env(env))


def run_cli_input(stdin: str, *cli_args: str | Path, env: dict | None = None, extra_args: list[str] | None = None) -> subprocess.CompletedProcess:
    args = [sys.executable, "-m", "keyframe", "--plain"]
    if extra_args:
        args.extend(extra_args)
    args.extend(str(arg) for arg in cli_args)
    return subprocess.run(args, input=stdin, capture_output=True, text=True, env=_env(env))


def test_cli_runs_script_file():
    result = run_cli(repo_root() / "tests" / "hello.kf")
    assert result.returncode == 0, result.stdout
    assert result.stdout.splitlines() == ["hello keyframe", "1", "2", "3"]


def test_cli_runtime_error_is_reported_and_execution_continues():
    file_path = repo_root() / "tests" / "error-runtime.kf"
    result = run_cli(file_path)
    assert result.returncode != 0
    out = result.stdout
    assert "before" in out and "after" in out
    assert "TYPE ERROR." in out
    assert "line 2" in out
    assert "compare different types" in out


def test_cli_stops_after_failing_script_unless_ignored():
    tests = repo_root() / "tests"
    result = run_cli(tests / "error-runtime.kf", tests / "hello.kf")
    assert result.returncode != 0
    assert "hello keyframe" not in result.stdout

    result = run_cli(tests / "error-runtime.kf", tests / "hello.kf", extra_args=["--ignore"])
    assert "TYPE ERROR." in result.stdout
    assert "hello keyframe" in result.stdout


def test_cli_parser_error_shows_context_when_validating():
    file_path = repo_root() / "tests" / "error-parser.kf"
    result = run_cli(file_path, extra_args=["--validate"])
    assert result.returncode != 0
    out = result.stdout
    assert "SYNTAX ERROR." in out
    assert "Parsing `" in out
    assert "File \"" in out
    assert "never" not in out.splitlines()


def test_cli_malformed_statement_without_validation():
    result = run_cli(repo_root() / "tests" / "error-parser.kf")
    assert result.returncode != 0
    lines = result.stdout.splitlines()
    assert lines[0] == "never"
    assert any("SYNTAX ERROR." in line and "line 3" in line for line in lines)


def test_cli_inline_command_prints_returned_value():
    result = run_cli("-c", 'return("x" + "y")')
    assert result.returncode == 0, result.stdout
    assert '>>> "xy"' in result.stdout


def test_cli_tokens_and_memory_dumps():
    result = run_cli("-c", "dec x = 1", extra_args=["--tokens", "--memory"])
    assert result.returncode == 0, result.stdout
    out = result.stdout
    assert "Token(keyword, dec)" in out
    assert "Token(number, 1)" in out
    assert "Full Memory Log:" in out
    assert "[number, x = 1]" in out


def test_cli_reads_program_from_stdin():
    result = run_cli_input('print("piped")\n')
    assert result.returncode == 0, result.stdout
    assert result.stdout.strip() == "piped"


def test_cli_rejects_wrong_file_suffix(tmp_path):
    script = tmp_path / "prog.txt"
    script.write_text('print("x")\n')
    result = run_cli(script)
    assert result.returncode != 0

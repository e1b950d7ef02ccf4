import subprocess
import sys

import pytest

from envbaker.provisioning import git
from envbaker.provisioning.git import GitCommandError, run_logged, setup_repository


class _Runner:
    def __init__(self, fail_on=None, exc=None):
        self.calls = []
        self.fail_on = fail_on
        self.exc = exc

    def __call__(self, cmd, **kwargs):
        self.calls.append((cmd, kwargs))
        if self.fail_on and cmd[1] == self.fail_on:
            if self.exc is not None:
                raise self.exc
            raise subprocess.CalledProcessError(128, cmd, output="", stderr="fatal: nope")
        return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")


def test_runs_git_sequence_in_environment_dir(tmp_path):
    runner = _Runner()

    setup_repository(
        tmp_path,
        "https://github.example/octo/DEV_x.git",
        branch="main",
        commit_message="first commit for DEV_x",
        runner=runner,
    )

    assert [cmd for cmd, _ in runner.calls] == [
        ["git", "init"],
        ["git", "add", "."],
        ["git", "commit", "--allow-empty", "-m", "first commit for DEV_x"],
        ["git", "branch", "-M", "main"],
        ["git", "remote", "add", "origin", "https://github.example/octo/DEV_x.git"],
        ["git", "push", "-u", "origin", "main"],
    ]
    assert all(kwargs["cwd"] == str(tmp_path) for _, kwargs in runner.calls)


def test_stops_at_first_failing_step(tmp_path):
    runner = _Runner(fail_on="commit")

    with pytest.raises(GitCommandError) as e:
        setup_repository(tmp_path, "url", commit_message="m", runner=runner)

    assert e.value.step == "commit"
    assert e.value.returncode == 128
    assert "fatal: nope" in str(e.value)
    assert [cmd[1] for cmd, _ in runner.calls] == ["init", "add", "commit"]


def test_missing_executable_is_reported(tmp_path):
    runner = _Runner(fail_on="init", exc=FileNotFoundError("git"))

    with pytest.raises(GitCommandError) as e:
        setup_repository(tmp_path, "url", commit_message="m", runner=runner)

    assert e.value.step == "init"
    assert e.value.returncode is None


def test_ensure_git_missing(monkeypatch):
    monkeypatch.setattr(git.shutil, "which", lambda name: None)
    with pytest.raises(GitCommandError, match="missing dependency: git"):
        git.ensure_git()


def test_run_logged_echoes_output_on_error(capsys):
    with pytest.raises(subprocess.CalledProcessError):
        run_logged(
            [sys.executable, "-c", "import sys; sys.stderr.write('broken\\n'); sys.exit(3)"],
            capture_output=True,
            echo="on_error",
        )
    assert "broken" in capsys.readouterr().err


def test_run_logged_quiet_on_success(capsys):
    result = run_logged(
        [sys.executable, "-c", "print('hi')"],
        capture_output=True,
        echo="on_error",
    )
    assert result.stdout.strip() == "hi"
    assert capsys.readouterr().out == ""

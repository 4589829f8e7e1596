"""Tests for change-set discovery."""

import shutil
import subprocess
import types

import pytest

from aireview_core.exceptions import GitError
from aireview_core.utils.git import FALLBACK_RANGE, get_changed_files, resolve_diff_range, run_git

MERGE_BASE = "c" * 40


def _completed(stdout="", returncode=0):
    return types.SimpleNamespace(stdout=stdout, returncode=returncode)


def _fake_git(responses):
    """Return a subprocess.run replacement keyed on the git subcommand."""
    calls = []

    def run(cmd, **kwargs):
        calls.append((cmd, kwargs))
        return responses[cmd[1]]

    run.calls = calls
    return run


class TestRunGit:
    def test_runs_in_repo_root(self, mocker, tmp_path):
        mock_run = mocker.patch("aireview_core.utils.git.subprocess.run", return_value=_completed("ok\n"))
        assert run_git(tmp_path, "status") == "ok\n"
        args, kwargs = mock_run.call_args
        assert args[0] == ["git", "status"]
        assert kwargs["cwd"] == tmp_path
        assert kwargs["stderr"] == subprocess.STDOUT
        # The inherited environment is used as-is.
        assert "env" not in kwargs

    def test_nonzero_exit_raises_with_output(self, mocker, tmp_path):
        mocker.patch(
            "aireview_core.utils.git.subprocess.run",
            return_value=_completed("fatal: bad revision\n", returncode=128),
        )
        with pytest.raises(GitError, match="bad revision"):
            run_git(tmp_path, "diff", "--name-only", "HEAD~1...HEAD")

    def test_missing_git_raises(self, mocker, tmp_path):
        mocker.patch("aireview_core.utils.git.subprocess.run", side_effect=FileNotFoundError("git"))
        with pytest.raises(GitError):
            run_git(tmp_path, "status")


class TestResolveDiffRange:
    def test_no_base_ref_uses_last_commit(self, mocker, tmp_path):
        mock_run = mocker.patch("aireview_core.utils.git.subprocess.run")
        assert resolve_diff_range(tmp_path, None) == FALLBACK_RANGE
        mock_run.assert_not_called()

    def test_base_ref_uses_merge_base(self, mocker, tmp_path):
        fake = _fake_git({"fetch": _completed(), "merge-base": _completed(MERGE_BASE + "\n")})
        mocker.patch("aireview_core.utils.git.subprocess.run", side_effect=fake)

        assert resolve_diff_range(tmp_path, "main") == f"{MERGE_BASE}...HEAD"
        assert fake.calls[0][0] == ["git", "fetch", "origin", "main", "--depth=1"]
        assert fake.calls[1][0] == ["git", "merge-base", "origin/main", "HEAD"]

    def test_failed_fetch_downgrades(self, mocker, tmp_path):
        fake = _fake_git({"fetch": _completed("network down", returncode=1)})
        mocker.patch("aireview_core.utils.git.subprocess.run", side_effect=fake)

        assert resolve_diff_range(tmp_path, "main") == FALLBACK_RANGE
        assert len(fake.calls) == 1

    def test_failed_merge_base_downgrades(self, mocker, tmp_path):
        fake = _fake_git({"fetch": _completed(), "merge-base": _completed("", returncode=1)})
        mocker.patch("aireview_core.utils.git.subprocess.run", side_effect=fake)

        assert resolve_diff_range(tmp_path, "main") == FALLBACK_RANGE


class TestGetChangedFiles:
    def test_blank_lines_dropped_and_order_kept(self, mocker, tmp_path):
        fake = _fake_git({"diff": _completed("b.go\n\n  a.py  \n\nc.md\n")})
        mocker.patch("aireview_core.utils.git.subprocess.run", side_effect=fake)

        assert get_changed_files(tmp_path) == ["b.go", "a.py", "c.md"]
        assert fake.calls[0][0] == ["git", "diff", "--name-only", FALLBACK_RANGE]

    def test_diff_against_merge_base(self, mocker, tmp_path):
        fake = _fake_git(
            {
                "fetch": _completed(),
                "merge-base": _completed(MERGE_BASE),
                "diff": _completed("main.go\n"),
            }
        )
        mocker.patch("aireview_core.utils.git.subprocess.run", side_effect=fake)

        assert get_changed_files(tmp_path, "main") == ["main.go"]
        assert fake.calls[-1][0] == ["git", "diff", "--name-only", f"{MERGE_BASE}...HEAD"]

    def test_failed_diff_is_fatal(self, mocker, tmp_path):
        fake = _fake_git({"diff": _completed("fatal: not a git repository", returncode=128)})
        mocker.patch("aireview_core.utils.git.subprocess.run", side_effect=fake)

        with pytest.raises(GitError, match="not a git repository"):
            get_changed_files(tmp_path)


@pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")
class TestAgainstRealRepository:
    def _git(self, repo, *args):
        subprocess.run(
            ["git", "-c", "user.name=t", "-c", "user.email=t@example.com", *args],
            cwd=repo,
            check=True,
            capture_output=True,
        )

    def test_files_from_last_commit(self, tmp_path):
        self._git(tmp_path, "init", "-q")
        (tmp_path / "README.md").write_text("hello\n")
        self._git(tmp_path, "add", ".")
        self._git(tmp_path, "commit", "-q", "-m", "first")
        (tmp_path / "main.go").write_text("package main\n")
        (tmp_path / "README.md").write_text("hello again\n")
        self._git(tmp_path, "add", ".")
        self._git(tmp_path, "commit", "-q", "-m", "second")

        assert sorted(get_changed_files(tmp_path)) == ["README.md", "main.go"]

    def test_unreachable_base_falls_back_to_last_commit(self, tmp_path):
        self._git(tmp_path, "init", "-q")
        (tmp_path / "a.py").write_text("a = 1\n")
        self._git(tmp_path, "add", ".")
        self._git(tmp_path, "commit", "-q", "-m", "first")
        (tmp_path / "b.py").write_text("b = 2\n")
        self._git(tmp_path, "add", ".")
        self._git(tmp_path, "commit", "-q", "-m", "second")

        # No "origin" remote: the fetch fails and the range downgrades.
        assert get_changed_files(tmp_path, "main") == ["b.py"]

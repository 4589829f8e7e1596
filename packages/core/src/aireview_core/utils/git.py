"""Change-set discovery through the local git checkout.

Every command runs with the working directory pinned to the repository root
that the caller passes in, and with the inherited environment, so the
checkout that GitHub Actions prepared is the one being diffed.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from aireview_core.exceptions import GitError

logger = logging.getLogger(__name__)

FALLBACK_RANGE = "HEAD~1...HEAD"


def run_git(repo_root: Path, *args: str) -> str:
    """Run a git command in repo_root and return its combined output.

    Raises GitError when git is missing or exits non-zero; the message
    includes whatever the command printed.
    """
    cmd = ["git", *args]
    try:
        result = subprocess.run(
            cmd,
            cwd=repo_root,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
        )
    except OSError as e:
        raise GitError(f"{' '.join(cmd)}: {e}") from e
    if result.returncode != 0:
        raise GitError(f"{' '.join(cmd)}: exit status {result.returncode}\n{result.stdout}")
    return result.stdout


def resolve_diff_range(repo_root: Path, base_ref: str | None) -> str:
    """Pick the revision range to diff.

    With a base branch, fetch it shallowly and diff from its merge-base with
    HEAD. Failing to fetch or to find a merge-base is not fatal; the range
    just downgrades to the last commit.
    """
    if not base_ref:
        return FALLBACK_RANGE

    try:
        run_git(repo_root, "fetch", "origin", base_ref, "--depth=1")
    except GitError as e:
        logger.warning("git fetch failed, diffing the last commit only: %s", e)
        return FALLBACK_RANGE

    try:
        merge_base = run_git(repo_root, "merge-base", f"origin/{base_ref}", "HEAD").strip()
    except GitError as e:
        logger.warning("No merge-base with origin/%s, diffing the last commit only: %s", base_ref, e)
        return FALLBACK_RANGE

    if not merge_base:
        return FALLBACK_RANGE
    return f"{merge_base}...HEAD"


def get_changed_files(repo_root: Path, base_ref: str | None = None) -> list[str]:
    """Return repository-relative paths changed on this branch, in git's order."""
    diff_range = resolve_diff_range(repo_root, base_ref)
    logger.debug("Diffing %s in %s", diff_range, repo_root)
    output = run_git(repo_root, "diff", "--name-only", diff_range)
    return [line.strip() for line in output.splitlines() if line.strip()]

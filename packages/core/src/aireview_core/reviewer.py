"""Core PR review orchestration."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from aireview_core.config import ReviewConfig
from aireview_core.gh.event import PullRequestEvent
from aireview_core.gh.pull_request import build_inline_comment, post_inline_comments, post_summary_comment
from aireview_core.models import CollectedFiles, FilePayload, ReviewResult, SkippedFile
from aireview_core.providers.base import BaseReviewer
from aireview_core.providers.openai import OpenAIReviewer
from aireview_core.utils.code import load_file
from aireview_core.utils.git import get_changed_files

console = Console()
logger = logging.getLogger(__name__)


def get_reviewer(config: ReviewConfig) -> BaseReviewer:
    return OpenAIReviewer(api_key=os.environ.get("OPENAI_API_KEY"), model=config.model)


def collect_files(repo_root: Path, paths: list[str], config: ReviewConfig) -> CollectedFiles:
    """Load the changed files that will be sent to the reviewer.

    The max_files cap applies to the raw change list, before any filtering,
    so fewer than max_files payloads may come back even when more files
    changed.
    """
    collected = CollectedFiles()
    for path in paths[: config.max_files]:
        loaded = load_file(repo_root, path, reject_binaries=config.reject_large_binaries)
        if isinstance(loaded, SkippedFile):
            logger.info("Skipping %s: %s", loaded.path, loaded.reason)
            collected.skipped.append(loaded)
            continue
        collected.files.append(loaded)

    if len(paths) > config.max_files:
        logger.info("Only the first %d of %d changed file(s) are considered", config.max_files, len(paths))
    return collected


def build_user_prompt(files: list[FilePayload], pr: dict) -> str:
    payload = {
        "changed_files": [{"path": f.path, "language": f.language, "content": f.content} for f in files],
        "pull_request": pr,
    }
    return json.dumps(payload)


def print_shadow_review(result: ReviewResult) -> None:
    """Print the review to the terminal without posting to GitHub."""
    _priority_color = {"high": "red", "medium": "yellow", "low": "blue"}
    console.print("\n[bold]Shadow review (not posted)[/bold]\n")
    console.print(escape(result.summary) if result.summary else "[dim]No summary.[/dim]")
    for suggestion in result.repo_suggestions:
        console.print(f"  - {escape(suggestion)}")

    comments = [(f, build_inline_comment(f)) for f in result.findings]
    console.print(f"\n[bold]{len(result.findings)} finding(s)[/bold]\n")
    for finding, comment in comments:
        color = _priority_color.get(finding.priority.lower(), "white")
        where = f"{finding.file}:{comment['line']}" if comment else (finding.file or "(no location)")
        priority = escape(finding.priority or "-")
        console.print(f"[bold cyan]{escape(where)}[/bold cyan]  [{color}]{priority}[/{color}]  {escape(finding.title)}")
        if finding.details:
            console.print(f"  {escape(finding.details)}")
        console.print()


def run_review(
    config: ReviewConfig,
    repo_root: Path,
    event: PullRequestEvent,
    instructions: str,
    reviewer: BaseReviewer,
    github_token: str | None,
    base_ref: str | None = None,
    shadow: bool = False,
) -> ReviewResult:
    """Run the full pipeline once and return the parsed review.

    Any AIReviewError raised along the way aborts the run. When inline
    posting fails, the summary comment has already been posted.
    """
    paths = get_changed_files(repo_root, base_ref or event.base_ref)
    console.print(f"[cyan]{len(paths)} changed file(s)[/cyan]")

    collected = collect_files(repo_root, paths, config)
    console.print(
        f"Reviewing {len(collected.files)} file(s) with {config.model}"
        + (f", {len(collected.skipped)} skipped" if collected.skipped else "")
    )

    user_prompt = build_user_prompt(collected.files, event.meta())
    result = reviewer.review(instructions, user_prompt)
    console.print(f"  {len(result.findings)} finding(s) returned.")

    if shadow:
        print_shadow_review(result)
        return result

    post_summary_comment(result, event, github_token)
    console.print("[green]Summary comment posted.[/green]")

    if config.inline_comments:
        posted = post_inline_comments(result.findings, event, github_token)
        console.print(f"[green]{posted} inline comment(s) posted.[/green]")

    return result

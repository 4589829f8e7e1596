"""CLI entry point for ai-review."""

from __future__ import annotations

import importlib.metadata
import logging
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from aireview_core.exceptions import AIReviewError

console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    # SDK request logging is noise even in verbose mode.
    for name in ("httpx", "httpcore", "openai", "urllib3", "github"):
        logging.getLogger(name).setLevel(logging.WARNING)


@click.command("ai-review")
@click.version_option(
    version=importlib.metadata.version("ai-review"),
    prog_name="ai-review",
)
@click.option(
    "--config",
    "config_path",
    default=None,
    envvar="AI_REVIEW_CONFIG",
    type=click.Path(dir_okay=False),
    help="Path to the configuration file. [default: <action root>/ai-review.yml]",
)
@click.option(
    "--instructions",
    "instructions_path",
    default=None,
    type=click.Path(dir_okay=False),
    help="System instruction file. [default: <action root>/prompts/AGENT_INSTRUCTION.md]",
)
@click.option(
    "--repo-root",
    default=None,
    type=click.Path(file_okay=False),
    help="Repository checkout to review. [default: $GITHUB_WORKSPACE or cwd]",
)
@click.option(
    "--event-path",
    default=None,
    envvar="GITHUB_EVENT_PATH",
    help="GitHub event payload JSON.",
)
@click.option(
    "--base-ref",
    default=None,
    envvar="GITHUB_BASE_REF",
    help="Base branch to diff against.",
)
@click.option("--model", default=None, help="Model name. Overrides config file.")
@click.option(
    "--shadow",
    "-s",
    is_flag=True,
    help="Dry-run mode: print the review without posting to GitHub.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def main(
    config_path: str | None,
    instructions_path: str | None,
    repo_root: str | None,
    event_path: str | None,
    base_ref: str | None,
    model: str | None,
    shadow: bool,
    verbose: bool,
):
    """AI review of the files changed in a pull request.

    Meant to run as a step of a pull_request workflow: it reads the GitHub
    Actions environment, reviews the changed files with an OpenAI model and
    posts the result on the pull request.

    \b
    Environment:
      GITHUB_ACTION_PATH   directory holding ai-review.yml and prompts/ (default: cwd)
      GITHUB_WORKSPACE     repository checkout to review (default: cwd)
      GITHUB_EVENT_PATH    pull_request event payload
      GITHUB_BASE_REF      base branch to diff against
      GITHUB_TOKEN         token used to post comments (falls back to `gh auth token`)
      OPENAI_API_KEY       OpenAI credential
    """
    from aireview_core.config import (
        CONFIG_FILE_NAME,
        INSTRUCTIONS_FILE,
        load_config,
        load_instructions,
        resolve_action_root,
        resolve_repo_root,
    )
    from aireview_core.gh.event import load_event
    from aireview_core.reviewer import get_reviewer, run_review
    from aireview_cli.auth import resolve_github_token

    _configure_logging(verbose)

    action_root = resolve_action_root()
    config = load_config(config_path or str(action_root / CONFIG_FILE_NAME), overrides={"model": model})

    try:
        instructions = load_instructions(instructions_path or action_root / INSTRUCTIONS_FILE)
        reviewer = get_reviewer(config)
        event = load_event(event_path)
        token = None if shadow else resolve_github_token()
        run_review(
            config=config,
            repo_root=Path(repo_root) if repo_root else resolve_repo_root(),
            event=event,
            instructions=instructions,
            reviewer=reviewer,
            github_token=token,
            base_ref=base_ref or None,
            shadow=shadow,
        )
    except AIReviewError as e:
        raise click.ClickException(str(e)) from e

    if not shadow:
        console.print("[bold green]Review complete.[/bold green]")


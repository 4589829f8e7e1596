"""Post review results back to the pull request.

Both calls POST to URLs taken from the event payload, through PyGithub's
requester.
"""

from __future__ import annotations

import logging
from urllib.parse import urlsplit

import requests
from github import Auth, Github, GithubException

from aireview_core.exceptions import PublishError
from aireview_core.gh.event import PullRequestEvent
from aireview_core.models import Finding, ReviewResult

logger = logging.getLogger(__name__)

GITHUB_TIMEOUT = 60
_ACCEPT = {"Accept": "application/vnd.github+json"}
_ERROR_BODY_LIMIT = 4096

SUMMARY_HEADING = "### 🤖 AI Code Review – Summary\n\n"


def _split_api_url(url: str) -> tuple[str, list[str]]:
    """Split a GitHub API URL into its API base and the segments after /repos/.

    ``https://ghe.example/api/v3/repos/o/r/pulls/7`` gives
    ``("https://ghe.example/api/v3", ["o", "r", "pulls", "7"])``.
    """
    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        raise PublishError(f"Invalid GitHub API URL: {url!r}")
    segments = [s for s in parts.path.split("/") if s]
    if "repos" not in segments:
        raise PublishError(f"Unexpected GitHub API URL format: {url!r}")
    idx = segments.index("repos")
    prefix = "/".join(segments[:idx])
    base = f"{parts.scheme}://{parts.netloc}" + (f"/{prefix}" if prefix else "")
    return base, segments[idx + 1 :]


def reviews_url(event: PullRequestEvent) -> str:
    """Build the pulls/{number}/reviews endpoint for the event's pull request."""
    if not event.number or not event.url:
        raise PublishError("not a pull request event")
    base, rest = _split_api_url(event.url)
    if len(rest) < 2:
        raise PublishError(f"Unexpected pull request URL format: {event.url!r}")
    owner, repo = rest[0], rest[1]
    return f"{base}/repos/{owner}/{repo}/pulls/{event.number}/reviews"


def _post(token: str, url: str, payload: dict, what: str) -> None:
    base, _ = _split_api_url(url)
    gh = Github(auth=Auth.Token(token), base_url=base, timeout=GITHUB_TIMEOUT, retry=None)
    try:
        gh.requester.requestJsonAndCheck("POST", url, headers=dict(_ACCEPT), input=payload)
    except GithubException as e:
        detail = str(e.data)[:_ERROR_BODY_LIMIT] if e.data is not None else ""
        raise PublishError(f"failed to post {what}: {e.status}: {detail}") from e
    except requests.RequestException as e:
        raise PublishError(f"failed to post {what}: {e}") from e


def build_summary_body(result: ReviewResult) -> str:
    body = SUMMARY_HEADING + result.summary
    if result.repo_suggestions:
        body += "\n\n**Repository/CI suggestions:**\n"
        for suggestion in result.repo_suggestions:
            body += f"- {suggestion}\n"
    return body


def post_summary_comment(result: ReviewResult, event: PullRequestEvent, token: str | None) -> None:
    """Post the summary as a single issue comment on the pull request."""
    if not token:
        raise PublishError("GITHUB_TOKEN is not set")
    if not event.comments_url:
        raise PublishError("comments URL not found in event payload")

    _post(token, event.comments_url, {"body": build_summary_body(result)}, "review comment")
    logger.info("Posted summary comment to %s", event.comments_url)


def build_inline_comment(finding: Finding) -> dict | None:
    """Map a finding to a review comment, or None if it has no usable anchor.

    The comment sits on the new side of the diff at end_line (start_line when
    end_line is unset or before it). A span of several lines also carries
    start_line so GitHub renders a ranged comment.
    """
    if not finding.is_anchored:
        return None

    title = finding.title or "Suggestion"
    body = f"**{title}** ({finding.priority})\n\n{finding.details}\n\n"
    if finding.suggested_patch:
        body += f"```diff\n{finding.suggested_patch}\n```"

    line = finding.end_line if finding.end_line >= finding.start_line else finding.start_line
    comment = {"path": finding.file, "body": body, "side": "RIGHT", "line": line}
    if finding.start_line < line:
        comment["start_line"] = finding.start_line
        comment["start_side"] = "RIGHT"
    return comment


def post_inline_comments(findings: list[Finding], event: PullRequestEvent, token: str | None) -> int:
    """Submit all anchored findings as one non-blocking COMMENT review.

    Returns the number of comments posted; zero means no request was made.
    """
    if not findings:
        return 0
    if not token:
        raise PublishError("GITHUB_TOKEN is not set")
    url = reviews_url(event)

    comments = [c for c in (build_inline_comment(f) for f in findings) if c is not None]
    if not comments:
        logger.info("None of %d finding(s) has a file and line; no inline review posted", len(findings))
        return 0

    _post(token, url, {"event": "COMMENT", "comments": comments}, "inline comments")
    logger.info("Posted %d inline comment(s) to %s", len(comments), url)
    return len(comments)

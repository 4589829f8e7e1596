"""Typed view of the GitHub Actions event payload.

The payload is decoded once into PullRequestEvent. Fields that are absent,
or present with the wrong JSON type, come out as None.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from aireview_core.exceptions import EventError

logger = logging.getLogger(__name__)


def _get(data, *keys):
    for key in keys:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def _str(value) -> str | None:
    return value if isinstance(value, str) else None


def _int(value) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


@dataclass(frozen=True)
class PullRequestEvent:
    title: str | None = None
    body: str | None = None
    number: int | None = None
    base_ref: str | None = None
    head_ref: str | None = None
    html_url: str | None = None
    user: str | None = None
    # API URL of the pull request itself, e.g. https://api.github.com/repos/o/r/pulls/7
    url: str | None = None
    comments_url: str | None = None

    @classmethod
    def from_payload(cls, payload: dict) -> PullRequestEvent:
        pr = _get(payload, "pull_request")
        if not isinstance(pr, dict):
            return cls()
        return cls(
            title=_str(pr.get("title")),
            body=_str(pr.get("body")),
            number=_int(pr.get("number")),
            base_ref=_str(_get(pr, "base", "ref")),
            head_ref=_str(_get(pr, "head", "ref")),
            html_url=_str(pr.get("html_url")),
            user=_str(_get(pr, "user", "login")),
            url=_str(pr.get("url")),
            comments_url=_str(_get(pr, "_links", "comments", "href")),
        )

    def meta(self) -> dict:
        """Pull request context included in the review prompt."""
        return {
            "title": self.title,
            "body": self.body,
            "number": self.number,
            "base_ref": self.base_ref,
            "head_ref": self.head_ref,
            "html_url": self.html_url,
            "user": self.user,
        }


def load_event(event_path: str | None) -> PullRequestEvent:
    """Read the event payload GitHub Actions wrote for this run.

    Without a path there is no pull request context: an empty event is
    returned and publishing will fail later for lack of URLs.
    """
    if not event_path:
        logger.warning("GITHUB_EVENT_PATH is not set; pull request metadata is unavailable")
        return PullRequestEvent()

    try:
        payload = json.loads(Path(event_path).read_text(encoding="utf-8"))
    except OSError as e:
        raise EventError(f"Could not read event payload {event_path}: {e}") from e
    except json.JSONDecodeError as e:
        raise EventError(f"Event payload {event_path} is not valid JSON: {e}") from e

    event = PullRequestEvent.from_payload(payload)
    if event.number is None:
        logger.warning("Event payload %s has no pull_request object", event_path)
    return event

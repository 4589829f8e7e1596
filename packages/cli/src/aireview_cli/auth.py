"""Find the token used to post the summary comment and the inline review.

Inside a workflow run the token comes from GITHUB_TOKEN, which the action
passes through from ``secrets.GITHUB_TOKEN``. Running ai-review by hand
outside Actions can reuse an existing ``gh auth login`` session instead.
Shadow runs never ask for a token.
"""

from __future__ import annotations

import logging
import os
import subprocess

logger = logging.getLogger(__name__)

GH_CLI_TIMEOUT = 5


def _token_from_gh_cli() -> str | None:
    try:
        proc = subprocess.run(["gh", "auth", "token"], capture_output=True, text=True, timeout=GH_CLI_TIMEOUT)
    except FileNotFoundError:
        logger.debug("GITHUB_TOKEN unset and gh is not installed; results cannot be posted.")
        return None
    except subprocess.TimeoutExpired:
        logger.debug("gh auth token did not answer within %ds; results cannot be posted.", GH_CLI_TIMEOUT)
        return None

    token = proc.stdout.strip() if proc.returncode == 0 else ""
    if not token:
        logger.debug("gh has no logged-in session; results cannot be posted.")
        return None
    return token


def resolve_github_token() -> str | None:
    """Return the token for posting review results, or None.

    A missing token is not an error here: the publishing step raises
    PublishError when it actually needs one.
    """
    token = os.environ.get("GITHUB_TOKEN", "").strip()
    if token:
        logger.debug("Posting with GITHUB_TOKEN from the workflow environment.")
        return token

    token = _token_from_gh_cli()
    if token:
        logger.debug("GITHUB_TOKEN unset; posting with the local gh session token.")
    return token

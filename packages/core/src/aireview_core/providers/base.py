"""Base reviewer implementing the Template Method pattern.

Every provider shares the same review algorithm:
    review() → _call_api()   ← only this differs per provider
             → _parse()

Subclasses implement two things only:
  - __init__: validate credentials and build the SDK client
  - _call_api: make one raw API call and return the text response

A failed call is not retried; it is fatal for the run.
"""

from __future__ import annotations

import json
import logging
import re
from abc import ABC, abstractmethod

from aireview_core.models import ReviewResult

logger = logging.getLogger(__name__)

TEMPERATURE = 0.2


class BaseReviewer(ABC):
    TEMPERATURE: float = TEMPERATURE

    def review(self, system_prompt: str, user_prompt: str) -> ReviewResult:
        """Send one two-turn conversation and return the parsed review.

        Raises ProviderError when the call fails. A response that cannot be
        parsed does not raise; it becomes a placeholder result so a summary
        comment can still be posted.
        """
        raw = self._call_api(system_prompt, user_prompt)
        return self._parse(raw)

    @abstractmethod
    def _call_api(self, system_prompt: str, user_prompt: str) -> str:
        """Make a single API call and return the raw text response.

        Must raise ProviderError on any failure.
        """

    def _parse(self, raw: str) -> ReviewResult:
        try:
            # Strip only an outer ```json ... ``` fence, not fences inside
            # string values such as suggested patches.
            cleaned = re.sub(r"^```(?:json)?\s*", "", raw.strip())
            cleaned = re.sub(r"\s*```$", "", cleaned.strip())
            return ReviewResult.from_dict(json.loads(cleaned))
        except ValueError as e:
            # json.JSONDecodeError is a ValueError too.
            logger.warning(
                "%s: failed to parse response as a review (%s): %s",
                self.__class__.__name__,
                e,
                raw[:200],
            )
            return ReviewResult.unparseable()

from __future__ import annotations

import logging

import openai
from openai import OpenAI

from aireview_core.exceptions import ProviderError
from aireview_core.providers.base import BaseReviewer

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 120.0
_ERROR_BODY_LIMIT = 4096


class OpenAIReviewer(BaseReviewer):
    def __init__(self, api_key: str | None, model: str):
        if not api_key:
            raise ProviderError("OPENAI_API_KEY is not set")
        self.model = model
        # The SDK retries by default; a failed call here must be final.
        self.client = OpenAI(api_key=api_key, timeout=REQUEST_TIMEOUT, max_retries=0)

    def _call_api(self, system_prompt: str, user_prompt: str) -> str:
        logger.debug("Requesting review from %s", self.model)
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                temperature=self.TEMPERATURE,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                response_format={"type": "json_object"},
            )
        except openai.APIStatusError as e:
            body = e.response.text[:_ERROR_BODY_LIMIT]
            raise ProviderError(f"openai request failed: {e.status_code}: {body}") from e
        except openai.APIError as e:
            raise ProviderError(f"openai request failed: {e}") from e

        if not response.choices:
            raise ProviderError("openai response missing choices")
        return response.choices[0].message.content or ""

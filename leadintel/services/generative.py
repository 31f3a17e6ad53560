"""
Gemini generative backend.

Wraps an explicitly constructed `google.genai.Client` (created by the
application lifespan and passed in) and issues one schema-constrained,
low-temperature completion per analysis. Safety filtering is relaxed for all
harm categories because the analyzed text legitimately discusses layoffs,
activist investors and restructuring.

The backend returns the raw completion text; parsing and validation belong to
leadintel.services.analysis_schema.
"""

import asyncio
import logging
from typing import List, Optional

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from leadintel.core.exceptions import BackendTimeoutError, ModelInvocationError
from leadintel.services.analysis_schema import (
    RESPONSE_SCHEMA,
    SYSTEM_INSTRUCTION,
    build_user_prompt,
)


logger = logging.getLogger(__name__)

PERMISSIVE_CATEGORIES = (
    types.HarmCategory.HARM_CATEGORY_HARASSMENT,
    types.HarmCategory.HARM_CATEGORY_HATE_SPEECH,
    types.HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT,
    types.HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
)


def permissive_safety_settings() -> List[types.SafetySetting]:
    return [
        types.SafetySetting(category=category, threshold=types.HarmBlockThreshold.BLOCK_NONE)
        for category in PERMISSIVE_CATEGORIES
    ]


class GeminiBackend:
    """
    Schema-constrained completions from a Gemini model.

    Args:
        client: google-genai client; its lifetime is owned by the caller.
        model: Model identifier, also reported by the health check.
        temperature: Sampling temperature (low for factual extraction).
        timeout_seconds: Upper bound for one completion.
    """

    def __init__(
        self,
        client: genai.Client,
        model: str,
        temperature: float = 0.2,
        timeout_seconds: float = 60.0,
    ):
        self._client = client
        self.model = model
        self._temperature = temperature
        self._timeout = timeout_seconds

    def build_config(self) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            system_instruction=SYSTEM_INSTRUCTION,
            temperature=self._temperature,
            response_mime_type="application/json",
            response_schema=RESPONSE_SCHEMA,
            safety_settings=permissive_safety_settings(),
        )

    async def complete(self, content_text: str) -> Optional[str]:
        """
        Submit the content and return the raw completion text (may be None or empty).

        Raises:
            BackendTimeoutError: The model did not answer within the timeout.
            ModelInvocationError: The API rejected the call or failed upstream.
        """
        try:
            response = await asyncio.wait_for(
                self._client.aio.models.generate_content(
                    model=self.model,
                    contents=build_user_prompt(content_text),
                    config=self.build_config(),
                ),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            logger.error(f"Gemini call timed out after {self._timeout}s")
            raise BackendTimeoutError("Generative model timed out")
        except genai_errors.APIError as e:
            logger.error(f"Gemini API Error: {e.code} - {e.message}")
            raise ModelInvocationError(f"Google API Error: {e.code} - {e.message}")

        text = response.text
        finish = None
        if response.candidates:
            finish = getattr(response.candidates[0], "finish_reason", None)
        logger.info(f"Gemini response: {len(text or '')} chars, finish_reason={finish}")
        return text

    async def aclose(self) -> None:
        await self._client.aio.aclose()

"""Gemini excerpt judge: cheap one-word YES / NO / UNCLEAR checks."""

import re
from typing import Optional

import google.generativeai as genai
from google.generativeai.types.generation_types import BlockedPromptException

from dateline.config.logging import get_logger
from dateline.config.settings import settings
from dateline.data_management.result_cache import ResultCache
from dateline.data_management.schemas import ExcerptAnswer
from dateline.llm.retry import RetryPolicy

_ANSWER_TOKEN = re.compile(r"\b(YES|NO|UNCLEAR)\b")


def decode_answer(text: str) -> ExcerptAnswer:
    """First YES/NO/UNCLEAR token in the reply, UNCLEAR when none is present."""
    match = _ANSWER_TOKEN.search((text or "").upper())
    if match:
        return ExcerptAnswer(match.group(1))
    return ExcerptAnswer.UNCLEAR


class GeminiClient:
    """
    Google Gemini client used as the secondary, cheaper language model.

    Answers strict yes/no/unclear questions about short excerpts. Replies
    are cached by (system prompt, prompt), and the prompt already embeds
    the title, date and excerpt being judged.

    Attributes:
        model_name: Configured Gemini model identifier
        retry_policy: Bounded retry applied to every generation call
        cache: Shared ResultCache
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: Optional[str] = None,
        cache: Optional[ResultCache] = None,
        retry_policy: Optional[RetryPolicy] = None,
    ):
        """
        Initialize Gemini client with API key from settings.

        Raises:
            ValueError: If API key is not configured
        """
        api_key = api_key or settings.gemini_api_key
        if not api_key:
            raise ValueError("GEMINI_API_KEY not configured in environment")

        genai.configure(api_key=api_key)

        self.model_name = model_name or settings.gemini_model
        self.cache = cache if cache is not None else ResultCache()
        self.retry_policy = retry_policy or RetryPolicy.exponential(max_attempts=3)
        self._models: dict[str, genai.GenerativeModel] = {}
        self.logger = get_logger("llm.gemini")

        self.logger.info(f"Gemini client initialized with model {self.model_name}")

    def _model_for(self, system_prompt: str) -> genai.GenerativeModel:
        if system_prompt not in self._models:
            self._models[system_prompt] = genai.GenerativeModel(
                self.model_name,
                system_instruction=system_prompt,
            )
        return self._models[system_prompt]

    async def _generate(self, system_prompt: str, prompt: str, temperature: float) -> str:
        try:
            response = await self._model_for(system_prompt).generate_content_async(
                prompt,
                generation_config=genai.types.GenerationConfig(
                    temperature=temperature,
                    max_output_tokens=10,
                ),
            )
            return response.text
        except BlockedPromptException as e:
            self.logger.error(f"Prompt blocked by safety filters: {e}")
            raise

    async def generate_content(
        self,
        system_prompt: str,
        prompt: str,
        temperature: float = 0.2,
    ) -> str:
        """
        Generate a short reply with exponential backoff.

        Raises:
            BlockedPromptException: If prompt violates safety policies
            Exception: For other API errors after retries exhausted
        """
        return await self.retry_policy.call(self._generate, system_prompt, prompt, temperature)

    async def judge(self, system_prompt: str, prompt: str) -> ExcerptAnswer:
        """Ask a one-word question and decode the answer."""

        async def fetch() -> ExcerptAnswer:
            reply = await self.generate_content(system_prompt, prompt)
            return decode_answer(reply)

        answer = await self.cache.get_or_compute(
            "excerpt-judge", (system_prompt, prompt), fetch
        )
        self.logger.debug(f"Excerpt judge answered {answer.value}")
        return answer

"""OpenAI client infrastructure - the text-generation capability used by the pipeline."""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

from openai import AsyncOpenAI, OpenAIError

from ...config.config import get_openai_api_key, get_openai_model_name, get_openai_timeout_seconds
from ...domain.errors import GenerationError

logger = logging.getLogger(__name__)


class OpenAITextGenerator:
    """
    Request ``{system_instruction, user_content}`` -> response text.

    Every call is bounded by ``timeout_seconds``; timeouts, API errors and empty
    completions all surface as GenerationError.
    """

    def __init__(self, client: AsyncOpenAI, model: str, timeout_seconds: float = 120.0):
        self.client = client
        self.model = model
        self.timeout_seconds = timeout_seconds

    async def generate(self, system_instruction: str, user_content: str) -> str:
        request_timestamp = datetime.now(timezone.utc).isoformat()
        logger.info(
            "LLM Request - Model: %s, Prompt chars: %d, Timestamp: %s",
            self.model,
            len(system_instruction) + len(user_content),
            request_timestamp,
        )

        try:
            response = await asyncio.wait_for(
                self.client.chat.completions.create(
                    model=self.model,
                    messages=[
                        {"role": "system", "content": system_instruction},
                        {"role": "user", "content": user_content},
                    ],
                ),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            logger.error("OpenAI call timed out after %.0fs", self.timeout_seconds)
            raise GenerationError(f"Generation timed out after {self.timeout_seconds:.0f}s") from exc
        except OpenAIError as exc:
            logger.error(f"OpenAI API error: {exc}")
            raise GenerationError(f"OpenAI API call failed: {exc}") from exc

        usage = getattr(response, "usage", None)
        if usage is not None:
            logger.info(
                f"LLM Response - Model: {self.model}, "
                f"Tokens: prompt={usage.prompt_tokens}, completion={usage.completion_tokens}, "
                f"total={usage.total_tokens}"
            )

        content = response.choices[0].message.content if response.choices else None
        if not content or not content.strip():
            raise GenerationError("Empty response from OpenAI")
        return content.strip()


def create_text_generator(
    api_key: Optional[str] = None,
    model: Optional[str] = None,
    timeout_seconds: Optional[float] = None,
) -> OpenAITextGenerator:
    """
    Build a text generator from explicit arguments or environment configuration.

    Raises:
        RuntimeError: If the OpenAI API key is not configured
    """
    timeout = timeout_seconds if timeout_seconds is not None else get_openai_timeout_seconds()
    client = AsyncOpenAI(api_key=api_key or get_openai_api_key(), timeout=timeout)
    generator = OpenAITextGenerator(client, model or get_openai_model_name(), timeout)
    logger.debug("Initialized OpenAI text generator for model %s", generator.model)
    return generator

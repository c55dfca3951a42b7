"""
Extractor Agent — structured LLM completions with rate-limit backoff.

Completions go through LangChain's structured output against a pydantic
schema. Throttled calls are retried with exponential backoff; every other
failure, and exhaustion, is soft: logged, reported and returned as None.
"""

import asyncio
import random
import time
from typing import Awaitable, Callable, Optional, Type, TypeVar

import openai
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI
from pydantic import BaseModel, ValidationError

from agents.merge import set_extracted_data
from config.log import get_logger
from config.settings import Settings
from models.context import LLMContext
from tools.errors import RateLimited, ValidationFailed
from tools.telemetry import Telemetry

log = get_logger(__name__)

S = TypeVar("S", bound=BaseModel)

MAX_RETRIES = 3
INITIAL_BACKOFF_MS = 500


def is_rate_limited(error: BaseException) -> bool:
    if isinstance(error, (RateLimited, openai.RateLimitError)):
        return True
    return getattr(error, "status_code", None) == 429


def backoff_delay(attempt: int, initial_backoff_ms: int = INITIAL_BACKOFF_MS) -> float:
    """Seconds to wait before retry `attempt` (0-based): doubling, plus up to 10% jitter."""
    backoff = initial_backoff_ms * (2 ** attempt)
    jitter = random.random() * 0.1 * backoff
    return (backoff + jitter) / 1000


class ExtractionService:
    def __init__(
        self,
        llm,
        telemetry: Telemetry,
        max_retries: int = MAX_RETRIES,
        initial_backoff_ms: int = INITIAL_BACKOFF_MS,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ):
        self.llm = llm
        self.telemetry = telemetry
        self.max_retries = max_retries
        self.initial_backoff_ms = initial_backoff_ms
        self._sleep = sleep

    @classmethod
    def from_settings(cls, settings: Settings, telemetry: Telemetry) -> "ExtractionService":
        llm = ChatOpenAI(
            base_url=settings.llm_base_url,
            api_key=settings.llm_api_key or "not-set",
            model=settings.llm_model_name,
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
            max_retries=0,  # Backoff is handled here
            timeout=120,
        )
        return cls(
            llm,
            telemetry,
            max_retries=settings.llm_max_retries,
            initial_backoff_ms=settings.llm_initial_backoff_ms,
        )

    async def extract(
        self,
        action: str,
        prompt: str,
        schema: Type[S],
        context: LLMContext,
    ) -> Optional[S]:
        """
        Run a structured completion.

        Args:
            action: Name used in logs and telemetry.
            prompt: System prompt.
            schema: Pydantic model the completion must satisfy.
            context: Item plus supporting context.

        Returns:
            A validated schema instance, or None on soft failure.

        Raises:
            ValidationFailed: if the context cannot be serialized.
        """
        text = context.to_prompt()
        attempt = 0

        while True:
            try:
                return await self._complete(action, prompt, schema, text)
            except Exception as e:
                if is_rate_limited(e) and attempt < self.max_retries:
                    delay = backoff_delay(attempt, self.initial_backoff_ms)
                    log.info("[%s] Rate limited, retry %d/%d in %.2fs", action, attempt + 1, self.max_retries, delay)
                    self.telemetry.log_counter("llm_backoff")
                    await self._sleep(delay)
                    attempt += 1
                    continue

                log.warning("[%s] Completion failed: %s", action, e)
                self.telemetry.log_error(e)
                return None

    async def fill(
        self,
        action: str,
        prompt: str,
        schema: Type[BaseModel],
        context: LLMContext,
    ) -> bool:
        """Extract and merge the result into `context.item`. True on success."""
        result = await self.extract(action, prompt, schema, context)

        if result is None:
            return False

        set_extracted_data(context.item, result.model_dump(mode="json"))
        return True

    async def _complete(self, action: str, prompt: str, schema: Type[S], text: str) -> S:
        structured = self.llm.with_structured_output(schema, include_raw=True)
        messages = [
            SystemMessage(content=prompt),
            HumanMessage(content=text),
        ]

        start = time.perf_counter()
        status = "ok"
        try:
            result = await structured.ainvoke(messages)
        except Exception:
            status = "error"
            raise
        finally:
            self.telemetry.log_call(f"LLM {action}", (time.perf_counter() - start) * 1000, status)

        usage = getattr(result.get("raw"), "usage_metadata", None)
        if isinstance(usage, dict):
            self.telemetry.log_property(f"{action}_tokens", usage.get("total_tokens"))

        parsed = result.get("parsed")
        error = result.get("parsing_error")

        if error is not None or parsed is None:
            raise ValidationFailed(f"{action}: completion did not match schema", error)

        if isinstance(parsed, schema):
            return parsed

        try:
            return schema.model_validate(parsed)
        except ValidationError as e:
            raise ValidationFailed(f"{action}: completion did not match schema", e) from e

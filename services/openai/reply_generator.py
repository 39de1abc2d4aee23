"""Reply generation using the OpenAI Responses API.

Given the conversation window and an optional news block, this module
composes the system prompt and the multimodal input array, sends one
request raced against a fixed deadline, and returns the reply text. Every
failure leaves as a `GenerationError` carrying exactly one `ErrorKind`.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI

from models.generation_models import GenerationRequest
from services.openai.error_classifier import classify_provider_error
from services.openai.media_inputs import build_inputs
from services.openai.reply_prompts import build_system_prompt
from services.openai.response_parser import extract_reply, extract_usage
from utils.deadline import race_deadline
from utils.errors import ErrorKind, GenerationError

LOGGER = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-5"
MAX_OUTPUT_TOKENS = 1024
GENERATION_TIMEOUT_SECONDS = 30.0


class ReplyGenerator:
    """Produce one assistant reply per GenerationRequest."""

    def __init__(
        self,
        client: Optional[AsyncOpenAI],
        *,
        model: str = DEFAULT_MODEL,
        max_output_tokens: int = MAX_OUTPUT_TOKENS,
        timeout_seconds: float = GENERATION_TIMEOUT_SECONDS,
    ) -> None:
        # A missing client is reported per call as a config error rather than
        # failing application startup.
        self.client = client
        self.model = model
        self.max_output_tokens = max_output_tokens
        self.timeout_seconds = timeout_seconds

    def build_payload(self, request: GenerationRequest) -> Dict[str, Any]:
        """Materialize the full request body before anything is sent."""
        system_prompt = build_system_prompt(request.freshness)
        inputs: List[Dict[str, Any]] = build_inputs(system_prompt, request.turns)
        return {
            "model": self.model,
            "input": inputs,
            "max_output_tokens": self.max_output_tokens,
        }

    async def generate(self, request: GenerationRequest) -> str:
        """Return the reply text for `request`.

        Raises:
            GenerationError: With kind config, timeout, auth, credits,
                ai_rate_limit, network or unknown.
        """
        if self.client is None:
            raise GenerationError(ErrorKind.CONFIG, "OpenAI client is not configured.")

        payload = self.build_payload(request)
        start = time.time()
        try:
            response = await race_deadline(self.client.responses.create(**payload), self.timeout_seconds)
        except Exception as exc:
            kind = classify_provider_error(exc)
            LOGGER.error(
                "OpenAI Responses API error: kind=%s type=%s status=%s at=%s: %s",
                kind.value,
                type(exc).__name__,
                getattr(exc, "status_code", None),
                datetime.now(timezone.utc).isoformat(),
                exc,
            )
            raise GenerationError(kind, str(exc)) from exc

        reply = extract_reply(response)
        usage = extract_usage(response)
        LOGGER.info(
            "Reply generated in %.3fs (input_tokens=%s, output_tokens=%s)",
            time.time() - start,
            usage["input_tokens"],
            usage["output_tokens"],
        )
        return reply

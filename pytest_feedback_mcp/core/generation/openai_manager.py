"""RequestManager backed by the OpenAI chat completions API."""

import logging
import os

from openai import BadRequestError, OpenAI, OpenAIError

from ...constants import AI_MAX_TOKENS, AI_TEMPERATURE, DEFAULT_AI_MODEL, OPENAI_API_KEY_ENV
from ..progress import ProgressIndicator
from ..suite.assembler import TestsAssembler
from .prompts import SYSTEM_PROMPT
from .request_manager import RequestManager, SendResult

logger = logging.getLogger(__name__)

# Error code OpenAI reports when the messages exceed the model's context window
CONTEXT_LENGTH_EXCEEDED = "context_length_exceeded"


class OpenAIRequestManager(RequestManager):
    """Send the chat history to an OpenAI model and collect its answer."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_AI_MODEL,
        temperature: float = AI_TEMPERATURE,
        max_tokens: int = AI_MAX_TOKENS,
        client: OpenAI | None = None
    ):
        """Initialize manager (api_key arg or OPENAI_API_KEY env; model is configurable)."""
        super().__init__()

        self.api_key = api_key or os.getenv(OPENAI_API_KEY_ENV)
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.client = client

        if self.client is None and self.api_key:
            self.client = OpenAI(api_key=self.api_key)

    def is_available(self) -> bool:
        """Check if the model can be reached (a client is configured)."""
        return self.client is not None

    def send(
        self,
        prompt: str,
        indicator: ProgressIndicator
    ) -> tuple[SendResult, TestsAssembler]:
        tests_assembler = TestsAssembler()

        if not self.is_available():
            logger.error("OpenAI API key not configured")
            return SendResult.OTHER, tests_assembler

        indicator.set_text("Waiting for the model response")

        messages = [{"role": "system", "content": SYSTEM_PROMPT}]
        messages.extend(message.to_dict() for message in self.chat_history)

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
                max_tokens=self.max_tokens
            )
        except BadRequestError as e:
            if e.code == CONTEXT_LENGTH_EXCEEDED:
                logger.info(f"Prompt rejected by {self.model}: too long")
                return SendResult.PROMPT_TOO_LONG, tests_assembler
            logger.error(f"Request to {self.model} rejected: {e}")
            return SendResult.OTHER, tests_assembler
        except OpenAIError as e:
            logger.error(f"Request to {self.model} failed: {e}")
            return SendResult.OTHER, tests_assembler

        if response.choices:
            tests_assembler.consume(response.choices[0].message.content or "")

        return SendResult.OK, tests_assembler

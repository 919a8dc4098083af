"""
Request manager - sends prompts to the model and classifies its replies.

One RequestManager serves both the generation feedback cycle and user
feedback requests; the `is_user_feedback` flag decides whether the
exchange is kept in the chat history.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Literal

from ..data.models import TestSuiteGeneratedByLLM
from ..progress import ProgressIndicator
from ..suite.assembler import TestsAssembler

logger = logging.getLogger(__name__)

ChatRole = Literal["system", "user", "assistant"]


class ResponseErrorCode(str, Enum):
    """Classification of one model reply."""
    OK = "ok"
    PROMPT_TOO_LONG = "prompt_too_long"
    EMPTY_LLM_RESPONSE = "empty_llm_response"
    TEST_SUITE_PARSING_FAILURE = "test_suite_parsing_failure"


class SendResult(str, Enum):
    """Transport-level outcome of a send."""
    OK = "ok"
    PROMPT_TOO_LONG = "prompt_too_long"
    OTHER = "other"


@dataclass(frozen=True)
class ChatMessage:
    role: ChatRole
    content: str

    def to_dict(self) -> dict:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class LLMResponse:
    """A classified reply: the suite is present only for ResponseErrorCode.OK."""
    error_code: ResponseErrorCode
    test_suite: TestSuiteGeneratedByLLM | None = None

    def __post_init__(self):
        if (self.error_code is ResponseErrorCode.OK) != (self.test_suite is not None):
            raise ValueError(
                f"Test suite must be provided if and only if error code is OK, "
                f"got {self.error_code.value} with suite {self.test_suite!r}"
            )


class RequestManager(ABC):
    """Base class for model clients; subclasses implement `send`."""

    def __init__(self):
        self.chat_history: list[ChatMessage] = []

    def request(
        self,
        prompt: str,
        indicator: ProgressIndicator,
        package_name: str,
        is_user_feedback: bool = False
    ) -> LLMResponse:
        """
        Send a prompt and classify the reply.

        Args:
            prompt: The prompt to send
            indicator: Progress indicator shown while the request runs
            package_name: Import path of the module under test
            is_user_feedback: Do not keep this exchange in chat history

        Returns:
            LLMResponse with the parsed suite on success
        """
        self.chat_history.append(ChatMessage("user", prompt))

        logger.info("Sending Request...")
        send_result, tests_assembler = self.send(prompt, indicator)

        if send_result is SendResult.PROMPT_TOO_LONG:
            # rejected prompts stay out of the history
            self.chat_history.pop()
            return LLMResponse(ResponseErrorCode.PROMPT_TOO_LONG)

        if is_user_feedback:
            self.chat_history.pop()

        return self.process_response(tests_assembler, package_name, is_user_feedback)

    def process_response(
        self,
        tests_assembler: TestsAssembler,
        package_name: str,
        is_user_feedback: bool = False
    ) -> LLMResponse:
        """Classify the assembled reply into an LLMResponse."""
        response = tests_assembler.get_content()

        logger.info(f"The full response: \n {response}")
        if not is_user_feedback:
            self.chat_history.append(ChatMessage("assistant", response))

        if not response.strip():
            return LLMResponse(ResponseErrorCode.EMPTY_LLM_RESPONSE)

        test_suite = tests_assembler.assemble_test_suite(package_name)

        if test_suite is None:
            return LLMResponse(ResponseErrorCode.TEST_SUITE_PARSING_FAILURE)
        if is_user_feedback:
            return LLMResponse(ResponseErrorCode.OK, test_suite)
        return LLMResponse(ResponseErrorCode.OK, test_suite.reformat())

    @abstractmethod
    def send(
        self,
        prompt: str,
        indicator: ProgressIndicator
    ) -> tuple[SendResult, TestsAssembler]:
        """Send the prompt (chat history already includes it) and collect the reply."""
        pass

"""LLM test generation with a compile-and-retry feedback cycle."""

from .feedback import (
    FeedbackCycleExecutionResult,
    FeedbackResponse,
    LLMWithFeedback,
    WarningType,
)
from .openai_manager import OpenAIRequestManager
from .prompts import (
    ContextDepthReductionStrategy,
    PromptSizeReductionStrategy,
    build_generation_prompt,
)
from .request_manager import (
    ChatMessage,
    LLMResponse,
    RequestManager,
    ResponseErrorCode,
    SendResult,
)

__all__ = [
    # Feedback cycle
    "LLMWithFeedback",
    "FeedbackCycleExecutionResult",
    "FeedbackResponse",
    "WarningType",
    # Requests
    "RequestManager",
    "OpenAIRequestManager",
    "LLMResponse",
    "ResponseErrorCode",
    "SendResult",
    "ChatMessage",
    # Prompts
    "PromptSizeReductionStrategy",
    "ContextDepthReductionStrategy",
    "build_generation_prompt",
]

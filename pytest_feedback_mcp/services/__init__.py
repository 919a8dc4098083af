"""Services package.

Exposes the service classes and shared result types used by the MCP handlers.
"""


from .base import (
    ErrorCode,
    ServiceError,
    ServiceResult,
)
from .code_loader import (
    CodeLoader,
    LoadedCode,
)
from .generation import FeedbackGenerationResult, GenerationService

__all__ = [
    # Base
    "ServiceResult",
    "ServiceError",
    "ErrorCode",
    # Code loading
    "CodeLoader",
    "LoadedCode",
    # Services
    "GenerationService",
    "FeedbackGenerationResult",
]


def create_generation_service(code_loader: CodeLoader | None = None) -> GenerationService:
    """Factory for GenerationService (optionally inject a CodeLoader)."""

    return GenerationService(code_loader=code_loader)

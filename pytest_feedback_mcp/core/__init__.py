"""Core domain logic for the feedback-driven test generator."""


from .data import Report, ReportTestCase, TestCaseGeneratedByLLM, TestSuiteGeneratedByLLM
from .generation import FeedbackCycleExecutionResult, FeedbackResponse, LLMWithFeedback, WarningType
from .progress import CancellableProgressIndicator, ProgressIndicator
from .suite import PytestCompiler, TestsAssembler, TestsPersistentStorage, TestsPresenter

__all__ = [
    # Data
    "TestCaseGeneratedByLLM",
    "TestSuiteGeneratedByLLM",
    "Report",
    "ReportTestCase",
    # Feedback cycle
    "LLMWithFeedback",
    "FeedbackCycleExecutionResult",
    "FeedbackResponse",
    "WarningType",
    # Progress
    "ProgressIndicator",
    "CancellableProgressIndicator",
    # Collaborators
    "TestsAssembler",
    "TestsPresenter",
    "TestsPersistentStorage",
    "PytestCompiler",
]

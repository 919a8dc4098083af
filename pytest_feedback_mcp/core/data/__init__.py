"""Data models shared by the feedback cycle and its collaborators."""

from .models import (
    CompilableTestCases,
    Report,
    ReportTestCase,
    TestCaseGeneratedByLLM,
    TestSuiteGeneratedByLLM,
)

__all__ = [
    "TestCaseGeneratedByLLM",
    "TestSuiteGeneratedByLLM",
    "CompilableTestCases",
    "Report",
    "ReportTestCase",
]

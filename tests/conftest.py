"""Shared fakes for the feedback cycle tests."""

import pytest

from pytest_feedback_mcp.core.generation.request_manager import RequestManager, SendResult
from pytest_feedback_mcp.core.suite.assembler import TestsAssembler
from pytest_feedback_mcp.core.suite.compiler import TestCasesCompilationResult

# Marker for a scripted reply the model rejects as too long
TOO_LONG = object()


class ScriptedRequestManager(RequestManager):
    """RequestManager whose replies come from a list instead of a model."""

    def __init__(self, replies, on_send=None):
        super().__init__()
        self.replies = list(replies)
        self.prompts: list[str] = []
        self.on_send = on_send

    def send(self, prompt, indicator):
        self.prompts.append(prompt)
        if self.on_send is not None:
            self.on_send(len(self.prompts), indicator)

        reply = self.replies.pop(0) if self.replies else ""
        assembler = TestsAssembler()
        if reply is TOO_LONG:
            return SendResult.PROMPT_TOO_LONG, assembler
        assembler.consume(reply)
        return SendResult.OK, assembler


class FakeCompiler:
    """Compiler that fails every test case whose name is listed as broken."""

    def __init__(self, broken=(), error="E   NameError: name 'undefined' is not defined"):
        self.broken = set(broken)
        self.error = error
        self.case_batches: list[list[str]] = []
        self.compiled_suites: list[str] = []

    def compile_test_cases(self, paths, build_path, test_cases):
        self.case_batches.append([t.name for t in test_cases])
        compilable = {
            test_case for _, test_case in zip(paths, test_cases)
            if test_case.name not in self.broken
        }
        return TestCasesCompilationResult(
            all_test_cases_compilable=len(compilable) == len(paths),
            compilable_test_cases=compilable,
        )

    def compile_code(self, path, build_path):
        self.compiled_suites.append(path)
        with open(path, encoding="utf-8") as f:
            code = f.read()
        if any(f"def {name}(" in code for name in self.broken):
            return False, self.error
        return True, ""


def _reply_with_tests(*names: str) -> str:
    functions = "\n\n".join(
        f"def {name}():\n    assert add(1, 2) == 3" for name in names
    )
    return f"Here are the tests:\n```python\nfrom calc import add\n\n\n{functions}\n```\n"


@pytest.fixture
def reply_with_tests():
    """Build a fenced model reply containing the named test functions."""
    return _reply_with_tests


@pytest.fixture
def too_long():
    return TOO_LONG


@pytest.fixture
def scripted_manager():
    return ScriptedRequestManager


@pytest.fixture
def fake_compiler():
    return FakeCompiler

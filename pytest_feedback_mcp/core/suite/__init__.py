"""Collaborators that parse, render, persist and compile generated tests."""

from .assembler import TestsAssembler
from .compiler import PytestCompiler, TestCasesCompilationResult
from .presenter import TestsPresenter
from .storage import TestsPersistentStorage

__all__ = [
    "TestsAssembler",
    "TestsPresenter",
    "TestsPersistentStorage",
    "PytestCompiler",
    "TestCasesCompilationResult",
]

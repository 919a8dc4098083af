"""Dataclasses for LLM-generated tests and the report they end up in."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field, replace


@dataclass(frozen=True)
class TestCaseGeneratedByLLM:
    """A single test function produced by the model."""
    __test__ = False  # not a pytest class

    name: str   # "test_add_basic"
    code: str   # full function source, decorators included

    def __str__(self) -> str:
        return self.code


@dataclass
class TestSuiteGeneratedByLLM:
    """A parsed model answer: imports, helper code and test functions."""
    __test__ = False

    package_name: str
    imports: list[str] = field(default_factory=list)
    other_code: str = ""
    test_cases: list[TestCaseGeneratedByLLM] = field(default_factory=list)

    def update_test_cases(self, test_cases: list[TestCaseGeneratedByLLM]) -> None:
        """Replace the test cases (used when forcing the compilable subset)."""
        self.test_cases = list(test_cases)

    def reformat(self) -> TestSuiteGeneratedByLLM:
        """Return a copy with duplicate imports removed and helper code trimmed."""
        imports: list[str] = []
        for line in self.imports:
            line = line.strip()
            if line and line not in imports:
                imports.append(line)

        return replace(
            self,
            imports=imports,
            other_code=self.other_code.strip(),
            test_cases=list(self.test_cases),
        )


class CompilableTestCases:
    """
    Test cases known to compile, accumulated across feedback iterations.

    Unique by test name and insertion-ordered. The first compiled version
    of a name is kept; the collection only ever grows.
    """

    def __init__(self, test_cases: Iterable[TestCaseGeneratedByLLM] = ()):
        self._by_name: dict[str, TestCaseGeneratedByLLM] = {}
        self.add_all(test_cases)

    def add_all(self, test_cases: Iterable[TestCaseGeneratedByLLM]) -> None:
        for test_case in test_cases:
            self._by_name.setdefault(test_case.name, test_case)

    def to_list(self) -> list[TestCaseGeneratedByLLM]:
        return list(self._by_name.values())

    def is_empty(self) -> bool:
        return not self._by_name

    def __contains__(self, test_case: object) -> bool:
        if not isinstance(test_case, TestCaseGeneratedByLLM):
            return False
        return self._by_name.get(test_case.name) == test_case

    def __iter__(self) -> Iterator[TestCaseGeneratedByLLM]:
        return iter(self._by_name.values())

    def __len__(self) -> int:
        return len(self._by_name)

    def __repr__(self) -> str:
        return f"CompilableTestCases({list(self._by_name)})"


@dataclass(frozen=True)
class ReportTestCase:
    """One entry of the final report: index, name and rendered source."""

    id: int
    test_name: str
    test_code: str

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "test_name": self.test_name,
            "test_code": self.test_code,
        }


@dataclass
class Report:
    """Sink the feedback cycle copies its final test cases into."""

    test_case_list: dict[int, ReportTestCase] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "test_cases": [
                self.test_case_list[index].to_dict()
                for index in sorted(self.test_case_list)
            ]
        }

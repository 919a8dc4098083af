"""Render generated suites and single test cases as pytest modules."""

from ...constants import TEST_CASE_FILE_PREFIX
from ..data.models import TestCaseGeneratedByLLM, TestSuiteGeneratedByLLM


class TestsPresenter:
    """Turns TestSuiteGeneratedByLLM into executable Python test code."""
    __test__ = False

    def represent_test_suite(self, test_suite: TestSuiteGeneratedByLLM) -> str:
        """Full module with every test case of the suite."""
        return self._to_code(test_suite, test_suite.test_cases)

    def represent_test_case(self, test_suite: TestSuiteGeneratedByLLM, test_case_index: int) -> str:
        """Module holding one test case plus the suite's imports and helpers."""
        return self._to_code(test_suite, [test_suite.test_cases[test_case_index]])

    def test_case_filename(self, test_case_name: str) -> str:
        """Deterministic file name for a single test case."""
        return f"{TEST_CASE_FILE_PREFIX}{test_case_name}.py"

    def _to_code(
        self,
        test_suite: TestSuiteGeneratedByLLM,
        test_cases: list[TestCaseGeneratedByLLM]
    ) -> str:
        lines = []

        # Module docstring
        lines.append(f'"""Tests for {test_suite.package_name}."""')
        lines.append("")

        # Imports
        lines.extend(test_suite.imports)
        lines.append("")
        lines.append("")

        # Helpers, fixtures, constants
        if test_suite.other_code:
            lines.append(test_suite.other_code)
            lines.append("")
            lines.append("")

        # Test functions
        for test in test_cases:
            lines.append(test.code)
            lines.append("")
            lines.append("")

        return "\n".join(lines).rstrip() + "\n"

"""Collect raw model output and assemble it into a structured test suite."""

import ast
import logging

from ..data.models import TestCaseGeneratedByLLM, TestSuiteGeneratedByLLM

logger = logging.getLogger(__name__)


class TestsAssembler:
    """Accumulates model output text and parses it into TestSuiteGeneratedByLLM."""
    __test__ = False

    def __init__(self):
        self._chunks: list[str] = []

    def consume(self, text: str) -> None:
        """Append a piece of model output."""
        self._chunks.append(text)

    def get_content(self) -> str:
        return "".join(self._chunks)

    def clear(self) -> None:
        self._chunks.clear()

    def assemble_test_suite(self, package_name: str) -> TestSuiteGeneratedByLLM | None:
        """
        Parse the collected content into a test suite.

        Returns None when there is no code or the code is not valid Python.
        A suite with zero test cases is a valid result.
        """
        code = self._extract_code_block(self.get_content())
        if not code:
            return None

        try:
            tree = ast.parse(code)
        except SyntaxError as e:
            logger.info(f"Generated code is not parsable: {e.msg} (line {e.lineno})")
            return None

        lines = code.splitlines()
        imports: list[str] = []
        other_parts: list[str] = []
        test_cases: list[TestCaseGeneratedByLLM] = []
        seen_names: set[str] = set()

        for node in tree.body:
            if isinstance(node, (ast.Import, ast.ImportFrom)):
                imports.append(ast.unparse(node))
            elif self._is_test_function(node):
                if node.name in seen_names:
                    continue
                seen_names.add(node.name)
                test_cases.append(TestCaseGeneratedByLLM(
                    name=node.name,
                    code=self._source_of(node, lines),
                ))
            else:
                other_parts.append(self._source_of(node, lines))

        return TestSuiteGeneratedByLLM(
            package_name=package_name,
            imports=imports,
            other_code="\n\n\n".join(other_parts),
            test_cases=test_cases,
        )

    def _extract_code_block(self, text: str) -> str | None:
        """Extract Python code block from the response (whole text if unfenced)."""
        if "```python" in text:
            start = text.find("```python") + len("```python")
            end = text.find("```", start)
            if end > start:
                return text[start:end].strip()
        elif "```" in text:
            start = text.find("```") + len("```")
            end = text.find("```", start)
            if end > start:
                return text[start:end].strip()
        return text.strip() or None

    @staticmethod
    def _is_test_function(node: ast.stmt) -> bool:
        return (
            isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef))
            and node.name.startswith("test_")
        )

    @staticmethod
    def _source_of(node: ast.stmt, lines: list[str]) -> str:
        """Source lines of a top-level statement, including its decorators."""
        start = node.lineno
        for decorator in getattr(node, "decorator_list", []):
            start = min(start, decorator.lineno)
        end = node.end_lineno or node.lineno
        return "\n".join(lines[start - 1:end])

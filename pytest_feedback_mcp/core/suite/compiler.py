"""Check that generated test files compile, i.e. pytest can collect them."""

import logging
import os
import subprocess
import sys
from dataclasses import dataclass, field
from pathlib import Path

from ...constants import COMPILE_TIMEOUT_SECONDS
from ..data.models import TestCaseGeneratedByLLM

logger = logging.getLogger(__name__)

# pytest exit code for a clean collection
EXIT_OK = 0


@dataclass
class TestCasesCompilationResult:
    """Outcome of compiling a batch of single-test-case files."""
    __test__ = False

    all_test_cases_compilable: bool
    compilable_test_cases: set[TestCaseGeneratedByLLM] = field(default_factory=set)


class PytestCompiler:
    """
    Runs `pytest --collect-only` against a file with the build path importable.

    Collection imports the module and every name it pulls in, so syntax
    errors, bad imports and missing fixtures' modules all surface here
    without executing any test.
    """

    def __init__(self, timeout: int = COMPILE_TIMEOUT_SECONDS):
        self.timeout = timeout

    def compile_test_cases(
        self,
        generated_test_cases_paths: list[str],
        build_path: str,
        test_cases: list[TestCaseGeneratedByLLM]
    ) -> TestCasesCompilationResult:
        """Compile each case file; paths and cases are paired by index."""
        all_test_cases_compilable = True
        compilable_test_cases: set[TestCaseGeneratedByLLM] = set()

        for index, path in enumerate(generated_test_cases_paths):
            compilable, _ = self.compile_code(path, build_path)
            all_test_cases_compilable = all_test_cases_compilable and compilable
            if compilable:
                compilable_test_cases.add(test_cases[index])

        return TestCasesCompilationResult(
            all_test_cases_compilable=all_test_cases_compilable,
            compilable_test_cases=compilable_test_cases,
        )

    def compile_code(self, path: str, build_path: str) -> tuple[bool, str]:
        """Collect one file. Returns (success, compiler diagnostics)."""
        cmd = [
            sys.executable, "-m", "pytest",
            str(path),
            "--collect-only",
            "-q",
            "--no-header",
            "-p", "no:cacheprovider",
        ]
        env = {**os.environ, "PYTHONPATH": self._python_path(build_path)}

        try:
            completed = subprocess.run(
                cmd,
                cwd=str(Path(path).parent),
                capture_output=True,
                text=True,
                stdin=subprocess.DEVNULL,
                env=env,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            return False, f"Compilation timed out ({self.timeout}s limit)"
        except FileNotFoundError:
            return False, "Python interpreter not found"

        output = (completed.stdout + "\n" + completed.stderr).strip()
        if completed.returncode != EXIT_OK:
            logger.info(f"Compilation of {path} failed (exit code {completed.returncode})")
            return False, self._extract_errors(output)

        return True, output

    @staticmethod
    def _python_path(build_path: str) -> str:
        existing = os.environ.get("PYTHONPATH")
        if existing:
            return os.pathsep.join([build_path, existing])
        return build_path

    @staticmethod
    def _extract_errors(output: str) -> str:
        """Keep the lines that explain why collection failed."""
        error_lines = []
        for line in output.split('\n'):
            stripped = line.strip()
            if stripped.startswith('E '):
                error_lines.append(stripped[2:].strip())
            elif 'Error' in stripped or stripped.startswith('ERROR'):
                error_lines.append(stripped)

        if error_lines:
            return '\n'.join(dict.fromkeys(error_lines))

        if not output:
            return "Unknown compilation error"
        return output

"""
Feedback cycle - generate tests with the model until they compile.

Each iteration sends the current prompt, classifies the reply, saves the
generated test cases and the assembled suite, and compiles them. Failures
are answered with a corrective prompt until the request budget runs out;
the last allowed iteration falls back to the test cases that already
compiled in earlier iterations.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from ..data.models import (
    CompilableTestCases,
    Report,
    ReportTestCase,
    TestSuiteGeneratedByLLM,
)
from ..progress import ProgressIndicator
from ..suite.compiler import PytestCompiler
from ..suite.presenter import TestsPresenter
from ..suite.storage import TestsPersistentStorage
from .prompts import (
    EMPTY_RESPONSE_PROMPT,
    NOT_PARSABLE_PROMPT,
    PromptSizeReductionStrategy,
    build_compilation_error_prompt,
)
from .request_manager import RequestManager, ResponseErrorCode

logger = logging.getLogger(__name__)


class FeedbackCycleExecutionResult(str, Enum):
    """How a feedback cycle ended."""
    OK = "ok"
    NO_COMPILABLE_TEST_CASES_GENERATED = "no_compilable_test_cases_generated"
    CANCELED = "canceled"
    PROVIDED_PROMPT_TOO_LONG = "provided_prompt_too_long"
    SAVING_TEST_FILES_ISSUE = "saving_test_files_issue"


class WarningType(str, Enum):
    """Non-fatal events reported to the caller during the cycle."""
    TEST_SUITE_PARSING_FAILED = "test_suite_parsing_failed"
    NO_TEST_CASES_GENERATED = "no_test_cases_generated"
    COMPILATION_ERROR_OCCURRED = "compilation_error_occurred"


@dataclass(frozen=True)
class FeedbackResponse:
    """
    Terminal result of a feedback cycle.

    The suite is present if and only if the execution result is OK.
    The compilable test cases are always present (possibly empty).
    """
    execution_result: FeedbackCycleExecutionResult
    generated_test_suite: TestSuiteGeneratedByLLM | None
    compilable_test_cases: CompilableTestCases

    def __post_init__(self):
        if self.execution_result is FeedbackCycleExecutionResult.OK and self.generated_test_suite is None:
            raise ValueError(
                "Test suite must be provided when FeedbackCycleExecutionResult is OK, got None"
            )
        if self.execution_result is not FeedbackCycleExecutionResult.OK and self.generated_test_suite is not None:
            raise ValueError(
                "Test suite must not be provided when FeedbackCycleExecutionResult is not OK, "
                f"got {self.generated_test_suite!r}"
            )

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "execution_result": self.execution_result.value,
            "test_cases": (
                [t.name for t in self.generated_test_suite.test_cases]
                if self.generated_test_suite else []
            ),
            "compilable_test_cases": [t.name for t in self.compilable_test_cases],
        }


class LLMWithFeedback:
    """Runs the send -> classify -> save -> compile -> retry cycle for one session."""

    def __init__(
        self,
        report: Report,
        initial_prompt_message: str,
        prompt_size_reduction_strategy: PromptSizeReductionStrategy,
        test_suite_filename: str,
        package_name: str,
        result_path: str,
        build_path: str,
        request_manager: RequestManager,
        test_compiler: PytestCompiler,
        test_storage: TestsPersistentStorage,
        tests_presenter: TestsPresenter,
        indicator: ProgressIndicator,
        requests_count_threshold: int,
    ):
        """
        Args:
            report: Sink the final test cases are copied into
            initial_prompt_message: First prompt sent to the model
            prompt_size_reduction_strategy: Shrinks the prompt when it is rejected as too long
            test_suite_filename: File name of the assembled suite inside `result_path`
            package_name: Import path of the module under test
            result_path: Directory generated test files are written to
            build_path: Directory that makes the module under test importable
            request_manager: Sends prompts and classifies replies
            test_compiler: Checks that generated files compile
            test_storage: Writes generated files
            tests_presenter: Renders suites and single cases as source
            indicator: Progress handle polled for cancellation
            requests_count_threshold: Counted requests allowed before the forced last iteration
        """
        self.report = report
        self.initial_prompt_message = initial_prompt_message
        self.prompt_size_reduction_strategy = prompt_size_reduction_strategy
        self.test_suite_filename = test_suite_filename
        self.package_name = package_name
        self.result_path = result_path
        self.build_path = build_path
        self.request_manager = request_manager
        self.test_compiler = test_compiler
        self.test_storage = test_storage
        self.tests_presenter = tests_presenter
        self.indicator = indicator
        self.requests_count_threshold = requests_count_threshold

    def run(self, on_warning: Callable[[WarningType], None] | None = None) -> FeedbackResponse:
        """Run the cycle to completion and return its terminal result."""
        requests_count = 0
        generated_tests_are_passing = False
        next_prompt_message = self.initial_prompt_message

        execution_result = FeedbackCycleExecutionResult.OK
        compilable_test_cases = CompilableTestCases()

        # latest suite with at least one test case
        generated_test_suite: TestSuiteGeneratedByLLM | None = None

        while not generated_tests_are_passing:
            requests_count += 1

            logger.info(f"Iteration #{requests_count} of feedback cycle")

            if self.indicator.is_canceled():
                execution_result = FeedbackCycleExecutionResult.CANCELED
                break

            last_iteration = self._is_last_iteration(requests_count)

            if last_iteration and compilable_test_cases.is_empty():
                execution_result = FeedbackCycleExecutionResult.NO_COMPILABLE_TEST_CASES_GENERATED
                break

            response = self.request_manager.request(
                prompt=next_prompt_message,
                indicator=self.indicator,
                package_name=self.package_name,
                is_user_feedback=False,
            )

            if response.error_code is ResponseErrorCode.PROMPT_TOO_LONG:
                if self.prompt_size_reduction_strategy.is_reduction_possible():
                    next_prompt_message = self.prompt_size_reduction_strategy.reduce_size_and_generate_prompt()
                    # rejected for size only; the model never saw it
                    requests_count -= 1
                    continue
                execution_result = FeedbackCycleExecutionResult.PROVIDED_PROMPT_TOO_LONG
                break

            usable_reply = False

            if response.error_code is ResponseErrorCode.EMPTY_LLM_RESPONSE:
                next_prompt_message = EMPTY_RESPONSE_PROMPT
            elif response.error_code is ResponseErrorCode.TEST_SUITE_PARSING_FAILURE:
                self._warn(on_warning, WarningType.TEST_SUITE_PARSING_FAILED)
                logger.info(f"Cannot parse a test suite from the LLM response. LLM response: '{response}'")
                next_prompt_message = NOT_PARSABLE_PROMPT
            elif not response.test_suite.test_cases:
                self._warn(on_warning, WarningType.NO_TEST_CASES_GENERATED)
                next_prompt_message = EMPTY_RESPONSE_PROMPT
            else:
                usable_reply = True
                generated_test_suite = response.test_suite
                logger.info(f"Test suite generated successfully: {generated_test_suite}")

            if not usable_reply and not last_iteration:
                continue
            # On the last iteration an unusable reply still ends the cycle:
            # the forced pass below runs on the latest suite that had test cases.

            if self.indicator.is_canceled():
                execution_result = FeedbackCycleExecutionResult.CANCELED
                break

            generated_test_cases_paths: list[str] = []

            if last_iteration:
                generated_test_suite.update_test_cases(compilable_test_cases.to_list())
            else:
                for test_case_index, test_case in enumerate(generated_test_suite.test_cases):
                    save_filepath = self.test_storage.save_generated_test(
                        generated_test_suite.package_name,
                        self.tests_presenter.represent_test_case(generated_test_suite, test_case_index),
                        self.result_path,
                        self.tests_presenter.test_case_filename(test_case.name),
                    )
                    generated_test_cases_paths.append(save_filepath)

            generated_test_suite_path = self.test_storage.save_generated_test(
                generated_test_suite.package_name,
                self.tests_presenter.represent_test_suite(generated_test_suite),
                self.result_path,
                self.test_suite_filename,
            )

            if not all(Path(path).exists() for path in [*generated_test_cases_paths, generated_test_suite_path]):
                logger.error("Generated test files were reported saved but are missing")
                execution_result = FeedbackCycleExecutionResult.SAVING_TEST_FILES_ISSUE
                break

            # on the last iteration these are the accumulated compilable cases
            test_cases = list(generated_test_suite.test_cases)

            self.indicator.set_text("Compilation tests checking")

            test_cases_compilation_result = self.test_compiler.compile_test_cases(
                generated_test_cases_paths, self.build_path, test_cases
            )
            _, test_suite_compilation_output = self.test_compiler.compile_code(
                str(Path(generated_test_suite_path).absolute()), self.build_path
            )

            compilable_test_cases.add_all(
                test_case for test_case in test_cases
                if test_case in test_cases_compilation_result.compilable_test_cases
            )

            if not test_cases_compilation_result.all_test_cases_compilable and not last_iteration:
                logger.info(
                    "Non-compilable test suite: \n"
                    f"{self.tests_presenter.represent_test_suite(generated_test_suite)}"
                )
                self._warn(on_warning, WarningType.COMPILATION_ERROR_OCCURRED)
                next_prompt_message = build_compilation_error_prompt(test_suite_compilation_output)
                continue

            logger.info("Result is compilable")

            generated_tests_are_passing = True

            for index, test_case in enumerate(test_cases):
                self.report.test_case_list[index] = ReportTestCase(index, test_case.name, str(test_case))

        return FeedbackResponse(
            execution_result=execution_result,
            generated_test_suite=(
                generated_test_suite
                if execution_result is FeedbackCycleExecutionResult.OK else None
            ),
            compilable_test_cases=compilable_test_cases,
        )

    def _is_last_iteration(self, requests_count: int) -> bool:
        return requests_count > self.requests_count_threshold

    @staticmethod
    def _warn(on_warning: Callable[[WarningType], None] | None, warning: WarningType) -> None:
        logger.warning(f"Feedback cycle warning: {warning.value}")
        if on_warning is not None:
            on_warning(warning)

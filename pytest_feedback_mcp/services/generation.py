"""
Generation Service - Business logic for feedback-driven test generation.

Orchestrates the full pipeline:
1. Load and syntax-check the module under test (and any context files)
2. Make the module importable from a build directory
3. Run the LLM feedback cycle until the generated tests compile
4. Return the outcome together with the saved suite

A feedback cycle that ends without tests (canceled, prompt too long, ...)
is still a successful service call: the outcome carries the reason.
"""

from __future__ import annotations

import ast
import logging
import tempfile
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from ..constants import (
    DEFAULT_AI_MODEL,
    DEFAULT_CONTEXT_DEPTH,
    DEFAULT_REQUESTS_COUNT_THRESHOLD,
    DEFAULT_TEST_SUITE_FILENAME,
)
from ..core.data import Report
from ..core.generation import (
    ContextDepthReductionStrategy,
    FeedbackCycleExecutionResult,
    FeedbackResponse,
    LLMWithFeedback,
    OpenAIRequestManager,
    RequestManager,
    WarningType,
)
from ..core.progress import CancellableProgressIndicator, ProgressIndicator
from ..core.suite import PytestCompiler, TestsPersistentStorage, TestsPresenter
from .base import ErrorCode, ServiceResult
from .code_loader import CodeLoader, LoadedCode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeedbackGenerationResult:
    """
    Complete result of a feedback generation session.

    Attributes:
        response: Terminal result of the feedback cycle
        report: Final test cases (filled only when the cycle succeeded)
        module_name: Import name of the module under test
        output_dir: Directory the generated files were written to
        saved_to: Path of the assembled suite file when the cycle succeeded
        warnings: Warnings raised during the cycle, in order
    """
    response: FeedbackResponse
    report: Report
    module_name: str
    output_dir: str
    saved_to: str | None = None
    warnings: list[WarningType] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.response.execution_result is FeedbackCycleExecutionResult.OK

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            **self.response.to_dict(),
            "module_name": self.module_name,
            "output_dir": self.output_dir,
            "saved_to": self.saved_to,
            "warnings": [w.value for w in self.warnings],
            "report": self.report.to_dict(),
        }


class GenerationService:
    """
    Service for generating pytest tests with the LLM feedback cycle.

    Collaborators are injectable; defaults talk to OpenAI and run pytest
    collection locally.
    """

    def __init__(
        self,
        code_loader: CodeLoader | None = None,
        compiler: PytestCompiler | None = None,
        storage: TestsPersistentStorage | None = None,
        presenter: TestsPresenter | None = None
    ):
        self._loader = code_loader or CodeLoader()
        self._compiler = compiler or PytestCompiler()
        self._storage = storage or TestsPersistentStorage()
        self._presenter = presenter or TestsPresenter()

    def generate(
        self,
        code: str | None = None,
        file_path: str | None = None,
        module_name: str | None = None,
        context_files: list[str] | None = None,
        output_dir: str | None = None,
        build_path: str | None = None,
        test_suite_filename: str = DEFAULT_TEST_SUITE_FILENAME,
        max_requests: int = DEFAULT_REQUESTS_COUNT_THRESHOLD,
        context_depth: int = DEFAULT_CONTEXT_DEPTH,
        model: str = DEFAULT_AI_MODEL,
        api_key: str | None = None,
        request_manager: RequestManager | None = None,
        indicator: ProgressIndicator | None = None,
        on_warning: Callable[[WarningType], None] | None = None
    ) -> ServiceResult[FeedbackGenerationResult]:
        """
        Generate tests for Python code.

        Args:
            code: Direct code string
            file_path: Path to Python file
            module_name: Import name of the module (default: file stem or "module")
            context_files: Related Python files added to the prompt
            output_dir: Where generated tests go (default: a new temp directory)
            build_path: Directory that makes the module importable
                (default: the file's directory, or `output_dir/build` for direct code)
            test_suite_filename: File name of the assembled suite
            max_requests: Counted requests before the forced last iteration
            context_depth: How many context files the first prompt includes
            model: OpenAI model name
            api_key: OpenAI API key (uses env var if not provided)
            request_manager: Custom model client (overrides model/api_key)
            indicator: Progress handle polled for cancellation
            on_warning: Called for each non-fatal cycle warning

        Returns:
            ServiceResult containing FeedbackGenerationResult
        """
        if max_requests < 1:
            return ServiceResult.fail(
                ErrorCode.VALIDATION_ERROR,
                f"'max_requests' must be at least 1 (got {max_requests})"
            )

        # Step 1: Load code and context
        load_result = self._loader.load(code=code, file_path=file_path, module_name=module_name)
        if not load_result.success:
            return ServiceResult.fail(
                load_result.error.code,
                f"Cannot generate tests: {load_result.error.message}",
                load_result.error.details
            )
        loaded = load_result.data

        syntax_error = self._check_syntax(loaded.content)
        if syntax_error:
            return syntax_error

        context_result = self._loader.load_context(context_files or [])
        if not context_result.success:
            return ServiceResult.fail(
                context_result.error.code,
                context_result.error.message,
                context_result.error.details
            )

        # Step 2: Model client
        if request_manager is None:
            request_manager = OpenAIRequestManager(api_key=api_key, model=model)
            if not request_manager.is_available():
                return ServiceResult.fail(
                    ErrorCode.AI_UNAVAILABLE,
                    "OpenAI API key not configured. Set OPENAI_API_KEY environment variable."
                )

        # Step 3: Output and build directories
        try:
            output_dir = output_dir or tempfile.mkdtemp(prefix="pytest_feedback_")
            build_path = build_path or self._prepare_build_path(loaded, output_dir)
        except OSError as e:
            return ServiceResult.fail(
                ErrorCode.INTERNAL_ERROR,
                f"Cannot prepare build directory: {e}"
            )

        # Step 4: Feedback cycle
        reduction_strategy = ContextDepthReductionStrategy(
            source_code=loaded.content,
            module_name=loaded.module_name,
            context=context_result.data,
            depth=context_depth,
        )
        report = Report()
        warnings: list[WarningType] = []

        def collect_warning(warning: WarningType) -> None:
            warnings.append(warning)
            if on_warning is not None:
                on_warning(warning)

        feedback = LLMWithFeedback(
            report=report,
            initial_prompt_message=reduction_strategy.generate_prompt(),
            prompt_size_reduction_strategy=reduction_strategy,
            test_suite_filename=test_suite_filename,
            package_name=loaded.module_name,
            result_path=output_dir,
            build_path=build_path,
            request_manager=request_manager,
            test_compiler=self._compiler,
            test_storage=self._storage,
            tests_presenter=self._presenter,
            indicator=indicator or CancellableProgressIndicator(),
            requests_count_threshold=max_requests,
        )

        logger.info(f"Generating tests for {loaded.module_name} into {output_dir}")
        response = feedback.run(on_warning=collect_warning)
        logger.info(f"Feedback cycle finished: {response.execution_result.value}")

        saved_to = None
        if response.execution_result is FeedbackCycleExecutionResult.OK:
            saved_to = str(Path(output_dir, test_suite_filename).absolute())

        return ServiceResult.ok(FeedbackGenerationResult(
            response=response,
            report=report,
            module_name=loaded.module_name,
            output_dir=output_dir,
            saved_to=saved_to,
            warnings=warnings,
        ))

    def _check_syntax(self, content: str) -> ServiceResult[FeedbackGenerationResult] | None:
        """Return an error result if the module under test is not valid Python."""
        try:
            ast.parse(content)
        except SyntaxError as e:
            return ServiceResult.fail(
                ErrorCode.SYNTAX_ERROR,
                f"Cannot generate tests: syntax error at line {e.lineno}: {e.msg}",
                details={"line": e.lineno, "offset": e.offset}
            )
        return None

    def _prepare_build_path(self, loaded: LoadedCode, output_dir: str) -> str:
        """
        Directory from which `import <module_name>` works during compilation.

        A dotted name such as `pkg.calc` puts the root one level above the
        file for every package in the name.
        """
        packages = loaded.module_name.split(".")[:-1]

        if loaded.source_path is not None:
            root = Path(loaded.source_path).absolute().parent
            for _ in packages:
                root = root.parent
            return str(root)

        build_dir = Path(output_dir, "build")
        module_dir = build_dir.joinpath(*packages)
        module_dir.mkdir(parents=True, exist_ok=True)
        module_file = module_dir / f"{loaded.module_name.rsplit('.', 1)[-1]}.py"
        module_file.write_text(loaded.content, encoding="utf-8")
        return str(build_dir.absolute())

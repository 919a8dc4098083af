"""
Code Loader Service - loads the module under test and related code.

Source comes from a file path or a direct string; related files are
loaded as context sections for the generation prompt.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..constants import ALLOWED_EXTENSIONS, MAX_CODE_SIZE
from .base import ErrorCode, ServiceResult


@dataclass(frozen=True)
class LoadedCode:
    """
    Result of successfully loading code.

    Attributes:
        content: The Python source code
        module_name: Import name of the module under test
        source_path: Original file path (None if loaded from string)
    """
    content: str
    module_name: str
    source_path: str | None = None


class CodeLoader:
    """Loads Python code from files or direct input, enforcing size and extension limits."""

    def __init__(
        self,
        max_size: int = MAX_CODE_SIZE,
        allowed_extensions: frozenset[str] = ALLOWED_EXTENSIONS
    ):
        self._max_size = max_size
        self._allowed_extensions = allowed_extensions

    def load(
        self,
        code: str | None = None,
        file_path: str | None = None,
        module_name: str | None = None
    ) -> ServiceResult[LoadedCode]:
        """
        Load code from file path or direct input.

        Args:
            code: Direct code string (optional)
            file_path: Path to Python file (optional, wins over `code`)
            module_name: Import name override (defaults to the file stem or "module")

        Returns:
            ServiceResult with LoadedCode on success, error on failure
        """
        if file_path:
            return self._load_from_file(file_path, module_name)
        elif code is not None:
            return self._load_from_string(code, module_name or "module")
        else:
            return ServiceResult.fail(
                ErrorCode.MISSING_INPUT,
                "Please provide either 'file_path' or 'code'"
            )

    def load_context(self, file_paths: list[str]) -> ServiceResult[list[str]]:
        """Load related files used as prompt context, in the given order."""
        sections = []
        for file_path in file_paths:
            result = self._load_from_file(file_path)
            if not result.success:
                return ServiceResult.fail(
                    result.error.code,
                    f"Cannot load context file: {result.error.message}",
                    result.error.details
                )
            sections.append(result.data.content)
        return ServiceResult.ok(sections)

    def _load_from_file(
        self,
        file_path: str,
        module_name: str | None = None
    ) -> ServiceResult[LoadedCode]:
        path = Path(file_path)

        if path.suffix not in self._allowed_extensions:
            return ServiceResult.fail(
                ErrorCode.INVALID_EXTENSION,
                f"Only Python files allowed (got {path.suffix})",
                details={
                    "extension": path.suffix,
                    "allowed": sorted(self._allowed_extensions)
                }
            )

        if not path.exists():
            return ServiceResult.fail(
                ErrorCode.FILE_NOT_FOUND,
                f"File not found: {file_path}"
            )

        if not path.is_file():
            return ServiceResult.fail(
                ErrorCode.VALIDATION_ERROR,
                f"Path is not a file: {file_path}"
            )

        try:
            content = path.read_text(encoding="utf-8")
        except PermissionError:
            return ServiceResult.fail(
                ErrorCode.PERMISSION_DENIED,
                f"Permission denied: {file_path}"
            )
        except (OSError, UnicodeDecodeError) as e:
            return ServiceResult.fail(
                ErrorCode.INTERNAL_ERROR,
                f"Error reading file: {e}"
            )

        if len(content) > self._max_size:
            return self._too_large("File", len(content))

        return ServiceResult.ok(LoadedCode(
            content=content,
            module_name=module_name or path.stem,
            source_path=str(path)
        ))

    def _load_from_string(self, code: str, module_name: str) -> ServiceResult[LoadedCode]:
        if not code.strip():
            return ServiceResult.fail(
                ErrorCode.MISSING_INPUT,
                "'code' cannot be empty"
            )

        if len(code) > self._max_size:
            return self._too_large("Code", len(code))

        return ServiceResult.ok(LoadedCode(
            content=code,
            module_name=module_name,
            source_path=None
        ))

    def _too_large(self, what: str, size: int) -> ServiceResult[LoadedCode]:
        return ServiceResult.fail(
            ErrorCode.FILE_TOO_LARGE,
            f"{what} too large: {size:,} bytes (max: {self._max_size:,})",
            details={"size": size, "max_size": self._max_size}
        )

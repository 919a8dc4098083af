"""Persist generated test code to disk."""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class TestsPersistentStorage:
    """Writes generated test files; callers verify the returned path exists."""
    __test__ = False

    def save_generated_test(
        self,
        package_name: str,
        code: str,
        result_path: str,
        filename: str
    ) -> str:
        """
        Write `code` to `result_path/filename` and return the absolute path.

        Repeated calls overwrite the file. A failed write is logged and the
        file is removed, so neither a truncated file nor one left over from
        an earlier call is mistaken for the new content.

        Args:
            package_name: Import path of the module under test (for logging)
            code: Test module source
            result_path: Directory holding the generated tests
            filename: File name inside `result_path`

        Returns:
            Absolute path of the (intended) file
        """
        path = Path(result_path, filename).absolute()

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(code, encoding="utf-8")
        except OSError as e:
            logger.error(f"Failed to save generated tests for {package_name} to {path}: {e}")
            self._discard(path)
            return str(path)

        logger.debug(f"Saved generated tests for {package_name} to {path}")
        return str(path)

    @staticmethod
    def _discard(path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Cannot remove partially written file {path}: {e}")

"""Progress reporting and cancellation for long-running generation sessions."""

import logging
import threading
from typing import Protocol

logger = logging.getLogger(__name__)


class ProgressIndicator(Protocol):
    """What the feedback cycle needs from a progress UI."""

    def is_canceled(self) -> bool:
        ...

    def set_text(self, text: str) -> None:
        ...


class CancellableProgressIndicator:
    """Indicator that can be canceled from another thread and logs its status text."""

    def __init__(self):
        self._canceled = threading.Event()
        self.text = ""

    def cancel(self) -> None:
        """Request cancellation; observed by the cycle at its next check."""
        self._canceled.set()

    def is_canceled(self) -> bool:
        return self._canceled.is_set()

    def set_text(self, text: str) -> None:
        self.text = text
        logger.info(f"Progress: {text}")

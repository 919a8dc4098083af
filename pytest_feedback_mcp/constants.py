"""
Shared constants used across the project.
"""

from typing import Final

# File constraints
MAX_CODE_SIZE: Final[int] = 1_000_000  # 1MB
ALLOWED_EXTENSIONS: Final[frozenset[str]] = frozenset({'.py'})

# AI Configuration
OPENAI_API_KEY_ENV: Final[str] = "OPENAI_API_KEY"
DEFAULT_AI_MODEL: Final[str] = "gpt-4o-mini"
AI_TEMPERATURE: Final[float] = 0.2
AI_MAX_TOKENS: Final[int] = 2000

# Feedback cycle
DEFAULT_REQUESTS_COUNT_THRESHOLD: Final[int] = 3
DEFAULT_CONTEXT_DEPTH: Final[int] = 2
DEFAULT_TEST_SUITE_FILENAME: Final[str] = "test_generated_suite.py"
TEST_CASE_FILE_PREFIX: Final[str] = "generated_"

# Collection ("compilation") of generated tests
COMPILE_TIMEOUT_SECONDS: Final[int] = 30

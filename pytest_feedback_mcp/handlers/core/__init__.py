"""Registry for core MCP tool definitions and handlers."""

from .generate_tests import (
    TOOL_DEFINITION as GENERATE_TESTS_TOOL,
    handle as handle_generate_tests,
)


# All Core tool definitions
TOOLS = [
    GENERATE_TESTS_TOOL,
]

# Tool name to handler mapping
HANDLERS = {
    "generate_tests": handle_generate_tests,
}


__all__ = [
    "TOOLS",
    "GENERATE_TESTS_TOOL",
    "HANDLERS",
    "handle_generate_tests",
]

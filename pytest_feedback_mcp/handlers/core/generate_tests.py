"""MCP handler for generate_tests (delegates to GenerationService)."""

from __future__ import annotations

import asyncio

from mcp.types import TextContent, Tool

from ...constants import DEFAULT_AI_MODEL, DEFAULT_REQUESTS_COUNT_THRESHOLD
from ...services import FeedbackGenerationResult, GenerationService, ServiceResult

# =============================================================================
# Tool Definition
# =============================================================================

TOOL_DEFINITION = Tool(
    name="generate_tests",
    description=(
        "Generate pytest test cases for Python code with an LLM. "
        "Generated tests are saved and compiled (collected by pytest); "
        "when they do not compile, the compiler output is fed back to the "
        "model and generation is retried until the request budget runs out."
    ),
    inputSchema={
        "type": "object",
        "properties": {
            "file_path": {
                "type": "string",
                "description": "Path to the Python file to generate tests for"
            },
            "code": {
                "type": "string",
                "description": "Python code content (alternative to file_path)"
            },
            "module_name": {
                "type": "string",
                "description": "Import name of the module under test (default: file name)"
            },
            "context_files": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Related Python files to include in the prompt"
            },
            "output_dir": {
                "type": "string",
                "description": "Directory for the generated test files (default: temp dir)"
            },
            "build_path": {
                "type": "string",
                "description": "Directory from which the module under test is importable"
            },
            "max_requests": {
                "type": "integer",
                "description": (
                    "Requests allowed before falling back to the tests that compiled "
                    f"(default: {DEFAULT_REQUESTS_COUNT_THRESHOLD})"
                )
            },
            "model": {
                "type": "string",
                "description": f"OpenAI model to use (default: {DEFAULT_AI_MODEL})"
            }
        }
    }
)


# =============================================================================
# Handler
# =============================================================================

async def handle(arguments: dict) -> list[TextContent]:
    """Generate pytest tests from 'code' or 'file_path' and return the result text."""
    service = GenerationService()

    # the feedback cycle blocks on network and subprocess calls
    result = await asyncio.to_thread(
        service.generate,
        code=arguments.get("code"),
        file_path=arguments.get("file_path"),
        module_name=arguments.get("module_name"),
        context_files=arguments.get("context_files"),
        output_dir=arguments.get("output_dir"),
        build_path=arguments.get("build_path"),
        max_requests=arguments.get("max_requests", DEFAULT_REQUESTS_COUNT_THRESHOLD),
        model=arguments.get("model", DEFAULT_AI_MODEL),
    )

    if not result.success:
        return _error_response(result)

    return [TextContent(
        type="text",
        text=format_generation_result(result.data)
    )]


# =============================================================================
# Response Formatting
# =============================================================================

def format_generation_result(result: FeedbackGenerationResult) -> str:
    """Format the feedback generation outcome as readable text."""
    response = result.response
    lines = [
        f"Result: {response.execution_result.value}",
        f"Module: {result.module_name}",
        f"Compilable test cases: {len(response.compilable_test_cases)}",
    ]

    if result.warnings:
        lines.append("")
        lines.append("Warnings:")
        for warning in result.warnings:
            lines.append(f"  - {warning.value}")

    if not result.succeeded:
        lines.append("")
        lines.append("No test suite was produced.")
        return "\n".join(lines)

    lines.append(f"\nTests saved to: {result.saved_to}")

    lines.extend([
        "",
        "=" * 60,
        "GENERATED TEST CODE:",
        "=" * 60,
        "",
    ])
    for index in sorted(result.report.test_case_list):
        lines.append(result.report.test_case_list[index].test_code)
        lines.append("")

    return "\n".join(lines)


# =============================================================================
# Helpers
# =============================================================================

def _error_response(result: ServiceResult) -> list[TextContent]:
    """Create error response from failed ServiceResult."""
    return [TextContent(type="text", text=f"Error: {result.error.message}")]

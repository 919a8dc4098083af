"""Prompt templates for the feedback cycle and the prompt size reduction strategy."""

from typing import Protocol

SYSTEM_PROMPT = """You are a Python testing expert. You write pytest test suites.

Rules:
- Write top-level test functions named test_<function>_<scenario>
- Import everything you test from the module under test
- Use plain assert statements; use pytest.raises for exceptions
- Return one Python code block between ``` and no other text
"""

GENERATION_PROMPT_TEMPLATE = """## Module under test: {module_name}
```python
{source_code}
```
{context}
Generate a pytest test suite for the module `{module_name}`.
Import the code under test with `from {module_name} import ...`.
Respond only with code between ```, do not provide any other text.
"""

CONTEXT_SECTION_TEMPLATE = """
## Related code:
```python
{context}
```
"""

EMPTY_RESPONSE_PROMPT = (
    "You have provided an empty answer! Please, answer my previous question with the same formats"
)

NOT_PARSABLE_PROMPT = "The provided code is not parsable. Please, generate the correct code"

COMPILATION_ERROR_PROMPT_TEMPLATE = (
    "I cannot compile the tests that you provided. The error is:\n{error}\n"
    " Fix this issue in the provided tests.\n"
    "Generate top-level test functions whose names start with test_. "
    "Response only a code with tests between ```, do not provide any other text."
)


def build_generation_prompt(source_code: str, module_name: str, context: list[str]) -> str:
    """Build the initial generation prompt with the given related-code sections."""
    context_text = "".join(
        CONTEXT_SECTION_TEMPLATE.format(context=section.strip())
        for section in context
    )
    return GENERATION_PROMPT_TEMPLATE.format(
        module_name=module_name,
        source_code=source_code.strip(),
        context=context_text,
    )


def build_compilation_error_prompt(error: str) -> str:
    return COMPILATION_ERROR_PROMPT_TEMPLATE.format(error=error)


class PromptSizeReductionStrategy(Protocol):
    """Shrinks the prompt when the model rejects it as too long."""

    def is_reduction_possible(self) -> bool:
        ...

    def reduce_size_and_generate_prompt(self) -> str:
        ...


class ContextDepthReductionStrategy:
    """
    Drops related-code sections one at a time.

    The prompt is rebuilt from the first `depth` context sections; each
    reduction lowers the depth by one, so at most len(context) reductions
    are ever possible.
    """

    def __init__(self, source_code: str, module_name: str, context: list[str], depth: int | None = None):
        self.source_code = source_code
        self.module_name = module_name
        self.context = list(context)
        self.depth = len(self.context) if depth is None else max(0, min(depth, len(self.context)))

    def generate_prompt(self) -> str:
        return build_generation_prompt(
            self.source_code,
            self.module_name,
            self.context[:self.depth],
        )

    def is_reduction_possible(self) -> bool:
        return self.depth > 0

    def reduce_size_and_generate_prompt(self) -> str:
        if not self.is_reduction_possible():
            raise ValueError("Prompt cannot be reduced any further")
        self.depth -= 1
        return self.generate_prompt()

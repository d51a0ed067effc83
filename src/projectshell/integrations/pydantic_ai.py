"""
PydanticAI integration for projectshell.

Provides helpers to create PydanticAI-compatible tools.
"""

from __future__ import annotations

try:
    from pydantic_ai import Tool
except ImportError:
    raise ImportError(
        "PydanticAI integration requires 'pydantic-ai'. "
        "Install with `pip install projectshell[pydantic-ai]`"
    )

from projectshell.api import ProjectToolkit
from projectshell.errors import AccessDenied
from projectshell.integrations.langchain import format_result


def create_project_tools(toolkit: ProjectToolkit) -> list[Tool]:
    """
    Create PydanticAI tools bound to one project.

    Example:
        >>> from pydantic_ai import Agent
        >>> toolkit = await create_project_toolkit(engine, project)
        >>> agent = Agent("openai:gpt-4o", tools=create_project_tools(toolkit))
    """

    async def read_file(path: str) -> str:
        """
        Read a file from the project.

        Args:
            path: Path relative to the project root.
        """
        try:
            return await toolkit.read_file(path)
        except (AccessDenied, OSError) as e:
            return f"Error: {e}"

    async def write_file(path: str, content: str) -> str:
        """
        Write a file in the project.

        Args:
            path: Path relative to the project root.
            content: Full new file content.
        """
        try:
            await toolkit.write_file(path, content)
        except (AccessDenied, OSError) as e:
            return f"Error: {e}"
        return f"Written to {path}"

    async def file_tree() -> str:
        """Show the project's file tree."""
        return await toolkit.file_tree()

    async def run_project() -> str:
        """Run the project's entry point and return its output."""
        return format_result(await toolkit.run())

    async def run_script(code: str) -> str:
        """
        Run a code snippet with the project's interpreter.

        Args:
            code: Source code in the project's language.
        """
        return format_result(await toolkit.run_script(code))

    return [
        Tool(read_file, takes_ctx=False),
        Tool(write_file, takes_ctx=False),
        Tool(file_tree, takes_ctx=False),
        Tool(run_project, takes_ctx=False),
        Tool(run_script, takes_ctx=False),
    ]

"""LangChain integration for projectshell."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from projectshell.api import ProjectToolkit

HAS_LANGCHAIN = False
_StructuredTool: Any = None

try:
    import langchain_core.tools

    _StructuredTool = langchain_core.tools.StructuredTool
    HAS_LANGCHAIN = True
except ImportError:
    pass


def format_result(result: Any) -> str:
    """Render an ExecutionResult as tool output text."""
    if not result.success:
        return f"Error ({result.outcome.value}, exit {result.exit_code}):\n{result.stdout}{result.stderr}"
    return result.stdout or "(no output)"


def create_langchain_tools(toolkit: ProjectToolkit) -> dict[str, Any]:
    """
    Create LangChain tools from a ProjectToolkit.

    Args:
        toolkit: The project toolkit to wrap.

    Returns:
        Dictionary of LangChain StructuredTool instances.

    Raises:
        ImportError: If langchain-core is not installed.

    Example:
        >>> toolkit = await create_project_toolkit(engine, project)
        >>> tools = create_langchain_tools(toolkit)
        >>> agent = create_react_agent(llm, list(tools.values()))
    """
    if not HAS_LANGCHAIN:
        raise ImportError(
            "LangChain integration requires langchain-core. "
            "Install with: pip install projectshell[langchain]"
        )

    async def read_file(path: str) -> str:
        """Read a file from the project."""
        return await toolkit.read_file(path)

    async def write_file(path: str, content: str) -> str:
        """Write a file in the project."""
        await toolkit.write_file(path, content)
        return f"Written to {path}"

    async def list_files() -> str:
        """List every file in the project."""
        return "\n".join(await toolkit.list_files())

    async def run_project() -> str:
        """Run the project's entry point."""
        return format_result(await toolkit.run())

    async def run_script(code: str) -> str:
        """Run a code snippet with the project's interpreter."""
        return format_result(await toolkit.run_script(code))

    read_tool = _StructuredTool.from_function(
        coroutine=read_file,
        name="read_file",
        description=f"Read a file from the project. {toolkit.tool_prompt}",
    )

    write_tool = _StructuredTool.from_function(
        coroutine=write_file,
        name="write_file",
        description="Write content to a file in the project, creating folders as needed.",
    )

    list_tool = _StructuredTool.from_function(
        coroutine=list_files,
        name="list_files",
        description="List all project files, relative to the project root.",
    )

    run_tool = _StructuredTool.from_function(
        coroutine=run_project,
        name="run_project",
        description="Run the project and return its output.",
    )

    script_tool = _StructuredTool.from_function(
        coroutine=run_script,
        name="run_script",
        description="Run a code snippet inside the project with its own interpreter.",
    )

    return {
        "read_file": read_tool,
        "write_file": write_tool,
        "list_files": list_tool,
        "run_project": run_tool,
        "run_script": script_tool,
    }

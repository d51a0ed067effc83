"""
Project lifecycle: scaffolding, deletion and dependency installation.
"""

from __future__ import annotations

import asyncio
import logging
import secrets
import shutil
from pathlib import Path
from textwrap import dedent
from typing import TYPE_CHECKING

from projectshell._types import CodeProject, ExecutionResult, ProjectType
from projectshell.errors import ProjectExistsError, ScaffoldError

if TYPE_CHECKING:
    from projectshell.config import Settings
    from projectshell.runner import CommandRunner
    from projectshell.security.policy import PathGuard

logger = logging.getLogger(__name__)

REQUIREMENTS_PLACEHOLDER = "# Add your python dependencies here"

POM_TEMPLATE = """\
<project xmlns="http://maven.apache.org/POM/4.0.0" xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"
  xsi:schemaLocation="http://maven.apache.org/POM/4.0.0 http://maven.apache.org/xsd/maven-4.0.0.xsd">
  <modelVersion>4.0.0</modelVersion>
  <groupId>com.example</groupId>
  <artifactId>{name}</artifactId>
  <version>1.0-SNAPSHOT</version>
  <properties>
    <maven.compiler.source>1.8</maven.compiler.source>
    <maven.compiler.target>1.8</maven.compiler.target>
  </properties>
  <build>
    <plugins>
      <plugin>
        <groupId>org.codehaus.mojo</groupId>
        <artifactId>exec-maven-plugin</artifactId>
        <version>3.0.0</version>
        <configuration>
          <mainClass>com.example.Main</mainClass>
        </configuration>
      </plugin>
    </plugins>
  </build>
</project>
"""

JAVA_MAIN_TEMPLATE = """\
package com.example;

public class Main {{
    public static void main(String[] args) {{
        System.out.println("Hello, Java World from {name}!");
    }}
}}
"""

DELPHI_TEMPLATE = """\
program {name};

{{$APPTYPE CONSOLE}}

uses
  System.SysUtils;

begin
  try
    WriteLn('Hello from {name}!');
  except
    on E: Exception do
      WriteLn(E.ClassName, ': ', E.Message);
  end;
end.
"""

HTML_TEMPLATE = dedent("""\
    <!DOCTYPE html>
    <html lang="en">
    <head>
        <meta charset="UTF-8">
        <meta name="viewport" content="width=device-width, initial-scale=1.0">
        <title>{name}</title>
    </head>
    <body>
        <h1>Welcome to {name}</h1>
    </body>
    </html>
    """)


def new_project_id() -> str:
    return secrets.token_hex(8)


class ProjectManager:
    """
    Creates, deletes and prepares typed code projects.

    All paths are validated by the PathGuard before anything is touched.
    """

    def __init__(self, settings: Settings, runner: CommandRunner, guard: PathGuard) -> None:
        self._settings = settings
        self._runner = runner
        self._host = runner.host
        self._guard = guard

    @property
    def npm_command(self) -> str:
        return self._host.sibling_tool(self._settings.selected_node_path, "npm")

    async def create(self, project_type: ProjectType | str, name: str, base_path: str | Path) -> CodeProject:
        """
        Create and scaffold a new project directory.

        Args:
            project_type: One of python, nodejs, java, delphi, webapp.
            name: Display name, also used as the directory name.
            base_path: Directory the project is created in.

        Returns:
            The new CodeProject with a fresh random id.

        Raises:
            ValueError: If the type or name is invalid.
            AccessDenied: If the target is outside the configured roots.
            ProjectExistsError: If the directory already exists.
            ScaffoldError: If scaffolding fails (the directory is removed first).
        """
        ptype = ProjectType(project_type)
        _validate_name(name)
        project_path = self._guard.check(Path(base_path) / name)

        if project_path.exists():
            raise ProjectExistsError(project_path)
        project_path.mkdir(parents=True)

        try:
            await self._scaffold(ptype, name, project_path)
        except asyncio.CancelledError:
            logger.info(f"Scaffolding {ptype.value} project {name} cancelled, removing {project_path}")
            shutil.rmtree(project_path, ignore_errors=True)
            raise
        except Exception as e:
            logger.error(f"Scaffolding {ptype.value} project {name} failed: {e}")
            shutil.rmtree(project_path, ignore_errors=True)
            if isinstance(e, ScaffoldError):
                raise
            raise ScaffoldError(f"Failed to create project: {e}") from e

        logger.info(f"Created {ptype.value} project {name} at {project_path}")
        return CodeProject(id=new_project_id(), name=name, type=ptype, path=str(project_path))

    async def _scaffold(self, ptype: ProjectType, name: str, project_path: Path) -> None:
        if ptype is ProjectType.PYTHON:
            venv_path = project_path / "venv"
            result = await self._runner.run(
                self._settings.python_command, ["-m", "venv", str(venv_path)], project_path
            )
            _require_success(result)
        elif ptype is ProjectType.NODEJS:
            result = await self._runner.run(self.npm_command, ["init", "-y"], project_path)
            _require_success(result)
        elif ptype is ProjectType.JAVA:
            src_path = project_path / "src" / "main" / "java" / "com" / "example"
            src_path.mkdir(parents=True)
            (project_path / "pom.xml").write_text(POM_TEMPLATE.format(name=name), encoding="utf-8")
            (src_path / "Main.java").write_text(JAVA_MAIN_TEMPLATE.format(name=name), encoding="utf-8")
        elif ptype is ProjectType.DELPHI:
            (project_path / f"{name}.dpr").write_text(DELPHI_TEMPLATE.format(name=name), encoding="utf-8")
        elif ptype is ProjectType.WEBAPP:
            (project_path / "index.html").write_text(HTML_TEMPLATE.format(name=name), encoding="utf-8")

    async def delete(self, path: str | Path) -> None:
        """
        Remove a project directory recursively. Missing paths are not an error.

        Raises:
            AccessDenied: If the path is outside the configured roots.
            ValueError: If the path is a project root itself.
        """
        project_path = self._guard.check(path)
        if self._guard.is_root(project_path):
            raise ValueError(f"Refusing to delete a project root directory: {project_path}")
        if project_path.exists():
            await asyncio.to_thread(shutil.rmtree, project_path)
            logger.info(f"Deleted project at {project_path}")

    async def install_dependencies(self, project: CodeProject) -> ExecutionResult:
        """
        Install a project's dependencies with its type's package tool.

        Python projects get an empty requirements.txt on first use.
        """
        project_path = self._guard.check(project.path)
        ptype = project.project_type

        if ptype is ProjectType.PYTHON:
            requirements = project_path / "requirements.txt"
            if not requirements.exists():
                requirements.write_text(REQUIREMENTS_PLACEHOLDER, encoding="utf-8")
                return ExecutionResult.message("Created empty requirements.txt.")
            python = self._host.venv_python(project_path / "venv")
            return await self._runner.run(
                str(python), ["-m", "pip", "install", "-r", "requirements.txt"], project_path
            )
        if ptype is ProjectType.NODEJS:
            return await self._runner.run(self.npm_command, ["install"], project_path)
        if ptype is ProjectType.JAVA:
            return await self._runner.run("mvn", ["install"], project_path)

        return ExecutionResult.not_run(
            f"Dependency installation is not applicable for project type: {project.to_dict()['type']}"
        )

    async def open_folder(self, path: str | Path) -> None:
        """Show a project directory in the host file manager."""
        folder = self._guard.check(path)
        await self._host.open_path(folder)

    async def open_webapp(self, path: str | Path) -> None:
        """
        Open a project's index.html in the default browser.

        Raises:
            FileNotFoundError: If the project has no index.html.
        """
        project_path = self._guard.check(path)
        index = project_path / "index.html"
        if not index.exists():
            raise FileNotFoundError(f"index.html not found in project: {project_path}")
        await self._host.open_in_browser(index)


def _validate_name(name: str) -> None:
    if not name or not name.strip():
        raise ValueError("Project name must not be empty")
    if name in (".", "..") or "/" in name or "\\" in name:
        raise ValueError(f"Invalid project name: {name!r}")


def _require_success(result: ExecutionResult) -> None:
    if not result.success:
        raise ScaffoldError(f"Failed to create project: {result.stderr.strip()}")

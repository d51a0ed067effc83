"""Tests for per-type project launchers and the ProjectRunner dispatcher."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

from projectshell import (
    CodeProject,
    CommandRunner,
    Outcome,
    PathGuard,
    ProjectRunner,
    ProjectType,
    Settings,
    WindowsPlatform,
)
from projectshell.launchers import NodeLauncher, PythonLauncher

from conftest import RecordingHost, RecordingRunner


@pytest.fixture
def project_runner(settings: Settings, recording_runner: RecordingRunner, guard: PathGuard) -> ProjectRunner:
    return ProjectRunner(settings, recording_runner, guard)


class TestProjectRunner:
    """Tests for dispatch and confinement."""

    async def test_denies_paths_outside_roots(
        self, project_runner: ProjectRunner, recording_runner: RecordingRunner, temp_dir: Path
    ) -> None:
        """A project outside every root is never launched."""
        project = CodeProject(id="x", name="x", type=ProjectType.JAVA, path=str(temp_dir))

        result = await project_runner.run(project)

        assert result.outcome is Outcome.NOT_RUN
        assert result.stderr == "Execution denied: project path is not in an allowed base directory."
        assert recording_runner.calls == []

    async def test_unknown_type(self, project_runner: ProjectRunner, roots: dict) -> None:
        project = CodeProject(id="x", name="x", type="cobol", path=str(roots[ProjectType.JAVA] / "x"))

        result = await project_runner.run(project)

        assert result.outcome is Outcome.NOT_RUN
        assert result.stderr == 'Project type "cobol" cannot be run.'

    def test_launcher_for(self, project_runner: ProjectRunner) -> None:
        assert isinstance(project_runner.launcher_for("python"), PythonLauncher)
        assert isinstance(project_runner.launcher_for(ProjectType.NODEJS), NodeLauncher)
        assert project_runner.launcher_for("cobol") is None


class TestWebAppLauncher:
    async def test_opens_index(self, project_runner: ProjectRunner, host: RecordingHost, make_project) -> None:
        project = make_project(ProjectType.WEBAPP, files={"index.html": "<h1>hi</h1>"})

        result = await project_runner.run(project)

        index = Path(project.path) / "index.html"
        assert result.success
        assert result.stdout == f"Successfully opened {index} in the default browser."
        assert host.browsed == [index]

    async def test_missing_index(self, project_runner: ProjectRunner, host: RecordingHost, make_project) -> None:
        project = make_project(ProjectType.WEBAPP)

        result = await project_runner.run(project)

        assert result.outcome is Outcome.NOT_RUN
        assert result.stderr == f"Could not find index.html in {project.path}"
        assert host.browsed == []


class TestPythonLauncher:
    async def test_prefers_main_over_app(
        self, project_runner: ProjectRunner, recording_runner: RecordingRunner, make_project
    ) -> None:
        project = make_project(ProjectType.PYTHON, files={"app.py": "", "main.py": ""})

        await project_runner.run(project)

        venv_python = str(Path(project.path) / "venv" / "bin" / "python")
        assert recording_runner.calls == [(venv_python, ["main.py"], project.path)]

    async def test_falls_back_to_app(
        self, project_runner: ProjectRunner, recording_runner: RecordingRunner, make_project
    ) -> None:
        project = make_project(ProjectType.PYTHON, files={"app.py": ""})
        await project_runner.run(project)
        assert recording_runner.calls[0][1] == ["app.py"]

    async def test_no_entry_point(
        self, project_runner: ProjectRunner, recording_runner: RecordingRunner, make_project
    ) -> None:
        project = make_project(ProjectType.PYTHON, files={"util.py": ""})

        result = await project_runner.run(project)

        assert result.outcome is Outcome.NOT_RUN
        assert result.stderr == "Could not find an entry point (e.g., main.py, app.py) in project."
        assert recording_runner.calls == []

    async def test_external_console_on_windows(self, settings: Settings, guard: PathGuard, make_project) -> None:
        """Windows hosts start the script in an activated venv console."""
        runner = RecordingRunner(WindowsPlatform())
        project = make_project(ProjectType.PYTHON, files={"main.py": ""})

        result = await ProjectRunner(settings, runner, guard).run(project)

        assert result.stdout == "Process started in a new console window."
        assert runner.calls == []
        [(command_line, cwd)] = runner.console_calls
        assert command_line.endswith("&& python main.py")
        assert cwd == project.path

    async def test_runs_real_venv_interpreter(self, settings: Settings, guard: PathGuard, make_project) -> None:
        """End to end with a venv interpreter symlinked to the test interpreter."""
        project = make_project(ProjectType.PYTHON, files={"main.py": "print('from main')"})
        bin_dir = Path(project.path) / "venv" / "bin"
        bin_dir.mkdir(parents=True)
        try:
            (bin_dir / "python").symlink_to(sys.executable)
        except OSError:
            pytest.skip("symlinks not supported")

        result = await ProjectRunner(settings, CommandRunner(RecordingHost()), guard).run(project)

        assert result.success
        assert result.stdout.strip() == "from main"


class TestNodeLauncher:
    """Tests for the Node.js resolution order."""

    async def test_start_script_wins(
        self, project_runner: ProjectRunner, recording_runner: RecordingRunner, make_project
    ) -> None:
        """npm start is used even when an entry file exists."""
        manifest = {"main": "server.js", "scripts": {"start": "node server.js"}}
        project = make_project(
            ProjectType.NODEJS, files={"package.json": json.dumps(manifest), "index.js": ""}
        )

        await project_runner.run(project)

        assert recording_runner.calls == [("npm", ["start"], project.path)]

    async def test_declared_main(
        self, project_runner: ProjectRunner, recording_runner: RecordingRunner, make_project
    ) -> None:
        project = make_project(
            ProjectType.NODEJS,
            files={"package.json": json.dumps({"main": "lib/run.js"}), "lib/run.js": "", "index.js": ""},
        )

        await project_runner.run(project)

        assert recording_runner.calls == [("node", ["lib/run.js"], project.path)]

    @pytest.mark.parametrize("main", ["../../evil.js", "../other/index.js", "missing.js"])
    async def test_declared_main_must_be_inside_project(
        self,
        project_runner: ProjectRunner,
        recording_runner: RecordingRunner,
        make_project,
        temp_dir: Path,
        main: str,
    ) -> None:
        """A main outside the project, or missing, falls through to the conventional entries."""
        (temp_dir / "evil.js").write_text("")
        make_project(ProjectType.NODEJS, name="other", files={"index.js": ""})
        project = make_project(
            ProjectType.NODEJS, files={"package.json": json.dumps({"main": main}), "app.js": ""}
        )

        await project_runner.run(project)

        assert recording_runner.calls == [("node", ["app.js"], project.path)]

    async def test_absolute_main_is_ignored(
        self, project_runner: ProjectRunner, recording_runner: RecordingRunner, make_project, temp_dir: Path
    ) -> None:
        outside = temp_dir / "evil.js"
        outside.write_text("")
        project = make_project(ProjectType.NODEJS, files={"package.json": json.dumps({"main": str(outside)})})

        result = await project_runner.run(project)

        assert result.outcome is Outcome.NOT_RUN
        assert recording_runner.calls == []

    async def test_typescript_first(
        self, project_runner: ProjectRunner, recording_runner: RecordingRunner, make_project
    ) -> None:
        """Conventional TypeScript entries run through npx ts-node."""
        project = make_project(ProjectType.NODEJS, files={"index.js": "", "main.ts": ""})

        await project_runner.run(project)

        assert recording_runner.calls == [("npx", ["ts-node", "main.ts"], project.path)]

    async def test_selected_node(
        self, settings: Settings, guard: PathGuard, recording_runner: RecordingRunner, make_project
    ) -> None:
        settings.selected_node_path = "/opt/node/bin/node"
        project = make_project(ProjectType.NODEJS, files={"app.js": ""})

        await ProjectRunner(settings, recording_runner, guard).run(project)

        assert recording_runner.calls == [("/opt/node/bin/node", ["app.js"], project.path)]

    async def test_index_html_fallback(
        self,
        project_runner: ProjectRunner,
        recording_runner: RecordingRunner,
        host: RecordingHost,
        make_project,
    ) -> None:
        project = make_project(
            ProjectType.NODEJS, files={"package.json": json.dumps({"name": "x"}), "index.html": ""}
        )

        result = await project_runner.run(project)

        index = Path(project.path) / "index.html"
        assert result.success
        assert result.stdout == f"No script found. Opened {index} in the default browser."
        assert host.browsed == [index]
        assert recording_runner.calls == []

    async def test_nothing_to_run(self, project_runner: ProjectRunner, make_project) -> None:
        project = make_project(ProjectType.NODEJS, files={"README.md": ""})

        result = await project_runner.run(project)

        assert result.outcome is Outcome.NOT_RUN
        assert result.stderr.startswith("Could not find an entry point. Looked for:")
        assert "index.ts" in result.stderr

    async def test_malformed_manifest(
        self, project_runner: ProjectRunner, recording_runner: RecordingRunner, make_project
    ) -> None:
        project = make_project(ProjectType.NODEJS, files={"package.json": "{oops", "index.js": ""})

        result = await project_runner.run(project)

        assert result.outcome is Outcome.NOT_RUN
        assert result.stderr.startswith("Error reading package.json:")
        assert recording_runner.calls == []


class TestJavaLauncher:
    async def test_runs_maven(
        self, project_runner: ProjectRunner, recording_runner: RecordingRunner, make_project
    ) -> None:
        project = make_project(ProjectType.JAVA, files={"pom.xml": "<project/>"})

        await project_runner.run(project)

        assert recording_runner.calls == [("mvn", ["compile", "exec:java"], project.path)]

    async def test_missing_maven_is_launch_error(self, settings: Settings, guard: PathGuard, make_project) -> None:
        """Without mvn on PATH the result explains the failed start."""
        runner = CommandRunner(RecordingHost(), env={"PATH": ""})
        project = make_project(ProjectType.JAVA)

        result = await ProjectRunner(settings, runner, guard).run(project)

        assert result.outcome is Outcome.LAUNCH_ERROR
        assert "Failed to start command" in result.stderr


class TestDelphiLauncher:
    """Tests for the Delphi prerequisites chain."""

    async def test_compiler_not_configured(self, project_runner: ProjectRunner, make_project) -> None:
        project = make_project(ProjectType.DELPHI, name="Hello", files={"Hello.dpr": ""})

        result = await project_runner.run(project)

        assert result.outcome is Outcome.NOT_RUN
        assert result.stderr == (
            "Delphi compiler path not set. Please configure it in Settings > Advanced > Toolchains."
        )

    async def test_compiler_missing(self, settings: Settings, guard: PathGuard, temp_dir: Path, make_project) -> None:
        settings.selected_delphi_path = str(temp_dir / "rad")
        project = make_project(ProjectType.DELPHI, name="Hello", files={"Hello.dpr": ""})

        result = await ProjectRunner(settings, RecordingRunner(), guard).run(project)

        expected = temp_dir / "rad" / "bin" / "dcc32.exe"
        assert result.stderr == f"Delphi compiler not found at expected path: {expected}"

    async def test_project_file_missing(
        self, settings: Settings, guard: PathGuard, temp_dir: Path, make_project
    ) -> None:
        compiler = temp_dir / "rad" / "bin" / "dcc32.exe"
        compiler.parent.mkdir(parents=True)
        compiler.write_text("")
        settings.selected_delphi_path = str(temp_dir / "rad")
        project = make_project(ProjectType.DELPHI, name="Hello")

        result = await ProjectRunner(settings, RecordingRunner(), guard).run(project)

        assert result.stderr == f"Project file not found: {Path(project.path) / 'Hello.dpr'}"

    async def test_compiles(self, settings: Settings, guard: PathGuard, temp_dir: Path, make_project) -> None:
        compiler = temp_dir / "rad" / "bin" / "dcc32.exe"
        compiler.parent.mkdir(parents=True)
        compiler.write_text("")
        settings.selected_delphi_path = str(temp_dir / "rad")
        runner = RecordingRunner()
        project = make_project(ProjectType.DELPHI, name="Hello", files={"Hello.dpr": "program Hello;"})

        await ProjectRunner(settings, runner, guard).run(project)

        assert runner.calls == [(str(compiler), ["-B", "-Q", "Hello.dpr"], project.path)]

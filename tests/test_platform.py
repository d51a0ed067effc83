"""Tests for host platform capabilities."""

from __future__ import annotations

from pathlib import Path

import pytest

from projectshell import PosixPlatform, WindowsPlatform
from projectshell.platform import PlatformKind


class TestPosixPlatform:
    def test_discovery_commands(self) -> None:
        host = PosixPlatform()
        assert host.kind is PlatformKind.POSIX
        assert host.python_discovery_commands == [["which", "-a", "python3"], ["which", "-a", "python"]]
        assert host.delphi_registry_query() is None

    def test_venv_python(self) -> None:
        assert PosixPlatform().venv_python(Path("/p/venv")) == Path("/p/venv/bin/python")

    def test_java_runtime_substitution(self) -> None:
        assert PosixPlatform().java_runtime_for("/usr/lib/jvm/jdk/bin/javac") == "/usr/lib/jvm/jdk/bin/java"

    def test_sibling_tool(self) -> None:
        host = PosixPlatform()
        assert host.sibling_tool(None, "npm") == "npm"
        assert host.sibling_tool("/opt/node/bin/node", "npx") == "/opt/node/bin/npx"

    def test_no_external_console(self) -> None:
        host = PosixPlatform()
        assert not host.supports_external_console
        with pytest.raises(NotImplementedError):
            host.external_console_command("python main.py")

    def test_parse_discovery_output_splits_lines(self) -> None:
        output = "/usr/bin/python3\n\n/usr/local/bin/python3  \n"
        paths = PosixPlatform().parse_discovery_output(["which", "-a", "python3"], output)
        assert paths == ["/usr/bin/python3", "/usr/local/bin/python3"]


class TestWindowsPlatform:
    """Windows command construction, tested as pure functions."""

    def test_parses_py_launcher_listing(self) -> None:
        """py -0p lines should yield the interpreter paths only."""
        output = (
            " -V:3.12 *        C:\\Python312\\python.exe\n"
            " -V:3.11          C:\\Users\\me\\AppData\\Local\\Programs\\Python\\Python311\\python.exe\n"
            " -V:3.10          (no path)\n"
        )
        paths = WindowsPlatform().parse_discovery_output(["py", "-0p"], output)
        assert paths == [
            "C:\\Python312\\python.exe",
            "C:\\Users\\me\\AppData\\Local\\Programs\\Python\\Python311\\python.exe",
        ]

    def test_where_output_is_line_based(self) -> None:
        output = "C:\\Program Files\\nodejs\\node.exe\r\n"
        paths = WindowsPlatform().parse_discovery_output(["where", "node"], output)
        assert paths == ["C:\\Program Files\\nodejs\\node.exe"]

    def test_java_runtime_substitution(self) -> None:
        javac = "C:\\Program Files\\Java\\jdk-17\\bin\\javac.exe"
        assert WindowsPlatform().java_runtime_for(javac) == "C:\\Program Files\\Java\\jdk-17\\bin\\java.exe"

    def test_venv_python(self) -> None:
        assert WindowsPlatform().venv_python(Path("p") / "venv") == Path("p") / "venv" / "Scripts" / "python.exe"

    def test_sibling_tool_uses_cmd_shims(self) -> None:
        tool = WindowsPlatform().sibling_tool("C:/nodejs/node.exe", "npm")
        assert Path(tool).name == "npm.cmd"

    def test_external_console_command(self) -> None:
        host = WindowsPlatform()
        assert host.supports_external_console
        command = host.external_console_command('"venv\\Scripts\\activate.bat" && python main.py')
        assert command.startswith('start "Python Runner" cmd.exe /k ')

    def test_venv_activation_command(self) -> None:
        command = WindowsPlatform().venv_activation_command("main.py")
        assert "activate.bat" in command
        assert command.endswith("&& python main.py")

    def test_registry_query(self) -> None:
        query = WindowsPlatform().delphi_registry_query()
        assert query is not None
        assert query[:2] == ["reg", "query"]
        assert "RootDir" in query

    def test_delphi_compiler_location(self) -> None:
        assert WindowsPlatform().delphi_compiler("C:/RAD/22.0") == Path("C:/RAD/22.0/bin/dcc32.exe")

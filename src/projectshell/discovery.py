"""
Toolchain discovery.

Probes the host for Python interpreters, JDKs, Node.js runtimes and
RAD Studio (Delphi) installs. Discovery is best-effort: a candidate that
cannot report its version is logged and dropped, and a family that finds
nothing simply yields an empty list.
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
from typing import TYPE_CHECKING

from projectshell._types import ProbeCandidates, Toolchain, ToolchainStatus
from projectshell.config import DEFAULT_PROBE_TIMEOUT

if TYPE_CHECKING:
    from projectshell.runner import CommandRunner

logger = logging.getLogger(__name__)

PYTHON_VERSION = re.compile(r"Python\s+(\S+)")
# `java -version` prints e.g. openjdk version "17.0.2" or java version "1.8.0_292"
JAVA_VERSION = re.compile(r'"(\d+(?:\.\d+)*)[^"]*"')
DELPHI_ROOTDIR = re.compile(
    r"HKEY_CURRENT_USER\\Software\\Embarcadero\\BDS\\(\d+\.\d+)\s+RootDir\s+REG_SZ\s+(.*)"
)


class ToolchainProber:
    """
    Enumerates installed toolchains through the host's discovery commands.

    Example:
        >>> prober = ToolchainProber(CommandRunner())
        >>> status = await prober.detect_all()
        >>> [t.name for t in status.python]
        ['Python 3.12.1']
    """

    def __init__(self, runner: CommandRunner, *, timeout: float = DEFAULT_PROBE_TIMEOUT) -> None:
        self._runner = runner
        self._host = runner.host
        self._timeout = timeout

    async def detect_all(self) -> ToolchainStatus:
        """Probe all four families concurrently and combine the results."""
        logger.info("Detecting toolchains...")
        python, java, nodejs, delphi = await asyncio.gather(
            self.detect_python(),
            self.detect_java(),
            self.detect_nodejs(),
            self.detect_delphi(),
        )
        logger.info(
            f"Detected: {len(python)} Python, {len(java)} Java, "
            f"{len(nodejs)} Node, {len(delphi)} Delphi"
        )
        return ToolchainStatus(
            python=tuple(python),
            java=tuple(java),
            nodejs=tuple(nodejs),
            delphi=tuple(delphi),
        )

    async def detect_python(self) -> list[Toolchain]:
        candidates = await self._collect("python", self._host.python_discovery_commands)

        toolchains: list[Toolchain] = []
        for path in candidates.paths:
            output = await self._query(path, ["--version"])
            if output is None:
                logger.warning(f"Could not get version for python at {path}")
                continue
            match = PYTHON_VERSION.search(output)
            version = match.group(1) if match else output
            toolchains.append(Toolchain(path=path, version=version, name=f"Python {version}"))
        return toolchains

    async def detect_java(self) -> list[Toolchain]:
        candidates = await self._collect("java", self._host.java_discovery_commands)

        toolchains: list[Toolchain] = []
        for javac in candidates.paths:
            java = self._host.java_runtime_for(javac)
            # -version reports on stderr
            output = await self._query(java, ["-version"], include_stderr=True)
            if output is None:
                logger.warning(f"Could not get version for java at {java}")
                continue
            match = JAVA_VERSION.search(output)
            version = match.group(1) if match else "Unknown"
            jdk_home = os.path.dirname(os.path.dirname(javac))
            toolchains.append(Toolchain(path=jdk_home, version=version, name=f"JDK {version}"))
        return toolchains

    async def detect_nodejs(self) -> list[Toolchain]:
        candidates = await self._collect("nodejs", self._host.node_discovery_commands)

        toolchains: list[Toolchain] = []
        for path in candidates.paths:
            version = await self._query(path, ["--version"])
            if version is None:
                logger.warning(f"Could not get version for node at {path}")
                continue
            toolchains.append(Toolchain(path=path, version=version, name=f"Node.js {version}"))
        return toolchains

    async def detect_delphi(self) -> list[Toolchain]:
        """Read RAD Studio installs from the registry. Always empty off Windows."""
        query = self._host.delphi_registry_query()
        if query is None:
            return []

        result = await self._runner.run(query[0], query[1:], timeout=self._timeout)
        if not result.success:
            logger.debug(f"Delphi registry query failed: {result.stderr.strip()}")
            return []

        return [
            Toolchain(path=match.group(2).strip(), version=match.group(1), name=f"RAD Studio {match.group(1)}")
            for match in DELPHI_ROOTDIR.finditer(result.stdout)
        ]

    async def _collect(self, family: str, commands: list[list[str]]) -> ProbeCandidates:
        """Run every discovery command concurrently and union their output."""
        outputs = await asyncio.gather(*(self._query(argv[0], argv[1:]) for argv in commands))

        candidates = ProbeCandidates(family)
        for argv, output in zip(commands, outputs):
            if output is None:
                # Command missing or nothing found
                continue
            for path in self._host.parse_discovery_output(argv, output):
                candidates.add(path)
        logger.debug(f"{family} candidates: {candidates.paths}")
        return candidates

    async def _query(self, command: str, args: list[str], *, include_stderr: bool = False) -> str | None:
        """Return trimmed output of a successful run, or None if it failed."""
        result = await self._runner.run(command, args, timeout=self._timeout)
        if not result.success:
            logger.debug(f"{command} {' '.join(args)} failed: {result.stderr.strip()}")
            return None
        output = result.stdout
        if include_stderr:
            output = f"{output}\n{result.stderr}"
        return output.strip()

"""
Compiler resolver - pick the solc binary for a source file.

Installing or selecting among several solc releases is not done here; the
resolver hands back an executable that already exists, plus its version as
reported by ``solc --version``.  The version is informational only and is
returned per call rather than cached on the resolver.
"""
from __future__ import annotations

import logging
import os
import re
import shutil
from dataclasses import dataclass
from typing import Optional

from solc_compile.core.process_runner import ProcessRunner

logger = logging.getLogger(__name__)

DEFAULT_SOLC_NAME = "solc"

# "Version: 0.8.19+commit.7dd6d404.Linux.g++"
_VERSION_RE = re.compile(r"Version:\s*(\d+\.\d+\.\d+)")


class CompilerNotFound(LookupError):
    """No usable solc executable could be located."""


@dataclass(frozen=True)
class ResolvedCompiler:
    executable_path: str
    version: Optional[str] = None


def parse_version(version_output: str) -> Optional[str]:
    """Extract ``X.Y.Z`` from ``solc --version`` output."""
    match = _VERSION_RE.search(version_output)
    return match.group(1) if match else None


def probe_version(executable: str, runner: Optional[ProcessRunner] = None) -> Optional[str]:
    """Ask *executable* for its version.  Returns None if it cannot tell."""
    runner = runner or ProcessRunner(timeout=10)
    result = runner.run([executable, "--version"])
    if not result.succeeded:
        logger.warning("%s --version failed: %s", executable, result.stderr.strip())
        return None
    version = parse_version(result.stdout)
    if version is None:
        logger.warning("Unrecognised version output from %s: %r", executable, result.stdout[:200])
    return version


class StaticCompilerResolver:
    """
    Resolve every source to one configured solc executable.

    With no explicit path, ``solc`` is looked up on PATH.
    """

    def __init__(
        self,
        executable: Optional[str] = None,
        probe: bool = True,
        runner: Optional[ProcessRunner] = None,
    ):
        self.executable = executable
        self.probe = probe
        self.runner = runner

    def _locate(self) -> str:
        if self.executable:
            if not os.path.isfile(self.executable):
                raise CompilerNotFound(f"solc executable not found: {self.executable}")
            return os.path.abspath(self.executable)
        found = shutil.which(DEFAULT_SOLC_NAME)
        if found is None:
            raise CompilerNotFound(f"'{DEFAULT_SOLC_NAME}' is not on PATH")
        return found

    def resolve(self, source_path: str) -> ResolvedCompiler:
        """Return the compiler to use for *source_path*."""
        executable = self._locate()
        version = probe_version(executable, self.runner) if self.probe else None
        logger.debug("Resolved solc %s (%s) for %s", executable, version or "unknown", source_path)
        return ResolvedCompiler(executable_path=executable, version=version)

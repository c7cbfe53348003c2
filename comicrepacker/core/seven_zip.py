#!/usr/bin/env python3
"""
Runner for the external 7-Zip command line tool.
Listing and extraction are both delegated to it; we only handle arguments and output.
"""

import logging
import os
import shlex
import shutil
import subprocess
from pathlib import Path
from typing import ClassVar, NamedTuple, Optional

from .errors import ToolError


logger = logging.getLogger(__name__)


class ToolOutput(NamedTuple):
    """Captured result of one tool invocation. Streams are decoded lossily."""

    returncode: int
    stdout: str
    stderr: str


class SevenZipTool:
    """Locates and invokes 7zz/7z for listing and extraction."""

    CANDIDATE_NAMES: ClassVar[tuple[str, ...]] = ('7zz', '7z', '7za')
    ENV_VAR: ClassVar[str] = 'COMICREPACKER_7ZZ'

    # l: list, -slt: technical mode, -y: assume yes
    LIST_ARGS: ClassVar[tuple[str, ...]] = ('l', '-slt', '-y')
    # x: extract with full paths, -y: assume yes (overwrite)
    EXTRACT_ARGS: ClassVar[tuple[str, ...]] = ('x', '-y')

    def __init__(self, executable=None, timeout=None, logger=None):
        """
        Args:
            executable: Path or command name of the tool. Discovered on first use if omitted.
            timeout: Seconds before an invocation is abandoned. None waits forever.
            logger: Logger instance for diagnostics
        """
        self._requested = executable
        self._resolved = None
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)

    @classmethod
    def locate(cls, executable=None):
        """
        Resolve the tool executable.

        Order: explicit argument, the COMICREPACKER_7ZZ environment variable,
        then the first of 7zz/7z/7za found on PATH.

        Raises:
            ToolError: If no usable executable is found
        """
        explicit = executable or os.environ.get(cls.ENV_VAR)
        if explicit:
            found = shutil.which(explicit)
            if found:
                return found
            if Path(explicit).is_file():
                return str(Path(explicit))
            raise ToolError(f"Failed to run 7zz: executable not found: {explicit}",
                            executable=explicit)

        for name in cls.CANDIDATE_NAMES:
            found = shutil.which(name)
            if found:
                return found

        raise ToolError(
            "Failed to run 7zz: no 7-Zip executable found on PATH "
            f"(tried {', '.join(cls.CANDIDATE_NAMES)}; set {cls.ENV_VAR} or --seven-zip)"
        )

    @property
    def executable(self):
        if self._resolved is None:
            self._resolved = self.locate(self._requested)
        return self._resolved

    def run(self, args):
        """Run the tool with the given arguments and capture its output. Blocks until exit."""
        cmd = [self.executable, *args]
        self.logger.debug(f"Running: {' '.join(shlex.quote(part) for part in cmd)}")

        try:
            completed = subprocess.run(cmd, capture_output=True, timeout=self.timeout, shell=False)
        except subprocess.TimeoutExpired as e:
            raise ToolError(f"Failed to run 7zz: timed out after {self.timeout} seconds",
                            command=cmd) from e
        except OSError as e:
            raise ToolError(f"Failed to run 7zz: {e}", command=cmd) from e

        output = ToolOutput(
            returncode=completed.returncode,
            stdout=_decode(completed.stdout),
            stderr=_decode(completed.stderr),
        )
        self.logger.debug(f"7zz exited with code {output.returncode}")
        return output

    def list_archive(self, archive_path):
        """List an archive in technical mode."""
        return self.run([*self.LIST_ARGS, str(archive_path)])

    def extract_archive(self, archive_path, output_dir):
        """Extract an archive with full paths into output_dir."""
        return self.run([*self.EXTRACT_ARGS, f"-o{output_dir}", str(archive_path)])


def _decode(data: Optional[bytes]) -> str:
    if not data:
        return ""
    return data.decode('utf-8', errors='replace')

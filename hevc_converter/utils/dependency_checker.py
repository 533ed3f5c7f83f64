"""
This module provides the Modules class to locate and verify the external tools
required by the application: ffmpeg, ffprobe and exiftool.
"""
import shutil
import subprocess
import sys
from pathlib import Path
from typing import Dict, Iterable, Optional

from loguru import logger

from ..config.common import FFMPEG, REQUIRED_EXECUTABLES
from ..domain.exceptions import MissingDependencyException


class Modules:
    """
    Resolves external executables and checks that all of them are available.

    A tools directory from the user's `config.user.yaml` takes priority; anything
    not found there is looked up on the system's PATH. Resolved commands are
    remembered so that every later call to a tool uses the same binary.
    """

    def __init__(self, tools_dir: Optional[Path] = None):
        self.tools_dir = tools_dir
        self.resolved: Dict[str, str] = {}

    def _find_executable(self, name: str) -> Optional[str]:
        """
        Determines the path of an executable, or None if it cannot be found.

        Handles the platform-specific executable name (adding '.exe' on Windows)
        when looking inside the configured tools directory.
        """
        exe_name = f"{name}.exe" if sys.platform == "win32" else name

        if self.tools_dir and self.tools_dir.is_dir():
            configured_path = self.tools_dir / exe_name
            if configured_path.is_file():
                logger.debug(f"Using {name} from configured path: '{configured_path}'")
                return str(configured_path)
            logger.warning(
                f"`tools_dir` is configured, but '{exe_name}' was not found there. Falling back to system PATH."
            )

        return shutil.which(name)

    def verify_dependencies(self, names: Iterable[str] = REQUIRED_EXECUTABLES):
        """
        Checks that every named executable resolves.

        This is an all-or-nothing gate run once at startup, before any file is
        touched. The first missing executable stops the check.

        Raises:
            MissingDependencyException: Naming the first executable that was not found.
        """
        for name in names:
            found = self._find_executable(name)
            if not found:
                raise MissingDependencyException(
                    f"{name} is not installed. Please install {name} and try again."
                )
            self.resolved[name] = found
            logger.debug(f"Dependency '{name}' resolved to '{found}'")

    def resolve_executable(self, name: str) -> str:
        """
        Returns the command to run for a tool.

        Falls back to the bare name (relying on PATH) when the tool has not been
        verified, which keeps components usable in isolation.
        """
        return self.resolved.get(name, name)

    def log_versions(self):
        """Logs the first line of `ffmpeg -version` for the record."""
        ffmpeg_cmd = self.resolve_executable(FFMPEG)
        try:
            result = subprocess.run(
                [ffmpeg_cmd, "-version"],
                check=True,
                capture_output=True,
                text=True,
                encoding="utf-8",
            )
        except (subprocess.CalledProcessError, OSError) as e:
            logger.warning(f"Could not read FFmpeg version: {e}")
            return
        version_output_lines = result.stdout.splitlines()
        if version_output_lines:
            logger.debug(f"FFmpeg version: {version_output_lines[0]}")

    def run_all(self):
        """Verifies every required tool and records the FFmpeg version."""
        self.verify_dependencies()
        self.log_versions()

"""
This module provides the helper used to run the external tools (ffmpeg, exiftool).
It wraps `subprocess.run` with logging, an optional command log file and the
numeric locale every child process must run under.
"""

import os
import shlex
import subprocess
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from loguru import logger

from ..config.common import SUBPROCESS_NUMERIC_LOCALE


def subprocess_env() -> Dict[str, str]:
    """Returns the current environment with the numeric locale forced to use a period."""
    env = dict(os.environ)
    env["LC_NUMERIC"] = SUBPROCESS_NUMERIC_LOCALE
    return env


@contextmanager
def numeric_locale() -> Iterator[None]:
    """
    Forces the numeric locale for child processes started inside the block.

    For tools spawned by a library (`ffmpeg.probe`) where no `env` can be passed.
    The previous value of `LC_NUMERIC` is restored on exit.
    """
    previous = os.environ.get("LC_NUMERIC")
    os.environ["LC_NUMERIC"] = SUBPROCESS_NUMERIC_LOCALE
    try:
        yield
    finally:
        if previous is None:
            os.environ.pop("LC_NUMERIC", None)
        else:
            os.environ["LC_NUMERIC"] = previous


def format_cmd(cmd_list: List[str]) -> str:
    """Joins a command list into a string that can be pasted into a shell."""
    if os.name == "nt":
        return subprocess.list2cmdline(cmd_list)
    return shlex.join(cmd_list)


def run_cmd(
    cmd_parts: List[str],
    src_file_for_log: Path = Path(),
    show_cmd: bool = False,
    cmd_log_file_path: Optional[Path] = None,
) -> Optional[subprocess.CompletedProcess]:
    """
    Executes an external command and captures its output.

    This is a wrapper around Python's `subprocess.run` that adds logging and a
    fixed `LC_NUMERIC` for the child process. The call blocks until the command exits;
    there is no timeout.

    Args:
        cmd_parts: The command to execute as a list of arguments. It is never
                   passed through a shell.
        src_file_for_log: The source file being processed, used for logging context
                          in case of an error.
        show_cmd: If True, the command will be logged at the DEBUG level before execution.
        cmd_log_file_path: If provided, the executed command string will be appended
                           to this file.

    Returns:
        A `subprocess.CompletedProcess` object containing the return code, stdout and
        stderr. Returns `None` if the command could not be started (e.g.
        `FileNotFoundError`). A non-zero exit code is not an error here; callers
        inspect `returncode`.
    """
    cmd_list = [str(part) for part in cmd_parts]

    if not cmd_list:
        logger.error("run_cmd received an empty command list.")
        return None

    display_cmd_str = format_cmd(cmd_list)
    if show_cmd:
        logger.debug(f"Executing: {display_cmd_str}")

    if cmd_log_file_path:
        try:
            cmd_log_file_path.parent.mkdir(parents=True, exist_ok=True)
            with cmd_log_file_path.open("a", encoding="utf-8") as cmd_f:
                cmd_f.write(display_cmd_str + "\n")
        except OSError as e:
            logger.error(f"Failed to write command to log file {cmd_log_file_path}: {e}")

    try:
        result = subprocess.run(
            cmd_list,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            env=subprocess_env(),
            shell=False,
        )
    except FileNotFoundError:
        logger.error(
            f"Error: Command not found (e.g., '{cmd_list[0]}'). Ensure it's in your system's PATH or configured correctly."
        )
        return None
    except OSError as e:
        logger.error(
            f"An unexpected error occurred while executing command for {src_file_for_log.name or 'N/A'}: {e}"
        )
        return None

    if result.stdout and len(result.stdout) > 500:
        logger.trace(f"Command stdout (truncated): {result.stdout[:500]}...")
    elif result.stdout:
        logger.trace(f"Command stdout: {result.stdout}")

    # ffmpeg writes progress and diagnostics to stderr even on success.
    if result.stderr and result.returncode != 0:
        logger.debug(f"Command stderr (error, rc={result.returncode}): {result.stderr}")
    elif result.stderr:
        logger.trace(f"Command stderr (non-error, rc={result.returncode}): {result.stderr}")

    return result

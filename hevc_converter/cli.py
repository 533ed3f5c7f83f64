"""
Command-Line Interface (CLI) setup for the HEVC converter.

Every option is optional: invoked without arguments the converter processes the
current working directory with the built-in defaults.
"""
import argparse
from pathlib import Path
from typing import List, Optional

from .services.logging_service import LogLevel


def get_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parses command-line arguments for the HEVC converter.

    Args:
        argv: Arguments to parse. Defaults to `sys.argv[1:]`.

    Returns:
        argparse.Namespace: The parsed arguments. `target_dir`, `log_dir` and
                            `config` are `Path` objects or None.
    """
    parser = argparse.ArgumentParser(
        description="Convert H.264 MP4 files below a directory into validated HEVC MKV files."
    )
    parser.add_argument(
        "--target-dir", type=Path, default=None,
        help="Directory to scan recursively for .mp4 files (default: current directory)."
    )
    parser.add_argument(
        "--log-level", type=str, default=LogLevel.INFO.value,
        choices=[level.value for level in LogLevel],
        help="Set the logging level."
    )
    parser.add_argument(
        "--no-color", action="store_true", help="Disable coloured console output."
    )
    parser.add_argument(
        "--continue-on-error", action="store_true",
        help="Record a failed file and move on instead of stopping the batch. "
             "The exit code is still non-zero if any file failed."
    )
    parser.add_argument(
        "--log-dir", type=Path, default=None,
        help="Write a YAML conversion report, an error log and the executed commands to this directory."
    )
    parser.add_argument(
        "--config", type=Path, default=None,
        help="YAML file overriding tool paths, codecs and the SSIM threshold (default: config.user.yaml)."
    )

    args = parser.parse_args(argv)

    if args.target_dir is not None and not args.target_dir.is_dir():
        parser.error(f"The target directory '{args.target_dir}' does not exist or is not a directory.")

    return args

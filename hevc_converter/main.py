"""
Main entry point for the HEVC converter.

Parses the command line, configures the logger, verifies the external tools and
runs the batch pipeline. This is the only place that turns failures into a
process exit code.
"""

import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger

from .cli import get_args
from .config.common import load_settings
from .domain.exceptions import ConverterException
from .pipeline.conversion_pipeline import BatchConversionPipeline
from .services.logging_service import LoggerSettings, LogLevel, configure_logger
from .utils.dependency_checker import Modules

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


def main(argv: Optional[List[str]] = None) -> int:
    """
    Runs a full batch and returns the process exit code.

    1. Parses command-line arguments and configures the console logger.
    2. Loads the settings (defaults plus optional YAML overrides).
    3. Verifies ffmpeg, ffprobe and exiftool before any file is touched.
    4. Runs the batch pipeline over the target directory.
    """
    args = get_args(argv)
    configure_logger(
        LoggerSettings(level=LogLevel.from_name(args.log_level), colorize=not args.no_color)
    )
    logger.debug(f"Parsed arguments: {args}")

    project_path = (args.target_dir or Path.cwd()).resolve()
    logger.info(f"Starting video conversion in {project_path}")

    try:
        settings = load_settings(args.config)
        modules = Modules(settings.tools_dir)
        modules.run_all()

        pipeline = BatchConversionPipeline(
            project_path,
            settings,
            modules=modules,
            continue_on_error=args.continue_on_error,
            log_dir=args.log_dir,
        )
        summary = pipeline.run()
    except ConverterException as e:
        logger.error(f"{e}")
        logger.error("Video conversion aborted.")
        return EXIT_FAILURE
    except KeyboardInterrupt:
        logger.warning("Interrupted by user. Video conversion aborted.")
        return EXIT_INTERRUPTED

    if not summary.ok:
        for path, message in summary.failed:
            logger.error(f"Failed: {path}: {message}")
        logger.error(f"Video conversion finished with {len(summary.failed)} failure(s).")
        return EXIT_FAILURE

    logger.success("Video conversion completed")
    return EXIT_OK


def run():
    sys.exit(main())

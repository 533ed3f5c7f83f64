"""
Common configuration settings used throughout the application.

This module contains globally shared configuration settings and constants that are
used across the HEVC converter. It centralizes parameters for logging, external
tool resolution and the files written next to a batch run. It also handles the
loading of user-specific overrides from an external YAML file, allowing thresholds
and tool locations to change without modifying the source code.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml
from loguru import logger

from .video import (
    SOURCE_CODEC,
    SSIM_THRESHOLD,
    TARGET_CODEC,
    VIDEO_ENCODER,
    VIDEO_TAG,
)

# --- User-Defined Configuration ---
# An optional 'config.user.yaml' at the project root may override the tool
# directory, the codecs and the quality threshold.

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
USER_CONFIG_PATH = PROJECT_ROOT / "config.user.yaml"


# --- Logging Configuration ---

# The format string for the Loguru console sink.
LOGGER_FORMAT = (
    "<green>{time:MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)

DEFAULT_LOG_LEVEL = "INFO"


# --- External Tools ---

FFMPEG = "ffmpeg"
FFPROBE = "ffprobe"
EXIFTOOL = "exiftool"

# Every executable that must resolve before the first file is touched.
REQUIRED_EXECUTABLES = (FFMPEG, FFPROBE, EXIFTOOL)

# Numeric locale forced on every child process. Tool output is parsed as
# floating point and must use a period as the decimal separator.
SUBPROCESS_NUMERIC_LOCALE = "C"


# --- Report Files ---
# Only written when a log directory is given on the command line.

# YAML list of every validated pair (see SuccessLog).
CONVERSION_REPORT_FILE_NAME = "conversion_log.yaml"

# Plain text record of every failure (see ErrorLog).
ERROR_LOG_FILE_NAME = "error.txt"

# Executed commands, one per line, for debugging.
COMMAND_TEXT = "cmd.txt"


@dataclass(frozen=True)
class Settings:
    """
    The effective configuration of a run.

    Built from the module constants and, when present, the user YAML file. It is
    passed explicitly into the dependency checker, the validators and the converter
    instead of being read from globals at call time.
    """

    tools_dir: Optional[Path] = None
    source_codec: str = SOURCE_CODEC
    target_codec: str = TARGET_CODEC
    video_encoder: str = VIDEO_ENCODER
    video_tag: str = VIDEO_TAG
    ssim_threshold: float = SSIM_THRESHOLD


def load_settings(config_path: Optional[Path] = None) -> Settings:
    """
    Loads the run settings, applying overrides from a YAML file if it exists.

    Expected layout (every key optional)::

        paths:
          tools_dir: /opt/ffmpeg/bin
        conversion:
          source_codec: h264
          target_codec: hevc
          video_encoder: libx265
          video_tag: hvc1
        validation:
          ssim_threshold: 0.95

    A missing file yields the defaults. A file that cannot be read or parsed is
    reported as a warning and the defaults are used.

    Args:
        config_path: The YAML file to read. Defaults to `USER_CONFIG_PATH`.

    Returns:
        The effective `Settings`.
    """
    path = config_path or USER_CONFIG_PATH
    if not path.is_file():
        logger.debug(f"User config '{path}' not found. Using built-in defaults.")
        return Settings()

    try:
        with path.open("r", encoding="utf-8") as f:
            user_config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Could not load or parse '{path}': {e}")
        return Settings()

    if not isinstance(user_config, dict):
        logger.warning(f"Ignoring '{path}': expected a mapping at the top level.")
        return Settings()

    paths_config = user_config.get("paths") or {}
    conversion_config = user_config.get("conversion") or {}
    validation_config = user_config.get("validation") or {}

    overrides = {}
    tools_dir_str = paths_config.get("tools_dir")
    if tools_dir_str:
        overrides["tools_dir"] = Path(tools_dir_str)
    for key in ("source_codec", "target_codec", "video_encoder", "video_tag"):
        if conversion_config.get(key):
            overrides[key] = str(conversion_config[key])
    if validation_config.get("ssim_threshold") is not None:
        try:
            overrides["ssim_threshold"] = float(validation_config["ssim_threshold"])
        except (TypeError, ValueError):
            logger.warning(
                f"Invalid ssim_threshold {validation_config['ssim_threshold']!r} in '{path}'. "
                f"Keeping {SSIM_THRESHOLD}."
            )

    settings = Settings(**overrides)
    logger.debug(f"Loaded settings from '{path}': {settings}")
    return settings

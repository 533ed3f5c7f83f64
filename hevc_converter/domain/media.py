import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from pathlib import Path
from pprint import pformat
from typing import Optional

import ffmpeg
from loguru import logger

from .exceptions import (
    MediaProbeException,
    NoDurationFoundException,
    NoVideoStreamException,
)
from ..config.common import FFPROBE
from ..config.video import PARTIAL_SUFFIX, TARGET_EXTENSION
from ..utils.ffmpeg_utils import numeric_locale


def parse_duration(duration_str: str) -> float:
    """
    Parses a duration string into total seconds.

    This function is designed to handle two common duration formats provided by ffprobe:
    1. A simple string representing a floating-point number of seconds (e.g., "3600.5").
    2. A timecode string in the format 'HH:MM:SS.sss' (e.g., "01:00:00.500").
       Hours and minutes are optional in the timecode format.

    Args:
        duration_str: The string containing the duration to parse.

    Returns:
        The total duration in seconds as a float. Returns 0.0 if parsing fails.
    """
    try:
        return float(duration_str)
    except ValueError:
        pattern = r"(?:(\d{1,2}):)?(\d{1,2}):(\d{1,2}(?:\.\d+)?)"
        match = re.fullmatch(pattern, duration_str)
        if match:
            hours_str, minutes_str, seconds_str = match.groups()
            hours = int(hours_str) if hours_str else 0
            minutes = int(minutes_str) if minutes_str else 0
            seconds = float(seconds_str)
            return float(hours * 3600 + minutes * 60 + seconds)
        logger.warning(f"Could not parse duration string: {duration_str}")
    return 0.0


def round_seconds(seconds: float) -> int:
    """
    Rounds a duration to the nearest whole second, halves away from zero.

    `round()` would round 10.5 down to 10 (banker's rounding); durations are
    compared the way a "%.0f" formatted value reads, so 10.5 becomes 11.
    """
    try:
        return int(Decimal(str(seconds)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    except (InvalidOperation, ValueError, OverflowError) as e:
        raise NoDurationFoundException(f"Duration {seconds!r} cannot be rounded") from e


@dataclass(frozen=True)
class ConversionPair:
    """
    A source file and the container it is converted into.

    The output always sits next to the source and only differs in its extension,
    e.g. `videos/clip.mp4` -> `videos/clip.mkv`. While ffmpeg is writing, the data
    goes to `partial_output` (`videos/clip.mkv.part`) so that an interrupted
    run never leaves a file that looks like a finished conversion.
    """

    source: Path

    @property
    def output(self) -> Path:
        return self.source.with_suffix(TARGET_EXTENSION)

    @property
    def partial_output(self) -> Path:
        output = self.output
        return output.with_name(output.name + PARTIAL_SUFFIX)


@dataclass(frozen=True)
class QualityMetrics:
    """SSIM (0..1) and average PSNR (dB) between an original and its conversion."""

    ssim: float
    psnr: Optional[float]


def _run_probe(path: Path, ffprobe_cmd: str, **kwargs) -> dict:
    """Runs ffprobe through ffmpeg-python and returns the decoded JSON document."""
    try:
        with numeric_locale():
            probe = ffmpeg.probe(str(path), cmd=ffprobe_cmd, v="error", **kwargs)
    except ffmpeg.Error as e:
        stderr = e.stderr.decode("utf-8", errors="replace").strip() if e.stderr else ""
        logger.error(f"ffprobe failed for {path}: {stderr}")
        raise MediaProbeException(f"Failed to probe media file {path}: {stderr}") from e
    except (OSError, ValueError) as e:
        # OSError: ffprobe could not be started. ValueError: output was not JSON.
        logger.error(f"Unexpected error probing {path}: {e}")
        raise MediaProbeException(f"Unexpected error probing {path}: {e}") from e
    logger.trace(f"Probe data for {path.name}:\n{pformat(probe)}")
    return probe


def probe_codec(path: Path, ffprobe_cmd: str = FFPROBE) -> str:
    """
    Returns the codec name of the first video stream of a file.

    Args:
        path: The media file to inspect.
        ffprobe_cmd: The ffprobe executable to run.

    Raises:
        MediaProbeException: If ffprobe cannot read the file.
        NoVideoStreamException: If the file has no video stream.
    """
    probe = _run_probe(path, ffprobe_cmd, select_streams="v:0")
    streams = probe.get("streams") or []
    if not streams:
        raise NoVideoStreamException(f"No video stream found in {path}")
    codec_name = streams[0].get("codec_name", "")
    if not codec_name:
        raise NoVideoStreamException(f"First video stream of {path} reports no codec name")
    logger.debug(f"Video codec for {path.name}: {codec_name}")
    return codec_name


def probe_duration(path: Path, ffprobe_cmd: str = FFPROBE) -> float:
    """
    Returns the container-level duration of a file, in seconds.

    Args:
        path: The media file to inspect.
        ffprobe_cmd: The ffprobe executable to run.

    Raises:
        MediaProbeException: If ffprobe cannot read the file.
        NoDurationFoundException: If the container reports no positive duration.
    """
    probe = _run_probe(path, ffprobe_cmd, select_streams="v:0")
    duration_val = (probe.get("format") or {}).get("duration")
    if duration_val is None:
        raise NoDurationFoundException(f"No container duration found for {path}")

    duration = parse_duration(str(duration_val))
    if duration <= 0:
        raise NoDurationFoundException(
            f"No valid (positive) duration found for {path}: {duration_val!r}"
        )
    logger.debug(f"Duration for {path.name}: {duration}s")
    return duration

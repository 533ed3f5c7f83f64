"""
This module defines the checks run before and after a conversion.

Each validator answers one question about a file or a pair of files and raises a
`ValidationException` (or a probe exception) when the answer is no. None of them
terminates the process; the batch pipeline owns that decision.

- `CodecValidator`: is the first video stream encoded with the expected codec?
- `DurationValidator`: do both files last the same number of whole seconds?
- `QualityValidator`: is the SSIM between original and converted above threshold?
- `ConversionValidator`: the post-conversion gate running all of the above.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from loguru import logger

from ..config.common import FFMPEG, FFPROBE, Settings
from ..config.video import (
    PSNR_LABEL,
    PSNR_LINE_MARKER,
    QUALITY_FILTER_GRAPH,
    SSIM_LABEL,
    SSIM_LINE_MARKER,
    SSIM_THRESHOLD,
)
from ..domain.exceptions import (
    CodecMismatchException,
    DurationMismatchException,
    MissingOutputFileException,
    QualityBelowThresholdException,
    QualityMetricsParseException,
)
from ..domain.media import (
    ConversionPair,
    QualityMetrics,
    probe_codec,
    probe_duration,
    round_seconds,
)
from ..utils.dependency_checker import Modules
from ..utils.ffmpeg_utils import run_cmd


class CodecValidator:
    """Compares a file's video codec name against an expected name, verbatim."""

    def __init__(self, expected_codec: str, ffprobe_cmd: str = FFPROBE):
        self.expected_codec = expected_codec
        self.ffprobe_cmd = ffprobe_cmd

    def validate(self, path: Path) -> str:
        """
        Returns the actual codec name when it matches.

        Raises:
            CodecMismatchException: If the names differ ("hevc" and "h265" differ too).
            MediaProbeException: If the file cannot be probed.
        """
        logger.debug(f"Validating codec {self.expected_codec} for {path}")
        actual_codec = probe_codec(path, self.ffprobe_cmd)
        if actual_codec != self.expected_codec:
            raise CodecMismatchException(
                f"Codec validation failed: {path} has codec {actual_codec}, "
                f"should have codec {self.expected_codec}."
            )
        logger.info(f"Codec {self.expected_codec} validation passed for {path}.")
        return actual_codec


class DurationValidator:
    """
    Checks that a conversion kept the whole length of the original.

    Container durations routinely differ by a fraction of a second between
    encoders, so both values are rounded to whole seconds before comparing.
    """

    def __init__(self, ffprobe_cmd: str = FFPROBE):
        self.ffprobe_cmd = ffprobe_cmd

    def validate(self, original: Path, converted: Path) -> Tuple[float, float]:
        """
        Returns both raw durations when their rounded values are equal.

        Raises:
            DurationMismatchException: If the rounded durations differ.
            MediaProbeException: If either file cannot be probed.
        """
        logger.debug(f"Validating video length for {original} and {converted}")
        original_duration = probe_duration(original, self.ffprobe_cmd)
        converted_duration = probe_duration(converted, self.ffprobe_cmd)
        logger.debug(f"Original duration: {original_duration}")
        logger.debug(f"Converted duration: {converted_duration}")

        if round_seconds(original_duration) != round_seconds(converted_duration):
            raise DurationMismatchException(
                f"Validation failed: {original} and {converted} have different durations. "
                f"original:{original_duration} - converted:{converted_duration}"
            )
        logger.info(
            f"Validation passed: {original} and {converted} have the same duration. "
            f"original:{original_duration} - converted:{converted_duration}"
        )
        return original_duration, converted_duration


def extract_metric(output: str, line_marker: str, label: str) -> Optional[str]:
    """
    Pulls a value out of ffmpeg's diagnostic text.

    Looks at the lines containing `line_marker`, splits each on `label` and takes
    the first whitespace-delimited token after it. When several lines qualify the
    last one wins, which is the summary line ffmpeg prints at the end of a run.

    >>> extract_metric("[Parsed_ssim_0 @ 0x1] SSIM Y:0.99 All:0.981 (17.2)", "SSIM", "All:")
    '0.981'
    """
    value = None
    for line in output.splitlines():
        if line_marker not in line or label not in line:
            continue
        tokens = line.split(label, 1)[1].split()
        if tokens:
            value = tokens[0]
    return value


def parse_quality_metrics(output: str) -> QualityMetrics:
    """
    Builds `QualityMetrics` from the stderr of an ssim+psnr comparison run.

    Raises:
        QualityMetricsParseException: If no numeric SSIM value can be found.
    """
    ssim_str = extract_metric(output, SSIM_LINE_MARKER, SSIM_LABEL)
    if ssim_str is None:
        raise QualityMetricsParseException("No SSIM value found in ffmpeg output.")
    try:
        ssim = float(ssim_str)
    except ValueError as e:
        raise QualityMetricsParseException(f"Unparsable SSIM value '{ssim_str}'.") from e

    psnr: Optional[float] = None
    psnr_str = extract_metric(output, PSNR_LINE_MARKER, PSNR_LABEL)
    if psnr_str is None:
        logger.warning("No PSNR value found in ffmpeg output.")
    else:
        try:
            psnr = float(psnr_str)
        except ValueError:
            logger.warning(f"Unparsable PSNR value '{psnr_str}'.")
    return QualityMetrics(ssim=ssim, psnr=psnr)


class QualityValidator:
    """
    Measures SSIM and PSNR between an original and its conversion with ffmpeg.

    Only SSIM is gated. PSNR is reported alongside it for the record.
    """

    def __init__(
        self,
        ssim_threshold: float = SSIM_THRESHOLD,
        ffmpeg_cmd: str = FFMPEG,
        cmd_log_file_path: Optional[Path] = None,
    ):
        self.ssim_threshold = ssim_threshold
        self.ffmpeg_cmd = ffmpeg_cmd
        self.cmd_log_file_path = cmd_log_file_path

    def build_command(self, original: Path, converted: Path) -> list:
        # The muxed output goes to the null sink; only stderr is of interest.
        return [
            self.ffmpeg_cmd,
            "-i", str(original),
            "-i", str(converted),
            "-lavfi", QUALITY_FILTER_GRAPH,
            "-f", "null",
            "-",
        ]

    def validate(self, original: Path, converted: Path) -> QualityMetrics:
        """
        Returns the measured metrics when SSIM is strictly above the threshold.

        Raises:
            QualityMetricsParseException: If the comparison run fails or yields no SSIM.
            QualityBelowThresholdException: If SSIM is at or below the threshold.
        """
        logger.debug(f"Validating video quality for {original} and {converted}")
        res = run_cmd(
            self.build_command(original, converted),
            src_file_for_log=converted,
            show_cmd=True,
            cmd_log_file_path=self.cmd_log_file_path,
        )
        if res is None:
            raise QualityMetricsParseException(
                f"Quality comparison could not be started for {converted}."
            )
        if res.returncode != 0:
            raise QualityMetricsParseException(
                f"Quality comparison failed for {converted} (rc={res.returncode}): "
                f"{res.stderr.strip()[-500:]}"
            )

        try:
            metrics = parse_quality_metrics(res.stderr)
        except QualityMetricsParseException as e:
            raise QualityMetricsParseException(f"Quality check failed for {converted}: {e}") from e
        logger.debug(f"SSIM: {metrics.ssim}")
        logger.debug(f"PSNR: {metrics.psnr}")

        if not metrics.ssim > self.ssim_threshold:
            raise QualityBelowThresholdException(
                f"Quality check failed for {converted} with SSIM: {metrics.ssim} "
                f"(required > {self.ssim_threshold}) and PSNR: {metrics.psnr}"
            )
        logger.info(
            f"Quality check passed for {converted} with SSIM: {metrics.ssim} and PSNR: {metrics.psnr}"
        )
        return metrics


@dataclass(frozen=True)
class ValidationReport:
    source_duration: float
    output_duration: float
    metrics: QualityMetrics


class ConversionValidator:
    """
    The post-conversion gate: existence, target codec, duration, then quality.

    The checks run in that fixed order and the first failing one raises, so the
    comparatively slow quality run only happens for files that passed the cheap
    probes.
    """

    def __init__(
        self,
        settings: Settings,
        modules: Optional[Modules] = None,
        cmd_log_file_path: Optional[Path] = None,
    ):
        modules = modules or Modules(settings.tools_dir)
        ffprobe_cmd = modules.resolve_executable(FFPROBE)
        self.codec_validator = CodecValidator(settings.target_codec, ffprobe_cmd)
        self.duration_validator = DurationValidator(ffprobe_cmd)
        self.quality_validator = QualityValidator(
            settings.ssim_threshold,
            modules.resolve_executable(FFMPEG),
            cmd_log_file_path=cmd_log_file_path,
        )

    def validate(self, pair: ConversionPair) -> ValidationReport:
        """
        Runs every post-conversion check on a source/output pair.

        Raises:
            MissingOutputFileException: If the output does not exist.
            ValidationException, MediaProbeException: From the individual checks.
        """
        if not pair.output.is_file():
            raise MissingOutputFileException(f"No matching file found for: {pair.output}")
        logger.debug(f"Matching {pair.output.suffix} file found: {pair.output}")

        self.codec_validator.validate(pair.output)
        source_duration, output_duration = self.duration_validator.validate(
            pair.source, pair.output
        )
        metrics = self.quality_validator.validate(pair.source, pair.output)
        return ValidationReport(
            source_duration=source_duration,
            output_duration=output_duration,
            metrics=metrics,
        )

"""
This module defines the Converter, the service that turns one H.264 MP4 into an
HEVC MKV next to it and proves the result is good.

A conversion is: ffmpeg transcode into a partial file, exiftool copy of the
source's modification date, atomic rename to the final name, then the
post-conversion validation. An output that already exists is never re-encoded,
only re-validated.
"""

import os
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import List, Optional

from loguru import logger

from ..config.common import EXIFTOOL, FFMPEG, Settings
from ..config.video import AUDIO_CODEC_MODE, TARGET_FORMAT
from ..domain.exceptions import EncodingException, MetadataCopyException
from ..domain.media import ConversionPair, QualityMetrics
from ..utils.dependency_checker import Modules
from ..utils.ffmpeg_utils import run_cmd
from ..utils.format_utils import format_timedelta, formatted_size
from .validation_service import ConversionValidator


@dataclass
class ConversionResult:
    """What happened to one source file, for the summary and the YAML report."""

    pair: ConversionPair
    transcoded: bool
    source_duration: float
    output_duration: float
    metrics: QualityMetrics
    encode_time: timedelta
    ended_datetime: datetime

    def to_log_dict(self) -> dict:
        source_size = self.pair.source.stat().st_size if self.pair.source.exists() else 0
        output_size = self.pair.output.stat().st_size if self.pair.output.exists() else 0
        return {
            "input_file": str(self.pair.source),
            "output_file": str(self.pair.output),
            "action": "converted" if self.transcoded else "revalidated",
            "source_duration_seconds": self.source_duration,
            "output_duration_seconds": self.output_duration,
            "ssim": self.metrics.ssim,
            "psnr": self.metrics.psnr,
            "encode_time_formatted": format_timedelta(self.encode_time),
            "original_size_bytes": source_size,
            "original_size_formatted": formatted_size(source_size),
            "encoded_size_bytes": output_size,
            "encoded_size_formatted": formatted_size(output_size),
            "size_ratio_percent": round(output_size / source_size * 100, 2)
            if source_size > 0
            else "N/A",
            "ended_datetime": self.ended_datetime.strftime("%Y%m%d_%H:%M:%S"),
        }


class Converter:
    """
    Converts a single source file and validates the output.

    Failures raise and leave no partial output behind: ffmpeg writes to
    `<stem>.mkv.part`, which is only renamed to `<stem>.mkv` once the encode
    and the timestamp copy have both succeeded.
    """

    def __init__(
        self,
        settings: Settings,
        modules: Optional[Modules] = None,
        validator: Optional[ConversionValidator] = None,
        cmd_log_file_path: Optional[Path] = None,
    ):
        self.settings = settings
        self.modules = modules or Modules(settings.tools_dir)
        self.cmd_log_file_path = cmd_log_file_path
        self.validator = validator or ConversionValidator(
            settings, self.modules, cmd_log_file_path=cmd_log_file_path
        )

    def build_encode_command(self, pair: ConversionPair) -> List[str]:
        return [
            self.modules.resolve_executable(FFMPEG),
            "-y",
            "-i", str(pair.source),
            "-c:v", self.settings.video_encoder,
            "-vtag", self.settings.video_tag,
            "-c:a", AUDIO_CODEC_MODE,
            "-f", TARGET_FORMAT,
            str(pair.partial_output),
        ]

    def build_metadata_command(self, pair: ConversionPair) -> List[str]:
        return [
            self.modules.resolve_executable(EXIFTOOL),
            "-overwrite_original_in_place",
            "-TagsFromFile", str(pair.source),
            "-FileModifyDate>FileModifyDate",
            str(pair.partial_output),
        ]

    def _discard_partial(self, pair: ConversionPair):
        try:
            pair.partial_output.unlink(missing_ok=True)
            logger.debug(f"Deleted partially encoded file: {pair.partial_output}")
        except OSError as e:
            logger.error(f"Could not delete partially encoded file {pair.partial_output}: {e}")

    def _encode(self, pair: ConversionPair):
        if pair.partial_output.exists():
            logger.warning(f"Removing leftover partial output from an earlier run: {pair.partial_output}")
            self._discard_partial(pair)

        res = run_cmd(
            self.build_encode_command(pair),
            src_file_for_log=pair.source,
            show_cmd=True,
            cmd_log_file_path=self.cmd_log_file_path,
        )
        if res is None or res.returncode != 0:
            self._discard_partial(pair)
            detail = res.stderr.strip()[-1000:] if res is not None else "command could not be started"
            rc = res.returncode if res is not None else "N/A"
            raise EncodingException(f"ffmpeg failed for {pair.source} (rc={rc}): {detail}")
        if not pair.partial_output.exists():
            raise EncodingException(
                f"FFmpeg reported success but the output file is missing: {pair.partial_output}"
            )

    def _copy_modify_date(self, pair: ConversionPair):
        res = run_cmd(
            self.build_metadata_command(pair),
            src_file_for_log=pair.source,
            show_cmd=True,
            cmd_log_file_path=self.cmd_log_file_path,
        )
        if res is None or res.returncode != 0:
            self._discard_partial(pair)
            detail = (res.stderr or res.stdout).strip() if res is not None else "command could not be started"
            raise MetadataCopyException(
                f"exiftool could not copy the modification date from {pair.source}: {detail}"
            )

    def _move_into_place(self, pair: ConversionPair):
        # The rename keeps the timestamp exiftool just copied.
        try:
            os.replace(pair.partial_output, pair.output)
        except OSError as e:
            self._discard_partial(pair)
            raise EncodingException(f"Could not move {pair.partial_output} to {pair.output}: {e}") from e

    def convert(self, source: Path) -> ConversionResult:
        """
        Converts `source` unless its output already exists, then validates the pair.

        Raises:
            EncodingException: If ffmpeg fails or the finished file cannot be renamed.
            MetadataCopyException: If exiftool fails.
            ValidationException, MediaProbeException: From the post-conversion checks.
        """
        pair = ConversionPair(source)
        transcoded = False
        encode_time = timedelta(0)

        if pair.output.exists():
            logger.warning(f"Skipping conversion as {pair.output} already exists.")
        else:
            logger.info(f"Converting {pair.source} to {pair.output}...")
            encode_start = datetime.now()
            self._encode(pair)
            self._copy_modify_date(pair)
            self._move_into_place(pair)
            encode_time = datetime.now() - encode_start
            transcoded = True

        report = self.validator.validate(pair)
        if transcoded:
            logger.success(
                f"Converted {pair.source} to {pair.output} successfully! "
                f"time: {format_timedelta(encode_time)}"
            )
        return ConversionResult(
            pair=pair,
            transcoded=transcoded,
            source_duration=report.source_duration,
            output_duration=report.output_duration,
            metrics=report.metrics,
            encode_time=encode_time,
            ended_datetime=datetime.now(),
        )

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from loguru import logger

from ..config.common import COMMAND_TEXT, FFPROBE, Settings
from ..config.video import SOURCE_EXTENSION
from ..domain.exceptions import ConverterException
from ..services.conversion_service import ConversionResult, Converter
from ..services.logging_service import ErrorLog, SuccessLog
from ..services.validation_service import CodecValidator
from ..utils.dependency_checker import Modules


@dataclass
class BatchSummary:
    converted: List[Path] = field(default_factory=list)
    revalidated: List[Path] = field(default_factory=list)
    failed: List[Tuple[Path, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


class BatchConversionPipeline:
    """
    Drives the conversion of every MP4 below a directory, one file at a time.

    Each file is checked for the source codec before anything is written, then
    handed to the `Converter`. The pipeline decides what a failure means: by
    default the first one stops the batch and propagates to the caller; with
    `continue_on_error` it is recorded and the next file is processed.
    """

    def __init__(
        self,
        project_dir: Path,
        settings: Settings,
        modules: Optional[Modules] = None,
        continue_on_error: bool = False,
        log_dir: Optional[Path] = None,
        converter: Optional[Converter] = None,
    ):
        self.project_dir: Path = project_dir.resolve()
        self.settings = settings
        self.modules = modules or Modules(settings.tools_dir)
        self.continue_on_error = continue_on_error
        self.log_dir = log_dir.resolve() if log_dir else None

        cmd_log_file_path = self.log_dir / COMMAND_TEXT if self.log_dir else None
        self.converter = converter or Converter(
            settings, self.modules, cmd_log_file_path=cmd_log_file_path
        )
        self.source_codec_validator = CodecValidator(
            settings.source_codec, self.modules.resolve_executable(FFPROBE)
        )
        self.success_log = SuccessLog(self.log_dir) if self.log_dir else None
        self.error_log = ErrorLog(self.log_dir) if self.log_dir else None

    def discover_files(self) -> List[Path]:
        """Every source file under the project directory, in lexical path order."""
        files = sorted(
            p for p in self.project_dir.rglob(f"*{SOURCE_EXTENSION}") if p.is_file()
        )
        logger.debug(f"Found {len(files)} {SOURCE_EXTENSION} file(s) under {self.project_dir}")
        return files

    def process_single_file(self, path: Path) -> ConversionResult:
        logger.info(f"Processing file: {path}")
        self.source_codec_validator.validate(path)
        return self.converter.convert(path)

    def _record_failure(self, path: Path, exc: ConverterException):
        if self.error_log:
            self.error_log.write(
                f"File: {path}",
                f"Error: {type(exc).__name__}",
                f"Message: {exc}",
            )

    def run(self) -> BatchSummary:
        """
        Processes every discovered file sequentially.

        Raises:
            ConverterException: The first failure, unless `continue_on_error` is set.
        """
        summary = BatchSummary()
        files = self.discover_files()
        if not files:
            logger.info(f"No {SOURCE_EXTENSION} files found under {self.project_dir}")
            return summary

        for path in files:
            try:
                result = self.process_single_file(path)
            except ConverterException as exc:
                self._record_failure(path, exc)
                if not self.continue_on_error:
                    raise
                logger.error(f"{exc}")
                logger.warning(f"Continuing with the next file after failure on {path}")
                summary.failed.append((path, str(exc)))
                continue

            if result.transcoded:
                summary.converted.append(path)
            else:
                summary.revalidated.append(path)
            if self.success_log:
                self.success_log.write(result.to_log_dict())

        logger.info(
            f"Batch finished: {len(summary.converted)} converted, "
            f"{len(summary.revalidated)} revalidated, {len(summary.failed)} failed."
        )
        return summary

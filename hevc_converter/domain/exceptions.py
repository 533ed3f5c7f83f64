"""
Defines custom exception types for the HEVC converter.

Validators and services raise these instead of terminating the process. The batch
pipeline and the entry point decide what a failure means for the run, so the
validation logic stays independent of the termination policy.

All custom exceptions inherit from the base `ConverterException`.
"""


class ConverterException(Exception):
    """Base class for all custom exceptions in the HEVC converter."""

    pass


# --- Startup ---
class MissingDependencyException(ConverterException):
    """Raised when a required executable (ffmpeg, ffprobe, exiftool) cannot be resolved."""

    pass


# --- Probe Specific Exceptions ---
class MediaProbeException(ConverterException):
    """
    Raised when ffprobe cannot read a file or returns unusable data.

    Covers unreadable, corrupted or unsupported media.
    """

    pass


class NoVideoStreamException(MediaProbeException):
    """Raised when a probed file contains no video stream."""

    pass


class NoDurationFoundException(MediaProbeException):
    """
    Raised when the container duration cannot be obtained for a media file.

    Without a duration the converted file cannot be checked for truncation.
    """

    pass


# --- Validation Specific Exceptions ---
class ValidationException(ConverterException):
    """Base class for failures of the pre- and post-conversion checks."""

    pass


class CodecMismatchException(ValidationException):
    """Raised when a file's video codec differs from the expected codec name."""

    pass


class DurationMismatchException(ValidationException):
    """
    Raised when the original and converted durations differ after rounding to
    whole seconds. Typically signals a conversion that dropped the tail of a video.
    """

    pass


class QualityBelowThresholdException(ValidationException):
    """Raised when the SSIM between original and converted is not above the threshold."""

    pass


class QualityMetricsParseException(QualityBelowThresholdException):
    """Raised when the comparison run fails or its SSIM value cannot be extracted."""

    pass


class MissingOutputFileException(ValidationException):
    """Raised when the converted file expected next to a source file does not exist."""

    pass


# --- Conversion Specific Exceptions ---
class EncodingException(ConverterException):
    """Raised when the ffmpeg transcode exits with an error."""

    pass


class MetadataCopyException(ConverterException):
    """Raised when exiftool fails to copy the modification date onto the new file."""

    pass

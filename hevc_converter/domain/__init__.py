"""
This package contains the core domain models of the HEVC converter.

The domain layer represents the fundamental concepts of a conversion as this
application sees it, independent of the CLI, the services and the pipeline.

Modules:
    exceptions.py: Defines the exception hierarchy raised by probes, validators
                   and the converter, so the pipeline can decide how a failure
                   affects the rest of the batch.
    media.py: Contains the `ConversionPair` and `QualityMetrics` value objects and
              the ffprobe adapter (`probe_codec`, `probe_duration`) built on
              ffmpeg-python.
"""

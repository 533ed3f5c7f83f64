"""
HEVC converter: batch conversion of H.264 MP4 files into validated HEVC MKV files.

Layout:
    cli.py       command-line arguments
    main.py      entry point and exit codes
    config/      constants and `config.user.yaml` overrides
    domain/      value objects, the ffprobe adapter and the exception hierarchy
    services/    converter, validators and logging
    pipeline/    the batch driver
    utils/       external command runner, dependency checks, formatting
"""

__version__ = "1.0.0"

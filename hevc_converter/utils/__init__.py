"""
Utilities Package for the HEVC converter.

This package contains helper modules that provide common, reusable functionality
across the application.

Modules:
    - dependency_checker.py: Locates ffmpeg, ffprobe and exiftool and stops the
      run early when one of them is missing.
    - ffmpeg_utils.py: Runs external commands under a fixed numeric locale.
    - format_utils.py: Formats timedelta objects and file sizes for display.
"""

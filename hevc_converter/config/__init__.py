"""
Configuration Package for the HEVC converter.

This package centralizes the static configuration settings for the application.
By separating configuration from the application logic, thresholds, codecs and
tool locations can be adjusted without changing the core code.

This package includes settings for:
- Source/target file extensions, codecs and the x265 encoding profile.
- The SSIM acceptance threshold used after every conversion.
- Logging format, external tool names and report file names.
- User-overridable values loaded from `config.user.yaml`.
"""

"""
Configuration settings related to video conversion.

This module defines the file extensions, codecs, encoding profile and quality
acceptance rule of the H.264 to HEVC conversion.
"""

# --- File Identification ---
SOURCE_EXTENSION = ".mp4"
TARGET_EXTENSION = ".mkv"
# Appended to the output name while ffmpeg is still writing, e.g. "clip.mkv.part".
# Never ends in TARGET_EXTENSION, so it is never the output name of another source.
PARTIAL_SUFFIX = ".part"
# Muxer passed to ffmpeg explicitly since the partial name has no known extension.
TARGET_FORMAT = "matroska"

# --- Codecs ---
# Names as reported by ffprobe's `codec_name`; compared verbatim.
SOURCE_CODEC = "h264"
TARGET_CODEC = "hevc"

# --- Encoding Profile ---
VIDEO_ENCODER = "libx265"
# Forces `hvc1` signaling so Apple players accept the stream.
VIDEO_TAG = "hvc1"
AUDIO_CODEC_MODE = "copy"

# --- Quality Validation ---
# SSIM must be strictly greater than this value. PSNR is informational only.
SSIM_THRESHOLD = 0.95
QUALITY_FILTER_GRAPH = "[0:v][1:v]ssim;[0:v][1:v]psnr"
SSIM_LINE_MARKER = "SSIM"
SSIM_LABEL = "All:"
PSNR_LINE_MARKER = "PSNR"
PSNR_LABEL = "average:"

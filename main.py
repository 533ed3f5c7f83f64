"""
Script entry point for the HEVC converter.

Run from the directory to convert (or pass --target-dir):

    python main.py

Once installed, the same entry point is available as `hevc-convert`.
"""

import sys

from hevc_converter.main import main


if __name__ == "__main__":
    sys.exit(main())

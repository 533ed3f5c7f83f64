"""
This package contains the batch pipeline of the HEVC converter.

The pipeline discovers the source files, runs the pre-conversion codec check and
the converter on each of them in turn, and decides whether a failure ends the
batch.
"""

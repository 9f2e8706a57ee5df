"""Codec for the compact term encoding and instruction records of BEAM code."""

"""
Property-based tests for the compact term and instruction codecs.

This package hosts Hypothesis strategies, round-trip helpers, and the test
entrypoints for both the fast CI lane and the nightly fuzz job.
"""

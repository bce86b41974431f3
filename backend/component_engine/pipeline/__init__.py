"""Extraction pipeline: retry policy, orchestration, and validation cache."""

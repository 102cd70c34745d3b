"""Cleaning utilities for the pipeline.

Provides functions to normalize raw CSV fields, reject rows lacking the
required identifiers, and validate the remaining rows into typed records.
"""

"""Ingestion of ANVISA petition exports: download and CSV parsing."""

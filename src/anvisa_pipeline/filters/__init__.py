"""Record filtering.

Applies a `FilterSpec` (subjects, outcome, publication date range) to a
record collection and lists the subjects available for selection.
"""

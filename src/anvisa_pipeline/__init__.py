"""anvisa_pipeline package.

Contains modules for fetching and reading ANVISA petition exports (CSV),
cleaning & validating the rows into typed records, filtering them, and
aggregating the statistics that back the petitions dashboard.

Architecture:
- CSV → Clean records → Filter → Stats snapshot
- Pydantic models validate records and describe the snapshot
- Dask is used for partitioned aggregation of large record sets
"""

__all__ = ["__version__"]
__version__ = "0.1.0"

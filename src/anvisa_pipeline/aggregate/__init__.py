"""Statistics aggregation helpers.

This package turns a validated record collection into a `StatsSnapshot`:
outcome totals, company/subject tallies, duration samples per status,
monthly/yearly timelines and the recent approval/denial trend.
"""

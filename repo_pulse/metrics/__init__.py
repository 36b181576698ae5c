"""
Metric derivation and scoring functions.

Every function in this package is pure: it takes already-fetched records from
``repo_pulse.models`` and returns a report record. Nothing here performs I/O.
"""

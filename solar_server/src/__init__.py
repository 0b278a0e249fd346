"""
Session ingest server for photovoltaic plant telemetry.

Accepts one bounded stream of samples per session, normalizes and validates
each row, runs streaming anomaly analytics, and records accepted and rejected
rows in two append-only CSV logs per plant and day.

CHANGELOG:
- 2026-10-19: Initial creation (STORY-001)

TODO:
- None
"""

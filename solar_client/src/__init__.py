"""
Client that streams a PV plant CSV export to the session ingest server.

Reads the export row by row, converts each row into a Sample, and pushes it
over HTTP inside one session, polling the server's warnings feed as it goes.

CHANGELOG:
- 2026-10-19: Initial creation (STORY-012)

TODO:
- None
"""

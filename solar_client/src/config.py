"""
Client configuration loaded from environment variables.

Uses Pydantic BaseSettings for automatic env var loading and validation.
Every value has a default so the client runs against a local server with
no environment set.

CHANGELOG:
- 2026-10-19: Initial creation (STORY-012)

TODO:
- None
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings


class ClientSettings(BaseSettings):
    """Configuration for one CSV transfer.

    Attributes:
        server_base_url: Base URL of the session ingest server.
        csv_path: Plant export to stream.
        client_rejects_path: Where rows the client cannot parse are logged.
        plant_id: Plant identifier sent in the session metadata.
        schema_version: Sample schema version sent in the session metadata.
        row_limit: Maximum rows to send, also declared as the session limit.
        warnings_every: Fetch the warnings feed after every N pushes.
        break_after: Drop the connection after N pushes without ending the
            session (0 disables).
        request_timeout_s: Per-request HTTP timeout in seconds.
        log_level: Root log level name.
    """

    server_base_url: str = "http://127.0.0.1:8088"
    csv_path: str = "input.csv"
    client_rejects_path: str = "rejected_client.csv"
    plant_id: str = "PLANT-001"
    schema_version: str = "1.0"
    row_limit: int = 100
    warnings_every: int = 5
    break_after: int = 0
    request_timeout_s: float = 10.0
    log_level: str = "INFO"

    @field_validator("server_base_url")
    @classmethod
    def server_base_url_must_be_http(cls, v: str) -> str:
        """Validate the server URL scheme and drop any trailing slash."""
        if not v.lower().startswith(("http://", "https://")):
            raise ValueError(
                f"SERVER_BASE_URL must start with http:// or https:// (got: '{v}')"
            )
        return v.rstrip("/")

    @field_validator("row_limit", "break_after")
    @classmethod
    def must_be_non_negative(cls, v: int) -> int:
        """Validate counts are non-negative."""
        if v < 0:
            raise ValueError("ROW_LIMIT and BREAK_AFTER must be >= 0")
        return v

    @field_validator("warnings_every")
    @classmethod
    def warnings_every_must_be_positive(cls, v: int) -> int:
        """Validate the warnings polling period."""
        if v < 1:
            raise ValueError("WARNINGS_EVERY must be >= 1")
        return v

    @field_validator("request_timeout_s")
    @classmethod
    def request_timeout_must_be_positive(cls, v: float) -> float:
        """Validate the HTTP timeout."""
        if v <= 0:
            raise ValueError("REQUEST_TIMEOUT_S must be > 0")
        return v

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

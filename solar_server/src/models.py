"""
Pydantic models for the PV telemetry session protocol.

Defines the session metadata, the per-row telemetry sample, the warning
record emitted by the analytics engine, and the Ack returned by every
session call. Sample field aliases match the column names of the persisted
session logs; both the alias and the field name are accepted on input.

Optional channels are ``float | None``: ``None`` means "no reading", which
is distinct from a reading of ``0.0``.

CHANGELOG:
- 2026-10-19: Refuse plant_id values that are not a plain directory name (STORY-015)
- 2026-10-19: Add WarningRecord.render() for the warnings feed (STORY-006)
- 2026-10-19: Initial creation (STORY-002)

TODO:
- None
"""

from __future__ import annotations

from datetime import date
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Channel field names in persisted column order.
CHANNEL_FIELDS: tuple[str, ...] = (
    "ac_power",
    "dc_voltage",
    "temperature",
    "v_l1_l2",
    "v_l2_l3",
    "v_l3_l1",
    "ac_current",
    "ac_voltage",
)


class SessionMeta(BaseModel):
    """Identifies one ingestion session.

    Created by the start call and never modified afterwards.

    Attributes:
        plant_id: Plant identifier; first level of the storage layout.
        file_name: Name of the source file on the client (informational).
        total_rows: Row count the client declared for its file (informational).
        schema_version: Version of the sample schema the client speaks.
        row_limit: Hard cap on accepted samples for this session.
        session_date: Calendar date used to partition storage. Defaults to
            the current UTC date when absent.
    """

    model_config = ConfigDict(frozen=True)

    plant_id: str = Field(default="PLANT-001", min_length=1)
    file_name: str = ""
    total_rows: int = 0
    schema_version: str = "1.0"
    row_limit: int = Field(default=100, ge=0)
    session_date: date | None = None

    @field_validator("plant_id")
    @classmethod
    def plant_id_must_be_directory_name(cls, v: str) -> str:
        """Validate plant_id is a single path component under the data root."""
        if v in (".", "..") or any(ch in v for ch in "/\\:\0"):
            raise ValueError(f"plant_id must be a plain directory name (got: '{v}')")
        return v


class Sample(BaseModel):
    """One telemetry reading as pushed by the client.

    Attributes:
        row_index: Client-assigned row number; must increase within a session.
        day: Calendar day as text, ``yyyy-M-d``.
        hour: Time of day as text, ``HH:MM:SS``.
        ac_power: AC output power (ACPWRT).
        dc_voltage: DC input voltage (DCVOLT).
        temperature: Inverter temperature in degrees Celsius (TEMPER).
        v_l1_l2: Line-to-line voltage L1-L2 (VL1TO2).
        v_l2_l3: Line-to-line voltage L2-L3 (VL2TO3).
        v_l3_l1: Line-to-line voltage L3-L1 (VL3TO1).
        ac_current: AC phase current (ACCUR1).
        ac_voltage: AC phase voltage (ACVLT1).
    """

    model_config = ConfigDict(populate_by_name=True)

    row_index: int = Field(alias="RowIndex")
    day: str | None = Field(default=None, alias="Day")
    hour: str | None = Field(default=None, alias="Hour")
    ac_power: float | None = Field(default=None, alias="AcPwrt")
    dc_voltage: float | None = Field(default=None, alias="DcVolt")
    temperature: float | None = Field(default=None, alias="Temper")
    v_l1_l2: float | None = Field(default=None, alias="Vl1to2")
    v_l2_l3: float | None = Field(default=None, alias="Vl2to3")
    v_l3_l1: float | None = Field(default=None, alias="Vl3to1")
    ac_current: float | None = Field(default=None, alias="AcCur1")
    ac_voltage: float | None = Field(default=None, alias="AcVlt1")


class WarningType(StrEnum):
    """Categories of analytics findings."""

    DC_SAG = "DCSagWarning"
    DC_FAULT = "DcFaultWarning"
    LOW_EFFICIENCY = "LowEfficiencyWarning"
    OVER_TEMP = "OverTempWarning"
    VOLTAGE_IMBALANCE = "VoltageImbalanceWarning"
    POWER_FLATLINE = "PowerFlatlineWarning"
    POWER_SPIKE = "PowerSpikeWarning"


class WarningRecord(BaseModel):
    """An immutable analytics finding tied to one accepted row."""

    model_config = ConfigDict(frozen=True)

    type: WarningType
    message: str
    row_index: int

    def render(self) -> str:
        """Return the human-readable form served by the warnings feed."""
        return f"[{self.type}] {self.message} (Row {self.row_index})"


class Ack(BaseModel):
    """Acknowledgment returned by every session call.

    ``success`` reports whether the call was carried out, not whether a
    pushed row was accepted; callers track acceptance through
    ``received_count`` / ``percent_of_limit``.

    Attributes:
        success: False only for protocol misuse or resource faults.
        message: Short human-readable status.
        received_count: Samples accepted so far in the session.
        percent_of_limit: received_count / row_limit * 100, 2 decimals.
    """

    success: bool
    message: str = ""
    received_count: int = 0
    percent_of_limit: float = 0.0


def percent_of_limit(received: int, row_limit: int) -> float:
    """Return received/row_limit as a percentage rounded to 2 decimals.

    A limit of zero is reported as fully used (100.0).
    """
    if row_limit <= 0:
        return 100.0
    return round(100.0 * received / row_limit, 2)

"""Usage endpoint response schema and the domain types built from it."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from pydantic import BaseModel, StrictFloat, field_validator


@dataclass(frozen=True)
class UsagePeriod:
    """One rolling usage window."""

    utilization: float  # percent, not clamped
    resets_at: datetime  # UTC


@dataclass(frozen=True)
class UsageData:
    five_hour: UsagePeriod
    seven_day: UsagePeriod


# ── Wire format ──────────────────────────────────────────────────────────────


def parse_rfc3339(value: str) -> datetime:
    """Parse an RFC3339 timestamp into an aware UTC datetime.

    A trailing ``Z`` is accepted; timestamps without an offset are rejected.
    """
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        raise ValueError(f"timestamp has no UTC offset: {value!r}")
    return parsed.astimezone(timezone.utc)


class ApiPeriod(BaseModel):
    utilization: StrictFloat
    resets_at: datetime

    @field_validator("resets_at", mode="before")
    @classmethod
    def _parse_resets_at(cls, value: object) -> datetime:
        if not isinstance(value, str):
            raise ValueError("resets_at must be an RFC3339 string")
        return parse_rfc3339(value)

    def to_period(self) -> UsagePeriod:
        return UsagePeriod(utilization=self.utilization, resets_at=self.resets_at)


class ApiUsageResponse(BaseModel):
    five_hour: ApiPeriod
    seven_day: ApiPeriod

    def to_usage_data(self) -> UsageData:
        return UsageData(
            five_hour=self.five_hour.to_period(),
            seven_day=self.seven_day.to_period(),
        )

"""Structured customization payloads (session duration, equipment)."""
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

Number = int | float

DurationConfigurationType = Literal[
    "duration-only", "with-warmup", "with-cooldown", "full-structure"
]


def _number(value: Any) -> Number | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def _raw_phase(data: dict, *keys: str) -> dict:
    for key in keys:
        value = data.get(key)
        if isinstance(value, BaseModel):
            return value.model_dump()
        if isinstance(value, dict):
            return value
    return {}


class PhaseConfig(BaseModel):
    """Warm-up or cool-down block of a session."""

    model_config = ConfigDict(frozen=True, extra="allow", allow_inf_nan=False)

    included: bool = False
    duration: Number = 0
    percentage: Number | None = None

    @model_validator(mode="after")
    def _check_non_negative(self) -> "PhaseConfig":
        if self.duration < 0:
            raise ValueError("phase duration must be non-negative")
        return self

    @property
    def effective_minutes(self) -> Number:
        """Minutes this phase adds to the session (0 when not included)."""
        return self.duration if self.included else 0


class DurationValidation(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")

    is_valid: bool = Field(default=True, alias="isValid")
    warnings: tuple[str, ...] = ()
    errors: tuple[str, ...] = ()


class DurationConfiguration(BaseModel):
    """Session duration with optional warm-up and cool-down.

    ``workingTime`` defaults to the total minus the included phases, and
    ``configuration`` defaults to the type implied by which phases are
    included.
    """

    model_config = ConfigDict(
        frozen=True, populate_by_name=True, extra="allow", allow_inf_nan=False
    )

    total_duration: Number = Field(alias="totalDuration")
    working_time: Number | None = Field(default=None, alias="workingTime")
    warm_up: PhaseConfig = Field(default_factory=PhaseConfig, alias="warmUp")
    cool_down: PhaseConfig = Field(default_factory=PhaseConfig, alias="coolDown")
    configuration: DurationConfigurationType | None = None
    validation: DurationValidation | None = None

    @model_validator(mode="before")
    @classmethod
    def _fill_derived(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        warm = _raw_phase(data, "warmUp", "warm_up")
        cool = _raw_phase(data, "coolDown", "cool_down")

        if data.get("workingTime") is None and data.get("working_time") is None:
            total = _number(data.get("totalDuration", data.get("total_duration")))
            durations = [_number(p.get("duration", 0)) for p in (warm, cool) if p.get("included")]
            if total is not None and None not in durations:
                data["workingTime"] = max(total - sum(durations), 0)

        if data.get("configuration") is None:
            has_warm = bool(warm.get("included"))
            has_cool = bool(cool.get("included"))
            if has_warm and has_cool:
                data["configuration"] = "full-structure"
            elif has_warm:
                data["configuration"] = "with-warmup"
            elif has_cool:
                data["configuration"] = "with-cooldown"
            else:
                data["configuration"] = "duration-only"
        return data

    @model_validator(mode="after")
    def _check_non_negative(self) -> "DurationConfiguration":
        if self.total_duration < 0:
            raise ValueError("totalDuration must be non-negative")
        if self.working_time is not None and self.working_time < 0:
            raise ValueError("workingTime must be non-negative")
        return self

    @property
    def working_minutes(self) -> Number:
        return self.working_time if self.working_time is not None else self.total_duration

    @classmethod
    def from_total(cls, total: Number) -> "DurationConfiguration":
        """Minimal configuration for a bare total: no warm-up or cool-down."""
        return cls(
            total_duration=total,
            working_time=total,
            warm_up=PhaseConfig(),
            cool_down=PhaseConfig(),
            configuration="duration-only",
            validation=DurationValidation(is_valid=True),
        )


class EquipmentSelection(BaseModel):
    """Location -> contexts -> specific equipment -> available weights."""

    model_config = ConfigDict(
        frozen=True, populate_by_name=True, extra="allow", allow_inf_nan=False
    )

    location: str | None = None
    contexts: tuple[str, ...] = ()
    specific_equipment: tuple[str, ...] = Field(default=(), alias="specificEquipment")
    weights: dict[str, tuple[Number, ...]] = Field(default_factory=dict)
    last_updated: datetime | None = Field(default=None, alias="lastUpdated")

    @property
    def is_empty(self) -> bool:
        return not (self.location or self.contexts or self.specific_equipment or self.weights)

"""
Scheduler configuration.

Defaults come from the constants module. Every value can be overridden per
instance (tests, tuning) or through environment variables / a .env file.
"""

from __future__ import annotations

import os
from datetime import timedelta
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from srs.fsrs.constants import (
    DEFAULT_WEIGHTS,
    LEARNING_STEPS,
    MAX_INTERVAL_DAYS,
    MIN_INTERVAL_DAYS,
    R_TARGET,
    RELEARNING_STEPS,
)


class SchedulerParameters(BaseModel):
    """Tunable knobs of the scheduler. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    target_retention: float = Field(R_TARGET, gt=0.0, lt=1.0)
    minimum_interval: int = Field(MIN_INTERVAL_DAYS, ge=1)
    maximum_interval: int = Field(MAX_INTERVAL_DAYS, ge=1)
    learning_steps: tuple[timedelta, ...] = LEARNING_STEPS
    relearning_steps: tuple[timedelta, ...] = RELEARNING_STEPS
    enable_fuzz: bool = True
    fuzz_scale: float = Field(1.0, ge=0.0)
    weights: tuple[float, ...] = DEFAULT_WEIGHTS

    @field_validator("learning_steps", "relearning_steps")
    @classmethod
    def _steps_positive(cls, steps: tuple[timedelta, ...]) -> tuple[timedelta, ...]:
        for step in steps:
            if step <= timedelta(0):
                raise ValueError(f"Step durations must be positive, got {step}")
        return steps

    @field_validator("weights")
    @classmethod
    def _weights_shape(cls, weights: tuple[float, ...]) -> tuple[float, ...]:
        if len(weights) != len(DEFAULT_WEIGHTS):
            raise ValueError(
                f"Expected {len(DEFAULT_WEIGHTS)} weights, got {len(weights)}"
            )
        if any(w <= 0 for w in weights[:4]):
            raise ValueError("Initial stability priors (w0-w3) must be positive")
        return weights

    @model_validator(mode="after")
    def _interval_range(self) -> "SchedulerParameters":
        if self.maximum_interval < self.minimum_interval:
            raise ValueError(
                f"maximum_interval ({self.maximum_interval}) is below "
                f"minimum_interval ({self.minimum_interval})"
            )
        return self


DEFAULT_PARAMETERS = SchedulerParameters()


def _parse_minutes(raw: str) -> tuple[timedelta, ...]:
    """Parse "10,1440" into step durations. An empty string means no steps."""
    raw = raw.strip()
    if not raw:
        return ()
    return tuple(timedelta(minutes=float(part)) for part in raw.split(","))


def load_parameters(env_file: Optional[str] = None) -> SchedulerParameters:
    """
    Build SchedulerParameters from environment variables.

    Reads a .env file first (python-dotenv); variables already present in
    the environment win. Unset variables keep their defaults.

    Variables:
        SRS_TARGET_RETENTION, SRS_MINIMUM_INTERVAL, SRS_MAXIMUM_INTERVAL,
        SRS_ENABLE_FUZZ, SRS_FUZZ_SCALE,
        SRS_LEARNING_STEPS, SRS_RELEARNING_STEPS (comma-separated minutes)
    """
    load_dotenv(env_file)

    overrides = {}
    if "SRS_TARGET_RETENTION" in os.environ:
        overrides["target_retention"] = float(os.environ["SRS_TARGET_RETENTION"])
    if "SRS_MINIMUM_INTERVAL" in os.environ:
        overrides["minimum_interval"] = int(os.environ["SRS_MINIMUM_INTERVAL"])
    if "SRS_MAXIMUM_INTERVAL" in os.environ:
        overrides["maximum_interval"] = int(os.environ["SRS_MAXIMUM_INTERVAL"])
    if "SRS_ENABLE_FUZZ" in os.environ:
        overrides["enable_fuzz"] = os.environ["SRS_ENABLE_FUZZ"].lower() == "true"
    if "SRS_FUZZ_SCALE" in os.environ:
        overrides["fuzz_scale"] = float(os.environ["SRS_FUZZ_SCALE"])
    if "SRS_LEARNING_STEPS" in os.environ:
        overrides["learning_steps"] = _parse_minutes(os.environ["SRS_LEARNING_STEPS"])
    if "SRS_RELEARNING_STEPS" in os.environ:
        overrides["relearning_steps"] = _parse_minutes(os.environ["SRS_RELEARNING_STEPS"])

    return SchedulerParameters(**overrides)

"""
Settings component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from src.components.membership import DEFAULT_TRIAL_CONFIG, TrialConfig, ValidationError
from src.domain.entities import MembershipLevel

DEFAULT_FEES: dict[MembershipLevel, float] = {
    "Full": 45.0,
    "Student": 25.0,
    "Associate": 25.0,
    "Corporate": 125.0,
    "Honorary": 0.0,
}


@dataclass(frozen=True)
class SettingsDefaults:
    """
    Fallback values used when a setting row is missing or unparseable.

    Built from rules.yaml at startup; the constants above are the last resort.
    """

    fees: dict[MembershipLevel, float] = field(default_factory=lambda: dict(DEFAULT_FEES))
    trial_config: dict[MembershipLevel, TrialConfig] = field(
        default_factory=lambda: dict(DEFAULT_TRIAL_CONFIG)
    )
    currency: str = "CAD"
    cutoff_month: int = 9
    cutoff_day: int = 1


@dataclass(frozen=True)
class GetFeesInput:
    """Input for reading membership fees."""

    pass


@dataclass(frozen=True)
class GetFeesOutput:
    """All membership fees keyed by level."""

    fees: dict[MembershipLevel, float]
    currency: str = "CAD"


@dataclass(frozen=True)
class UpdateFeesInput:
    """Partial fee update, level -> amount."""

    updates: dict[str, Any]


@dataclass(frozen=True)
class UpdateFeesOutput:
    """Output from updating fees."""

    fees: dict[MembershipLevel, float]
    errors: list[ValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class GetTrialConfigInput:
    """Input for reading trial configuration."""

    pass


@dataclass(frozen=True)
class GetTrialConfigOutput:
    """Trial configuration for every level."""

    trial: dict[MembershipLevel, TrialConfig]


@dataclass(frozen=True)
class UpdateTrialConfigInput:
    """Full trial configuration replacement; every level must be present."""

    config: dict[str, Any]


@dataclass(frozen=True)
class UpdateTrialConfigOutput:
    """Output from updating trial configuration."""

    trial: dict[MembershipLevel, TrialConfig]
    errors: list[ValidationError] = field(default_factory=list)
    success: bool = True

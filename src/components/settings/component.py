"""
Settings component - Membership fees and trial configuration.

Settings live in a key/value table:
- membership_fee_<level>: decimal fee in the configured currency
- trial_config_<level>: JSON {"type": "none"|"sept1"|"months", "months": N}

Reads always succeed: missing or unparseable rows fall back to defaults.
Writes validate first and return actionable errors instead of raising.
"""

from __future__ import annotations

import json
import logging
import math
from typing import Any

from src.components.membership import (
    MAX_TRIAL_MONTHS,
    TrialConfig,
    TrialPolicy,
    ValidationError,
    parse_trial_config_item,
)
from src.domain.entities import MEMBERSHIP_LEVELS, MembershipLevel

from .models import (
    GetFeesInput,
    GetFeesOutput,
    GetTrialConfigInput,
    GetTrialConfigOutput,
    SettingsDefaults,
    UpdateFeesInput,
    UpdateFeesOutput,
    UpdateTrialConfigInput,
    UpdateTrialConfigOutput,
)
from .ports import SettingsRepoPort

logger = logging.getLogger(__name__)


# --- Keys ---


def fee_key(level: MembershipLevel) -> str:
    return f"membership_fee_{level.lower()}"


def trial_config_key(level: MembershipLevel) -> str:
    return f"trial_config_{level.lower()}"


# --- Parsing ---


def _parse_fee(raw: str | None) -> float | None:
    if raw is None:
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    if math.isnan(value) or math.isinf(value) or value < 0:
        return None
    return value


def _parse_trial_config(raw: str | None) -> TrialConfig | None:
    if raw is None:
        return None
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Ignoring malformed trial config value: %r", raw)
        return None
    return parse_trial_config_item(data)


def _coerce_fee(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        fee = float(value)
    elif isinstance(value, str):
        return _parse_fee(value.strip())
    else:
        return None
    if math.isnan(fee) or math.isinf(fee) or fee < 0:
        return None
    return fee


# --- Reads ---


def get_fee(
    level: MembershipLevel,
    *,
    repo: SettingsRepoPort,
    defaults: SettingsDefaults | None = None,
) -> float:
    """Fee for one membership level, falling back to the default."""
    defaults = defaults or SettingsDefaults()
    stored = _parse_fee(repo.get_value(fee_key(level)))
    if stored is not None:
        return stored
    return defaults.fees.get(level, 0.0)


def get_all_fees(
    *,
    repo: SettingsRepoPort,
    defaults: SettingsDefaults | None = None,
) -> dict[MembershipLevel, float]:
    """All membership fees keyed by level."""
    return {level: get_fee(level, repo=repo, defaults=defaults) for level in MEMBERSHIP_LEVELS}


def get_trial_config(
    *,
    repo: SettingsRepoPort,
    defaults: SettingsDefaults | None = None,
) -> dict[MembershipLevel, TrialConfig]:
    """Trial configuration for every level."""
    defaults = defaults or SettingsDefaults()
    result: dict[MembershipLevel, TrialConfig] = {}
    for level in MEMBERSHIP_LEVELS:
        stored = _parse_trial_config(repo.get_value(trial_config_key(level)))
        result[level] = stored or defaults.trial_config.get(level, TrialConfig())
    return result


def get_trial_policy(
    *,
    repo: SettingsRepoPort,
    defaults: SettingsDefaults | None = None,
) -> TrialPolicy:
    """Trial policy for the status resolver (stored config + calendar cutoff)."""
    defaults = defaults or SettingsDefaults()
    return TrialPolicy(
        levels=get_trial_config(repo=repo, defaults=defaults),
        cutoff_month=defaults.cutoff_month,
        cutoff_day=defaults.cutoff_day,
    )


# --- Validation ---


def validate_fee_updates(updates: dict[str, Any]) -> list[ValidationError]:
    """Validate a partial fee update."""
    errors: list[ValidationError] = []
    if not updates:
        errors.append(
            ValidationError(
                field="_body",
                code="required",
                message="At least one membership level fee is required",
            )
        )
        return errors

    for level, value in updates.items():
        if level not in MEMBERSHIP_LEVELS:
            errors.append(
                ValidationError(
                    field=level,
                    code="unknown_level",
                    message=(
                        f"Unknown membership level '{level}'; expected one of: "
                        f"{', '.join(MEMBERSHIP_LEVELS)}"
                    ),
                )
            )
            continue
        if _coerce_fee(value) is None:
            errors.append(
                ValidationError(
                    field=level,
                    code="invalid_fee",
                    message=f"Fee for '{level}' must be a non-negative number",
                )
            )
    return errors


def parse_trial_config_update(
    config: dict[str, Any],
) -> tuple[dict[MembershipLevel, TrialConfig] | None, list[ValidationError]]:
    """
    Parse a full trial configuration.

    Every level must be present with a valid type and at most
    MAX_TRIAL_MONTHS months; otherwise no config is returned and each
    offending level is reported.
    """
    parsed: dict[MembershipLevel, TrialConfig] = {}
    errors: list[ValidationError] = []

    for level in MEMBERSHIP_LEVELS:
        raw = config.get(level)
        months = raw.get("months") if isinstance(raw, dict) else None
        if isinstance(months, int) and months > MAX_TRIAL_MONTHS:
            errors.append(
                ValidationError(
                    field=level,
                    code="invalid_months",
                    message=(
                        f"Trial length for '{level}' must be at most "
                        f"{MAX_TRIAL_MONTHS} months"
                    ),
                )
            )
            continue

        item = parse_trial_config_item(raw)
        if item is None:
            errors.append(
                ValidationError(
                    field=level,
                    code="invalid_trial_config",
                    message=(
                        f"Trial config for '{level}' must be an object with type "
                        "'none', 'sept1' or 'months'"
                    ),
                )
            )
            continue
        parsed[level] = item

    if errors:
        return None, errors
    return parsed, []


# --- Component Entry Points ---


def run_get_fees(
    inp: GetFeesInput,
    *,
    repo: SettingsRepoPort,
    defaults: SettingsDefaults | None = None,
) -> GetFeesOutput:
    """Get all membership fees (defaults fill missing rows)."""
    defaults = defaults or SettingsDefaults()
    return GetFeesOutput(
        fees=get_all_fees(repo=repo, defaults=defaults),
        currency=defaults.currency,
    )


def run_update_fees(
    inp: UpdateFeesInput,
    *,
    repo: SettingsRepoPort,
    defaults: SettingsDefaults | None = None,
) -> UpdateFeesOutput:
    """
    Update one or more membership fees.

    Validates the whole update before persisting anything.

    Args:
        inp: Level -> fee updates
        repo: Settings repository port
        defaults: Fallback values

    Returns:
        UpdateFeesOutput with the resulting fees or validation errors
    """
    errors = validate_fee_updates(inp.updates)
    if errors:
        return UpdateFeesOutput(
            fees=get_all_fees(repo=repo, defaults=defaults),
            errors=errors,
            success=False,
        )

    for level, value in inp.updates.items():
        fee = _coerce_fee(value)
        repo.set_value(fee_key(level), str(fee))
        logger.info("Membership fee for %s set to %s", level, fee)

    return UpdateFeesOutput(fees=get_all_fees(repo=repo, defaults=defaults))


def run_get_trial_config(
    inp: GetTrialConfigInput,
    *,
    repo: SettingsRepoPort,
    defaults: SettingsDefaults | None = None,
) -> GetTrialConfigOutput:
    """Get the trial configuration for every level."""
    return GetTrialConfigOutput(trial=get_trial_config(repo=repo, defaults=defaults))


def run_update_trial_config(
    inp: UpdateTrialConfigInput,
    *,
    repo: SettingsRepoPort,
    defaults: SettingsDefaults | None = None,
) -> UpdateTrialConfigOutput:
    """
    Replace the trial configuration.

    Args:
        inp: Level -> {"type": ..., "months": ...} for every level
        repo: Settings repository port
        defaults: Fallback values

    Returns:
        UpdateTrialConfigOutput with the stored config or validation errors
    """
    parsed, errors = parse_trial_config_update(inp.config)
    if parsed is None:
        return UpdateTrialConfigOutput(
            trial=get_trial_config(repo=repo, defaults=defaults),
            errors=errors,
            success=False,
        )

    for level, config in parsed.items():
        repo.set_value(trial_config_key(level), json.dumps(config.to_dict()))
    logger.info(
        "Trial config updated: %s",
        ", ".join(f"{level}={config.type}" for level, config in parsed.items()),
    )

    return UpdateTrialConfigOutput(trial=get_trial_config(repo=repo, defaults=defaults))


def run(
    inp: GetFeesInput | UpdateFeesInput | GetTrialConfigInput | UpdateTrialConfigInput,
    *,
    repo: SettingsRepoPort,
    defaults: SettingsDefaults | None = None,
) -> GetFeesOutput | UpdateFeesOutput | GetTrialConfigOutput | UpdateTrialConfigOutput:
    """
    Main entry point for the settings component.

    Dispatches to the handler for the input type.
    """
    if isinstance(inp, GetFeesInput):
        return run_get_fees(inp, repo=repo, defaults=defaults)
    elif isinstance(inp, UpdateFeesInput):
        return run_update_fees(inp, repo=repo, defaults=defaults)
    elif isinstance(inp, GetTrialConfigInput):
        return run_get_trial_config(inp, repo=repo, defaults=defaults)
    elif isinstance(inp, UpdateTrialConfigInput):
        return run_update_trial_config(inp, repo=repo, defaults=defaults)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")

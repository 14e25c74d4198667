"""
SettingsService - Membership settings management.

Object wrapper over the settings component functions so the API layer can
inject a single service bound to a repo and rules-derived defaults.
"""

from __future__ import annotations

from typing import Any

from src.components.membership import (
    DEFAULT_TRIAL_CONFIG,
    TrialConfig,
    TrialPolicy,
    parse_trial_config_item,
)
from src.domain.entities import MEMBERSHIP_LEVELS, MembershipLevel
from src.rules.models import MembershipRules

from .component import (
    get_fee,
    get_trial_policy,
    run_get_fees,
    run_get_trial_config,
    run_update_fees,
    run_update_trial_config,
)
from .models import (
    DEFAULT_FEES,
    GetFeesInput,
    GetFeesOutput,
    GetTrialConfigInput,
    SettingsDefaults,
    UpdateFeesInput,
    UpdateFeesOutput,
    UpdateTrialConfigInput,
    UpdateTrialConfigOutput,
)
from .ports import SettingsRepoPort


def defaults_from_rules(rules: MembershipRules) -> SettingsDefaults:
    """Build settings defaults from the membership section of rules.yaml."""
    fees: dict[MembershipLevel, float] = dict(DEFAULT_FEES)
    trial: dict[MembershipLevel, TrialConfig] = dict(DEFAULT_TRIAL_CONFIG)

    for level in MEMBERSHIP_LEVELS:
        if level in rules.default_fees:
            fees[level] = float(rules.default_fees[level])
        if level in rules.trial_defaults:
            parsed = parse_trial_config_item(rules.trial_defaults[level].model_dump())
            if parsed is not None:
                trial[level] = parsed

    return SettingsDefaults(
        fees=fees,
        trial_config=trial,
        currency=rules.currency,
        cutoff_month=rules.trial_cutoff.month,
        cutoff_day=rules.trial_cutoff.day,
    )


class SettingsService:
    """Membership settings bound to a repository."""

    def __init__(
        self,
        repo: SettingsRepoPort,
        defaults: SettingsDefaults | None = None,
    ) -> None:
        self.repo = repo
        self.defaults = defaults or SettingsDefaults()

    @property
    def currency(self) -> str:
        return self.defaults.currency

    def get_fees(self) -> GetFeesOutput:
        return run_get_fees(GetFeesInput(), repo=self.repo, defaults=self.defaults)

    def get_fee(self, level: MembershipLevel) -> float:
        return get_fee(level, repo=self.repo, defaults=self.defaults)

    def update_fees(self, updates: dict[str, Any]) -> UpdateFeesOutput:
        return run_update_fees(
            UpdateFeesInput(updates=updates), repo=self.repo, defaults=self.defaults
        )

    def get_trial_config(self) -> dict[MembershipLevel, TrialConfig]:
        return run_get_trial_config(
            GetTrialConfigInput(), repo=self.repo, defaults=self.defaults
        ).trial

    def update_trial_config(self, config: dict[str, Any]) -> UpdateTrialConfigOutput:
        return run_update_trial_config(
            UpdateTrialConfigInput(config=config), repo=self.repo, defaults=self.defaults
        )

    def get_trial_policy(self) -> TrialPolicy:
        return get_trial_policy(repo=self.repo, defaults=self.defaults)

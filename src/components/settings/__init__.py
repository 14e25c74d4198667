"""
Settings component - Membership fees and trial configuration.
"""

from ._impl import SettingsService, defaults_from_rules
from .component import (
    fee_key,
    get_all_fees,
    get_fee,
    get_trial_config,
    get_trial_policy,
    parse_trial_config_update,
    run,
    run_get_fees,
    run_get_trial_config,
    run_update_fees,
    run_update_trial_config,
    trial_config_key,
    validate_fee_updates,
)
from .models import (
    DEFAULT_FEES,
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

__all__ = [
    # Component entry points
    "run",
    "run_get_fees",
    "run_update_fees",
    "run_get_trial_config",
    "run_update_trial_config",
    # Functions
    "fee_key",
    "trial_config_key",
    "get_fee",
    "get_all_fees",
    "get_trial_config",
    "get_trial_policy",
    "parse_trial_config_update",
    "validate_fee_updates",
    "defaults_from_rules",
    # Service
    "SettingsService",
    # Models
    "GetFeesInput",
    "GetFeesOutput",
    "UpdateFeesInput",
    "UpdateFeesOutput",
    "GetTrialConfigInput",
    "GetTrialConfigOutput",
    "UpdateTrialConfigInput",
    "UpdateTrialConfigOutput",
    "SettingsDefaults",
    # Constants
    "DEFAULT_FEES",
    # Ports
    "SettingsRepoPort",
]

"""
Membership component - Trial policy, status resolution and expiry sweeps.
"""

from .component import (
    can_access_member_area,
    default_trial_policy,
    is_valid_trial_months,
    level_display,
    parse_trial_config_item,
    resolve_member,
    resolve_membership_status,
    run,
    run_expire_members,
    select_expired_members,
    status_input_from_member,
    trial_end_date,
)
from .models import (
    DEFAULT_TRIAL_CONFIG,
    DEFAULT_TRIAL_MONTHS,
    MAX_TRIAL_MONTHS,
    TRIAL_TYPES,
    ExpiredMemberSummary,
    ExpireMembersOutput,
    MemberNotFoundError,
    MembershipError,
    MembershipStatus,
    ResolveStatusInput,
    TrialConfig,
    TrialPolicy,
    TrialType,
    ValidationError,
)
from .ports import MemberRepoPort, TimePort

__all__ = [
    # Component entry points
    "run",
    "run_expire_members",
    # Pure functions
    "can_access_member_area",
    "default_trial_policy",
    "is_valid_trial_months",
    "level_display",
    "parse_trial_config_item",
    "resolve_member",
    "resolve_membership_status",
    "select_expired_members",
    "status_input_from_member",
    "trial_end_date",
    # Models
    "ExpireMembersOutput",
    "ExpiredMemberSummary",
    "MembershipStatus",
    "ResolveStatusInput",
    "TrialConfig",
    "TrialPolicy",
    "TrialType",
    "ValidationError",
    # Errors
    "MembershipError",
    "MemberNotFoundError",
    # Constants
    "DEFAULT_TRIAL_CONFIG",
    "DEFAULT_TRIAL_MONTHS",
    "MAX_TRIAL_MONTHS",
    "TRIAL_TYPES",
    # Ports
    "MemberRepoPort",
    "TimePort",
]

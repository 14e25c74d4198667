import os
from functools import lru_cache
from pathlib import Path
from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from src.adapters.clock import SystemClock
from src.adapters.sqlite.repos import (
    SQLiteCommentRepo,
    SQLiteMemberRepo,
    SQLitePaymentRepo,
    SQLiteSettingsRepo,
    SQLiteThreadRepo,
)
from src.adapters.subscription_stub import SubscriptionStubAdapter
from src.api.auth_utils import decode_access_token
from src.components.billing import BillingService
from src.components.membership import TrialPolicy, resolve_member
from src.components.ranking import RankingConfig
from src.components.settings import SettingsService, defaults_from_rules
from src.domain.entities import Member
from src.rules.loader import load_rules
from src.rules.models import Rules


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("TIPA_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "tipa.db")
        self.rules_path = Path(os.environ.get("TIPA_RULES_PATH", self.base_dir / "rules.yaml"))
        self.migrations_dir = self.base_dir / "migrations"
        self.secret_key = os.environ.get("TIPA_SECRET_KEY", "dev-secret-unsafe")


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return load_rules(settings.rules_path)


def get_cron_secret(rules: Rules = Depends(get_rules)) -> str | None:
    """Shared secret for cron triggers; None when not configured."""
    return os.environ.get(rules.ops.cron.secret_env) or None


def get_ranking_config(rules: Rules = Depends(get_rules)) -> RankingConfig:
    return RankingConfig(
        decay_hours=rules.forum.hot_decay_hours,
        comment_weight_factor=rules.forum.comment_weight_factor,
    )


# --- Repos ---
def get_member_repo(settings: Settings = Depends(get_settings)) -> SQLiteMemberRepo:
    return SQLiteMemberRepo(settings.db_path)


def get_thread_repo(settings: Settings = Depends(get_settings)) -> SQLiteThreadRepo:
    return SQLiteThreadRepo(settings.db_path)


def get_comment_repo(settings: Settings = Depends(get_settings)) -> SQLiteCommentRepo:
    return SQLiteCommentRepo(settings.db_path)


def get_settings_repo(settings: Settings = Depends(get_settings)) -> SQLiteSettingsRepo:
    return SQLiteSettingsRepo(settings.db_path)


def get_payment_repo(settings: Settings = Depends(get_settings)) -> SQLitePaymentRepo:
    return SQLitePaymentRepo(settings.db_path)


# Time adapter for deterministic time operations
_clock_instance: SystemClock | None = None


def get_clock() -> SystemClock:
    """Get clock singleton."""
    global _clock_instance
    if _clock_instance is None:
        _clock_instance = SystemClock()
    return _clock_instance


# Subscription provider singleton (stub until a real provider is wired)
_provider_instance: SubscriptionStubAdapter | None = None


def get_subscription_provider() -> SubscriptionStubAdapter:
    """Get subscription provider singleton."""
    global _provider_instance
    if _provider_instance is None:
        _provider_instance = SubscriptionStubAdapter()
    return _provider_instance


# --- Component Services ---
def get_settings_service(
    repo: SQLiteSettingsRepo = Depends(get_settings_repo),
    rules: Rules = Depends(get_rules),
) -> SettingsService:
    """Get settings component service."""
    return SettingsService(repo=repo, defaults=defaults_from_rules(rules.membership))


def get_trial_policy(
    service: SettingsService = Depends(get_settings_service),
) -> TrialPolicy:
    return service.get_trial_policy()


def get_billing_service(
    member_repo: SQLiteMemberRepo = Depends(get_member_repo),
    payment_repo: SQLitePaymentRepo = Depends(get_payment_repo),
    provider: SubscriptionStubAdapter = Depends(get_subscription_provider),
    settings_service: SettingsService = Depends(get_settings_service),
    rules: Rules = Depends(get_rules),
    clock: SystemClock = Depends(get_clock),
) -> BillingService:
    """Get billing component service."""
    membership = rules.membership
    return BillingService(
        member_repo,
        payment_repo,
        provider,
        settings_service,
        currency=membership.currency,
        validity_months=membership.default_payment_months,
        cutoff_month=membership.trial_cutoff.month,
        cutoff_day=membership.trial_cutoff.day,
        time_port=clock,
    )


# --- Auth ---
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


async def get_current_member(
    request: Request,
    token: Annotated[str | None, Depends(oauth2_scheme)],
    settings: Settings = Depends(get_settings),
    member_repo: SQLiteMemberRepo = Depends(get_member_repo),
) -> Member:
    # 1. Try Cookie first (HttpOnly)
    cookie_token = request.cookies.get("access_token")
    if cookie_token:
        token = cookie_token.removeprefix("Bearer ").strip()

    # 2. Fall back to the Authorization header (OAuth2Bearer)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    # 3. Decode
    payload = decode_access_token(token, settings.secret_key)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    member_id = payload.get("sub")
    if member_id is None or not isinstance(member_id, str):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )

    # 4. Fetch Member
    try:
        member = member_repo.get_by_id(UUID(member_id))
    except ValueError:
        member = None
    if not member:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Member not found",
        )

    return member


def require_admin(member: Member = Depends(get_current_member)) -> Member:
    if not member.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden: Admin access required",
        )
    return member


def require_member_access(
    member: Member = Depends(get_current_member),
    policy: TrialPolicy = Depends(get_trial_policy),
    clock: SystemClock = Depends(get_clock),
) -> Member:
    """Members whose resolved status grants access to member-only areas."""
    if not resolve_member(member, clock.now_utc(), policy).can_access:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden: Active membership required",
        )
    return member

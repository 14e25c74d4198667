"""
Unit tests for Membership component.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, date, datetime, timedelta, timezone
from uuid import UUID

import pytest

from src.domain.entities import Member, MemberStatus

from ..component import (
    can_access_member_area,
    level_display,
    parse_trial_config_item,
    resolve_member,
    resolve_membership_status,
    run,
    run_expire_members,
    select_expired_members,
    trial_end_date,
)
from ..models import ResolveStatusInput, TrialConfig, TrialPolicy

NOW = datetime(2026, 10, 18, 12, 0, 0, tzinfo=UTC)


# --- Test Fixtures ---


class FakeTimePort:
    """Fake time port for testing."""

    def __init__(self, fixed_time: datetime = NOW):
        self._now = fixed_time

    def now_utc(self) -> datetime:
        return self._now


class FakeMemberRepo:
    """In-memory member repo for testing."""

    def __init__(self, members: list[Member] | None = None):
        self.members: dict[UUID, Member] = {m.id: m for m in members or []}

    def get_by_id(self, member_id: UUID) -> Member | None:
        return self.members.get(member_id)

    def list_approved_with_expiry_before(self, cutoff: datetime) -> list[Member]:
        return [
            m
            for m in self.members.values()
            if m.status == "approved"
            and m.membership_expires_at is not None
            and m.membership_expires_at < cutoff
        ]

    def set_status(self, member_ids: Sequence[UUID], status: MemberStatus) -> int:
        for member_id in member_ids:
            self.members[member_id] = self.members[member_id].model_copy(
                update={"status": status}
            )
        return len(member_ids)

    def save(self, member: Member) -> Member:
        self.members[member.id] = member
        return member


def snapshot(**overrides: object) -> ResolveStatusInput:
    values: dict[str, object] = {
        "membership_level": "Full",
        "created_at": datetime(2026, 10, 1, tzinfo=UTC),
        "membership_expires_at": None,
        "has_stripe_subscription": False,
        "status": "approved",
    }
    values.update(overrides)
    return ResolveStatusInput(**values)  # type: ignore[arg-type]


# --- Trial policy ---


class TestTrialEndDate:
    """Tests for trial_end_date."""

    def test_full_trial_ends_next_sept_first(self) -> None:
        created = datetime(2026, 3, 15, tzinfo=UTC)
        assert trial_end_date("Full", created) == date(2026, 9, 1)

    def test_associate_signup_after_cutoff_rolls_to_next_year(self) -> None:
        created = datetime(2026, 10, 1, tzinfo=UTC)
        assert trial_end_date("Associate", created) == date(2027, 9, 1)

    def test_signup_on_cutoff_day_rolls_to_next_year(self) -> None:
        created = datetime(2026, 9, 1, 8, 0, tzinfo=UTC)
        assert trial_end_date("Full", created) == date(2027, 9, 1)

    def test_student_trial_is_twelve_months(self) -> None:
        created = datetime(2025, 11, 20, 15, 0, tzinfo=UTC)
        assert trial_end_date("Student", created) == date(2026, 11, 20)

    def test_student_leap_day_signup_clamps(self) -> None:
        created = datetime(2024, 2, 29, tzinfo=UTC)
        assert trial_end_date("Student", created) == date(2025, 2, 28)

    @pytest.mark.parametrize("level", ["Corporate", "Honorary"])
    def test_levels_without_trial(self, level: str) -> None:
        assert trial_end_date(level, NOW) is None  # type: ignore[arg-type]

    def test_missing_inputs(self) -> None:
        assert trial_end_date(None, NOW) is None
        assert trial_end_date("Student", None) is None

    def test_configured_policy_overrides_defaults(self) -> None:
        policy = TrialPolicy(
            levels={"Corporate": TrialConfig(type="months", months=3)},
            cutoff_month=6,
            cutoff_day=15,
        )
        created = datetime(2026, 1, 10, tzinfo=UTC)
        assert trial_end_date("Corporate", created, policy) == date(2026, 4, 10)
        # Level absent from the policy has no trial
        assert trial_end_date("Full", created, policy) is None

    def test_out_of_range_months_has_no_trial_end(self) -> None:
        policy = TrialPolicy(levels={"Student": TrialConfig(type="months", months=200000)})
        created = datetime(2026, 1, 10, tzinfo=UTC)
        assert trial_end_date("Student", created, policy) is None

        status = resolve_membership_status(
            snapshot(membership_level="Student", created_at=created), NOW, policy
        )
        assert status.is_on_trial is False
        assert status.effective_expiry_date is None

    def test_configured_cutoff_date(self) -> None:
        policy = TrialPolicy(
            levels={"Full": TrialConfig(type="sept1")}, cutoff_month=6, cutoff_day=15
        )
        created = datetime(2026, 1, 10, tzinfo=UTC)
        assert trial_end_date("Full", created, policy) == date(2026, 6, 15)


class TestParseTrialConfigItem:
    """Tests for parse_trial_config_item."""

    def test_sept1(self) -> None:
        assert parse_trial_config_item({"type": "sept1"}) == TrialConfig(type="sept1")

    def test_months_with_value(self) -> None:
        assert parse_trial_config_item({"type": "months", "months": 6}) == TrialConfig(
            type="months", months=6
        )

    @pytest.mark.parametrize("months", [None, 0, -3, "6", True, 121])
    def test_months_invalid_value_defaults_to_twelve(self, months: object) -> None:
        parsed = parse_trial_config_item({"type": "months", "months": months})
        assert parsed == TrialConfig(type="months", months=12)

    @pytest.mark.parametrize("item", [None, "sept1", {"type": "weekly"}, {}])
    def test_invalid_items(self, item: object) -> None:
        assert parse_trial_config_item(item) is None


# --- Status resolution ---


class TestResolveStudentBoundary:
    """Student trial boundary around 365 days."""

    def test_created_364_days_ago_still_on_trial(self) -> None:
        status = resolve_membership_status(
            snapshot(membership_level="Student", created_at=NOW - timedelta(days=364)),
            NOW,
        )
        assert status.is_on_trial is True
        assert status.is_expired is False
        assert status.can_access is True

    def test_created_366_days_ago_trial_ended(self) -> None:
        status = resolve_membership_status(
            snapshot(membership_level="Student", created_at=NOW - timedelta(days=366)),
            NOW,
        )
        assert status.is_on_trial is False
        assert status.is_expired is True
        assert status.effective_expiry_date == date(2026, 10, 17)
        assert status.can_access is False


class TestResolveMembershipStatus:
    """Tests for resolve_membership_status."""

    def test_full_member_in_trial_window(self) -> None:
        status = resolve_membership_status(snapshot(), NOW)
        assert status.is_on_trial is True
        assert status.is_expired is False
        assert status.trial_end_date == date(2027, 9, 1)
        assert status.effective_expiry_date == date(2027, 9, 1)
        assert status.level_display == "Full (trial)"

    def test_full_member_trial_over(self) -> None:
        status = resolve_membership_status(
            snapshot(created_at=datetime(2026, 3, 1, tzinfo=UTC)), NOW
        )
        assert status.is_on_trial is False
        assert status.is_expired is True

    def test_explicit_expiry_and_subscription_override_trial(self) -> None:
        status = resolve_membership_status(
            snapshot(
                membership_expires_at=datetime(2027, 10, 1, tzinfo=UTC),
                has_stripe_subscription=True,
            ),
            NOW,
        )
        assert status.is_on_trial is False
        assert status.is_expired is False
        assert status.effective_expiry_date == date(2027, 10, 1)
        assert status.level_display == "Full"

    def test_explicit_expiry_in_past_wins_over_future_trial(self) -> None:
        status = resolve_membership_status(
            snapshot(membership_expires_at=datetime(2026, 10, 10, tzinfo=UTC)), NOW
        )
        assert status.is_on_trial is False
        assert status.is_expired is True
        assert status.effective_expiry_date == date(2026, 10, 10)

    def test_subscription_without_explicit_expiry_never_expires(self) -> None:
        status = resolve_membership_status(snapshot(has_stripe_subscription=True), NOW)
        assert status.is_on_trial is False
        assert status.is_expired is False
        assert status.effective_expiry_date is None

    def test_level_without_trial_never_expires(self) -> None:
        status = resolve_membership_status(snapshot(membership_level="Honorary"), NOW)
        assert status.is_on_trial is False
        assert status.is_expired is False
        assert status.effective_expiry_date is None
        assert status.can_access is True

    def test_rejected_never_on_trial(self) -> None:
        status = resolve_membership_status(snapshot(status="rejected"), NOW)
        assert status.is_on_trial is False
        assert status.can_access is False

    def test_pending_keeps_informational_trial(self) -> None:
        status = resolve_membership_status(snapshot(status="pending"), NOW)
        assert status.is_on_trial is True
        assert status.can_access is False

    def test_stored_expired_is_authoritative(self) -> None:
        status = resolve_membership_status(
            snapshot(
                status="expired",
                membership_expires_at=datetime(2027, 1, 1, tzinfo=UTC),
            ),
            NOW,
        )
        assert status.is_expired is True
        assert status.is_on_trial is False
        assert status.can_access is False

    def test_admin_always_has_access(self) -> None:
        status = resolve_membership_status(snapshot(status="pending", is_admin=True), NOW)
        assert status.can_access is True

    def test_all_optional_fields_missing(self) -> None:
        status = resolve_membership_status(
            ResolveStatusInput(membership_level=None, created_at=None), NOW
        )
        assert status.is_on_trial is False
        assert status.is_expired is False
        assert status.effective_expiry_date is None
        assert status.level_display == ""

    def test_expiry_later_today_keeps_access(self) -> None:
        expires = NOW + timedelta(hours=8)
        status = resolve_membership_status(
            snapshot(membership_level="Corporate", membership_expires_at=expires), NOW
        )
        assert status.is_expired is False
        assert status.can_access is True
        member = Member(
            email="corp@example.com", status="approved", membership_expires_at=expires
        )
        assert select_expired_members([member], NOW) == []

    def test_expiry_earlier_today_keeps_access(self) -> None:
        status = resolve_membership_status(
            snapshot(membership_expires_at=datetime(2026, 10, 18, 1, 0, tzinfo=UTC)), NOW
        )
        assert status.is_expired is False
        assert status.can_access is True

    def test_expiry_yesterday_is_expired(self) -> None:
        status = resolve_membership_status(
            snapshot(membership_expires_at=datetime(2026, 10, 17, 23, 0, tzinfo=UTC)), NOW
        )
        assert status.is_expired is True
        assert status.can_access is False

    def test_idempotent(self) -> None:
        inp = snapshot(membership_level="Student", created_at=NOW - timedelta(days=100))
        assert resolve_membership_status(inp, NOW) == resolve_membership_status(inp, NOW)

    def test_timezone_stable(self) -> None:
        """Same instants expressed in different offsets resolve identically."""
        toronto = timezone(timedelta(hours=-5))
        created_utc = datetime(2025, 10, 19, 4, 30, tzinfo=UTC)
        created_local = created_utc.astimezone(toronto)
        now_local = NOW.astimezone(toronto)

        a = resolve_membership_status(
            snapshot(membership_level="Student", created_at=created_utc), NOW
        )
        b = resolve_membership_status(
            snapshot(membership_level="Student", created_at=created_local), now_local
        )
        assert a == b
        assert a.trial_end_date == date(2026, 10, 19)


class TestLevelDisplay:
    def test_trial_suffix(self) -> None:
        assert level_display("Student", True) == "Student (trial)"

    def test_plain(self) -> None:
        assert level_display("Corporate", False) == "Corporate"


class TestMemberHelpers:
    """Tests for entity-level helpers."""

    def test_resolve_member_uses_subscription_flag(self) -> None:
        member = Member(
            email="a@example.com",
            status="approved",
            membership_level="Full",
            created_at=datetime(2026, 10, 1, tzinfo=UTC),
            stripe_subscription_id="sub_123",
        )
        assert resolve_member(member, NOW).is_on_trial is False

    def test_can_access_member_area(self) -> None:
        approved = Member(email="a@example.com", status="approved", membership_level="Honorary")
        pending = Member(email="b@example.com", status="pending", membership_level="Honorary")
        assert can_access_member_area(approved, NOW) is True
        assert can_access_member_area(pending, NOW) is False

    def test_run_uses_time_port(self) -> None:
        inp = snapshot(membership_level="Student", created_at=NOW - timedelta(days=364))
        assert run(inp, time_port=FakeTimePort()).is_on_trial is True


# --- Expiry sweep ---


class TestExpireMembers:
    """Tests for the expiry sweep."""

    def _members(self) -> list[Member]:
        return [
            Member(
                email="lapsed@example.com",
                full_name="Lapsed",
                status="approved",
                membership_expires_at=NOW - timedelta(days=1),
            ),
            Member(
                email="current@example.com",
                status="approved",
                membership_expires_at=NOW + timedelta(days=30),
            ),
            Member(
                email="trial@example.com",
                status="approved",
                membership_expires_at=None,
            ),
            Member(
                email="admin@example.com",
                role="admin",
                status="approved",
                membership_expires_at=NOW - timedelta(days=10),
            ),
            Member(
                email="rejected@example.com",
                status="rejected",
                membership_expires_at=NOW - timedelta(days=10),
            ),
        ]

    def test_select_expired_members(self) -> None:
        selected = select_expired_members(self._members(), NOW)
        assert [m.email for m in selected] == ["lapsed@example.com"]

    def test_run_expire_members_updates_repo(self) -> None:
        members = self._members()
        repo = FakeMemberRepo(members)

        out = run_expire_members(repo=repo, now=NOW)

        assert out.members_checked == 1
        assert out.members_expired == 1
        assert out.expired_members[0].email == "lapsed@example.com"
        assert out.expired_members[0].name == "Lapsed"
        assert repo.members[members[0].id].status == "expired"
        assert repo.members[members[3].id].status == "approved"
        assert out.message == "Successfully expired 1 member(s)"

    def test_run_expire_members_nothing_to_do(self) -> None:
        repo = FakeMemberRepo([])
        out = run_expire_members(repo=repo, time_port=FakeTimePort())
        assert out.members_checked == 0
        assert out.members_expired == 0
        assert out.message == "No members found with expired memberships"

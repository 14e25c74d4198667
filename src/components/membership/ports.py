"""
Membership component port definitions.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Protocol
from uuid import UUID

from src.domain.entities import Member, MemberStatus


class MemberRepoPort(Protocol):
    """Repository interface for member profiles."""

    def get_by_id(self, member_id: UUID) -> Member | None:
        """Get a member by id."""
        ...

    def list_approved_with_expiry_before(self, cutoff: datetime) -> list[Member]:
        """Approved members whose membership_expires_at is before cutoff."""
        ...

    def set_status(self, member_ids: Sequence[UUID], status: MemberStatus) -> int:
        """Set status for the given members, returning rows updated."""
        ...

    def save(self, member: Member) -> Member:
        """Insert or update a member."""
        ...


class TimePort(Protocol):
    """Port for time operations."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...

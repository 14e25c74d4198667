"""
Settings component port definitions.
"""

from __future__ import annotations

from typing import Protocol


class SettingsRepoPort(Protocol):
    """Key/value repository for admin-configurable settings."""

    def get_value(self, key: str) -> str | None:
        """Get a raw setting value, or None if not configured."""
        ...

    def set_value(self, key: str, value: str) -> None:
        """Insert or update a setting (upsert on key)."""
        ...

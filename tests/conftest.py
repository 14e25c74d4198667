from collections.abc import Callable, Iterator
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

from src.adapters.sqlite.migrator import SQLiteMigrator
from src.adapters.sqlite.repos import SQLiteMemberRepo
from src.adapters.subscription_stub import SubscriptionStubAdapter
from src.api.auth_utils import create_access_token
from src.api.deps import (
    Settings,
    get_clock,
    get_rules,
    get_settings,
    get_subscription_provider,
)
from src.api.main import app
from src.domain.entities import Member
from src.rules.loader import load_rules
from src.rules.models import Rules

PROJECT_ROOT = Path(__file__).parent.parent
TEST_SECRET = "test-secret"
NOW = datetime(2026, 10, 18, 12, 0, 0, tzinfo=UTC)


class FixedClock:
    """Clock pinned to a fixed instant."""

    def __init__(self, now: datetime = NOW) -> None:
        self._now = now

    def now_utc(self) -> datetime:
        return self._now

    def set_now(self, now: datetime) -> None:
        self._now = now


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    """Temporary SQLite database with all migrations applied."""
    path = str(tmp_path / "tipa.db")
    SQLiteMigrator(path, str(PROJECT_ROOT / "migrations")).run_migrations()
    return path


@pytest.fixture
def rules() -> Rules:
    """Real rules from the project root."""
    return load_rules(PROJECT_ROOT / "rules.yaml")


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def provider() -> SubscriptionStubAdapter:
    return SubscriptionStubAdapter()


@pytest.fixture
def member_repo(db_path: str) -> SQLiteMemberRepo:
    return SQLiteMemberRepo(db_path)


@pytest.fixture
def make_member(member_repo: SQLiteMemberRepo) -> Callable[..., Member]:
    """Persist a member; keyword arguments override the defaults."""
    counter = iter(range(1, 10_000))

    def _make(**kwargs: Any) -> Member:
        fields: dict[str, Any] = {
            "email": f"member{next(counter)}@example.com",
            "full_name": "Test Member",
            "status": "approved",
            "created_at": datetime(2026, 1, 10, tzinfo=UTC),
            "updated_at": datetime(2026, 1, 10, tzinfo=UTC),
        }
        fields.update(kwargs)
        return member_repo.save(Member(**fields))

    return _make


@pytest.fixture
def auth_headers() -> Callable[[Member], dict[str, str]]:
    """Bearer header for a member signed with the test secret."""

    def _headers(member: Member) -> dict[str, str]:
        token = create_access_token({"sub": str(member.id)}, secret_key=TEST_SECRET)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def client(
    db_path: str,
    tmp_path: Path,
    rules: Rules,
    clock: FixedClock,
    provider: SubscriptionStubAdapter,
) -> Iterator[TestClient]:
    """API client backed by the temporary database and a fixed clock."""

    def _settings() -> Settings:
        s = Settings()
        s.data_dir = tmp_path
        s.db_path = db_path
        s.rules_path = PROJECT_ROOT / "rules.yaml"
        s.migrations_dir = PROJECT_ROOT / "migrations"
        s.secret_key = TEST_SECRET
        return s

    app.dependency_overrides[get_settings] = _settings
    app.dependency_overrides[get_rules] = lambda: rules
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_subscription_provider] = lambda: provider
    yield TestClient(app)
    app.dependency_overrides.clear()


"""
Tests for the admin membership fee and trial config API.
"""

from __future__ import annotations

import pytest

FULL_TRIAL_CONFIG = {
    "Full": {"type": "sept1"},
    "Student": {"type": "months", "months": 6},
    "Associate": {"type": "sept1"},
    "Corporate": {"type": "none"},
    "Honorary": {"type": "none"},
}


@pytest.fixture
def admin_headers(make_member, auth_headers):
    return auth_headers(make_member(role="admin"))


@pytest.fixture
def member_headers(make_member, auth_headers):
    return auth_headers(make_member())


class TestAdminGuard:
    @pytest.mark.parametrize(
        ("method", "path"),
        [
            ("get", "/api/admin/settings/membership-fees"),
            ("patch", "/api/admin/settings/membership-fees"),
            ("get", "/api/admin/settings/trial-config"),
            ("patch", "/api/admin/settings/trial-config"),
            ("post", "/api/admin/record-payment"),
        ],
    )
    def test_member_forbidden(self, client, member_headers, method, path) -> None:
        kwargs = {"json": {}} if method != "get" else {}
        response = getattr(client, method)(path, headers=member_headers, **kwargs)
        assert response.status_code == 403

    def test_anonymous_unauthorized(self, client) -> None:
        response = client.get("/api/admin/settings/membership-fees")
        assert response.status_code == 401


class TestMembershipFees:
    def test_defaults(self, client, admin_headers) -> None:
        data = client.get("/api/admin/settings/membership-fees", headers=admin_headers).json()
        assert data["currency"] == "CAD"
        assert data["fees"] == {
            "Full": 45.0,
            "Student": 25.0,
            "Associate": 25.0,
            "Corporate": 125.0,
            "Honorary": 0.0,
        }

    def test_partial_update(self, client, admin_headers) -> None:
        response = client.patch(
            "/api/admin/settings/membership-fees",
            json={"Full": 50, "Student": "27.5"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["fees"]["Full"] == 50.0

        data = client.get("/api/admin/settings/membership-fees", headers=admin_headers).json()
        assert data["fees"]["Student"] == 27.5
        assert data["fees"]["Corporate"] == 125.0

    def test_invalid_fee_rejected(self, client, admin_headers) -> None:
        response = client.patch(
            "/api/admin/settings/membership-fees",
            json={"Full": -5, "Platinum": 10},
            headers=admin_headers,
        )
        assert response.status_code == 400
        errors = response.json()["detail"]["errors"]
        assert {e["code"] for e in errors} == {"invalid_fee", "unknown_level"}

        data = client.get("/api/admin/settings/membership-fees", headers=admin_headers).json()
        assert data["fees"]["Full"] == 45.0

    def test_non_object_body_rejected(self, client, admin_headers) -> None:
        response = client.patch(
            "/api/admin/settings/membership-fees", json=[1, 2], headers=admin_headers
        )
        assert response.status_code == 400


class TestTrialConfig:
    def test_defaults(self, client, admin_headers) -> None:
        data = client.get("/api/admin/settings/trial-config", headers=admin_headers).json()
        assert data["trial"]["Full"] == {"type": "sept1", "months": None}
        assert data["trial"]["Student"] == {"type": "months", "months": 12}
        assert data["trial"]["Corporate"]["type"] == "none"

    def test_replace(self, client, admin_headers) -> None:
        response = client.patch(
            "/api/admin/settings/trial-config", json=FULL_TRIAL_CONFIG, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["trial"]["Student"] == {"type": "months", "months": 6}

    def test_incomplete_config_rejected(self, client, admin_headers) -> None:
        body = {k: v for k, v in FULL_TRIAL_CONFIG.items() if k != "Corporate"}
        response = client.patch(
            "/api/admin/settings/trial-config", json=body, headers=admin_headers
        )
        assert response.status_code == 400
        assert [e["field"] for e in response.json()["detail"]["errors"]] == ["Corporate"]

    def test_invalid_months_defaults_to_twelve(self, client, admin_headers) -> None:
        body = dict(FULL_TRIAL_CONFIG, Student={"type": "months", "months": 0})
        response = client.patch(
            "/api/admin/settings/trial-config", json=body, headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["trial"]["Student"]["months"] == 12

    def test_months_over_limit_rejected(
        self, client, admin_headers, make_member, auth_headers
    ) -> None:
        body = dict(FULL_TRIAL_CONFIG, Student={"type": "months", "months": 200000})
        response = client.patch(
            "/api/admin/settings/trial-config", json=body, headers=admin_headers
        )
        assert response.status_code == 400
        errors = response.json()["detail"]["errors"]
        assert [(e["field"], e["code"]) for e in errors] == [("Student", "invalid_months")]

        student = make_member(membership_level="Student")
        status = client.get("/api/membership/status", headers=auth_headers(student))
        assert status.status_code == 200
        assert status.json()["trial_end_date"] == "2027-01-10"

"""Integration tests for ``/api/v1/blood-centers``."""

from __future__ import annotations

import pytest

from tests.factories.blood_center import BloodCenterFactory
from tests.helpers.assertions import assert_pagination, assert_problem
from tests.helpers.http import build_url

VALID_CENTER = {
    "name": "Centro de Transfusion Sur",
    "address": "Avenida del Sol 12",
    "phone": "+34911111111",
    "latitude": 40.38,
    "longitude": -3.72,
    "operating_hours": {"monday": {"open": "08:00", "close": "20:00"}},
}


class TestPublicReads:
    def test_list_without_token(self, client, session):
        BloodCenterFactory.create_batch(2)
        BloodCenterFactory(archived=True)
        session.commit()

        resp = client.get(build_url("/blood-centers"))

        assert resp.status_code == 200
        body = resp.get_json()
        assert_pagination(body)
        assert body["pagination"]["total"] == 3

    @pytest.mark.parametrize("flag, expected", [("true", [True]), ("false", [False, False])])
    def test_archived_filter(self, client, session, flag, expected):
        BloodCenterFactory.create_batch(2)
        BloodCenterFactory(archived=True)
        session.commit()

        resp = client.get(build_url("/blood-centers", archived=flag))

        assert [c["archived"] for c in resp.get_json()["items"]] == expected

    def test_get_one(self, client, center):
        resp = client.get(build_url(f"/blood-centers/{center.id}"))
        assert resp.get_json()["data"]["name"] == center.name

    def test_get_missing(self, client):
        body = assert_problem(client.get(build_url("/blood-centers/4040")), 404, "not_found")
        assert body["error"] == "Blood center not found"


class TestAdminWrites:
    def test_create(self, client, admin, auth_headers):
        resp = client.post(build_url("/blood-centers"), json=VALID_CENTER, headers=auth_headers(admin))

        assert resp.status_code == 201
        data = resp.get_json()["data"]
        assert data["archived"] is False
        assert data["current_donor_count"] == 0
        assert data["operating_hours"]["monday"]["open"] == "08:00"

    @pytest.mark.parametrize(
        "override",
        [
            {"latitude": 91},
            {"name": ""},
            {"operating_hours": {"funday": {"open": "08:00"}}},
            {"archived": True},
        ],
    )
    def test_create_validation(self, client, admin, auth_headers, override):
        payload = {**VALID_CENTER, **override}
        resp = client.post(build_url("/blood-centers"), json=payload, headers=auth_headers(admin))
        assert_problem(resp, 422, "validation_error")

    def test_create_requires_admin(self, client, user, auth_headers):
        resp = client.post(build_url("/blood-centers"), json=VALID_CENTER, headers=auth_headers(user))
        assert_problem(resp, 403, "forbidden")

    def test_create_requires_token(self, client):
        assert_problem(client.post(build_url("/blood-centers"), json=VALID_CENTER), 401, "token_missing")

    def test_update(self, client, admin, center, auth_headers):
        resp = client.put(
            build_url(f"/blood-centers/{center.id}"),
            json={"current_donor_count": 12, "phone": "+34900000000"},
            headers=auth_headers(admin),
        )
        data = resp.get_json()["data"]
        assert data["current_donor_count"] == 12
        assert data["phone"] == "+34900000000"

    def test_empty_update(self, client, admin, center, auth_headers):
        resp = client.put(build_url(f"/blood-centers/{center.id}"), json={}, headers=auth_headers(admin))
        assert_problem(resp, 400, "invalid_input")

    def test_archive_toggle_blocks_new_donations(self, client, admin, user, center, auth_headers):
        url = build_url(f"/blood-centers/{center.id}/archive")

        resp = client.patch(url, headers=auth_headers(admin))
        assert resp.get_json()["message"] == "Blood center archived successfully"
        assert resp.get_json()["data"]["archived"] is True

        donation = client.post(
            build_url("/donations"),
            json={"center_id": center.id, "scheduled_for": "2099-01-01T09:00:00+00:00"},
            headers=auth_headers(user),
        )
        assert_problem(donation, 403, "business_rule_violation")

        resp = client.patch(url, headers=auth_headers(admin))
        assert resp.get_json()["message"] == "Blood center unarchived successfully"

import pytest
from sqlalchemy.exc import OperationalError

from kolmarket.services.contact_request_service import (
    ContactRequestKey, ContactRequestService, get_contact_request_service
)
from kolmarket.main import app

INTAKE_URL = "/api/discover/request-contact"
LIST_URL = "/api/discover/contact-requests"


def withdraw_url(request_id: str) -> str:
    return f"/api/discover/contact-requests/{request_id}/withdraw"


def intake_body(**overrides):
    body = {
        "userId": "biz-1",
        "campaignId": "camp-1",
        "campaignTitle": "Protein Bar Launch",
        "kol": {"id": "kol-1", "handle": "@miamoves", "display_name": "Mia Moves"},
    }
    body.update(overrides)
    return body


class FailingService(ContactRequestService):
    """Every store call fails like an unreachable database."""

    def __init__(self, exc=None):
        self.exc = exc or OperationalError("SELECT 1", {}, Exception("connection refused"))

    def upsert(self, record):
        raise self.exc

    def list_by_filter(self, requester_id=None, campaign_id=None):
        raise self.exc

    def update_status_to_withdrawn(self, key, withdrawn_at=None):
        raise self.exc


# ============================================================
# INTAKE
# ============================================================

def test_intake_records_request(client):
    resp = client.post(INTAKE_URL, json=intake_body())

    assert resp.status_code == 200
    assert resp.json() == {
        "success": True,
        "message": "Request received. We will contact this KOL. Status: in progress.",
    }

    stored = ContactRequestService().get(ContactRequestKey("camp-1", "kol-1"))
    assert stored["status"] == "in_progress"
    assert stored["requester_id"] == "biz-1"
    assert stored["campaign_title"] == "Protein Bar Launch"
    assert stored["kol_handle"] == "@miamoves"
    assert stored["kol_display_name"] == "Mia Moves"
    assert stored["withdrawn_at"] is None


@pytest.mark.parametrize("body", [
    intake_body(userId=None),
    intake_body(campaignId=None),
    intake_body(campaignId=""),
    intake_body(kol=None),
    intake_body(kol={"handle": "@nokolid"}),
])
def test_intake_missing_required_fields(client, body):
    resp = client.post(INTAKE_URL, json=body)

    assert resp.status_code == 400
    assert resp.json() == {"error": "Missing required fields"}


def test_intake_rejects_key_delimiter_in_campaign_id(client):
    resp = client.post(INTAKE_URL, json=intake_body(campaignId="camp:1"))

    assert resp.status_code == 400
    assert resp.json() == {"error": "campaignId must not contain ':'"}


def test_intake_accepts_key_delimiter_in_kol_id(client, fetch_one):
    resp = client.post(INTAKE_URL, json=intake_body(kol={"id": "yt:UC123", "handle": "@mia"}))

    assert resp.status_code == 200
    [record] = client.get(LIST_URL, params={"campaignId": "camp-1"}).json()["data"]
    assert record["id"] == "camp-1:yt:UC123"

    assert client.post(withdraw_url(record["id"])).status_code == 200
    stored = fetch_one("SELECT status FROM kol_contact_requests WHERE kol_id = :kol_id", kol_id="yt:UC123")
    assert stored["status"] == "withdrawn"


def test_intake_accepts_numeric_ids(client):
    resp = client.post(INTAKE_URL, json=intake_body(userId=7, campaignId=42, kol={"id": 9}))

    assert resp.status_code == 200
    data = client.get(LIST_URL, params={"campaignId": "42"}).json()["data"]
    assert [r["id"] for r in data] == ["42:9"]


def test_intake_succeeds_when_store_unreachable(client):
    app.dependency_overrides[get_contact_request_service] = lambda: FailingService()

    resp = client.post(INTAKE_URL, json=intake_body())

    assert resp.status_code == 200
    assert resp.json()["success"] is True


def test_intake_succeeds_when_table_missing(client, drop_table):
    drop_table("kol_contact_requests")

    resp = client.post(INTAKE_URL, json=intake_body())

    assert resp.status_code == 200
    assert resp.json()["success"] is True


def test_intake_storage_error_surfaces_without_degradation(client, drop_table, no_degrade):
    drop_table("kol_contact_requests")

    resp = client.post(INTAKE_URL, json=intake_body())

    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to record request"}


def test_intake_unexpected_error_is_500_without_details(client):
    app.dependency_overrides[get_contact_request_service] = lambda: FailingService(RuntimeError("boom"))

    resp = client.post(INTAKE_URL, json=intake_body())

    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to record request"}


def test_intake_malformed_body_is_client_error(client):
    resp = client.post(INTAKE_URL, content="{not json", headers={"Content-Type": "application/json"})

    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid request body"}


# ============================================================
# LISTING
# ============================================================

def test_list_excludes_withdrawn(client):
    client.post(INTAKE_URL, json=intake_body(kol={"id": "kol-a"}))
    client.post(INTAKE_URL, json=intake_body(kol={"id": "kol-b"}))
    client.post(withdraw_url("camp-1:kol-b"))

    resp = client.get(LIST_URL, params={"userId": "biz-1", "campaignId": "camp-1"})

    assert resp.status_code == 200
    assert [r["id"] for r in resp.json()["data"]] == ["camp-1:kol-a"]


def test_list_newest_first():
    service = ContactRequestService()
    service.upsert({"campaign_id": "c1", "kol_id": "old", "requester_id": "biz-1",
                    "requested_at": "2026-01-01T09:00:00+00:00"})
    service.upsert({"campaign_id": "c1", "kol_id": "new", "requester_id": "biz-1",
                    "requested_at": "2026-01-02T09:00:00+00:00"})

    rows = service.list_by_filter(requester_id="biz-1")

    assert [r["kol_id"] for r in rows] == ["new", "old"]


def test_list_endpoint_orders_and_serializes(client):
    service = ContactRequestService()
    service.upsert({"campaign_id": "c1", "kol_id": "k1", "requester_id": "biz-1",
                    "requested_at": "2026-01-01T09:00:00+00:00"})
    service.upsert({"campaign_id": "c2", "kol_id": "k1", "requester_id": "biz-1",
                    "requested_at": "2026-01-03T09:00:00+00:00"})

    data = client.get(LIST_URL).json()["data"]

    assert [r["id"] for r in data] == ["c2:k1", "c1:k1"]
    assert data[0]["requested_at"].startswith("2026-01-03T09:00:00")
    assert data[0]["status"] == "in_progress"


def test_list_filters_are_conjunctive(client):
    client.post(INTAKE_URL, json=intake_body(userId="biz-1", campaignId="c1", kol={"id": "kol-a"}))
    client.post(INTAKE_URL, json=intake_body(userId="biz-1", campaignId="c2", kol={"id": "kol-a"}))
    client.post(INTAKE_URL, json=intake_body(userId="biz-2", campaignId="c1", kol={"id": "kol-b"}))

    by_user = client.get(LIST_URL, params={"userId": "biz-1"}).json()["data"]
    by_both = client.get(LIST_URL, params={"userId": "biz-1", "campaignId": "c1"}).json()["data"]
    unfiltered = client.get(LIST_URL).json()["data"]

    assert sorted(r["campaign_id"] for r in by_user) == ["c1", "c2"]
    assert [r["id"] for r in by_both] == ["c1:kol-a"]
    assert len(unfiltered) == 3


def test_reintake_by_another_requester_overwrites_pair(client):
    client.post(INTAKE_URL, json=intake_body(userId="biz-1"))
    client.post(INTAKE_URL, json=intake_body(userId="biz-2"))

    data = client.get(LIST_URL).json()["data"]

    assert [(r["id"], r["requester_id"]) for r in data] == [("camp-1:kol-1", "biz-2")]


def test_list_degrades_to_empty_on_store_failure(client, drop_table):
    drop_table("kol_contact_requests")

    resp = client.get(LIST_URL, params={"userId": "biz-1"})

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "data": []}


def test_list_storage_error_surfaces_without_degradation(client, no_degrade):
    app.dependency_overrides[get_contact_request_service] = lambda: FailingService()

    resp = client.get(LIST_URL)

    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to fetch contact requests"}


# ============================================================
# WITHDRAWAL / LIFECYCLE
# ============================================================

def test_withdraw_marks_request(client):
    client.post(INTAKE_URL, json=intake_body())

    resp = client.post(withdraw_url("camp-1:kol-1"))

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "message": "Contact request withdrawn."}
    stored = ContactRequestService().get(ContactRequestKey("camp-1", "kol-1"))
    assert stored["status"] == "withdrawn"
    assert stored["withdrawn_at"] is not None


def test_withdraw_is_idempotent():
    service = ContactRequestService()
    key = ContactRequestKey("camp-1", "kol-1")
    service.upsert({"campaign_id": "camp-1", "kol_id": "kol-1", "requester_id": "biz-1"})

    assert service.update_status_to_withdrawn(key, withdrawn_at="2026-02-01T00:00:00+00:00") is True
    assert service.update_status_to_withdrawn(key, withdrawn_at="2026-03-01T00:00:00+00:00") is False

    stored = service.get(key)
    assert stored["status"] == "withdrawn"
    assert stored["withdrawn_at"].startswith("2026-02-01")


@pytest.mark.parametrize("request_id", ["camp-x:kol-x", "no-delimiter", "camp-x:"])
def test_withdraw_unknown_id_still_succeeds(client, request_id):
    resp = client.post(withdraw_url(request_id))

    assert resp.status_code == 200
    assert resp.json()["success"] is True


@pytest.mark.parametrize("request_id", ["camp-1:ig/mia", "camp-1:ig%2Fmia"])
def test_withdraw_kol_id_with_slash(client, fetch_one, request_id):
    client.post(INTAKE_URL, json=intake_body(kol={"id": "ig/mia"}))

    resp = client.post(withdraw_url(request_id))

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "message": "Contact request withdrawn."}
    stored = fetch_one("SELECT status FROM kol_contact_requests WHERE kol_id = :kol_id", kol_id="ig/mia")
    assert stored["status"] == "withdrawn"


def test_withdraw_blank_id_is_rejected(client):
    resp = client.post(withdraw_url("%20"))

    assert resp.status_code == 400
    assert resp.json() == {"error": "Missing id"}


def test_withdraw_succeeds_when_store_unreachable(client):
    app.dependency_overrides[get_contact_request_service] = lambda: FailingService()

    resp = client.post(withdraw_url("camp-1:kol-1"))

    assert resp.status_code == 200
    assert resp.json()["success"] is True


def test_reintake_after_withdrawal_reopens_request(client):
    client.post(INTAKE_URL, json=intake_body())
    client.post(withdraw_url("camp-1:kol-1"))
    assert client.get(LIST_URL).json()["data"] == []

    resp = client.post(INTAKE_URL, json=intake_body(campaignTitle="Protein Bar Launch v2"))
    assert resp.status_code == 200

    data = client.get(LIST_URL, params={"campaignId": "camp-1"}).json()["data"]
    assert len(data) == 1
    assert data[0]["status"] == "in_progress"
    assert data[0]["withdrawn_at"] is None
    assert data[0]["campaign_title"] == "Protein Bar Launch v2"


# ============================================================
# KEY
# ============================================================

def test_key_round_trips_through_string_form():
    key = ContactRequestKey("camp-1", "kol-1")

    assert key.id == "camp-1:kol-1"
    assert ContactRequestKey.parse(key.id) == key


@pytest.mark.parametrize("value", ["", "camp-1", ":kol-1", "camp-1:"])
def test_key_parse_rejects_incomplete_ids(value):
    assert ContactRequestKey.parse(value) is None

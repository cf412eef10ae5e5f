import pytest

from kolmarket.api.routes import campaign_routes

CAMPAIGNS_URL = "/api/campaigns"


@pytest.fixture
def business(insert_row):
    return insert_row("users", id="biz-1", email="brand@example.com", role="business")


@pytest.fixture
def kol(insert_row):
    return insert_row("users", id="kol-1", email="mia@example.com", role="kol")


@pytest.fixture
def campaign(insert_row, business):
    return insert_row(
        "campaigns", id="camp-1", business_id="biz-1", title="Protein Bar Launch",
        description="Taste tests", budget=5000, requirements='["1 video"]', status="active",
        created_at="2026-01-01T00:00:00+00:00", updated_at="2026-01-01T00:00:00+00:00"
    )


def create(client, **overrides):
    body = {
        "userId": "biz-1",
        "title": "Summer Hydration",
        "description": "Outdoor training clips",
        "budget": 2500,
        "requirements": ["outdoor content", "2 stories"],
    }
    body.update(overrides)
    return client.post(f"{CAMPAIGNS_URL}/create", json=body)


# ============================================================
# CREATE / GET / LIST
# ============================================================

def test_create_campaign(client):
    resp = create(client)

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    [created] = body["data"]
    assert created["business_id"] == "biz-1"
    assert created["title"] == "Summer Hydration"
    assert created["status"] == "active"
    assert created["budget"] == 2500
    assert created["requirements"] == ["outdoor content", "2 stories"]

    fetched = client.get(f"{CAMPAIGNS_URL}/{created['id']}").json()
    assert fetched["data"]["title"] == "Summer Hydration"


@pytest.mark.parametrize("missing", ["userId", "title"])
def test_create_campaign_requires_user_and_title(client, missing):
    resp = create(client, **{missing: None})

    assert resp.status_code == 400
    assert resp.json() == {"error": "User ID and title required"}


def test_get_unknown_campaign_is_404(client):
    resp = client.get(f"{CAMPAIGNS_URL}/nope")

    assert resp.status_code == 404
    assert resp.json() == {"error": "Campaign not found"}


def test_browse_lists_only_active_campaigns_newest_first(client, monkeypatch):
    stamps = iter(["2026-01-01T00:00:00.000000+00:00", "2026-01-02T00:00:00.000000+00:00"])
    monkeypatch.setattr(campaign_routes, "utc_now", lambda: next(stamps))
    first = create(client, title="First").json()["data"][0]
    second = create(client, title="Second").json()["data"][0]
    client.post(f"/api/withdrawals/campaign/{first['id']}", json={"userId": "biz-1"})

    resp = client.get(CAMPAIGNS_URL)

    assert resp.status_code == 200
    assert [c["id"] for c in resp.json()["data"]] == [second["id"]]


def test_business_sees_own_campaigns_except_cancelled(client, insert_row, campaign):
    insert_row("campaigns", id="camp-draft", business_id="biz-1", title="Draft", status="draft",
               created_at="2026-01-02T00:00:00+00:00")
    insert_row("campaigns", id="camp-gone", business_id="biz-1", title="Gone", status="cancelled",
               created_at="2026-01-03T00:00:00+00:00")
    insert_row("campaigns", id="camp-other", business_id="biz-2", title="Other", status="active",
               created_at="2026-01-04T00:00:00+00:00")

    own = client.get(CAMPAIGNS_URL, params={"role": "business", "userId": "biz-1"}).json()["data"]
    browse = client.get(CAMPAIGNS_URL).json()["data"]

    assert [c["id"] for c in own] == ["camp-draft", "camp-1"]
    assert [c["id"] for c in browse] == ["camp-other", "camp-1"]


def test_list_campaigns_storage_error_is_500(client, drop_table):
    drop_table("campaigns")

    resp = client.get(CAMPAIGNS_URL)

    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to fetch campaigns"}


# ============================================================
# APPLY
# ============================================================

def test_apply_to_campaign(client, campaign, kol, fetch_one):
    resp = client.post(f"{CAMPAIGNS_URL}/camp-1", json={"userId": "kol-1", "message": "Love it"})

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["campaign_id"] == "camp-1"
    assert data["kol_id"] == "kol-1"
    assert data["status"] == "applied"
    stored = fetch_one("SELECT status, message FROM campaign_kols WHERE id = :id", id=data["id"])
    assert stored == {"status": "applied", "message": "Love it"}


def test_apply_twice_is_rejected(client, campaign, kol):
    client.post(f"{CAMPAIGNS_URL}/camp-1", json={"userId": "kol-1"})

    resp = client.post(f"{CAMPAIGNS_URL}/camp-1", json={"userId": "kol-1"})

    assert resp.status_code == 400
    assert resp.json() == {"error": "You have already applied to this campaign"}


def test_apply_requires_user_id(client, campaign):
    resp = client.post(f"{CAMPAIGNS_URL}/camp-1", json={})

    assert resp.status_code == 400
    assert resp.json() == {"error": "User ID is required"}


def test_apply_unknown_user(client, campaign):
    resp = client.post(f"{CAMPAIGNS_URL}/camp-1", json={"userId": "ghost"})

    assert resp.status_code == 400
    assert resp.json() == {"error": "User not found"}


def test_apply_unknown_campaign(client, kol):
    resp = client.post(f"{CAMPAIGNS_URL}/nope", json={"userId": "kol-1"})

    assert resp.status_code == 404
    assert resp.json() == {"error": "Campaign not found"}

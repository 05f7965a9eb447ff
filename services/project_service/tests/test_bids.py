import pytest

from conftest import MERCHANT_A_ID, MERCHANT_B_ID
from crud import create_bid, get_bids_by_merchant
from errors import NotFoundError, ProjectNotOpenForBidding
from models import BidStatus, ProjectStatus


@pytest.mark.parametrize("days", [0, -1])
def test_create_bid_rejects_non_positive_days(client, merchant_a_headers, make_project, days):
    project = make_project(status=ProjectStatus.IN_BIDDING)
    response = client.post(
        f"/api/Projects/{project.id}/bids",
        json={"price": 1000, "days": days},
        headers=merchant_a_headers,
    )
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "days"


def test_create_bid_accepts_one_day(client, merchant_a_headers, make_project):
    project = make_project(status=ProjectStatus.IN_BIDDING)
    response = client.post(
        f"/api/Projects/{project.id}/bids",
        json={"price": 1000, "days": 1, "message": "Can start tomorrow"},
        headers=merchant_a_headers,
    )
    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "pending"
    assert data["merchant_id"] == MERCHANT_A_ID
    assert data["project_id"] == project.id
    assert data["days"] == 1
    assert data["message"] == "Can start tomorrow"


def test_create_bid_rejects_fractional_days(client, merchant_a_headers, make_project):
    project = make_project(status=ProjectStatus.PUBLISHED)
    response = client.post(f"/api/Projects/{project.id}/bids", json={"price": 1000, "days": 2.5}, headers=merchant_a_headers)
    assert response.status_code == 400


def test_create_bid_rejects_non_numeric_price(client, merchant_a_headers, make_project):
    project = make_project(status=ProjectStatus.PUBLISHED)
    response = client.post(f"/api/Projects/{project.id}/bids", json={"price": "cheap", "days": 2}, headers=merchant_a_headers)
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "price"


def test_create_bid_rejects_unknown_fields(client, merchant_a_headers, make_project):
    project = make_project(status=ProjectStatus.PUBLISHED)
    response = client.post(
        f"/api/Projects/{project.id}/bids",
        json={"price": 1000, "days": 2, "status": "accepted"},
        headers=merchant_a_headers,
    )
    assert response.status_code == 400


@pytest.mark.parametrize("status", [
    ProjectStatus.DRAFT,
    ProjectStatus.CANCELLED,
    ProjectStatus.AWARDED,
    ProjectStatus.COMPLETED,
])
def test_create_bid_on_closed_project_is_refused(client, merchant_a_headers, make_project, status):
    project = make_project(status=status)
    response = client.post(f"/api/Projects/{project.id}/bids", json={"price": 1000, "days": 2}, headers=merchant_a_headers)
    assert response.status_code == 409
    assert response.json()["success"] is False
    assert status.value in response.json()["message"]


def test_create_bid_on_missing_project_is_404(client, merchant_a_headers):
    response = client.post("/api/Projects/999/bids", json={"price": 1000, "days": 2}, headers=merchant_a_headers)
    assert response.status_code == 404


def test_create_bid_store_enforces_bidding_window(db, make_project):
    draft = make_project(status=ProjectStatus.DRAFT)
    with pytest.raises(ProjectNotOpenForBidding):
        create_bid(db, draft.id, MERCHANT_A_ID, price=10, days=1)
    with pytest.raises(NotFoundError):
        create_bid(db, 999, MERCHANT_A_ID, price=10, days=1)


def test_customer_cannot_bid(client, customer_headers, make_project):
    project = make_project(status=ProjectStatus.PUBLISHED)
    response = client.post(f"/api/Projects/{project.id}/bids", json={"price": 1000, "days": 2}, headers=customer_headers)
    assert response.status_code == 403


def test_list_bids_newest_first(client, db, customer_headers, make_project):
    project = make_project(status=ProjectStatus.IN_BIDDING)
    first = create_bid(db, project.id, MERCHANT_A_ID, price=1000, days=5)
    second = create_bid(db, project.id, MERCHANT_B_ID, price=1200, days=4)

    response = client.get(f"/api/Projects/{project.id}/bids", headers=customer_headers)
    assert response.status_code == 200
    assert [b["id"] for b in response.json()] == [second.id, first.id]


def test_list_bids_by_merchant(client, db, merchant_a_headers, make_project):
    one = make_project(title="One", status=ProjectStatus.PUBLISHED)
    two = make_project(title="Two", status=ProjectStatus.IN_BIDDING)
    create_bid(db, one.id, MERCHANT_A_ID, price=100, days=1)
    create_bid(db, two.id, MERCHANT_A_ID, price=200, days=2)
    create_bid(db, two.id, MERCHANT_B_ID, price=300, days=3)

    assert len(get_bids_by_merchant(db, MERCHANT_B_ID)) == 1

    response = client.get("/api/Projects/bids/merchant/my-bids", headers=merchant_a_headers)
    assert response.status_code == 200
    bids = response.json()
    assert [b["project_id"] for b in bids] == [two.id, one.id]
    assert all(b["status"] == BidStatus.PENDING.value for b in bids)


def test_bid_created_event_is_published(client, merchant_a_headers, make_project, monkeypatch):
    published = []
    monkeypatch.setattr("routes.publish_event", lambda event_type, data: published.append((event_type, data)))
    project = make_project(status=ProjectStatus.PUBLISHED)

    response = client.post(f"/api/Projects/{project.id}/bids", json={"price": 750, "days": 3}, headers=merchant_a_headers)
    assert response.status_code == 201
    assert published == [("bid.created", {
        "bid_id": response.json()["id"],
        "project_id": project.id,
        "merchant_id": MERCHANT_A_ID,
        "customer_id": project.customer_id,
    })]

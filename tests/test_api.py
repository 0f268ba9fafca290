from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from haccp_review.main import create_app

ADMIN = {"X-User-Id": "u-admin", "X-User-Code": "ADM-001", "X-User-Role": "admin"}
CONSUMER = {"X-User-Id": "u-school-1", "X-User-Code": "SCH-001", "X-User-Role": "consumer"}
SUPPLIER = {"X-User-Id": "u-supplier-1", "X-User-Code": "SUP-001", "X-User-Role": "supplier"}


@pytest.fixture
def client(settings, session_factory, clock):
    app = create_app(settings=settings, session_factory=session_factory, clock=clock)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def kitchen_headers(kitchen):
    return {
        "X-User-Id": "u-kitchen-1",
        "X-User-Code": "KIT-BDG-01",
        "X-User-Role": "kitchen",
        "X-User-Kitchens": kitchen.id,
    }


def submit(client, payload):
    response = client.post("/api/v1/reviews", json=payload, headers=CONSUMER)
    assert response.status_code == 201, response.text
    return response.json()


def test_health(client):
    assert client.get("/api/v1/health").json() == {"status": "ok"}


def test_identity_headers_are_required(client, review_payload):
    response = client.post("/api/v1/reviews", json=review_payload())
    assert response.status_code == 401


def test_unknown_role_is_rejected(client, review_payload):
    response = client.post("/api/v1/reviews", json=review_payload(), headers={**CONSUMER, "X-User-Role": "janitor"})
    assert response.status_code == 401


def test_review_to_notification_flow(client, review_payload, kitchen_headers):
    review = submit(client, review_payload(ratings={"taste": "1.5"}))
    assert review["verification_status"] == "unverified"
    assert review["dispute_status"] == "none"

    verified = client.post(f"/api/v1/reviews/{review['id']}/verify", json={"status": "verified"}, headers=ADMIN)
    assert verified.status_code == 200
    assert verified.json()["verified"] is True

    listed = client.get("/api/v1/notifications", headers=kitchen_headers).json()
    assert len(listed) == 1
    notification = listed[0]
    assert notification["category"] == "taste"
    assert notification["priority"] == "critical"
    assert notification["target_role"] == "kitchen"

    assert client.get("/api/v1/notifications", headers=SUPPLIER).json() == []
    assert client.get("/api/v1/notifications/unread-count", headers=kitchen_headers).json() == {"unread": 1}

    viewed = client.post(f"/api/v1/notifications/{notification['id']}/view", headers=kitchen_headers)
    assert viewed.json()["status"] == "viewed"
    resolved = client.post(f"/api/v1/notifications/{notification['id']}/resolve", headers=kitchen_headers)
    assert resolved.json()["status"] == "resolved"

    detail = client.get(f"/api/v1/notifications/{notification['id']}", headers=kitchen_headers).json()
    assert [e["action"] for e in detail["audit_trail"]] == ["Created", "Viewed", "Resolved"]

    again = client.post(f"/api/v1/notifications/{notification['id']}/view", headers=kitchen_headers)
    assert again.status_code == 409
    assert again.json()["error"]["code"] == "INVALID_TRANSITION"


def test_verify_defaults_to_verified(client, review_payload):
    review = submit(client, review_payload())
    response = client.post(f"/api/v1/reviews/{review['id']}/verify", headers=ADMIN)
    assert response.json()["verification_status"] == "verified"


def test_error_mapping(client, review_payload):
    review = submit(client, review_payload())

    forbidden = client.post(f"/api/v1/reviews/{review['id']}/verify", json={}, headers=CONSUMER)
    assert forbidden.status_code == 403
    assert forbidden.json()["error"]["code"] == "FORBIDDEN"

    missing = client.get("/api/v1/reviews/does-not-exist", headers=ADMIN)
    assert missing.status_code == 404
    assert missing.json()["error"]["code"] == "RESOURCE_NOT_FOUND"

    invalid = client.post("/api/v1/reviews", json=review_payload(ratings={"taste": "7.0"}), headers=CONSUMER)
    assert invalid.status_code == 422
    assert invalid.json()["error"]["code"] == "VALIDATION_ERROR"

    stale = client.post(
        f"/api/v1/reviews/{review['id']}/verify",
        json={"status": "verified", "expected_version": 5},
        headers=ADMIN,
    )
    assert stale.status_code == 409
    assert stale.json()["error"]["code"] == "CONCURRENT_MODIFICATION"


def test_update_and_delete(client, review_payload):
    review = submit(client, review_payload())

    patched = client.patch(f"/api/v1/reviews/{review['id']}", json={"comment": "Portions were too small."}, headers=CONSUMER)
    assert patched.status_code == 200
    assert patched.json()["version"] == 2

    null_patch = client.patch(f"/api/v1/reviews/{review['id']}", json={"comment": None}, headers=CONSUMER)
    assert null_patch.status_code == 422

    assert client.delete(f"/api/v1/reviews/{review['id']}", headers=CONSUMER).status_code == 204
    assert client.get(f"/api/v1/reviews/{review['id']}", headers=CONSUMER).status_code == 404


def test_dispute_flow(client, review_payload, kitchen_headers):
    review = submit(client, review_payload())
    client.post(f"/api/v1/reviews/{review['id']}/verify", headers=ADMIN)

    filed = client.post(f"/api/v1/reviews/{review['id']}/dispute", json={"reason": "Wrong kitchen"}, headers=kitchen_headers)
    assert filed.status_code == 200
    assert filed.json()["dispute_status"] == "disputed"

    skipped = client.post(
        f"/api/v1/reviews/{review['id']}/dispute/advance", json={"new_status": "resolved"}, headers=ADMIN
    )
    assert skipped.status_code == 409

    for status in ("under_review", "resolved"):
        response = client.post(
            f"/api/v1/reviews/{review['id']}/dispute/advance", json={"new_status": status}, headers=ADMIN
        )
        assert response.status_code == 200

    history = client.get(f"/api/v1/reviews/{review['id']}/dispute/history", headers=ADMIN).json()
    assert [e["action"] for e in history] == ["Filed", "UnderReview", "Resolved"]


def test_batch_submission(client, review_payload):
    response = client.post(
        "/api/v1/reviews/batch",
        json={"reviews": [review_payload(), review_payload(kitchen_id="missing")]},
        headers=CONSUMER,
    )
    body = response.json()
    assert response.status_code == 200
    assert (body["created"], body["failed"]) == (1, 1)


def test_kitchen_reads(client, review_payload, kitchen, add_incident):
    review = submit(client, review_payload())
    submit(client, review_payload())
    client.post(f"/api/v1/reviews/{review['id']}/verify", headers=ADMIN)

    public = client.get(f"/api/v1/kitchens/{kitchen.id}/reviews/public").json()
    assert [r["id"] for r in public["items"]] == [review["id"]]
    assert "reviewer_code" not in public["items"][0]

    unverified = client.get(f"/api/v1/kitchens/{kitchen.id}/reviews?verified=false", headers=ADMIN).json()
    assert unverified["meta"]["total_items"] == 1

    trend = client.get(f"/api/v1/kitchens/{kitchen.id}/trend?months=2", headers=ADMIN)
    assert trend.status_code == 200
    points = trend.json()["points"]
    assert [p["month"] for p in points] == ["2024-06", "2024-05"]
    assert Decimal(str(points[0]["score"])) == Decimal("4.3")

    too_long = client.get(f"/api/v1/kitchens/{kitchen.id}/trend?months=37", headers=ADMIN)
    assert too_long.status_code == 422


def test_badges(client, kitchen):
    badge = {"type": "gold", "title": "Zero incidents", "description": "No incidents for a full term", "earned_date": "2024-06-01"}

    assert client.post(f"/api/v1/kitchens/{kitchen.id}/badges", json=badge, headers=CONSUMER).status_code == 403
    created = client.post(f"/api/v1/kitchens/{kitchen.id}/badges", json=badge, headers=ADMIN)
    assert created.status_code == 201

    listed = client.get(f"/api/v1/kitchens/{kitchen.id}/badges").json()
    assert [b["title"] for b in listed] == ["Zero incidents"]

"""End-to-end tests for the contact endpoints"""

import pytest

INQUIRY = {
    "name": "John Smith",
    "email": "John@Example.com",
    "phone": "+254711000000",
    "subject": "Accident on highway",
    "message": "Our rental was in a minor accident near Thika.",
    "department": "general",
}


@pytest.fixture
def inquiry_form():
    return dict(INQUIRY)


def test_submit_inquiry(client, inquiry_form, inquiry_store, transport):
    response = client.post("/api/contact", json=inquiry_form)

    assert response.status_code == 201
    inquiry = response.json()["inquiry"]
    assert inquiry["id"].startswith("CONTACT-")
    assert inquiry["priority"] == "urgent"
    assert inquiry["assignedTo"] == "executive-team"
    assert inquiry["estimatedResponseTime"] == "Within 30 minutes"
    assert inquiry["email"] == "john@example.com"
    assert len(inquiry_store) == 1

    recipients = sorted(message.to[0] for message in transport.sent)
    assert recipients == ["general@example.com", "john@example.com"]


def test_invalid_inquiry(client, inquiry_form, inquiry_store, transport):
    inquiry_form.update(email="nope", department="sales")

    response = client.post("/api/contact", json=inquiry_form)

    assert response.status_code == 400
    assert {error["field"] for error in response.json()["errors"]} == {"email", "department"}
    assert len(inquiry_store) == 0
    assert transport.sent == []


def test_list_inquiries_most_urgent_first(client, make_inquiry):
    normal = make_inquiry()
    urgent = make_inquiry(department="support")
    make_inquiry(department="corporate")

    response = client.get("/api/contact/inquiries")

    body = response.json()
    assert body["count"] == 3
    assert [i["priority"] for i in body["inquiries"]] == ["urgent", "high", "normal"]
    assert body["inquiries"][0]["id"] == urgent.id
    assert body["inquiries"][-1]["id"] == normal.id

    filtered = client.get("/api/contact/inquiries", params={"department": "corporate", "limit": 5}).json()
    assert filtered["count"] == 1
    assert filtered["inquiries"][0]["department"] == "corporate"


def test_get_inquiry(client, make_inquiry):
    inquiry = make_inquiry()

    assert client.get(f"/api/contact/inquiries/{inquiry.id}").json()["inquiry"]["id"] == inquiry.id
    assert client.get("/api/contact/inquiries/CONTACT-0-MISSING").status_code == 404


def test_update_status(client, make_inquiry, inquiry_store):
    inquiry = make_inquiry()

    response = client.patch(
        f"/api/contact/inquiries/{inquiry.id}/status",
        json={"status": "in-progress", "assignedTo": "concierge-team"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["inquiry"]["status"] == "in-progress"
    assert body["inquiry"]["assignedTo"] == "concierge-team"
    assert "updatedAt" in body
    assert inquiry_store.get(inquiry.id).status.value == "in-progress"


def test_update_status_rejects_unknown_status(client, make_inquiry):
    inquiry = make_inquiry()

    response = client.patch(f"/api/contact/inquiries/{inquiry.id}/status", json={"status": "done"})

    assert response.status_code == 400
    assert "in-progress" in response.json()["error"]


def test_update_status_of_unknown_inquiry(client):
    response = client.patch("/api/contact/inquiries/CONTACT-0-MISSING/status", json={"status": "resolved"})

    assert response.status_code == 404


def test_stats(client, make_inquiry):
    make_inquiry()
    make_inquiry(department="support")

    stats = client.get("/api/contact/stats").json()["stats"]

    assert stats["total"] == 2
    assert stats["byPriority"]["urgent"] == 1
    assert stats["byDepartment"]["general"] == 1
    assert stats["byStatus"]["new"] == 2
    assert len(stats["recentInquiries"]) == 2


def test_resend_inquiry_emails(client, make_inquiry, transport):
    inquiry = make_inquiry()

    response = client.post(f"/api/contact/inquiries/{inquiry.id}/resend")

    assert response.status_code == 200
    assert response.json()["results"] == {"customer": "sent", "internal": "sent"}
    assert len(transport.sent) == 2
    assert client.post("/api/contact/inquiries/CONTACT-0-MISSING/resend").status_code == 404


def test_malformed_query_and_body_use_error_envelope(client, make_inquiry):
    inquiry = make_inquiry()

    response = client.get("/api/contact/inquiries", params={"limit": "ten"})
    assert response.status_code == 400
    assert response.json()["success"] is False
    assert [error["field"] for error in response.json()["errors"]] == ["limit"]

    response = client.patch(f"/api/contact/inquiries/{inquiry.id}/status", json=["resolved"])
    assert response.status_code == 400
    assert response.json()["success"] is False

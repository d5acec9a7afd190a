"""Request layer: routing, bearer auth and error mapping."""
from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from jose import jwt as jose_jwt

from autoshop.config import JWT_ALGORITHM, SECRET_KEY
from autoshop.database import get_db
from autoshop.main import app


def token_for(email):
    return jose_jwt.encode({"sub": email}, SECRET_KEY, algorithm=JWT_ALGORITHM)


def auth(email):
    return {"Authorization": f"Bearer {token_for(email)}"}


def future(days=2):
    return (datetime.now() + timedelta(days=days)).replace(microsecond=0)


@pytest.fixture
def client(db, seed):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def booking_payload(seed):
    return {
        "vehicle_id": seed["vehicle"].id,
        "scheduled_date_time": future().isoformat(),
        "service_ids": [seed["oil"].id, seed["tires"].id],
        "customer_notes": "Please check brakes too",
    }


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_missing_token(client):
    response = client.get("/appointments")
    assert response.status_code in (401, 403)


def test_invalid_token(client):
    response = client.get("/appointments", headers={"Authorization": "Bearer not.a.jwt"})
    assert response.status_code == 401


def test_book_and_list(client, booking_payload):
    response = client.post("/appointments", json=booking_payload, headers=auth("customer@test.com"))
    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "SCHEDULED"
    assert Decimal(str(body["estimated_cost"])) == Decimal("79.98")

    listed = client.get("/appointments", headers=auth("customer@test.com")).json()
    assert [a["id"] for a in listed] == [body["id"]]


def test_error_kinds_are_mapped(client, booking_payload, seed):
    headers = auth("customer@test.com")

    past = dict(booking_payload, scheduled_date_time=(datetime.now() - timedelta(days=1)).isoformat())
    response = client.post("/appointments", json=past, headers=headers)
    assert response.status_code == 400
    assert response.json()["error"] == "InvalidArgument"

    foreign = dict(booking_payload, vehicle_id=seed["other_vehicle"].id)
    response = client.post("/appointments", json=foreign, headers=headers)
    assert response.status_code == 403
    assert response.json()["error"] == "Unauthorized"

    client.post("/appointments", json=booking_payload, headers=headers)
    response = client.post("/appointments", json=booking_payload, headers=headers)
    assert response.status_code == 409
    assert response.json()["error"] == "DuplicateResource"

    response = client.get("/appointments", headers=auth("ghost@test.com"))
    assert response.status_code == 404
    assert response.json()["error"] == "UserNotFound"


def test_lifecycle_over_http(client, booking_payload):
    customer = auth("customer@test.com")
    employee = auth("employee@test.com")
    appointment_id = client.post("/appointments", json=booking_payload, headers=customer).json()["id"]

    response = client.get(f"/appointments/{appointment_id}", headers=auth("other@test.com"))
    assert response.status_code == 403

    response = client.get(f"/appointments/{appointment_id}", headers=employee)
    assert response.status_code == 200

    response = client.patch(
        f"/appointments/{appointment_id}", json={"customer_notes": "Updated"}, headers=customer
    )
    assert response.json()["customer_notes"] == "Updated"

    assert client.post(f"/employee/appointments/{appointment_id}/confirm", headers=employee).status_code == 200
    assert client.post(f"/employee/appointments/{appointment_id}/start", headers=employee).status_code == 200

    response = client.patch(
        f"/appointments/{appointment_id}", json={"customer_notes": "Too late"}, headers=customer
    )
    assert response.status_code == 409
    assert response.json()["error"] == "IllegalState"

    response = client.patch(
        f"/employee/appointments/{appointment_id}/progress",
        json={"progress_percentage": 60},
        headers=employee,
    )
    assert response.json()["progress_percentage"] == 60

    response = client.post(
        f"/employee/appointments/{appointment_id}/complete",
        json={"final_cost": "85.00"},
        headers=employee,
    )
    assert response.json()["status"] == "COMPLETED"

    response = client.delete(f"/appointments/{appointment_id}", headers=customer)
    assert response.status_code == 409

    counts = client.get("/dashboard/customer", headers=customer).json()
    assert counts["completed"] == 1
    assert Decimal(str(counts["total_spent"])) == Decimal("85.00")


def test_cancel_and_delete(client, booking_payload):
    customer = auth("customer@test.com")
    first = client.post("/appointments", json=booking_payload, headers=customer).json()["id"]
    second_payload = dict(booking_payload, scheduled_date_time=future(days=3).isoformat())
    second = client.post("/appointments", json=second_payload, headers=customer).json()["id"]

    response = client.post(f"/appointments/{first}/cancel", headers=customer)
    assert response.json()["status"] == "CANCELLED"
    assert client.post(f"/appointments/{first}/cancel", headers=customer).status_code == 409

    assert client.delete(f"/appointments/{second}", headers=customer).status_code == 204
    assert client.get(f"/appointments/{second}", headers=customer).status_code == 404


def test_dashboard_endpoints(client, booking_payload):
    customer = auth("customer@test.com")
    client.post("/appointments", json=booking_payload, headers=customer)

    counts = client.get("/dashboard/customer", headers=customer).json()
    assert counts["total"] == 1
    assert counts["vehicles"] == 1
    assert counts["total_spent"] is None

    assert client.get("/dashboard/customer/appointments/count", headers=customer).json() == 1
    assert client.get("/dashboard/customer/spent/total", headers=customer).json() is None

    upcoming = client.get("/dashboard/customer/appointments/upcoming", headers=customer).json()
    assert len(upcoming) == 1

    response = client.get("/dashboard/customer", headers=auth("ghost@test.com"))
    assert response.status_code == 404
    assert response.json()["error"] == "ResourceNotFound"

    employee = client.get("/dashboard/employee", headers=auth("employee@test.com")).json()
    assert employee == {"assigned": 0, "in_progress": 0, "completed": 0}

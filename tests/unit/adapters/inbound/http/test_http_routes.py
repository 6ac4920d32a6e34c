"""Unit tests for HTTP routes."""

import pytest
from fastapi import FastAPI, status
from fastapi.testclient import TestClient

from app.adapters.inbound.http.errors import register_error_handlers
from app.adapters.inbound.http.routes import get_container, router
from app.adapters.outbound.timeline_store import InMemoryTimelineStore
from app.infrastructure.wiring.container import Container

ADMIN = {"X-User-Id": "admin-1", "X-User-Role": "admin"}
OFFICE = {"X-User-Id": "office-1", "X-User-Role": "office"}
AGENT = {"X-User-Id": "agent-1", "X-User-Role": "agent"}
CUSTOMER = {"X-User-Id": "cust-1", "X-User-Role": "customer"}


@pytest.fixture
def app():
    """Create FastAPI app with router and a fresh in-memory store."""
    app = FastAPI()
    register_error_handlers(app)
    app.include_router(router)
    container = Container(InMemoryTimelineStore())
    app.dependency_overrides[get_container] = lambda: container
    return app


@pytest.fixture
def client(app):
    """Create test client."""
    return TestClient(app)


def _create_step(client, name, **fields):
    response = client.post(
        "/steps", json={"name": name, "allowed_roles": ["office"], **fields}, headers=ADMIN
    )
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()


def _create_lead(client):
    response = client.post(
        "/leads", json={"customer_name": "Asha", "phone": "98765 43210"}, headers=AGENT
    )
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()


def test_health_check(client):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"status": "ok"}


def test_step_completion_flow(client):
    """Test lead creation, completion and progression over HTTP."""
    a = _create_step(client, "A")
    b = _create_step(client, "B", remarks_required=True)
    lead = _create_lead(client)

    timeline = client.get(f"/leads/{lead['id']}/steps").json()
    assert [e["step"]["status"] for e in timeline] == ["pending", "upcoming"]

    response = client.post(
        f"/leads/{lead['id']}/steps/{a['id']}/complete", json={}, headers=OFFICE
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == "completed"

    response = client.post(
        f"/leads/{lead['id']}/steps/{b['id']}/complete", json={"remarks": ""}, headers=OFFICE
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"]["code"] == "remarks_required"

    response = client.post(
        f"/leads/{lead['id']}/steps/{b['id']}/complete",
        json={"remarks": "done"},
        headers=OFFICE,
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["remarks"] == "done"
    assert response.json()["remarks_type"] == "note"

    timeline = client.get(f"/leads/{lead['id']}/steps").json()
    assert [e["step"]["status"] for e in timeline] == ["completed", "completed"]


def test_error_statuses(client):
    """Test the error code to status mapping."""
    a = _create_step(client, "A")
    lead = _create_lead(client)
    url = f"/leads/{lead['id']}/steps/{a['id']}/complete"

    denied = client.post(url, json={}, headers=AGENT)
    assert denied.status_code == status.HTTP_403_FORBIDDEN
    assert denied.json()["error"]["code"] == "permission_denied"

    assert client.post(url, json={}, headers=OFFICE).status_code == status.HTTP_200_OK
    again = client.post(url, json={}, headers=OFFICE)
    assert again.status_code == status.HTTP_409_CONFLICT
    assert again.json()["error"]["code"] == "already_completed"

    missing = client.get("/leads/missing")
    assert missing.status_code == status.HTTP_404_NOT_FOUND
    assert missing.json()["error"]["code"] == "not_found"


def test_closed_lead_rejects_completion(client):
    """Test closure over HTTP."""
    a = _create_step(client, "A")
    lead = _create_lead(client)

    closed = client.post(f"/leads/{lead['id']}/close", headers=OFFICE)
    assert closed.status_code == status.HTTP_200_OK
    assert closed.json()["status"] == "closed"

    response = client.post(
        f"/leads/{lead['id']}/steps/{a['id']}/complete", json={}, headers=OFFICE
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["error"]["code"] == "lead_closed"

    reopened = client.post(f"/leads/{lead['id']}/reopen", headers=ADMIN)
    assert reopened.json()["status"] == "ongoing"

    actions = [e["action"] for e in client.get(f"/leads/{lead['id']}/activity").json()]
    assert actions[:2] == ["reopen_project", "close_project"]


def test_step_registry_routes(client):
    """Test template management routes."""
    a = _create_step(client, "A")
    b = _create_step(client, "B")

    duplicate = client.post(
        "/steps",
        json={"name": "C", "allowed_roles": ["office"], "order_index": a["order_index"]},
        headers=ADMIN,
    )
    assert duplicate.status_code == status.HTTP_409_CONFLICT
    assert duplicate.json()["error"]["code"] == "duplicate_order_index"

    reordered = client.put("/steps/reorder", json={"step_ids": [b["id"], a["id"]]}, headers=ADMIN)
    assert [s["name"] for s in reordered.json()] == ["B", "A"]

    patched = client.patch(f"/steps/{a['id']}", json={"remarks_required": True}, headers=ADMIN)
    assert patched.json()["remarks_required"] is True

    moved = client.post(f"/steps/{a['id']}/move", json={"after_id": None}, headers=ADMIN)
    assert moved.status_code == status.HTTP_200_OK

    deleted = client.delete(f"/steps/{b['id']}", headers=ADMIN)
    assert deleted.json()["is_active"] is False
    assert [s["name"] for s in client.get("/steps").json()] == ["A"]

    forbidden = client.post("/steps", json={"name": "X", "allowed_roles": ["office"]}, headers=OFFICE)
    assert forbidden.status_code == status.HTTP_403_FORBIDDEN


def test_reopen_and_move_backward(client):
    """Test step reopen and admin rewind routes."""
    a = _create_step(client, "A")
    _create_step(client, "B")
    lead = _create_lead(client)
    client.post(f"/leads/{lead['id']}/steps/{a['id']}/complete", json={}, headers=OFFICE)

    reopened = client.post(f"/leads/{lead['id']}/steps/{a['id']}/reopen", headers=OFFICE)
    assert reopened.status_code == status.HTTP_200_OK
    assert reopened.json()["status"] == "pending"

    rewound = client.post(
        f"/leads/{lead['id']}/admin/move-backward", json={"step_id": a["id"]}, headers=ADMIN
    )
    assert rewound.status_code == status.HTTP_200_OK
    assert [s["status"] for s in rewound.json()] == ["pending", "upcoming"]
    assert rewound.json()[0]["remarks"] == "Admin override - moved timeline backward"


def test_initialize_existing_timeline_conflicts(client):
    """Test that re-initializing returns a conflict."""
    _create_step(client, "A")
    lead = _create_lead(client)

    response = client.post(f"/leads/{lead['id']}/steps/initialize")
    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["error"]["code"] == "already_initialized"


def test_customer_link(client):
    """Test customer linking over HTTP."""
    lead = _create_lead(client)

    response = client.post(
        "/customers/link",
        json={"customer_id": "cust-1", "phone": "9876543210", "name": "Asha"},
        headers=CUSTOMER,
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"action": "linked", "lead_id": lead["id"], "customer_id": "cust-1"}


def test_customer_link_requires_the_customer(client):
    """Test that only the customer being linked may call the link route."""
    body = {"customer_id": "cust-1", "phone": "9876543210", "name": "Asha"}

    anonymous = client.post("/customers/link", json=body)
    assert anonymous.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    staff = client.post("/customers/link", json=body, headers=OFFICE)
    assert staff.status_code == status.HTTP_403_FORBIDDEN
    assert staff.json()["error"]["code"] == "permission_denied"

    other = client.post(
        "/customers/link",
        json=body,
        headers={"X-User-Id": "cust-2", "X-User-Role": "customer"},
    )
    assert other.status_code == status.HTTP_403_FORBIDDEN


def test_blank_customer_name_is_rejected(client):
    """Test that a whitespace-only name fails request validation."""
    response = client.post(
        "/leads", json={"customer_name": "   ", "phone": "9876543210"}, headers=AGENT
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_missing_identity_headers(client):
    """Test that mutating routes require caller identity."""
    response = client.post("/leads", json={"customer_name": "Asha", "phone": "1"})
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

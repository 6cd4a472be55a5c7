"""
Patient transfer workflow: request, admin decision, notifications.
"""
import uuid
from types import SimpleNamespace

import pytest

from conftest import auth_headers, make_lead, make_user
from youclinic.models import Lead, PatientTransfer, TransferStatus


@pytest.fixture
def carol(db):
    return make_user(db, "carol@youclinic.com", name="Carol")


@pytest.fixture
def patient(db, alice):
    return make_lead(db, alice, "+90 532 444 4444", first_name="Zeynep", last_name="Yılmaz")


def _request(client, headers, patient, to_user, transfer_type="give", **extra):
    return client.post(
        "/api/transfers",
        json={
            "patient_id": str(patient.id),
            "to_user_id": str(to_user.id),
            "transfer_type": transfer_type,
            **extra,
        },
        headers=headers,
    )


def _owner(db, patient):
    db.expire_all()
    return db.get(Lead, patient.id).assigned_to


class TestCreateTransfer:
    def test_give_request_is_pending_and_notifies_target(
        self, client, alice, bob, alice_headers, bob_headers, patient
    ):
        response = _request(client, alice_headers, patient, bob, reason="Going on leave")
        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "pending"
        assert body["from_user_id"] == str(alice.id)
        assert body["to_user_id"] == str(bob.id)
        assert body["patient"]["first_name"] == "Zeynep"
        assert body["to_user"]["name"] == "Bob"

        notifications = client.get("/api/transfers/notifications", headers=bob_headers).json()
        assert [n["type"] for n in notifications] == ["request_created"]
        assert notifications[0]["transfer_id"] == body["id"]

    def test_cannot_give_someone_elses_patient(self, client, bob_headers, carol, patient):
        response = _request(client, bob_headers, patient, carol)
        assert response.status_code == 403

    def test_cannot_take_own_patient(self, client, alice_headers, bob, patient):
        response = _request(client, alice_headers, patient, bob, transfer_type="take")
        assert response.status_code == 403

    def test_duplicate_pending_request_is_rejected(self, client, db, alice_headers, bob, patient):
        assert _request(client, alice_headers, patient, bob).status_code == 201

        response = _request(client, alice_headers, patient, bob)
        assert response.status_code == 409
        assert response.json()["error"] == "duplicate_transfer"
        db.expire_all()
        assert db.query(PatientTransfer).count() == 1

    def test_unknown_patient(self, client, alice_headers, bob):
        stranger = SimpleNamespace(id=uuid.uuid4())
        response = _request(client, alice_headers, stranger, bob)
        assert response.status_code == 404


class TestDecisions:
    def test_approve_give_reassigns_to_target(
        self, client, db, admin, bob, alice_headers, admin_headers, patient
    ):
        transfer_id = _request(client, alice_headers, patient, bob).json()["id"]

        response = client.post(f"/api/transfers/{transfer_id}/approve", headers=admin_headers)
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "approved"
        assert body["approved_by"] == str(admin.id)
        assert body["approved_at"] is not None
        assert _owner(db, patient) == bob.id

    def test_approve_take_reassigns_to_requester(
        self, client, db, alice, bob, bob_headers, admin_headers, patient
    ):
        response = _request(client, bob_headers, patient, alice, transfer_type="take")
        assert response.status_code == 201

        client.post(f"/api/transfers/{response.json()['id']}/approve", headers=admin_headers)
        assert _owner(db, patient) == bob.id

    def test_approving_twice_fails(self, client, alice_headers, admin_headers, bob, patient):
        transfer_id = _request(client, alice_headers, patient, bob).json()["id"]
        client.post(f"/api/transfers/{transfer_id}/approve", headers=admin_headers)

        response = client.post(f"/api/transfers/{transfer_id}/approve", headers=admin_headers)
        assert response.status_code == 409
        assert response.json()["error"] == "invalid_transfer_state"

    def test_reject_keeps_owner(self, client, db, alice, bob, alice_headers, admin_headers, patient):
        transfer_id = _request(client, alice_headers, patient, bob).json()["id"]

        response = client.post(
            f"/api/transfers/{transfer_id}/reject",
            json={"rejection_reason": "Bob is fully booked"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["status"] == "rejected"
        assert response.json()["rejection_reason"] == "Bob is fully booked"
        assert _owner(db, patient) == alice.id

        response = client.post(f"/api/transfers/{transfer_id}/approve", headers=admin_headers)
        assert response.status_code == 409

        notifications = client.get("/api/transfers/notifications", headers=alice_headers).json()
        assert [n["type"] for n in notifications] == ["request_rejected"]

    def test_rejected_request_can_be_resubmitted(self, client, alice_headers, admin_headers, bob, patient):
        transfer_id = _request(client, alice_headers, patient, bob).json()["id"]
        client.post(f"/api/transfers/{transfer_id}/reject", json={}, headers=admin_headers)

        assert _request(client, alice_headers, patient, bob).status_code == 201

    def test_salesperson_cannot_decide(self, client, alice_headers, bob_headers, bob, patient):
        transfer_id = _request(client, alice_headers, patient, bob).json()["id"]
        response = client.post(f"/api/transfers/{transfer_id}/approve", headers=bob_headers)
        assert response.status_code == 403

    def test_approval_notifies_requester(self, client, alice_headers, admin_headers, bob, patient):
        transfer_id = _request(client, alice_headers, patient, bob).json()["id"]
        client.post(f"/api/transfers/{transfer_id}/approve", headers=admin_headers)

        notifications = client.get("/api/transfers/notifications", headers=alice_headers).json()
        assert [n["type"] for n in notifications] == ["request_approved"]
        assert notifications[0]["transfer"]["status"] == TransferStatus.APPROVED.value


class TestVisibility:
    def test_requests_visible_to_parties_and_admin(
        self, client, carol, alice_headers, bob_headers, admin_headers, bob, patient
    ):
        _request(client, alice_headers, patient, bob)

        assert client.get("/api/transfers", headers=alice_headers).json()["total"] == 1
        assert client.get("/api/transfers", headers=bob_headers).json()["total"] == 1
        assert client.get("/api/transfers", headers=admin_headers).json()["total"] == 1
        assert client.get("/api/transfers", headers=auth_headers(carol)).json()["total"] == 0

    def test_history(self, client, alice_headers, bob, patient):
        _request(client, alice_headers, patient, bob)
        assert client.get("/api/transfers/history?days=7", headers=alice_headers).json()["total"] == 1

    def test_search_patients_by_direction(self, client, db, alice_headers, bob, patient):
        make_lead(db, bob, "+90 532 555 5555", first_name="Zehra")

        give = client.get(
            "/api/transfers/search-patients?q=ze&transfer_type=give", headers=alice_headers
        ).json()
        assert [p["first_name"] for p in give] == ["Zeynep"]

        take = client.get(
            "/api/transfers/search-patients?q=ze&transfer_type=take", headers=alice_headers
        ).json()
        assert [p["first_name"] for p in take] == ["Zehra"]


class TestNotifications:
    def test_mark_read_updates_unread_count(self, client, alice_headers, bob_headers, bob, patient):
        _request(client, alice_headers, patient, bob)
        assert client.get("/api/transfers/notifications/unread-count", headers=bob_headers).json() == {"count": 1}

        notification_id = client.get("/api/transfers/notifications", headers=bob_headers).json()[0]["id"]
        response = client.post(f"/api/transfers/notifications/{notification_id}/read", headers=bob_headers)
        assert response.status_code == 200
        assert response.json()["is_read"] is True
        assert client.get("/api/transfers/notifications/unread-count", headers=bob_headers).json() == {"count": 0}

    def test_only_recipient_can_mark_read(self, client, alice_headers, bob_headers, bob, patient):
        _request(client, alice_headers, patient, bob)
        notification_id = client.get("/api/transfers/notifications", headers=bob_headers).json()[0]["id"]

        response = client.post(f"/api/transfers/notifications/{notification_id}/read", headers=alice_headers)
        assert response.status_code == 404

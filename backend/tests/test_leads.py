"""
Lead endpoints: access scoping, creation, status transitions and files.
"""
import uuid

import pytest

from conftest import make_lead, make_user, auth_headers
from youclinic.models import ActivityLog, ActivityType, Lead, LeadFile, LeadStatus


def _status_entries(db):
    db.expire_all()
    return (
        db.query(ActivityLog)
        .filter(ActivityLog.type == ActivityType.STATUS_UPDATE)
        .all()
    )


class TestAccessScoping:
    """Salespersons only ever see leads assigned to them; admins see all."""

    @pytest.fixture
    def leads(self, db, alice, bob):
        return {
            "alice": make_lead(db, alice, "+90 532 111 1111", first_name="Ayşe"),
            "bob": make_lead(db, bob, "+90 532 222 2222", first_name="Mehmet"),
            "unassigned": make_lead(db, None, "+90 532 333 3333", first_name="Deniz"),
        }

    def test_salesperson_list_is_scoped(self, client, alice_headers, alice, leads):
        response = client.get("/api/leads", headers=alice_headers)
        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 1
        assert [item["assigned_to"] for item in body["items"]] == [str(alice.id)]

    def test_admin_sees_everything(self, client, admin_headers, leads):
        response = client.get("/api/leads", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["total"] == 3

    def test_assigned_to_filter_never_widens_scope(self, client, alice_headers, bob, leads):
        response = client.get(f"/api/leads?assigned_to={bob.id}", headers=alice_headers)
        assert response.status_code == 200
        assert response.json()["total"] == 0

    def test_other_salespersons_lead_is_forbidden(self, client, alice_headers, leads):
        response = client.get(f"/api/leads/{leads['bob'].id}", headers=alice_headers)
        assert response.status_code == 403
        assert response.json() == {
            "success": False,
            "error": "forbidden",
            "message": "You do not have access to this lead",
        }

    def test_unassigned_lead_is_admin_only(self, client, alice_headers, admin_headers, leads):
        lead_id = leads["unassigned"].id
        assert client.get(f"/api/leads/{lead_id}", headers=alice_headers).status_code == 403
        assert client.get(f"/api/leads/{lead_id}", headers=admin_headers).status_code == 200

    def test_update_of_foreign_lead_is_forbidden(self, client, db, alice_headers, leads):
        response = client.patch(
            f"/api/leads/{leads['bob'].id}",
            json={"notes": "mine now"},
            headers=alice_headers,
        )
        assert response.status_code == 403
        db.expire_all()
        assert db.get(Lead, leads["bob"].id).notes is None

    def test_missing_lead_is_not_found(self, client, admin_headers):
        response = client.get(f"/api/leads/{uuid.uuid4()}", headers=admin_headers)
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    def test_requires_authentication(self, client):
        response = client.get("/api/leads")
        assert response.status_code == 401
        assert response.json()["error"] == "unauthenticated"

    def test_unknown_role_is_rejected(self, client, db):
        user = make_user(db, "reception@youclinic.com", role="receptionist")
        response = client.get("/api/leads", headers=auth_headers(user))
        assert response.status_code == 403
        assert response.json()["error"] == "invalid_role"

    def test_search_is_scoped(self, client, alice_headers, admin_headers, leads):
        response = client.get("/api/leads/search?q=532", headers=alice_headers)
        assert response.status_code == 200
        assert [r["first_name"] for r in response.json()] == ["Ayşe"]

        response = client.get("/api/leads/search?q=532", headers=admin_headers)
        assert len(response.json()) == 3


class TestCreateLead:
    def test_create_assigns_to_caller(self, client, alice, alice_headers):
        response = client.post(
            "/api/leads",
            json={"first_name": "Elif", "last_name": "Kaya", "phone": " +90 555 123 4567 "},
            headers=alice_headers,
        )
        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "new"
        assert body["phone"] == "+90 555 123 4567"
        assert body["assigned_to"] == str(alice.id)
        assert body["sales_person"] == "Alice"

    def test_duplicate_phone_inserts_nothing(self, client, db, bob, alice_headers):
        make_lead(db, bob, "+90 555 123 4567")

        response = client.post(
            "/api/leads",
            json={"first_name": "Elif", "phone": "+90 555 123 4567"},
            headers=alice_headers,
        )
        assert response.status_code == 409
        assert response.json()["error"] == "duplicate_phone"
        db.expire_all()
        assert db.query(Lead).count() == 1

    def test_blank_phone_is_invalid(self, client, alice_headers):
        response = client.post(
            "/api/leads", json={"first_name": "Elif", "phone": "   "}, headers=alice_headers
        )
        assert response.status_code == 422


class TestStatusTransitions:
    @pytest.fixture
    def lead(self, db, alice):
        return make_lead(db, alice, "+90 555 000 1111")

    def test_follow_up_is_scheduled_for_tomorrow(self, client, db, clinic_day, alice_headers, lead):
        clinic_day(2024, 1, 1)

        response = client.patch(
            f"/api/leads/{lead.id}", json={"status": "on_follow_up"}, headers=alice_headers
        )
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "on_follow_up"
        assert body["next_follow_up_date"] == "2024-01-02"
        assert body["status_updated_at"] is not None

        entries = _status_entries(db)
        assert len(entries) == 1
        assert entries[0].user_name == "Alice"
        assert entries[0].details["old_status"] == "new"
        assert entries[0].details["new_status"] == "on_follow_up"
        assert entries[0].details["patient_id"] == str(lead.id)
        assert entries[0].timestamp.startswith("2024-01-01T10:00:00")

    def test_follow_up_date_wins_over_sent_value(self, client, clinic_day, alice_headers, lead):
        clinic_day(2024, 12, 31)
        response = client.patch(
            f"/api/leads/{lead.id}",
            json={"status": "on_follow_up", "next_follow_up_date": "2030-01-01"},
            headers=alice_headers,
        )
        assert response.json()["next_follow_up_date"] == "2025-01-01"

    def test_same_status_is_not_logged(self, client, db, alice_headers, lead):
        response = client.patch(
            f"/api/leads/{lead.id}", json={"status": "new", "notes": "called"}, headers=alice_headers
        )
        assert response.status_code == 200
        assert response.json()["notes"] == "called"
        assert _status_entries(db) == []

    def test_each_change_is_logged_once(self, client, db, alice_headers, lead):
        for status in ("hot", "sold", "sold"):
            client.patch(f"/api/leads/{lead.id}", json={"status": status}, headers=alice_headers)
        entries = _status_entries(db)
        assert sorted((e.details["old_status"], e.details["new_status"]) for e in entries) == [
            ("hot", "sold"),
            ("new", "hot"),
        ]

    def test_unknown_status_is_rejected(self, client, alice_headers, lead):
        response = client.patch(
            f"/api/leads/{lead.id}", json={"status": "maybe"}, headers=alice_headers
        )
        assert response.status_code == 422

    @pytest.mark.parametrize(
        "field", ["first_name", "last_name", "email", "phone", "country", "treatment_type", "source", "follow_up_count"]
    )
    def test_null_for_required_column_is_rejected(self, client, db, alice_headers, lead, field):
        response = client.patch(f"/api/leads/{lead.id}", json={field: None}, headers=alice_headers)
        assert response.status_code == 422
        db.expire_all()
        assert db.get(Lead, lead.id).first_name == "Test"

    def test_null_for_optional_column_clears_it(self, client, alice_headers, lead):
        client.patch(f"/api/leads/{lead.id}", json={"notes": "called twice"}, headers=alice_headers)
        response = client.patch(f"/api/leads/{lead.id}", json={"notes": None}, headers=alice_headers)
        assert response.status_code == 200
        assert response.json()["notes"] is None

    def test_log_keeps_name_from_before_rename(self, client, db, alice_headers, lead):
        response = client.patch(
            f"/api/leads/{lead.id}",
            json={"first_name": "Selin", "last_name": "Demir", "status": "hot"},
            headers=alice_headers,
        )
        assert response.status_code == 200
        assert response.json()["first_name"] == "Selin"

        (entry,) = _status_entries(db)
        assert entry.details["patient_name"] == "Test Patient"

    def test_treatment_done_moves_to_aftercare(self, client, alice_headers, lead):
        response = client.patch(
            f"/api/leads/{lead.id}", json={"status": "treatment_done"}, headers=alice_headers
        )
        assert response.json()["treatment_done_at"] is not None

        listed = client.get("/api/leads", headers=alice_headers).json()
        assert listed["total"] == 0

        aftercare = client.get("/api/leads/aftercare", headers=alice_headers).json()
        assert [a["id"] for a in aftercare] == [str(lead.id)]

        marketing = client.get("/api/leads/marketing", headers=alice_headers).json()
        assert marketing["total"] == 1


class TestLeadViews:
    def test_sold_includes_converted(self, client, db, alice, alice_headers):
        make_lead(db, alice, "1001", status=LeadStatus.SOLD)
        make_lead(db, alice, "1002", status=LeadStatus.CONVERTED)
        make_lead(db, alice, "1003", status=LeadStatus.HOT)

        sold = client.get("/api/leads/sold", headers=alice_headers).json()
        assert sorted(s["status"] for s in sold) == ["converted", "sold"]

    def test_stats_counts_per_status(self, client, db, alice, bob, alice_headers, admin_headers):
        make_lead(db, alice, "1001", status=LeadStatus.HOT)
        make_lead(db, alice, "1002", status=LeadStatus.HOT)
        make_lead(db, alice, "1003", status=LeadStatus.DEAD)
        make_lead(db, bob, "1004", status=LeadStatus.HOT)

        stats = client.get("/api/leads/stats", headers=alice_headers).json()
        assert stats["total"] == 3
        assert stats["by_status"]["hot"] == 2
        assert stats["by_status"]["dead"] == 1
        assert stats["by_status"]["sold"] == 0

        stats = client.get(f"/api/leads/stats/{bob.id}", headers=admin_headers).json()
        assert stats["total"] == 1

        response = client.get(f"/api/leads/stats/{bob.id}", headers=alice_headers)
        assert response.status_code == 403

    def test_marketing_filters_by_ad(self, client, db, alice, alice_headers):
        make_lead(db, alice, "1001", ad_name="summer-hair")
        make_lead(db, alice, "1002", ad_name="winter-teeth")

        body = client.get("/api/leads/marketing?ad_name=summer-hair", headers=alice_headers).json()
        assert body["total"] == 1
        assert body["items"][0]["ad_name"] == "summer-hair"

    def test_dashboard_limit(self, client, db, alice, alice_headers):
        for i in range(5):
            make_lead(db, alice, f"100{i}")
        assert len(client.get("/api/leads/dashboard?limit=3", headers=alice_headers).json()) == 3

    def test_pagination(self, client, db, alice, alice_headers):
        for i in range(5):
            make_lead(db, alice, f"100{i}")
        body = client.get("/api/leads?page=2&page_size=2", headers=alice_headers).json()
        assert body["total"] == 5
        assert len(body["items"]) == 2
        assert body["total_pages"] == 3
        assert body["has_next"] is True
        assert body["has_previous"] is True


class TestLeadFiles:
    @pytest.fixture
    def lead(self, db, alice):
        return make_lead(db, alice, "+90 555 000 2222")

    def _attach(self, client, headers, lead):
        upload = client.post(
            f"/api/leads/{lead.id}/files/upload-url",
            json={"file_name": "x-ray scan.pdf"},
            headers=headers,
        ).json()
        response = client.post(
            f"/api/leads/{lead.id}/files",
            json={"file_id": upload["file_id"], "file_name": "x-ray scan.pdf", "file_type": "application/pdf"},
            headers=headers,
        )
        assert response.status_code == 201
        return upload

    def test_two_step_upload(self, client, alice_headers, lead):
        upload = self._attach(client, alice_headers, lead)
        assert upload["file_id"].startswith(f"leads/{lead.id}/")
        assert upload["file_id"].endswith("_x-rayscan.pdf")
        assert upload["upload_url"].endswith(upload["file_id"])

        files = client.get(f"/api/leads/{lead.id}", headers=alice_headers).json()["files"]
        assert [f["file_id"] for f in files] == [upload["file_id"]]

    def test_download_redirect_respects_access(self, client, alice_headers, bob_headers, lead):
        upload = self._attach(client, alice_headers, lead)

        response = client.get(
            f"/api/files/{upload['file_id']}", headers=alice_headers, follow_redirects=False
        )
        assert response.status_code == 307
        assert response.headers["location"] == f"http://storage.test/download/{upload['file_id']}"

        response = client.get(
            f"/api/files/{upload['file_id']}", headers=bob_headers, follow_redirects=False
        )
        assert response.status_code == 403

    def test_remove_file(self, client, db, storage, alice_headers, lead):
        upload = self._attach(client, alice_headers, lead)
        response = client.delete(
            f"/api/leads/{lead.id}/files/{upload['file_id']}", headers=alice_headers
        )
        assert response.status_code == 200
        assert storage.deleted == [upload["file_id"]]
        db.expire_all()
        assert db.query(LeadFile).count() == 0

    def test_delete_lead_is_admin_only(self, client, alice_headers, lead):
        response = client.delete(f"/api/leads/{lead.id}", headers=alice_headers)
        assert response.status_code == 403

    def test_delete_lead_removes_blobs_after_commit(self, client, db, storage, alice_headers, admin_headers, lead):
        upload = self._attach(client, alice_headers, lead)
        storage.fail_on.add(upload["file_id"])

        response = client.delete(f"/api/leads/{lead.id}", headers=admin_headers)
        assert response.status_code == 200
        db.expire_all()
        assert db.query(Lead).count() == 0
        assert db.query(LeadFile).count() == 0

    def test_file_from_another_lead_is_forbidden(self, client, db, alice, alice_headers, lead):
        other = make_lead(db, alice, "+90 555 000 3333")
        upload = self._attach(client, alice_headers, other)

        response = client.post(
            f"/api/leads/{lead.id}/files",
            json={"file_id": upload["file_id"], "file_name": "x-ray scan.pdf"},
            headers=alice_headers,
        )
        assert response.status_code == 403
        db.expire_all()
        assert db.query(LeadFile).filter(LeadFile.lead_id == lead.id).count() == 0

    def test_registering_same_file_twice_conflicts(self, client, db, alice_headers, lead):
        upload = self._attach(client, alice_headers, lead)

        response = client.post(
            f"/api/leads/{lead.id}/files",
            json={"file_id": upload["file_id"], "file_name": "x-ray scan.pdf"},
            headers=alice_headers,
        )
        assert response.status_code == 409
        assert response.json()["error"] == "duplicate_file"
        db.expire_all()
        assert db.query(LeadFile).count() == 1

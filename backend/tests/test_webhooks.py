"""
Lead import webhook.
"""
import pytest

from conftest import make_lead
from youclinic.api.webhooks import _split_full_name
from youclinic.core.config import settings
from youclinic.models import Lead


@pytest.mark.parametrize(
    "full_name, expected",
    [
        ("Ayşe Yılmaz", ("Ayşe", "Yılmaz")),
        ("Mary Jane Watson", ("Mary", "Jane Watson")),
        ("Cher", ("Cher", "")),
        ("", ("", "")),
    ],
)
def test_split_full_name(full_name, expected):
    assert _split_full_name(full_name) == expected


class TestImportLead:
    def _post(self, client, **payload):
        body = {"fullName": "Ayşe Yılmaz", "phone": "+90 532 999 9999", "adName": "summer-hair"}
        body.update(payload)
        return client.post("/import-lead", json=body)

    def _leads(self, db):
        db.expire_all()
        return db.query(Lead).all()

    def test_creates_advertisement_lead(self, client, db, alice):
        response = self._post(client, assignedTo=str(alice.id), salesPerson="Alice")
        assert response.status_code == 200
        assert response.text == "OK"

        (lead,) = self._leads(db)
        assert (lead.first_name, lead.last_name) == ("Ayşe", "Yılmaz")
        assert lead.source == "advertisement"
        assert lead.status.value == "new"
        assert lead.ad_name == "summer-hair"
        assert lead.assigned_to == alice.id
        assert lead.sales_person == "Alice"

    def test_duplicate_phone_is_ignored(self, client, db, bob):
        make_lead(db, bob, "+90 532 999 9999")

        response = self._post(client)
        assert response.status_code == 200
        assert response.text == "OK"
        assert len(self._leads(db)) == 1

    def test_unknown_assignee_falls_back_to_default(self, client, db, monkeypatch, alice):
        monkeypatch.setattr(settings, "import_default_assignee_email", "alice@youclinic.com")

        self._post(client, assignedTo="00000000-0000-0000-0000-000000000000")
        (lead,) = self._leads(db)
        assert lead.assigned_to == alice.id
        assert lead.sales_person == "Marketing"

    def test_without_default_lead_is_unassigned(self, client, db):
        self._post(client)
        (lead,) = self._leads(db)
        assert lead.assigned_to is None

    def test_webhook_key(self, client, db, monkeypatch):
        monkeypatch.setattr(settings, "import_webhook_key", "s3cret")

        response = self._post(client)
        assert response.status_code == 403
        assert self._leads(db) == []

        response = client.post(
            "/import-lead",
            json={"fullName": "Can", "phone": "123"},
            headers={"X-Webhook-Key": "s3cret"},
        )
        assert response.status_code == 200
        assert len(self._leads(db)) == 1

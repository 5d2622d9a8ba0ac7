"""Integration tests for the registrations HTTP API.

These drive the JSON endpoints end to end against the test database.
Run with: pytest tests/test_registration_api.py -v
"""

import uuid
from datetime import timedelta

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from registrations import models

pytestmark = pytest.mark.django_db


def create_resource(api_client: APIClient, publish: bool = True, **overrides) -> dict:
    payload = {
        "kind": "event",
        "title": "Community Meetup",
        "starts_at": (timezone.now() + timedelta(days=7)).isoformat(),
        "capacity": 2,
    }
    payload.update(overrides)
    response = api_client.post("/api/resources", payload, format="json")
    assert response.status_code == 201, response.data
    resource = response.data
    if publish:
        response = api_client.post(
            f"/api/resources/{resource['id']}/transitions", {"event": "publish"}, format="json"
        )
        assert response.status_code == 200, response.data
        resource = response.data
    return resource


def register(api_client: APIClient, resource_id: str, email: str, **extra):
    payload = {"email": email, "agreed_to_terms": True}
    payload.update(extra)
    return api_client.post(f"/api/resources/{resource_id}/registrations", payload, format="json")


def transition(api_client: APIClient, resource_id: str, event: str):
    return api_client.post(
        f"/api/resources/{resource_id}/transitions", {"event": event}, format="json"
    )


class TestResources:
    """Tests for /api/resources"""

    def test_create_resource_starts_in_draft(self, api_client: APIClient):
        """Given a valid payload, creates a draft resource."""
        resource = create_resource(api_client, publish=False, kind="workshop")
        assert resource["status"] == "draft"
        assert resource["capacity"] == 2
        assert resource["certificate_threshold"] == 75
        assert models.Resource.objects.filter(pk=resource["id"]).exists()

    def test_create_resource_validation_error(self, api_client: APIClient):
        """Given a missing title and bad kind, returns field errors."""
        response = api_client.post(
            "/api/resources",
            {"kind": "party", "starts_at": timezone.now().isoformat()},
            format="json",
        )
        assert response.status_code == 400
        assert response.data["error"]["code"] == "VALIDATION_ERROR"
        assert set(response.data["error"]["fields"]) >= {"kind", "title"}

    def test_create_resource_in_past(self, api_client: APIClient):
        """Given a start time in the past, returns INVALID_INPUT."""
        response = api_client.post(
            "/api/resources",
            {
                "kind": "event",
                "title": "Yesterday",
                "starts_at": (timezone.now() - timedelta(days=1)).isoformat(),
            },
            format="json",
        )
        assert response.status_code == 400
        assert response.data["error"]["code"] == "INVALID_INPUT"

    def test_create_resource_with_lapsed_deadline(self, api_client: APIClient):
        """Given a registration deadline already in the past, returns INVALID_INPUT."""
        response = api_client.post(
            "/api/resources",
            {
                "kind": "event",
                "title": "Late Notice",
                "starts_at": (timezone.now() + timedelta(days=7)).isoformat(),
                "registration_deadline": (timezone.now() - timedelta(hours=1)).isoformat(),
            },
            format="json",
        )
        assert response.status_code == 400
        assert response.data["error"]["message"] == "Registration deadline cannot be in the past"

    def test_get_resource_not_found(self, api_client: APIClient):
        """Given resource does not exist, returns 404."""
        response = api_client.get(f"/api/resources/{uuid.uuid4()}")
        assert response.status_code == 404
        assert response.data["error"]["code"] == "RESOURCE_NOT_FOUND"

    def test_get_resource_invalid_id_format(self, api_client: APIClient):
        """Given invalid UUID, returns 400."""
        response = api_client.get("/api/resources/not-a-uuid")
        assert response.status_code == 400
        assert response.data["error"]["code"] == "INVALID_ID"

    def test_list_resources_by_status(self, api_client: APIClient):
        """Given draft and published resources, filters by status."""
        published = create_resource(api_client)
        create_resource(api_client, publish=False, title="Planning")
        response = api_client.get("/api/resources", {"status": "published"})
        assert response.status_code == 200
        assert [r["id"] for r in response.data] == [published["id"]]

    def test_patch_resource(self, api_client: APIClient):
        """Given an editable field, updates the resource."""
        resource = create_resource(api_client)
        response = api_client.patch(
            f"/api/resources/{resource['id']}", {"capacity": 10}, format="json"
        )
        assert response.status_code == 200
        assert response.data["capacity"] == 10

    def test_illegal_transition_conflict(self, api_client: APIClient):
        """Given a completed resource, publishing again returns 409."""
        resource = create_resource(api_client)
        transition(api_client, resource["id"], "start")
        transition(api_client, resource["id"], "complete")
        response = transition(api_client, resource["id"], "publish")
        assert response.status_code == 409
        assert response.data["error"]["code"] == "INVALID_TRANSITION"

    def test_delete_resource(self, api_client: APIClient):
        """Given a resource with registrations, deletes both."""
        resource = create_resource(api_client)
        register(api_client, resource["id"], "alice@x.com")
        response = api_client.delete(f"/api/resources/{resource['id']}")
        assert response.status_code == 204
        assert models.Registration.objects.count() == 0


class TestSubmitRegistration:
    """Tests for POST /api/resources/{id}/registrations"""

    def test_submit_returns_confirmed(self, api_client: APIClient):
        """Given a published resource, registration is created confirmed."""
        resource = create_resource(api_client)
        response = register(
            api_client, resource["id"], " Alice@X.com", full_name="Alice", details={"city": "Accra"}
        )
        assert response.status_code == 201
        assert response.data["status"] == "confirmed"
        assert response.data["email"] == "alice@x.com"
        assert response.data["details"] == {"city": "Accra"}
        assert response.data["registration_number"].startswith("REG-")
        assert response.data["payment_status"] == "unpaid"
        assert response.data["certificate_requested"] is False
        assert response.data["agreed_at"] is not None

    def test_requires_approval_then_confirm(self, api_client: APIClient):
        """Given a resource requiring approval, registration waits for confirm."""
        resource = create_resource(api_client, requires_approval=True)
        response = register(api_client, resource["id"], "alice@x.com")
        assert response.data["status"] == "pending"
        response = api_client.post(f"/api/registrations/{response.data['id']}/confirm")
        assert response.status_code == 200
        assert response.data["status"] == "confirmed"

    def test_terms_must_be_accepted(self, api_client: APIClient):
        """Given agreed_to_terms false, returns a validation error."""
        resource = create_resource(api_client)
        response = register(api_client, resource["id"], "alice@x.com", agreed_to_terms=False)
        assert response.status_code == 400
        assert "agreed_to_terms" in response.data["error"]["fields"]

    def test_duplicate_returns_existing_id(self, api_client: APIClient):
        """Given an active registration, a second submission returns 409 with its id."""
        resource = create_resource(api_client)
        first = register(api_client, resource["id"], "alice@x.com")
        response = register(api_client, resource["id"], "ALICE@x.com")
        assert response.status_code == 409
        assert response.data["error"]["code"] == "DUPLICATE_REGISTRATION"
        assert response.data["error"]["existing_registration_id"] == first.data["id"]

    def test_draft_resource_not_accepting(self, api_client: APIClient):
        """Given a draft resource, returns 422."""
        resource = create_resource(api_client, publish=False)
        response = register(api_client, resource["id"], "alice@x.com")
        assert response.status_code == 422
        assert response.data["error"]["code"] == "RESOURCE_NOT_ACCEPTING_REGISTRATIONS"

    def test_unknown_resource(self, api_client: APIClient):
        """Given resource does not exist, returns 404."""
        response = register(api_client, str(uuid.uuid4()), "alice@x.com")
        assert response.status_code == 404


class TestEndToEnd:
    """Capacity two with alice, bob and carol."""

    def test_cancellation_frees_capacity(self, api_client: APIClient):
        """Given a full resource, a cancellation lets the next identity in."""
        resource = create_resource(api_client, capacity=2)
        alice = register(api_client, resource["id"], "alice@x.com")
        bob = register(api_client, resource["id"], "bob@x.com")
        assert alice.status_code == 201 and bob.status_code == 201

        carol = register(api_client, resource["id"], "carol@x.com")
        assert carol.status_code == 409
        assert carol.data["error"]["code"] == "CAPACITY_EXCEEDED"

        response = api_client.post(
            f"/api/registrations/{alice.data['id']}/cancel",
            {"actor": "registrant", "email": "alice@x.com", "reason": "Clash"},
            format="json",
        )
        assert response.status_code == 200
        assert response.data["status"] == "cancelled"
        assert response.data["cancelled_by"] == "registrant"

        carol = register(api_client, resource["id"], "carol@x.com")
        assert carol.status_code == 201
        assert carol.data["status"] == "confirmed"

        availability = api_client.get(f"/api/resources/{resource['id']}/availability")
        assert availability.data == {
            "resource_id": resource["id"],
            "capacity": 2,
            "admitted": 2,
            "remaining": 0,
        }


class TestRegistrationLifecycle:
    """Tests for cancel, attendance, feedback and certificate endpoints."""

    def test_registrant_cannot_cancel_other_identity(self, api_client: APIClient):
        """Given another identity, cancel returns 404."""
        resource = create_resource(api_client)
        alice = register(api_client, resource["id"], "alice@x.com")
        response = api_client.post(
            f"/api/registrations/{alice.data['id']}/cancel",
            {"actor": "registrant", "email": "mallory@x.com"},
            format="json",
        )
        assert response.status_code == 404
        assert response.data["error"]["code"] == "REGISTRATION_NOT_FOUND"

    def test_registrant_cancel_requires_email(self, api_client: APIClient):
        """Given a registrant actor without email, returns a validation error."""
        resource = create_resource(api_client)
        alice = register(api_client, resource["id"], "alice@x.com")
        response = api_client.post(
            f"/api/registrations/{alice.data['id']}/cancel", {"actor": "registrant"}, format="json"
        )
        assert response.status_code == 400
        assert response.data["error"]["code"] == "VALIDATION_ERROR"

    def test_registrant_cancel_with_unnormalizable_email(self, api_client: APIClient):
        """Given an address without a dotted domain, cancel returns 400 instead of failing."""
        resource = create_resource(api_client)
        alice = register(api_client, resource["id"], "alice@x.com")
        response = api_client.post(
            f"/api/registrations/{alice.data['id']}/cancel",
            {"actor": "registrant", "email": "someone@localhost"},
            format="json",
        )
        assert response.status_code == 400
        assert response.data["error"]["code"] == "INVALID_INPUT"
        stored = models.Registration.objects.get(pk=alice.data["id"])
        assert stored.status == "confirmed"

    def test_record_payment(self, api_client: APIClient):
        """Given an administrator payment update, returns the flagged registration."""
        resource = create_resource(api_client)
        alice = register(api_client, resource["id"], "alice@x.com")
        assert alice.data["payment_status"] == "unpaid"
        response = api_client.post(
            f"/api/registrations/{alice.data['id']}/payment",
            {"payment_status": "paid"},
            format="json",
        )
        assert response.status_code == 200
        assert response.data["payment_status"] == "paid"
        assert response.data["status"] == "confirmed"

    def test_record_payment_unknown_status(self, api_client: APIClient):
        """Given an unknown payment status, returns a validation error."""
        resource = create_resource(api_client)
        alice = register(api_client, resource["id"], "alice@x.com")
        response = api_client.post(
            f"/api/registrations/{alice.data['id']}/payment",
            {"payment_status": "refunded"},
            format="json",
        )
        assert response.status_code == 400
        assert "payment_status" in response.data["error"]["fields"]

    def test_attendance_before_start_rejected(self, api_client: APIClient):
        """Given a published resource that has not started, attendance returns 409."""
        resource = create_resource(api_client)
        alice = register(api_client, resource["id"], "alice@x.com")
        response = api_client.post(
            f"/api/registrations/{alice.data['id']}/attendance", {"attended": True}, format="json"
        )
        assert response.status_code == 409

    def test_attendance_feedback_and_certificate(self, api_client: APIClient):
        """Given an ongoing workshop, attendance unlocks feedback and a certificate."""
        resource = create_resource(api_client, kind="workshop", title="Digital Skills")
        alice = register(api_client, resource["id"], "alice@x.com", certificate_requested=True)
        transition(api_client, resource["id"], "start")
        registration_url = f"/api/registrations/{alice.data['id']}"

        response = api_client.post(
            f"{registration_url}/attendance",
            {"attended": True, "attendance_percentage": 80},
            format="json",
        )
        assert response.status_code == 200
        assert response.data["status"] == "attended"
        assert response.data["attendance_percentage"] == 80

        response = api_client.post(
            f"{registration_url}/feedback", {"rating": 5, "feedback": "Excellent"}, format="json"
        )
        assert response.status_code == 200
        assert response.data["rating"] == 5

        first = api_client.post(f"{registration_url}/certificate")
        second = api_client.post(f"{registration_url}/certificate")
        assert first.status_code == 200 and second.status_code == 200
        assert first.data["certificate_issued"] is True
        assert second.data["certificate_issued_at"] == first.data["certificate_issued_at"]

    def test_certificate_below_threshold(self, api_client: APIClient):
        """Given attendance below the workshop threshold, certificate returns 422."""
        resource = create_resource(api_client, kind="workshop", title="Digital Skills")
        alice = register(api_client, resource["id"], "alice@x.com", certificate_requested=True)
        transition(api_client, resource["id"], "start")
        api_client.post(
            f"/api/registrations/{alice.data['id']}/attendance",
            {"attended": True, "attendance_percentage": 40},
            format="json",
        )
        response = api_client.post(f"/api/registrations/{alice.data['id']}/certificate")
        assert response.status_code == 422
        assert response.data["error"]["code"] == "NOT_ELIGIBLE"

    def test_certificate_not_requested(self, api_client: APIClient):
        """Given a workshop participant who did not ask for one, certificate returns 422."""
        resource = create_resource(api_client, kind="workshop", title="Digital Skills")
        alice = register(api_client, resource["id"], "alice@x.com")
        transition(api_client, resource["id"], "start")
        api_client.post(
            f"/api/registrations/{alice.data['id']}/attendance",
            {"attended": True, "attendance_percentage": 100},
            format="json",
        )
        response = api_client.post(f"/api/registrations/{alice.data['id']}/certificate")
        assert response.status_code == 422
        assert response.data["error"]["message"] == "Participant did not request a certificate"

    def test_feedback_requires_attendance(self, api_client: APIClient):
        """Given a confirmed registration, feedback returns 422."""
        resource = create_resource(api_client)
        alice = register(api_client, resource["id"], "alice@x.com")
        response = api_client.post(
            f"/api/registrations/{alice.data['id']}/feedback", {"rating": 4}, format="json"
        )
        assert response.status_code == 422

    def test_feedback_rating_out_of_range(self, api_client: APIClient):
        """Given a rating of 6, returns a validation error."""
        resource = create_resource(api_client)
        alice = register(api_client, resource["id"], "alice@x.com")
        response = api_client.post(
            f"/api/registrations/{alice.data['id']}/feedback", {"rating": 6}, format="json"
        )
        assert response.status_code == 400
        assert "rating" in response.data["error"]["fields"]


class TestRegistrationQueries:
    """Tests for GET /api/registrations and lookups."""

    def test_lookup_by_number(self, api_client: APIClient):
        """Given a registration number, returns the registration."""
        resource = create_resource(api_client)
        alice = register(api_client, resource["id"], "alice@x.com")
        number = alice.data["registration_number"]
        response = api_client.get(f"/api/registrations/by-number/{number.lower()}")
        assert response.status_code == 200
        assert response.data["id"] == alice.data["id"]

    def test_lookup_unknown_number(self, api_client: APIClient):
        """Given an unknown number, returns 404."""
        response = api_client.get("/api/registrations/by-number/REG-NOPE-0000")
        assert response.status_code == 404

    def test_list_filters(self, api_client: APIClient):
        """Given registrations on two resources, filters by resource and email."""
        first = create_resource(api_client)
        second = create_resource(api_client, title="Another Meetup")
        register(api_client, first["id"], "alice@x.com")
        register(api_client, first["id"], "bob@x.com")
        register(api_client, second["id"], "alice@x.com")

        by_resource = api_client.get("/api/registrations", {"resource": first["id"]})
        assert len(by_resource.data) == 2
        by_email = api_client.get("/api/registrations", {"email": "alice@x.com"})
        assert {r["resource_id"] for r in by_email.data} == {first["id"], second["id"]}


    def test_list_filters_by_payment_status(self, api_client: APIClient):
        """Given one waived registration, the payment filter returns only it."""
        resource = create_resource(api_client)
        alice = register(api_client, resource["id"], "alice@x.com")
        register(api_client, resource["id"], "bob@x.com")
        api_client.post(
            f"/api/registrations/{alice.data['id']}/payment",
            {"payment_status": "waived"},
            format="json",
        )
        response = api_client.get("/api/registrations", {"payment_status": "waived"})
        assert [r["id"] for r in response.data] == [alice.data["id"]]

    def test_list_invalid_status(self, api_client: APIClient):
        """Given an unknown status filter, returns a validation error."""
        response = api_client.get("/api/registrations", {"status": "lost"})
        assert response.status_code == 400

    def test_delete_registration(self, api_client: APIClient):
        """Given an existing registration, deletes it."""
        resource = create_resource(api_client)
        alice = register(api_client, resource["id"], "alice@x.com")
        response = api_client.delete(f"/api/registrations/{alice.data['id']}")
        assert response.status_code == 204
        response = api_client.get(f"/api/registrations/{alice.data['id']}")
        assert response.status_code == 404

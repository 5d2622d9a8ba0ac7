"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details
"""

from django.conf import settings
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from registrations.domain.errors import DomainError, ErrorCode
from registrations.handlers.serializers import (
    AttendanceSerializer,
    AvailabilitySerializer,
    CancelSerializer,
    FeedbackSerializer,
    PaymentSerializer,
    RegistrationListQuerySerializer,
    RegistrationSerializer,
    RegistrationSubmitSerializer,
    ResourceCreateSerializer,
    ResourceListQuerySerializer,
    ResourceSerializer,
    ResourceUpdateSerializer,
    TransitionSerializer,
)
from registrations.services import RegistrationService, ResourceService
from registrations.stores.django_store import DjangoRegistrationStore

ERROR_STATUS = {
    ErrorCode.RESOURCE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.REGISTRATION_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.INVALID_ID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
    ErrorCode.DUPLICATE_REGISTRATION: status.HTTP_409_CONFLICT,
    ErrorCode.CAPACITY_EXCEEDED: status.HTTP_409_CONFLICT,
    ErrorCode.RESOURCE_NOT_ACCEPTING_REGISTRATIONS: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.PAST_DEADLINE: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.INVALID_TRANSITION: status.HTTP_409_CONFLICT,
    ErrorCode.NOT_ELIGIBLE: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.ADMISSION_TIMEOUT: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def registration_service() -> RegistrationService:
    return RegistrationService(
        DjangoRegistrationStore(),
        admission_timeout=settings.REGISTRATION_ADMISSION_TIMEOUT,
    )


def resource_service() -> ResourceService:
    return ResourceService(
        DjangoRegistrationStore(),
        admission_timeout=settings.REGISTRATION_ADMISSION_TIMEOUT,
        default_certificate_threshold=settings.REGISTRATION_CERTIFICATE_THRESHOLD,
    )


def error_response(error: DomainError) -> Response:
    body = {"error": {"code": error.code.value, "message": error.message}}
    if error.code is ErrorCode.DUPLICATE_REGISTRATION:
        body["error"]["existing_registration_id"] = error.existing_registration_id
    return Response(body, status=ERROR_STATUS.get(error.code, status.HTTP_400_BAD_REQUEST))


def validation_response(errors: dict) -> Response:
    return Response(
        {"error": {"code": "VALIDATION_ERROR", "message": "Invalid request", "fields": errors}},
        status=status.HTTP_400_BAD_REQUEST,
    )


class DomainAPIView(APIView):
    """APIView that renders domain errors as JSON error bodies."""

    def handle_exception(self, exc):
        if isinstance(exc, DomainError):
            return error_response(exc)
        return super().handle_exception(exc)


class ResourceListView(DomainAPIView):
    """Handler for GET/POST /api/resources"""

    def get(self, request: Request) -> Response:
        query = ResourceListQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return validation_response(query.errors)
        resources = resource_service().list_resources(query.validated_data.get("status"))
        return Response(ResourceSerializer(resources, many=True).data)

    def post(self, request: Request) -> Response:
        payload = ResourceCreateSerializer(data=request.data)
        if not payload.is_valid():
            return validation_response(payload.errors)
        resource = resource_service().create_resource(**payload.validated_data)
        return Response(ResourceSerializer(resource).data, status=status.HTTP_201_CREATED)


class ResourceDetailView(DomainAPIView):
    """Handler for GET/PATCH/DELETE /api/resources/{resource_id}"""

    def get(self, request: Request, resource_id: str) -> Response:
        resource = resource_service().get_resource(resource_id)
        return Response(ResourceSerializer(resource).data)

    def patch(self, request: Request, resource_id: str) -> Response:
        payload = ResourceUpdateSerializer(data=request.data, partial=True)
        if not payload.is_valid():
            return validation_response(payload.errors)
        resource = resource_service().update_resource(resource_id, **payload.validated_data)
        return Response(ResourceSerializer(resource).data)

    def delete(self, request: Request, resource_id: str) -> Response:
        resource_service().delete_resource(resource_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class ResourceTransitionView(DomainAPIView):
    """Handler for POST /api/resources/{resource_id}/transitions"""

    def post(self, request: Request, resource_id: str) -> Response:
        payload = TransitionSerializer(data=request.data)
        if not payload.is_valid():
            return validation_response(payload.errors)
        resource = resource_service().transition_resource(
            resource_id, payload.validated_data["event"]
        )
        return Response(ResourceSerializer(resource).data)


class ResourceAvailabilityView(DomainAPIView):
    """Handler for GET /api/resources/{resource_id}/availability"""

    def get(self, request: Request, resource_id: str) -> Response:
        availability = registration_service().availability(resource_id)
        return Response(AvailabilitySerializer(availability).data)


class ResourceRegistrationView(DomainAPIView):
    """Handler for POST /api/resources/{resource_id}/registrations"""

    def post(self, request: Request, resource_id: str) -> Response:
        payload = RegistrationSubmitSerializer(data=request.data)
        if not payload.is_valid():
            return validation_response(payload.errors)
        data = payload.validated_data
        registration = registration_service().submit_registration(
            resource_id,
            email=data["email"],
            full_name=data["full_name"],
            details=data["details"],
            certificate_requested=data["certificate_requested"],
            agreed_to_terms=data["agreed_to_terms"],
        )
        return Response(RegistrationSerializer(registration).data, status=status.HTTP_201_CREATED)


class RegistrationListView(DomainAPIView):
    """Handler for GET /api/registrations"""

    def get(self, request: Request) -> Response:
        query = RegistrationListQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return validation_response(query.errors)
        data = query.validated_data
        registrations = registration_service().list_registrations(
            resource_id=str(data["resource"]) if data.get("resource") else None,
            status=data.get("status"),
            email=data.get("email"),
            payment_status=data.get("payment_status"),
        )
        return Response(RegistrationSerializer(registrations, many=True).data)


class RegistrationDetailView(DomainAPIView):
    """Handler for GET/DELETE /api/registrations/{registration_id}"""

    def get(self, request: Request, registration_id: str) -> Response:
        registration = registration_service().get_registration(registration_id)
        return Response(RegistrationSerializer(registration).data)

    def delete(self, request: Request, registration_id: str) -> Response:
        registration_service().delete_registration(registration_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class RegistrationByNumberView(DomainAPIView):
    """Handler for GET /api/registrations/by-number/{registration_number}"""

    def get(self, request: Request, registration_number: str) -> Response:
        registration = registration_service().get_by_number(registration_number)
        return Response(RegistrationSerializer(registration).data)


class RegistrationConfirmView(DomainAPIView):
    """Handler for POST /api/registrations/{registration_id}/confirm"""

    def post(self, request: Request, registration_id: str) -> Response:
        registration = registration_service().confirm_registration(registration_id)
        return Response(RegistrationSerializer(registration).data)


class RegistrationCancelView(DomainAPIView):
    """Handler for POST /api/registrations/{registration_id}/cancel"""

    def post(self, request: Request, registration_id: str) -> Response:
        payload = CancelSerializer(data=request.data)
        if not payload.is_valid():
            return validation_response(payload.errors)
        data = payload.validated_data
        registration = registration_service().cancel_registration(
            registration_id,
            role=data["actor"],
            email=data.get("email"),
            reason=data.get("reason") or None,
        )
        return Response(RegistrationSerializer(registration).data)


class RegistrationPaymentView(DomainAPIView):
    """Handler for POST /api/registrations/{registration_id}/payment"""

    def post(self, request: Request, registration_id: str) -> Response:
        payload = PaymentSerializer(data=request.data)
        if not payload.is_valid():
            return validation_response(payload.errors)
        registration = registration_service().record_payment(
            registration_id, payload.validated_data["payment_status"]
        )
        return Response(RegistrationSerializer(registration).data)


class RegistrationAttendanceView(DomainAPIView):
    """Handler for POST /api/registrations/{registration_id}/attendance"""

    def post(self, request: Request, registration_id: str) -> Response:
        payload = AttendanceSerializer(data=request.data)
        if not payload.is_valid():
            return validation_response(payload.errors)
        registration = registration_service().mark_attendance(
            registration_id,
            attended=payload.validated_data["attended"],
            attendance_percentage=payload.validated_data.get("attendance_percentage"),
        )
        return Response(RegistrationSerializer(registration).data)


class RegistrationFeedbackView(DomainAPIView):
    """Handler for POST /api/registrations/{registration_id}/feedback"""

    def post(self, request: Request, registration_id: str) -> Response:
        payload = FeedbackSerializer(data=request.data)
        if not payload.is_valid():
            return validation_response(payload.errors)
        registration = registration_service().submit_feedback(
            registration_id,
            rating=payload.validated_data["rating"],
            feedback=payload.validated_data.get("feedback") or None,
        )
        return Response(RegistrationSerializer(registration).data)


class RegistrationCertificateView(DomainAPIView):
    """Handler for POST /api/registrations/{registration_id}/certificate"""

    def post(self, request: Request, registration_id: str) -> Response:
        registration = registration_service().issue_certificate(registration_id)
        return Response(RegistrationSerializer(registration).data)

from django.urls import path

from registrations.handlers import (
    RegistrationAttendanceView,
    RegistrationByNumberView,
    RegistrationCancelView,
    RegistrationCertificateView,
    RegistrationConfirmView,
    RegistrationDetailView,
    RegistrationFeedbackView,
    RegistrationListView,
    RegistrationPaymentView,
    ResourceAvailabilityView,
    ResourceDetailView,
    ResourceListView,
    ResourceRegistrationView,
    ResourceTransitionView,
)

urlpatterns = [
    path("resources", ResourceListView.as_view(), name="resource-list"),
    path("resources/<str:resource_id>", ResourceDetailView.as_view(), name="resource-detail"),
    path(
        "resources/<str:resource_id>/transitions",
        ResourceTransitionView.as_view(),
        name="resource-transition",
    ),
    path(
        "resources/<str:resource_id>/availability",
        ResourceAvailabilityView.as_view(),
        name="resource-availability",
    ),
    path(
        "resources/<str:resource_id>/registrations",
        ResourceRegistrationView.as_view(),
        name="resource-registration",
    ),
    path("registrations", RegistrationListView.as_view(), name="registration-list"),
    path(
        "registrations/by-number/<str:registration_number>",
        RegistrationByNumberView.as_view(),
        name="registration-by-number",
    ),
    path(
        "registrations/<str:registration_id>",
        RegistrationDetailView.as_view(),
        name="registration-detail",
    ),
    path(
        "registrations/<str:registration_id>/confirm",
        RegistrationConfirmView.as_view(),
        name="registration-confirm",
    ),
    path(
        "registrations/<str:registration_id>/cancel",
        RegistrationCancelView.as_view(),
        name="registration-cancel",
    ),
    path(
        "registrations/<str:registration_id>/payment",
        RegistrationPaymentView.as_view(),
        name="registration-payment",
    ),
    path(
        "registrations/<str:registration_id>/attendance",
        RegistrationAttendanceView.as_view(),
        name="registration-attendance",
    ),
    path(
        "registrations/<str:registration_id>/feedback",
        RegistrationFeedbackView.as_view(),
        name="registration-feedback",
    ),
    path(
        "registrations/<str:registration_id>/certificate",
        RegistrationCertificateView.as_view(),
        name="registration-certificate",
    ),
]

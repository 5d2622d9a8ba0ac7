from registrations.handlers.views import (
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

__all__ = [
    "RegistrationAttendanceView",
    "RegistrationByNumberView",
    "RegistrationCancelView",
    "RegistrationCertificateView",
    "RegistrationConfirmView",
    "RegistrationDetailView",
    "RegistrationFeedbackView",
    "RegistrationListView",
    "RegistrationPaymentView",
    "ResourceAvailabilityView",
    "ResourceDetailView",
    "ResourceListView",
    "ResourceRegistrationView",
    "ResourceTransitionView",
]

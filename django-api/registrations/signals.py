"""Domain signals for side effects owned by external collaborators.

Services send these after the change is stored. Receivers (notification
delivery, certificate artifact generation) must not raise back into the
registration flow; failures are logged and dropped.
"""

import logging

from django.dispatch import Signal, receiver

logger = logging.getLogger(__name__)

# sender=service class, registration=Registration
registration_admitted = Signal()
registration_confirmed = Signal()
registration_cancelled = Signal()
attendance_marked = Signal()
certificate_issued = Signal()

# sender=service class, resource=Resource, event=ResourceEvent
resource_transitioned = Signal()


def dispatch(signal: Signal, sender: type, **payload) -> None:
    """Send ``signal`` without letting receivers fail the caller."""
    for handler, response in signal.send_robust(sender=sender, **payload):
        if isinstance(response, Exception):
            logger.error(
                "Signal receiver %s failed",
                getattr(handler, "__qualname__", handler),
                exc_info=response,
            )


@receiver(certificate_issued)
def log_certificate_issued(sender, registration, **kwargs):
    """Record the hand-off to certificate artifact generation."""
    logger.info(
        "Certificate issued for registration %s (%s)",
        registration.id,
        registration.registration_number,
    )

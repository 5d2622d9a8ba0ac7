from registrations.services.registration_service import RegistrationService
from registrations.services.resource_service import ResourceService

__all__ = ["RegistrationService", "ResourceService"]

"""Domain errors raised by services and translated to HTTP responses by routers"""

from typing import List, Optional


class CompetitionError(Exception):
    """Base class for all domain errors"""

    message = "Request failed"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class ValidationError(CompetitionError):
    """Malformed or missing input, with field-level messages"""

    message = "Validation failed"

    def __init__(self, errors: List[dict], message: Optional[str] = None):
        super().__init__(message)
        self.errors = errors


class NotFoundError(CompetitionError):
    message = "Resource not found"


class CompetitionNotFound(NotFoundError):
    message = "Competition not found"


class CompetitionUnavailable(NotFoundError):
    message = "Competition not found or registration deadline has passed"


class RegistrationNotFound(NotFoundError):
    message = "Registration not found"


class RegionNotFound(NotFoundError):
    message = "Region not found for this competition"


class ConflictError(CompetitionError):
    message = "Conflicting resource"


class DuplicateTeamName(ConflictError):
    message = "Team name already exists for this competition"


class PersistenceError(CompetitionError):
    """Transactional write failed; the enclosing transaction was rolled back"""

    message = "Failed to save changes"


class DeliveryError(CompetitionError):
    """Mail transport rejected or failed to accept a message"""

    message = "Email delivery failed"


class RenderError(CompetitionError):
    """Certificate or pass artifact could not be produced"""

    message = "Failed to render artifact"


class InvalidTeamCodeFormat(ValueError):
    """Team code does not match NNN-XXXXXX"""

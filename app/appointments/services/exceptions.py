# appointments/services/exceptions.py
from rest_framework import status


# ============================================================================
# CUSTOM EXCEPTIONS
# ============================================================================

class SchedulingServiceError(Exception):
    """
    Base exception for booking and scheduling errors.

    Each subclass carries a stable ``kind`` and the HTTP status the API
    layer answers with.
    """
    kind = 'error'
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message, details=None):
        super().__init__(message)
        self.message = str(message)
        self.details = details or {}

    def to_dict(self):
        payload = {'error': self.message, 'kind': self.kind}
        if self.details:
            payload['details'] = self.details
        return payload


class BookingValidationError(SchedulingServiceError):
    """Raised when input is missing, malformed or out of range"""
    kind = 'validation_error'
    status_code = status.HTTP_400_BAD_REQUEST


class ResourceNotFoundError(SchedulingServiceError):
    """Raised when a referenced order, appointment, doctor, service or slot does not exist"""
    kind = 'not_found'
    status_code = status.HTTP_404_NOT_FOUND


class BookingConflictError(SchedulingServiceError):
    """Raised when a slot is taken or a uniqueness rule would be violated"""
    kind = 'conflict'
    status_code = status.HTTP_409_CONFLICT


class InvalidStateTransitionError(SchedulingServiceError):
    """Raised when a status change is not allowed from the current status"""
    kind = 'state_error'
    status_code = status.HTTP_409_CONFLICT


class UnauthorizedActionError(SchedulingServiceError):
    """Raised when the actor does not own the resource"""
    kind = 'unauthorized'
    status_code = status.HTTP_403_FORBIDDEN

# appointments/services/__init__.py

from .exceptions import (
    SchedulingServiceError,
    BookingValidationError,
    ResourceNotFoundError,
    BookingConflictError,
    InvalidStateTransitionError,
    UnauthorizedActionError,
)
from .unit_of_work import UnitOfWork
from .availability_service import AvailabilityCalendarService
from .aggregate_service import AggregateConsistencyService
from .booking_service import OrderBookingService
from .lifecycle_service import AppointmentLifecycleService
from .query_service import SchedulingQueryService
from .session_service import SessionService

# appointments/services/query_service.py
import math
from typing import Any, Dict, Optional

from django.conf import settings

from doctors.services import DoctorDirectory
from ..models import Appointment
from .exceptions import BookingValidationError, ResourceNotFoundError
from .unit_of_work import UnitOfWork
from .validation import coerce_date, require_int


class SchedulingQueryService:
    """
    Read-side appointment queries for calendars and dashboards
    """

    def __init__(self, uow: Optional[UnitOfWork] = None, doctors: Optional[DoctorDirectory] = None):
        self.uow = uow or UnitOfWork()
        self.doctors = doctors or DoctorDirectory(using=self.uow.using)

    def _appointments(self):
        return self.uow.query(Appointment).select_related(
            'order__client__user', 'order__doctor', 'order__service', 'availability'
        )

    def all_appointments(self):
        return self._appointments().order_by('-scheduled_at', '-pk')

    def appointments_for_week(self, start, end):
        """
        Appointments scheduled between two dates, both inclusive, earliest first
        """
        start = coerce_date('start', start)
        end = coerce_date('end', end)
        if start > end:
            raise BookingValidationError("start must be on or before end")

        return self._appointments().filter(
            scheduled_at__date__gte=start,
            scheduled_at__date__lte=end,
        ).order_by('scheduled_at', 'pk')

    def appointments_for_doctor(self, doctor_id, page=1, limit=None) -> Dict[str, Any]:
        """
        One page of a doctor's appointments, newest first
        """
        require_int('doctor_id', doctor_id)
        page = require_int('page', page)
        limit = require_int('limit', limit if limit is not None else settings.DOCTOR_APPOINTMENTS_PAGE_SIZE)

        if not self.doctors.exists(doctor_id):
            raise ResourceNotFoundError("Doctor not found")

        queryset = self._appointments().filter(order__doctor_id=doctor_id).order_by('-scheduled_at', '-pk')
        total = queryset.count()
        offset = (page - 1) * limit

        return {
            'appointments': list(queryset[offset:offset + limit]),
            'total': total,
            'page': page,
            'total_pages': math.ceil(total / limit) if total else 0,
        }

    def appointments_for_client(self, client_id):
        return self._appointments().filter(order__client_id=client_id).order_by('-scheduled_at', '-pk')

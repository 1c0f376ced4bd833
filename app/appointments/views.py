# appointments/views.py
from rest_framework import status, permissions
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet
from django.utils.translation import gettext_lazy as _
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes
import logging

from clients.services import ClientService
from .models import Appointment, AvailabilitySlot, Order, Session
from .serializers import (
    AppointmentCancelSerializer,
    AppointmentCompleteSerializer,
    AppointmentRescheduleSerializer,
    AppointmentSerializer,
    AppointmentStatusSerializer,
    AvailabilityCreateSerializer,
    AvailabilityFilterSerializer,
    AvailabilitySlotSerializer,
    AvailabilityUpdateSerializer,
    DoctorAppointmentsQuerySerializer,
    OrderCreateSerializer,
    OrderSerializer,
    OrderStatusSerializer,
    OrderUpdateSerializer,
    SessionCreateSerializer,
    SessionSerializer,
    SessionStatusSerializer,
    SessionUpdateSerializer,
    WeekRangeSerializer,
)
from .services import (
    AppointmentLifecycleService,
    AvailabilityCalendarService,
    BookingValidationError,
    OrderBookingService,
    SchedulingQueryService,
    SchedulingServiceError,
    SessionService,
    UnauthorizedActionError,
)
from .permissions import IsClient, IsClientOrPlatformAdmin, IsPlatformAdmin

logger = logging.getLogger(__name__)


class SchedulingViewMixin:
    """
    Shared helpers: acting client lookup and translation of service errors
    into API responses
    """

    def get_acting_client_id(self):
        client = ClientService.get_client_by_user(self.request.user)
        return client.pk if client else None

    def is_platform_admin(self):
        user = self.request.user
        return bool(user.is_authenticated and user.is_platform_admin)

    def ensure_owner_or_admin(self, client_id):
        if self.is_platform_admin():
            return
        if client_id is None or client_id != self.get_acting_client_id():
            raise UnauthorizedActionError(_("You do not have access to this resource"))

    def service_error_response(self, error: SchedulingServiceError):
        return Response(error.to_dict(), status=error.status_code)

    def unexpected_error_response(self, operation, error):
        logger.exception(f"Unexpected error during {operation} for {self.request.user}: {str(error)}")
        return Response({
            'error': _('An unexpected error occurred'),
            'kind': 'internal_error'
        }, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


class OrderViewSet(SchedulingViewMixin, GenericViewSet):
    """
    Orders: booking, status transitions and admin maintenance
    """
    queryset = Order.objects.all()
    serializer_class = OrderSerializer
    lookup_value_regex = r'\d+'

    def get_permissions(self):
        """Set permissions based on action"""
        if self.action in ['create', 'list', 'retrieve']:
            permission_classes = [permissions.IsAuthenticated, IsClientOrPlatformAdmin]
        else:
            permission_classes = [permissions.IsAuthenticated, IsPlatformAdmin]
        return [permission() for permission in permission_classes]

    def get_booking_service(self):
        return OrderBookingService()

    @extend_schema(
        responses={200: OrderSerializer(many=True)},
        description="List orders. Admins see all orders, clients see their own.",
        tags=['Orders']
    )
    def list(self, request):
        try:
            client_id = None if self.is_platform_admin() else self.get_acting_client_id()
            queryset = self.get_booking_service().list_orders(client_id=client_id)
            page = self.paginate_queryset(queryset)
            if page is not None:
                return self.get_paginated_response(OrderSerializer(page, many=True).data)
            return Response(OrderSerializer(queryset, many=True).data)
        except SchedulingServiceError as e:
            return self.service_error_response(e)
        except Exception as e:
            return self.unexpected_error_response('order listing', e)

    @extend_schema(
        request=OrderCreateSerializer,
        responses={
            201: OrderSerializer,
            400: {'description': 'Invalid order data'},
            404: {'description': 'Doctor, service, client or slot not found'},
            409: {'description': 'A selected slot is no longer available'}
        },
        description="Create an order, optionally reserving availability slots",
        tags=['Orders']
    )
    def create(self, request):
        """
        Create an order
        POST /api/orders/
        """
        serializer = OrderCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            data = dict(serializer.validated_data)
            requested_client_id = data.pop('client_id', None)

            if self.is_platform_admin():
                if requested_client_id is None:
                    raise BookingValidationError(_("client_id is required"))
                client_id = requested_client_id
            else:
                client_id = self.get_acting_client_id()
                if requested_client_id is not None and requested_client_id != client_id:
                    raise UnauthorizedActionError(_("Clients can only place orders for themselves"))

            order = self.get_booking_service().create_order(client_id=client_id, **data)
            order = self.get_booking_service().get_order(order.pk)

            logger.info(f"Order {order.pk} placed by {request.user.email}")
            return Response({
                'message': _('Order created successfully'),
                'order': OrderSerializer(order).data
            }, status=status.HTTP_201_CREATED)

        except SchedulingServiceError as e:
            return self.service_error_response(e)
        except Exception as e:
            return self.unexpected_error_response('order creation', e)

    @extend_schema(responses={200: OrderSerializer}, tags=['Orders'])
    def retrieve(self, request, pk=None):
        try:
            order = self.get_booking_service().get_order(int(pk))
            self.ensure_owner_or_admin(order.client_id)
            return Response(OrderSerializer(order).data)
        except SchedulingServiceError as e:
            return self.service_error_response(e)
        except Exception as e:
            return self.unexpected_error_response('order retrieval', e)

    @extend_schema(
        request=OrderUpdateSerializer,
        responses={200: OrderSerializer},
        description="Update order fields (admin)",
        tags=['Orders']
    )
    def partial_update(self, request, pk=None):
        serializer = OrderUpdateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            order = self.get_booking_service().update_order(int(pk), **serializer.validated_data)
            return Response({
                'message': _('Order updated successfully'),
                'order': OrderSerializer(order).data
            })
        except SchedulingServiceError as e:
            return self.service_error_response(e)
        except Exception as e:
            return self.unexpected_error_response('order update', e)

    @extend_schema(responses={204: None}, description="Delete an order and its appointments (admin)", tags=['Orders'])
    def destroy(self, request, pk=None):
        try:
            self.get_booking_service().delete_order(int(pk))
            logger.info(f"Order {pk} deleted by {request.user.email}")
            return Response(status=status.HTTP_204_NO_CONTENT)
        except SchedulingServiceError as e:
            return self.service_error_response(e)
        except Exception as e:
            return self.unexpected_error_response('order deletion', e)

    @extend_schema(
        request=OrderStatusSerializer,
        responses={
            200: OrderSerializer,
            409: {'description': 'Transition not allowed from the current status'}
        },
        description="Transition order status; the first confirmation generates weekly appointments",
        tags=['Orders']
    )
    @action(detail=True, methods=['patch'], url_path='status')
    def change_status(self, request, pk=None):
        """
        PATCH /api/orders/{id}/status/
        """
        serializer = OrderStatusSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            order = self.get_booking_service().transition_order_status(
                int(pk), serializer.validated_data['status']
            )
            return Response({
                'message': _('Order status updated'),
                'order': OrderSerializer(order).data
            })
        except SchedulingServiceError as e:
            return self.service_error_response(e)
        except Exception as e:
            return self.unexpected_error_response('order status change', e)


class AppointmentViewSet(SchedulingViewMixin, GenericViewSet):
    """
    Appointment lifecycle and calendar queries
    """
    queryset = Appointment.objects.all()
    serializer_class = AppointmentSerializer
    lookup_value_regex = r'\d+'

    def get_permissions(self):
        """Set permissions based on action"""
        if self.action in ['my', 'cancel']:
            permission_classes = [permissions.IsAuthenticated, IsClient]
        elif self.action == 'retrieve':
            permission_classes = [permissions.IsAuthenticated, IsClientOrPlatformAdmin]
        else:
            permission_classes = [permissions.IsAuthenticated, IsPlatformAdmin]
        return [permission() for permission in permission_classes]

    def get_lifecycle_service(self):
        return AppointmentLifecycleService()

    def get_query_service(self):
        return SchedulingQueryService()

    @extend_schema(responses={200: AppointmentSerializer(many=True)}, description="All appointments (admin)", tags=['Appointments'])
    def list(self, request):
        try:
            queryset = self.get_query_service().all_appointments()
            page = self.paginate_queryset(queryset)
            if page is not None:
                return self.get_paginated_response(AppointmentSerializer(page, many=True).data)
            return Response(AppointmentSerializer(queryset, many=True).data)
        except Exception as e:
            return self.unexpected_error_response('appointment listing', e)

    @extend_schema(responses={200: AppointmentSerializer}, tags=['Appointments'])
    def retrieve(self, request, pk=None):
        try:
            appointment = self.get_lifecycle_service().get_appointment(int(pk))
            self.ensure_owner_or_admin(appointment.order.client_id)
            return Response(AppointmentSerializer(appointment).data)
        except SchedulingServiceError as e:
            return self.service_error_response(e)
        except Exception as e:
            return self.unexpected_error_response('appointment retrieval', e)

    @extend_schema(
        responses={200: AppointmentSerializer(many=True)},
        description="Current client's appointments with order progress, newest first",
        tags=['Appointments']
    )
    @action(detail=False, methods=['get'])
    def my(self, request):
        """
        GET /api/appointments/my/
        """
        try:
            appointments = self.get_query_service().appointments_for_client(self.get_acting_client_id())
            data = AppointmentSerializer(appointments, many=True).data
            return Response({'count': len(data), 'appointments': data})
        except SchedulingServiceError as e:
            return self.service_error_response(e)
        except Exception as e:
            return self.unexpected_error_response('client appointment listing', e)

    @extend_schema(
        parameters=[
            OpenApiParameter('start', OpenApiTypes.DATE, description='First day (inclusive)', required=True),
            OpenApiParameter('end', OpenApiTypes.DATE, description='Last day (inclusive)', required=True),
        ],
        responses={200: AppointmentSerializer(many=True)},
        description="Appointments in a date range, earliest first (admin)",
        tags=['Appointments']
    )
    @action(detail=False, methods=['get'])
    def week(self, request):
        """
        GET /api/appointments/week/?start=YYYY-MM-DD&end=YYYY-MM-DD
        """
        query = WeekRangeSerializer(data=request.query_params.dict())
        if not query.is_valid():
            return Response(query.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            appointments = self.get_query_service().appointments_for_week(
                query.validated_data['start'], query.validated_data['end']
            )
            data = AppointmentSerializer(appointments, many=True).data
            return Response({'count': len(data), 'appointments': data})
        except SchedulingServiceError as e:
            return self.service_error_response(e)
        except Exception as e:
            return self.unexpected_error_response('weekly appointment listing', e)

    @extend_schema(
        parameters=[
            OpenApiParameter('page', OpenApiTypes.INT, description='Page number, from 1'),
            OpenApiParameter('limit', OpenApiTypes.INT, description='Page size'),
        ],
        responses={200: AppointmentSerializer(many=True)},
        description="Paginated appointments of a doctor, newest first (admin)",
        tags=['Appointments']
    )
    @action(detail=False, methods=['get'], url_path=r'doctor/(?P<doctor_id>\d+)')
    def doctor(self, request, doctor_id=None):
        """
        GET /api/appointments/doctor/{doctor_id}/?page=&limit=
        """
        query = DoctorAppointmentsQuerySerializer(data=request.query_params.dict())
        if not query.is_valid():
            return Response(query.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            result = self.get_query_service().appointments_for_doctor(
                int(doctor_id),
                page=query.validated_data['page'],
                limit=query.validated_data.get('limit'),
            )
            return Response({
                'appointments': AppointmentSerializer(result['appointments'], many=True).data,
                'total': result['total'],
                'page': result['page'],
                'total_pages': result['total_pages'],
            })
        except SchedulingServiceError as e:
            return self.service_error_response(e)
        except Exception as e:
            return self.unexpected_error_response('doctor appointment listing', e)

    @extend_schema(
        request=AppointmentCancelSerializer,
        responses={
            200: AppointmentSerializer,
            403: {'description': 'Appointment belongs to another client'},
            409: {'description': 'Appointment already completed or cancelled'}
        },
        description="Cancel one of the current client's appointments",
        tags=['Appointments']
    )
    @action(detail=True, methods=['put'])
    def cancel(self, request, pk=None):
        serializer = AppointmentCancelSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            appointment = self.get_lifecycle_service().cancel(int(pk), self.get_acting_client_id())
            logger.info(f"Appointment {pk} cancelled by {request.user.email}")
            return Response({
                'message': _('Appointment cancelled successfully'),
                'appointment': AppointmentSerializer(appointment).data
            })
        except SchedulingServiceError as e:
            return self.service_error_response(e)
        except Exception as e:
            return self.unexpected_error_response('appointment cancellation', e)

    @extend_schema(
        request=AppointmentCompleteSerializer,
        responses={200: AppointmentSerializer},
        description="Mark an appointment completed and update the order's completed sessions (admin)",
        tags=['Appointments']
    )
    @action(detail=True, methods=['put'])
    def complete(self, request, pk=None):
        serializer = AppointmentCompleteSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            appointment = self.get_lifecycle_service().complete(
                int(pk), serializer.validated_data.get('completion_notes')
            )
            return Response({
                'message': _('Appointment completed'),
                'appointment': AppointmentSerializer(appointment).data
            })
        except SchedulingServiceError as e:
            return self.service_error_response(e)
        except Exception as e:
            return self.unexpected_error_response('appointment completion', e)

    @extend_schema(
        request=AppointmentStatusSerializer,
        responses={200: AppointmentSerializer},
        description="Set any appointment status (admin)",
        tags=['Appointments']
    )
    @action(detail=True, methods=['put'], url_path='status')
    def update_status(self, request, pk=None):
        serializer = AppointmentStatusSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            data = serializer.validated_data
            appointment = self.get_lifecycle_service().update_status(
                int(pk),
                data['status'],
                notes=data.get('notes'),
                completion_notes=data.get('completion_notes'),
            )
            return Response({
                'message': _('Appointment status updated'),
                'appointment': AppointmentSerializer(appointment).data
            })
        except SchedulingServiceError as e:
            return self.service_error_response(e)
        except Exception as e:
            return self.unexpected_error_response('appointment status update', e)

    @extend_schema(
        request=AppointmentRescheduleSerializer,
        responses={200: AppointmentSerializer},
        description="Move an appointment to a new date and time (admin)",
        tags=['Appointments']
    )
    @action(detail=True, methods=['put'])
    def reschedule(self, request, pk=None):
        serializer = AppointmentRescheduleSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            appointment = self.get_lifecycle_service().reschedule(
                int(pk), serializer.validated_data['scheduled_at']
            )
            return Response({
                'message': _('Appointment rescheduled'),
                'appointment': AppointmentSerializer(appointment).data
            })
        except SchedulingServiceError as e:
            return self.service_error_response(e)
        except Exception as e:
            return self.unexpected_error_response('appointment reschedule', e)


class AvailabilityViewSet(SchedulingViewMixin, GenericViewSet):
    """
    Doctor availability slots
    """
    queryset = AvailabilitySlot.objects.all()
    serializer_class = AvailabilitySlotSerializer
    lookup_value_regex = r'\d+'

    def get_permissions(self):
        """Set permissions based on action"""
        if self.action in ['retrieve', 'doctor']:
            permission_classes = [permissions.IsAuthenticated]
        else:
            permission_classes = [permissions.IsAuthenticated, IsPlatformAdmin]
        return [permission() for permission in permission_classes]

    def get_calendar_service(self):
        return AvailabilityCalendarService()

    @extend_schema(
        request=AvailabilityCreateSerializer,
        responses={
            201: AvailabilitySlotSerializer,
            409: {'description': 'Slot already exists for this doctor'}
        },
        description="Publish an availability slot (admin)",
        tags=['Availability']
    )
    def create(self, request):
        serializer = AvailabilityCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            slot = self.get_calendar_service().create_slot(**serializer.validated_data)
            return Response({
                'message': _('Availability slot created'),
                'slot': AvailabilitySlotSerializer(slot).data
            }, status=status.HTTP_201_CREATED)
        except SchedulingServiceError as e:
            return self.service_error_response(e)
        except Exception as e:
            return self.unexpected_error_response('availability creation', e)

    @extend_schema(responses={200: AvailabilitySlotSerializer}, tags=['Availability'])
    def retrieve(self, request, pk=None):
        try:
            slot = self.get_calendar_service().get_slot(int(pk))
            return Response(AvailabilitySlotSerializer(slot).data)
        except SchedulingServiceError as e:
            return self.service_error_response(e)
        except Exception as e:
            return self.unexpected_error_response('availability retrieval', e)

    @extend_schema(
        request=AvailabilityUpdateSerializer,
        responses={200: AvailabilitySlotSerializer},
        description="Change a slot's date, times, status or active flag (admin)",
        tags=['Availability']
    )
    def update(self, request, pk=None):
        serializer = AvailabilityUpdateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            slot = self.get_calendar_service().update_slot(int(pk), **serializer.validated_data)
            return Response({
                'message': _('Availability slot updated'),
                'slot': AvailabilitySlotSerializer(slot).data
            })
        except SchedulingServiceError as e:
            return self.service_error_response(e)
        except Exception as e:
            return self.unexpected_error_response('availability update', e)

    @extend_schema(responses={204: None}, tags=['Availability'])
    def destroy(self, request, pk=None):
        try:
            self.get_calendar_service().delete_slot(int(pk))
            return Response(status=status.HTTP_204_NO_CONTENT)
        except SchedulingServiceError as e:
            return self.service_error_response(e)
        except Exception as e:
            return self.unexpected_error_response('availability deletion', e)

    @extend_schema(
        parameters=[
            OpenApiParameter('startDate', OpenApiTypes.DATE, description='Earliest date (inclusive)'),
            OpenApiParameter('endDate', OpenApiTypes.DATE, description='Latest date (inclusive)'),
            OpenApiParameter('status', OpenApiTypes.STR, description='available, booked or blocked'),
            OpenApiParameter('isActive', OpenApiTypes.BOOL, description='Filter by active flag'),
        ],
        responses={200: AvailabilitySlotSerializer(many=True)},
        description="A doctor's slots ordered by date then start time",
        tags=['Availability']
    )
    @action(detail=False, methods=['get'], url_path=r'doctor/(?P<doctor_id>\d+)')
    def doctor(self, request, doctor_id=None):
        """
        GET /api/availability/doctor/{doctor_id}/
        """
        query = AvailabilityFilterSerializer(data=request.query_params.dict())
        if not query.is_valid():
            return Response(query.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            filters = query.validated_data
            slots = self.get_calendar_service().list_available(
                int(doctor_id),
                date_from=filters.get('startDate'),
                date_to=filters.get('endDate'),
                status=filters.get('status'),
                is_active=filters.get('isActive'),
            )
            data = AvailabilitySlotSerializer(slots, many=True).data
            return Response({'count': len(data), 'slots': data})
        except SchedulingServiceError as e:
            return self.service_error_response(e)
        except Exception as e:
            return self.unexpected_error_response('availability listing', e)


class SessionViewSet(SchedulingViewMixin, GenericViewSet):
    """
    Session records of orders; status changes drive the order status
    """
    queryset = Session.objects.all()
    serializer_class = SessionSerializer
    lookup_value_regex = r'\d+'

    def get_permissions(self):
        """Set permissions based on action"""
        if self.action in ['retrieve', 'order']:
            permission_classes = [permissions.IsAuthenticated, IsClientOrPlatformAdmin]
        else:
            permission_classes = [permissions.IsAuthenticated, IsPlatformAdmin]
        return [permission() for permission in permission_classes]

    def get_session_service(self):
        return SessionService()

    @extend_schema(request=SessionCreateSerializer, responses={201: SessionSerializer}, tags=['Sessions'])
    def create(self, request):
        serializer = SessionCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            session = self.get_session_service().create_session(**serializer.validated_data)
            return Response({
                'message': _('Session created'),
                'session': SessionSerializer(session).data
            }, status=status.HTTP_201_CREATED)
        except SchedulingServiceError as e:
            return self.service_error_response(e)
        except Exception as e:
            return self.unexpected_error_response('session creation', e)

    @extend_schema(responses={200: SessionSerializer}, tags=['Sessions'])
    def retrieve(self, request, pk=None):
        try:
            session = self.get_session_service().get_session(int(pk))
            self.ensure_owner_or_admin(session.order.client_id)
            return Response(SessionSerializer(session).data)
        except SchedulingServiceError as e:
            return self.service_error_response(e)
        except Exception as e:
            return self.unexpected_error_response('session retrieval', e)

    @extend_schema(request=SessionUpdateSerializer, responses={200: SessionSerializer}, tags=['Sessions'])
    def update(self, request, pk=None):
        serializer = SessionUpdateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            session = self.get_session_service().update_session(int(pk), **serializer.validated_data)
            return Response({
                'message': _('Session updated'),
                'session': SessionSerializer(session).data
            })
        except SchedulingServiceError as e:
            return self.service_error_response(e)
        except Exception as e:
            return self.unexpected_error_response('session update', e)

    @extend_schema(responses={204: None}, tags=['Sessions'])
    def destroy(self, request, pk=None):
        try:
            self.get_session_service().delete_session(int(pk))
            return Response(status=status.HTTP_204_NO_CONTENT)
        except SchedulingServiceError as e:
            return self.service_error_response(e)
        except Exception as e:
            return self.unexpected_error_response('session deletion', e)

    @extend_schema(responses={200: SessionSerializer(many=True)}, description="Sessions of an order", tags=['Sessions'])
    @action(detail=False, methods=['get'], url_path=r'order/(?P<order_id>\d+)')
    def order(self, request, order_id=None):
        """
        GET /api/sessions/order/{order_id}/
        """
        try:
            service = self.get_session_service()
            sessions = service.list_for_order(int(order_id))
            if not self.is_platform_admin():
                owner_id = Order.objects.filter(pk=int(order_id)).values_list('client_id', flat=True).first()
                self.ensure_owner_or_admin(owner_id)
            data = SessionSerializer(sessions, many=True).data
            return Response({'count': len(data), 'sessions': data})
        except SchedulingServiceError as e:
            return self.service_error_response(e)
        except Exception as e:
            return self.unexpected_error_response('session listing', e)

    @extend_schema(
        request=SessionStatusSerializer,
        responses={200: SessionSerializer},
        description="Change session status and re-derive the order status (admin)",
        tags=['Sessions']
    )
    @action(detail=True, methods=['patch'], url_path='status')
    def update_status(self, request, pk=None):
        serializer = SessionStatusSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            session = self.get_session_service().update_status(int(pk), serializer.validated_data['status'])
            return Response({
                'message': _('Session status updated'),
                'session': SessionSerializer(session).data
            })
        except SchedulingServiceError as e:
            return self.service_error_response(e)
        except Exception as e:
            return self.unexpected_error_response('session status update', e)

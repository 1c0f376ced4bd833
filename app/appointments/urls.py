# appointments/urls.py
from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import (
    AppointmentViewSet,
    AvailabilityViewSet,
    OrderViewSet,
    SessionViewSet,
)

# Create router for ViewSets
router = DefaultRouter()
router.register('orders', OrderViewSet, basename='order')
router.register('appointments', AppointmentViewSet, basename='appointment')
router.register('availability', AvailabilityViewSet, basename='availability')
router.register('sessions', SessionViewSet, basename='session')

# URL patterns
urlpatterns = [
    path('', include(router.urls)),
]

# Resulting routes under /api/:
#
# Orders:
# - GET    /api/orders/                          -> list orders (admin: all, client: own)
# - POST   /api/orders/                          -> create order, optionally with availability_ids
# - GET    /api/orders/{id}/                     -> order with its appointments
# - PATCH  /api/orders/{id}/                     -> update order fields (admin)
# - DELETE /api/orders/{id}/                     -> delete order and its appointments (admin)
# - PATCH  /api/orders/{id}/status/              -> transition order status (admin)
#
# Appointments:
# - GET    /api/appointments/                    -> all appointments (admin)
# - GET    /api/appointments/{id}/               -> one appointment (admin or owning client)
# - GET    /api/appointments/my/                 -> current client's appointments
# - GET    /api/appointments/week/?start=&end=   -> appointments in a date range (admin)
# - GET    /api/appointments/doctor/{id}/        -> paginated appointments of a doctor (admin)
# - PUT    /api/appointments/{id}/cancel/        -> cancel own appointment (client)
# - PUT    /api/appointments/{id}/complete/      -> complete appointment (admin)
# - PUT    /api/appointments/{id}/status/        -> set any status (admin)
# - PUT    /api/appointments/{id}/reschedule/    -> move to a new time (admin)
#
# Availability:
# - POST   /api/availability/                    -> create slot (admin)
# - GET    /api/availability/doctor/{id}/        -> doctor's slots (startDate, endDate, status, isActive)
# - GET    /api/availability/{id}/               -> one slot
# - PUT    /api/availability/{id}/               -> update slot (admin)
# - DELETE /api/availability/{id}/               -> delete slot (admin)
#
# Sessions:
# - POST   /api/sessions/                        -> create session (admin)
# - GET    /api/sessions/order/{id}/             -> sessions of an order
# - GET    /api/sessions/{id}/                   -> one session
# - PUT    /api/sessions/{id}/                   -> update session (admin)
# - DELETE /api/sessions/{id}/                   -> delete session (admin)
# - PATCH  /api/sessions/{id}/status/            -> change status, re-derive order status (admin)

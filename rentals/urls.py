from django.urls import path

from . import views

app_name = "rentals"

urlpatterns = [
    path("dashboard/", views.dashboard, name="dashboard"),
    path("cars/available/", views.available_cars, name="available_cars"),
    path("cars/<int:pk>/availability/", views.car_availability, name="car_availability"),
    path("cars/<int:pk>/check/", views.car_check_availability, name="car_check_availability"),
    path("quote/", views.quote, name="quote"),
    path("bookings/", views.bookings, name="bookings"),
    path("bookings/<int:pk>/", views.booking_detail, name="booking_detail"),
    path("bookings/<int:pk>/reschedule/", views.booking_reschedule, name="booking_reschedule"),
    path("bookings/<int:pk>/reassign/", views.booking_reassign, name="booking_reassign"),
    path("bookings/<int:pk>/cancel/", views.booking_cancel, name="booking_cancel"),
]

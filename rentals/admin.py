from django.contrib import admin

from .models import Car, Customer, Rental
from .services.lifecycle import ContractLifecycleService
from .services.orm import DjangoFleetRepository
from .services.records import STATUS_CANCELLED


@admin.register(Car)
class CarAdmin(admin.ModelAdmin):
    list_display = (
        "plate_number",
        "make",
        "model",
        "year",
        "daily_rate",
        "rate_1_4",
        "rate_5_14",
        "rate_15_plus",
        "is_active",
    )
    list_filter = ("is_active",)
    search_fields = ("plate_number", "make", "model", "vin")


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ("full_name", "phone", "email", "license_number")
    search_fields = ("full_name", "email", "phone", "license_number")


@admin.register(Rental)
class RentalAdmin(admin.ModelAdmin):
    list_display = (
        "contract_number",
        "car",
        "customer",
        "start_date",
        "end_date",
        "daily_rate",
        "total_price",
        "status",
    )
    list_filter = ("status", "start_date", "end_date")
    search_fields = ("contract_number", "car__plate_number", "car__make", "car__model", "customer__full_name")
    # Bookings change through the booking service so every write is conflict-checked.
    readonly_fields = [field.name for field in Rental._meta.fields]
    actions = ["cancel_bookings"]

    def has_add_permission(self, request):
        return False

    @admin.action(description="Cancel selected bookings")
    def cancel_bookings(self, request, queryset):
        service = ContractLifecycleService(DjangoFleetRepository(created_by=request.user))
        cancelled = 0
        for rental in queryset.exclude(status=STATUS_CANCELLED):
            service.cancel_booking(rental.pk, reason=f"Cancelled from admin by {request.user}")
            cancelled += 1
        self.message_user(request, f"Cancelled {cancelled} booking(s).")

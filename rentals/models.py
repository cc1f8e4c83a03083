import random
from decimal import Decimal

from django.conf import settings
from django.db import IntegrityError, models, transaction

from .services.interval import Interval
from .services.records import STATUS_CANCELLED, STATUS_CONFIRMED, Contract, Vehicle


class Car(models.Model):
    plate_number = models.CharField(max_length=20, unique=True)
    make = models.CharField(max_length=50)
    model = models.CharField(max_length=50)
    year = models.PositiveIntegerField()
    vin = models.CharField(max_length=50, blank=True, null=True, help_text="VIN / chassis number.")
    daily_rate = models.DecimalField(max_digits=8, decimal_places=2)
    rate_1_4 = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Per-day rate for 1-4 day rentals.",
    )
    rate_5_14 = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Per-day rate for 5-14 day rentals.",
    )
    rate_15_plus = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Per-day rate for rentals of 15 days or more.",
    )
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["plate_number"]

    def __str__(self):
        return f"{self.plate_number} - {self.make} {self.model} ({self.year})"

    def to_record(self) -> Vehicle:
        return Vehicle(
            id=self.pk,
            plate_number=self.plate_number,
            daily_rate=self.daily_rate,
            make=self.make,
            model=self.model,
            year=self.year,
            is_active=self.is_active,
            tiered_rates=((15, self.rate_15_plus), (5, self.rate_5_14), (1, self.rate_1_4)),
        )


class Customer(models.Model):
    full_name = models.CharField(max_length=100)
    email = models.EmailField(blank=True, null=True)
    phone = models.CharField(max_length=30)
    license_number = models.CharField(max_length=50)
    notes = models.TextField(blank=True, null=True)

    def __str__(self):
        return self.full_name


class Rental(models.Model):
    # Upcoming/active/completed are derived from the dates at read time.
    STATUS_CHOICES = [
        (STATUS_CONFIRMED, "Confirmed"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    car = models.ForeignKey(Car, on_delete=models.PROTECT, related_name="rentals")
    customer = models.ForeignKey(Customer, on_delete=models.PROTECT, related_name="rentals")
    contract_number = models.CharField(
        max_length=5,
        unique=True,
        blank=True,
        null=True,
        help_text="Automatically generated 5-digit booking reference.",
    )
    start_date = models.DateField()
    end_date = models.DateField()
    daily_rate = models.DecimalField(
        max_digits=10,
        decimal_places=3,
        help_text="Per-day rate captured when the booking was confirmed.",
    )
    total_price = models.DecimalField(max_digits=10, decimal_places=2)
    notes = models.TextField(blank=True, default="")
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_CONFIRMED)
    cancelled_at = models.DateTimeField(blank=True, null=True)
    cancellation_reason = models.TextField(blank=True, default="")
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["start_date", "id"]
        indexes = [models.Index(fields=["car", "status", "start_date", "end_date"], name="rentals_car_period_idx")]

    def __str__(self):
        return self.deal_name

    @staticmethod
    def _generate_contract_number() -> str:
        return f"{random.randint(10000, 99999):05d}"

    @classmethod
    def generate_unique_contract_number(cls) -> str:
        """
        Generate a 5-digit number and retry if the candidate already exists.
        """
        for _ in range(50):
            candidate = cls._generate_contract_number()
            if not cls.objects.filter(contract_number=candidate).exists():
                return candidate
        raise RuntimeError("Could not generate a unique contract number.")

    def ensure_contract_number(self, force: bool = False):
        if self.contract_number and not force:
            return
        self.contract_number = self.generate_unique_contract_number()

    @property
    def deal_name(self) -> str:
        """
        Build a human-friendly deal name:
        {contract}/{plate}/{start date}
        """
        contract = self.contract_number or "-----"
        car_piece = self.car.plate_number if self.car_id else ""
        date_piece = self.start_date.strftime("%Y-%m-%d") if self.start_date else ""
        return f"{contract}/{car_piece}/{date_piece}"

    @property
    def interval(self) -> Interval:
        return Interval(self.start_date, self.end_date)

    def to_record(self) -> Contract:
        return Contract(
            id=self.pk,
            vehicle_id=self.car_id,
            customer_id=self.customer_id,
            interval=self.interval,
            daily_rate=self.daily_rate,
            total_price=self.total_price,
            status=self.status,
            notes=self.notes or "",
            contract_number=self.contract_number,
            cancelled_at=self.cancelled_at,
            cancellation_reason=self.cancellation_reason or "",
        )

    def save(self, *args, **kwargs):
        if not self._state.adding:
            return super().save(*args, **kwargs)
        attempts = 0
        while attempts < 3:
            if not self.contract_number:
                self.ensure_contract_number()
            try:
                with transaction.atomic():
                    return super().save(*args, **kwargs)
            except IntegrityError:
                # Contract number collision, try again with a fresh number.
                self.contract_number = None
                attempts += 1
        self.ensure_contract_number()
        return super().save(*args, **kwargs)

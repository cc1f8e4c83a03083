from decimal import Decimal

from django import forms

from .models import Rental
from .services.errors import InvalidIntervalError
from .services.interval import DATE_FORMATS, Interval
from .services.status import BOOKING_STATUSES


class PeriodForm(forms.Form):
    """Rental period parameters shared by the availability and booking endpoints."""

    start_date = forms.DateField(input_formats=DATE_FORMATS)
    end_date = forms.DateField(input_formats=DATE_FORMATS)

    def clean(self):
        cleaned_data = super().clean()
        start_date = cleaned_data.get("start_date")
        end_date = cleaned_data.get("end_date")
        if start_date and end_date:
            try:
                cleaned_data["interval"] = Interval(start_date, end_date)
            except InvalidIntervalError as exc:
                self.add_error("end_date", exc.message)
        return cleaned_data


class QuoteForm(PeriodForm):
    car = forms.IntegerField(required=False)
    daily_rate = forms.DecimalField(required=False, max_digits=10, decimal_places=3, min_value=Decimal("0.001"))

    def clean(self):
        cleaned_data = super().clean()
        if cleaned_data.get("car") is None and cleaned_data.get("daily_rate") is None:
            raise forms.ValidationError("Provide a car or a daily rate to quote.")
        return cleaned_data


class BookingForm(PeriodForm):
    car = forms.IntegerField()
    customer = forms.IntegerField()
    daily_rate = forms.DecimalField(
        required=False,
        max_digits=10,
        decimal_places=3,
        min_value=Decimal("0.001"),
        help_text="Overrides the car's own rate for this booking.",
    )
    notes = forms.CharField(required=False, widget=forms.Textarea)


class ReassignForm(forms.Form):
    car = forms.IntegerField()


class CancelForm(forms.Form):
    reason = forms.CharField(required=False, widget=forms.Textarea)


class BookingFilterForm(forms.Form):
    STATUS_FILTER_CHOICES = [("", "All")] + [(code, code.title()) for code in BOOKING_STATUSES] + Rental.STATUS_CHOICES

    status = forms.ChoiceField(required=False, choices=STATUS_FILTER_CHOICES)
    car = forms.IntegerField(required=False)
    customer = forms.IntegerField(required=False)

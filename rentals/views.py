import logging

from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from .forms import BookingFilterForm, BookingForm, CancelForm, PeriodForm, QuoteForm, ReassignForm
from .models import Car, Customer
from .services.errors import BookingError, ConflictError, NotFoundError
from .services.interval import length_in_days
from .services.lifecycle import ContractLifecycleService
from .services.orm import DjangoFleetRepository
from .services.stats import car_utilization, rental_status_breakdown, rentals_summary

logger = logging.getLogger(__name__)


def _service(request) -> ContractLifecycleService:
    return ContractLifecycleService(DjangoFleetRepository(created_by=request.user))


def _form_error_response(form):
    return JsonResponse({"message": "Validation error", "errors": form.errors.get_json_data()}, status=400)


def _error_response(exc: BookingError):
    payload = {"message": exc.message}
    if isinstance(exc, ConflictError):
        payload["conflict"] = exc.as_dict()
        status = 409
    elif isinstance(exc, NotFoundError):
        status = 404
    else:
        payload["field"] = getattr(exc, "field", None)
        status = 400
    logger.info("Booking request rejected (%s): %s", type(exc).__name__, exc.message)
    return JsonResponse(payload, status=status)


def _serialize_vehicle(vehicle):
    return {
        "id": vehicle.id,
        "label": vehicle.label,
        "plate_number": vehicle.plate_number,
        "make": vehicle.make,
        "model": vehicle.model,
        "year": vehicle.year,
        "daily_rate": vehicle.daily_rate,
        "is_active": vehicle.is_active,
    }


def _serialize_contract(contract, service: ContractLifecycleService):
    return {
        "id": contract.id,
        "contract_number": contract.contract_number,
        "car": contract.vehicle_id,
        "customer": contract.customer_id,
        "start_date": contract.interval.start,
        "end_date": contract.interval.end,
        "days": length_in_days(contract.interval),
        "daily_rate": contract.daily_rate,
        "total_price": contract.total_price,
        "status": contract.status,
        "booking_status": service.display_status(contract),
        "notes": contract.notes,
        "cancelled_at": contract.cancelled_at,
        "cancellation_reason": contract.cancellation_reason,
    }


@login_required
@require_GET
def available_cars(request):
    """Cars free for the whole requested period, each with a price quote."""
    form = PeriodForm(request.GET)
    if not form.is_valid():
        return _form_error_response(form)

    service = _service(request)
    try:
        available = service.find_available_with_prices(form.cleaned_data["interval"])
    except BookingError as exc:
        return _error_response(exc)

    results = []
    for item in available:
        results.append(
            {
                **_serialize_vehicle(item.vehicle),
                "quoted_rate": item.daily_rate,
                "total_price": item.total_price,
            }
        )
    return JsonResponse({"results": results})


@login_required
@require_GET
def car_availability(request, pk: int):
    """Booking calendar for a single car."""
    car = get_object_or_404(Car, pk=pk)
    service = _service(request)
    schedule = service.vehicle_schedule(car.pk)
    bookings = [
        {
            "id": entry["contract"].id,
            "contract_number": entry["contract"].contract_number,
            "customer": entry["contract"].customer_id,
            "start_date": entry["start_date"],
            "end_date": entry["end_date"],
            "status": entry["status"],
        }
        for entry in schedule
    ]
    return JsonResponse({"car": _serialize_vehicle(car.to_record()), "bookings": bookings})


@login_required
@require_GET
def car_check_availability(request, pk: int):
    car = get_object_or_404(Car, pk=pk)
    form = PeriodForm(request.GET)
    if not form.is_valid():
        return _form_error_response(form)

    service = _service(request)
    available, conflicts = service.check_availability(car.pk, form.cleaned_data["interval"])
    payload = {
        "available": available,
        "conflicting_bookings": [_serialize_contract(contract, service) for contract in conflicts],
    }
    if not available:
        payload["message"] = f"{car.plate_number} is booked for part of the requested period."
    return JsonResponse(payload)


@login_required
@require_GET
def quote(request):
    form = QuoteForm(request.GET)
    if not form.is_valid():
        return _form_error_response(form)

    interval = form.cleaned_data["interval"]
    daily_rate = form.cleaned_data.get("daily_rate")
    service = _service(request)
    try:
        if form.cleaned_data.get("car") is not None:
            days, rate, total = service.quote_vehicle(form.cleaned_data["car"], interval, daily_rate)
        else:
            days, rate, total = length_in_days(interval), daily_rate, service.quote_price(daily_rate, interval)
    except BookingError as exc:
        return _error_response(exc)
    return JsonResponse({"days": days, "daily_rate": rate, "total_price": total})


@login_required
@require_http_methods(["GET", "POST"])
def bookings(request):
    """List bookings (GET, filterable by status/car/customer) or create one (POST)."""
    service = _service(request)

    if request.method == "POST":
        form = BookingForm(request.POST)
        if not form.is_valid():
            return _form_error_response(form)
        data = form.cleaned_data
        try:
            contract = service.create_booking(
                vehicle_id=data["car"],
                customer_id=data["customer"],
                interval=data["interval"],
                daily_rate=data.get("daily_rate"),
                notes=data.get("notes", ""),
            )
        except BookingError as exc:
            return _error_response(exc)
        return JsonResponse(_serialize_contract(contract, service), status=201)

    form = BookingFilterForm(request.GET)
    if not form.is_valid():
        return _form_error_response(form)
    try:
        contracts = service.list_bookings(
            status=form.cleaned_data.get("status") or None,
            vehicle_id=form.cleaned_data.get("car"),
            customer_id=form.cleaned_data.get("customer"),
        )
    except BookingError as exc:
        return _error_response(exc)
    return JsonResponse({"results": [_serialize_contract(contract, service) for contract in contracts]})


@login_required
@require_GET
def booking_detail(request, pk: int):
    service = _service(request)
    try:
        contract = service.get_booking(pk)
    except BookingError as exc:
        return _error_response(exc)
    return JsonResponse(_serialize_contract(contract, service))


@login_required
@require_POST
def booking_reschedule(request, pk: int):
    form = PeriodForm(request.POST)
    if not form.is_valid():
        return _form_error_response(form)

    service = _service(request)
    try:
        contract = service.reschedule_booking(pk, form.cleaned_data["interval"])
    except BookingError as exc:
        return _error_response(exc)
    return JsonResponse(_serialize_contract(contract, service))


@login_required
@require_POST
def booking_reassign(request, pk: int):
    form = ReassignForm(request.POST)
    if not form.is_valid():
        return _form_error_response(form)

    service = _service(request)
    try:
        contract = service.reassign_vehicle(pk, form.cleaned_data["car"])
    except BookingError as exc:
        return _error_response(exc)
    return JsonResponse(_serialize_contract(contract, service))


@login_required
@require_POST
def booking_cancel(request, pk: int):
    form = CancelForm(request.POST)
    if not form.is_valid():
        return _form_error_response(form)

    service = _service(request)
    try:
        contract = service.cancel_booking(pk, reason=form.cleaned_data.get("reason", ""))
    except BookingError as exc:
        return _error_response(exc)
    return JsonResponse(_serialize_contract(contract, service))


@login_required
@require_GET
def dashboard(request):
    service = _service(request)
    today = service.today()
    contracts = service.repository.list_contracts(include_cancelled=True)
    summary = rentals_summary(contracts, today)
    status_counts = rental_status_breakdown(contracts, today)
    utilization = car_utilization(service.repository.list_vehicles(), contracts, today)[:5]

    chart_payload = {
        "status": {
            "labels": [code.title() for code in status_counts],
            "counts": list(status_counts.values()),
        },
        "topCars": {
            "labels": [row["vehicle"].label for row in utilization],
            "revenue": [float(row["revenue"]) for row in utilization],
            "counts": [row["num_rentals"] for row in utilization],
        },
    }
    return JsonResponse(
        {
            "cars_count": Car.objects.count(),
            "customers_count": Customer.objects.count(),
            **summary,
            "chart_payload": chart_payload,
        }
    )

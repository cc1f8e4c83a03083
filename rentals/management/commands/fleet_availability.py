from django.core.management.base import BaseCommand, CommandError

from rentals.services.errors import BookingError
from rentals.services.interval import Interval
from rentals.services.lifecycle import ContractLifecycleService
from rentals.services.orm import DjangoFleetRepository


class Command(BaseCommand):
    help = "List cars that are free for the whole period, with the quoted price."

    def add_arguments(self, parser):
        parser.add_argument("start_date", type=str, help="First rental day, e.g. 2024-06-01")
        parser.add_argument("end_date", type=str, help="Last rental day, e.g. 2024-06-10")
        parser.add_argument(
            "--include-inactive",
            action="store_true",
            help="Also list cars flagged inactive.",
        )

    def handle(self, *args, **options):
        service = ContractLifecycleService(
            DjangoFleetRepository(),
            include_inactive=True if options["include_inactive"] else None,
        )
        try:
            interval = Interval.parse(options["start_date"], options["end_date"])
            available = service.find_available_with_prices(interval)
        except BookingError as exc:
            raise CommandError(exc.message) from exc

        if not available:
            self.stdout.write(self.style.WARNING(f"No cars available for {interval}."))
            return

        for item in available:
            price = f"{item.total_price}" if item.total_price is not None else "no rate"
            self.stdout.write(f"{item.vehicle.label}\t{price}")
        self.stdout.write(self.style.SUCCESS(f"{len(available)} car(s) available for {interval}."))

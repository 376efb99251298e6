from django.core.management.base import BaseCommand, CommandError

from crm.services import items_stock_sync_service


class Command(BaseCommand):
    """Run the items -> stock on hand sync from the command line."""

    help = "Synchronise all items to stock on hand and log the outcome."

    def add_arguments(self, parser):
        parser.add_argument(
            "--refresh-view",
            action="store_true",
            help="Refresh the stock summary view after a successful sync.",
        )
        parser.add_argument(
            "--stats",
            type=int,
            metavar="DAYS",
            help="Only print sync statistics for the last DAYS days.",
        )

    def handle(self, *args, **options):
        if options["stats"]:
            stats = items_stock_sync_service.get_sync_statistics(options["stats"])
            for key, value in stats.items():
                self.stdout.write(f"{key}: {value}")
            return

        if items_stock_sync_service.is_sync_running():
            raise CommandError("A sync is already running.")

        result = items_stock_sync_service.manual_sync_all_items()
        if not result.success:
            raise CommandError("; ".join(result.errors) or "Sync failed")

        self.stdout.write(
            self.style.SUCCESS(
                f"Synced {result.total_items} items: {result.updated_records} updated, "
                f"{result.inserted_records} inserted in {result.duration_seconds:.2f}s."
            )
        )
        if options["refresh_view"]:
            refresh = items_stock_sync_service.refresh_stock_summary_view()
            style = self.style.SUCCESS if refresh["success"] else self.style.WARNING
            self.stdout.write(style(refresh["message"]))

import logging
import time

from django.conf import settings
from django.core.management.base import BaseCommand
from django.db import close_old_connections

from services.matching import sweep_expired

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Expire offers that have been waiting too long and offer their requests to the next professional."

    def add_arguments(self, parser):
        parser.add_argument(
            "--loop",
            action="store_true",
            help="Keep sweeping every --interval seconds instead of running once.",
        )
        parser.add_argument(
            "--interval",
            type=int,
            default=None,
            help="Seconds between sweeps in --loop mode (default: MATCH_SWEEP_INTERVAL_SECONDS).",
        )

    def handle(self, *args, **options):
        if not options["loop"]:
            self._sweep_once()
            return

        interval = options["interval"] or settings.MATCH_SWEEP_INTERVAL_SECONDS
        self.stdout.write(f"Sweeping expired matches every {interval}s (Ctrl+C to stop)")
        try:
            while True:
                try:
                    self._sweep_once()
                except Exception:
                    logger.exception("Sweep loop iteration failed")
                # Close stale DB connections for long-running workers
                close_old_connections()
                time.sleep(interval)
        except KeyboardInterrupt:
            self.stdout.write("Stopped.")

    def _sweep_once(self):
        result = sweep_expired()
        self.stdout.write(
            self.style.SUCCESS(
                f"Expired {result.expired} offer(s); advanced {result.advanced} request(s); "
                f"{result.exhausted} exhausted; {result.failed} failed."
            )
        )

"""Run the voucher re-evaluation loop outside the web process."""

import asyncio
import logging

from django.core.management.base import BaseCommand, CommandError

from scheduling.services.scheduler import ReevaluationScheduler, Trigger
from scheduling.services.voucher_service import VoucherService
from scheduling.stores.django_store import DjangoVoucherStore

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Re-evaluate voucher statuses on a timer until interrupted."

    def add_arguments(self, parser):
        parser.add_argument(
            "--interval",
            type=float,
            default=None,
            help="Seconds between timer triggers (defaults to SCHEDULING['REEVALUATION_INTERVAL_SECONDS']).",
        )
        parser.add_argument("--once", action="store_true", help="Run a single cycle and exit.")

    def handle(self, *args, **options):
        interval = options["interval"]
        if interval is not None and interval <= 0:
            raise CommandError("--interval must be positive")
        scheduler = ReevaluationScheduler(VoucherService(DjangoVoucherStore()), interval_seconds=interval)
        if options["once"]:
            result = asyncio.run(scheduler.run_cycle(Trigger.MANUAL))
            if result is None:
                raise CommandError("Voucher re-evaluation failed; see the log for details")
            self.stdout.write(f"{len(result.changes)} change(s), {len(result.failed)} failed")
            return
        try:
            asyncio.run(self._run_forever(scheduler))
        except KeyboardInterrupt:
            logger.info("Voucher re-evaluation stopped")

    async def _run_forever(self, scheduler: ReevaluationScheduler) -> None:
        async with scheduler:
            scheduler.notify(Trigger.MANUAL)
            await asyncio.Event().wait()

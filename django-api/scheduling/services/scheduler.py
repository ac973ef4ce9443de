"""Re-evaluation scheduler for voucher statuses.

Three independent producers request a re-evaluation: a periodic timer, the
console regaining focus, and back/forward navigation landing on the voucher
view. Each producer only enqueues a ``Trigger`` through ``notify``; a single
consumer task drains the queue and runs ``VoucherService.converge``, so two
cycles never run at the same time through the scheduler. A cycle that raises
is logged and the consumer moves on to the next trigger.

Without an in-process scheduler the console reports focus and navigation
through ``POST /api/vouchers/reevaluate``, which calls the same entry point.

Reads can also complete out of band (``refresh``). Every read cycle is
stamped with an increasing sequence number, and a completion older than the
last applied one is dropped so a slow response cannot replace newer state.
"""

import asyncio
import logging
from collections.abc import Callable
from enum import Enum

from asgiref.sync import sync_to_async

from scheduling.conf import get_setting
from scheduling.domain import Voucher
from scheduling.services.voucher_service import ConvergenceResult, VoucherService

logger = logging.getLogger(__name__)


class Trigger(Enum):
    TIMER = "timer"
    FOCUS = "focus"
    NAVIGATION = "navigation"
    MANUAL = "manual"


class ReevaluationScheduler:
    """Drives voucher convergence from queued triggers."""

    def __init__(
        self,
        service: VoucherService,
        interval_seconds: float | None = None,
        on_refresh: Callable[[list[Voucher]], None] | None = None,
    ) -> None:
        self._service = service
        self._interval = (
            interval_seconds if interval_seconds is not None else get_setting("REEVALUATION_INTERVAL_SECONDS")
        )
        self._on_refresh = on_refresh
        self._queue: asyncio.Queue[Trigger] = asyncio.Queue()
        self._tasks: list[asyncio.Task] = []
        self._issued = 0
        self._applied = 0
        self.vouchers: list[Voucher] = []
        self.cycles = 0

    @property
    def running(self) -> bool:
        return bool(self._tasks)

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def notify(self, trigger: Trigger) -> None:
        self._queue.put_nowait(trigger)

    def begin_read(self) -> int:
        self._issued += 1
        return self._issued

    def complete_read(self, sequence: int, vouchers: list[Voucher]) -> bool:
        if sequence < self._applied:
            logger.debug("Dropping stale voucher read #%d (already applied #%d)", sequence, self._applied)
            return False
        self._applied = sequence
        self.vouchers = vouchers
        if self._on_refresh is not None:
            self._on_refresh(vouchers)
        return True

    async def refresh(self) -> bool:
        """Read vouchers without resolving; returns whether the read was applied."""
        sequence = self.begin_read()
        vouchers = await sync_to_async(self._service.list_vouchers)()
        return self.complete_read(sequence, vouchers)

    async def run_cycle(self, trigger: Trigger) -> ConvergenceResult | None:
        """Run one convergence. Failures are logged and leave state as it was."""
        sequence = self.begin_read()
        try:
            result = await sync_to_async(self._service.converge)()
        except Exception:
            logger.exception("Voucher re-evaluation (%s) failed; waiting for the next trigger", trigger.value)
            return None
        self.cycles += 1
        if result.changes:
            logger.info(
                "Voucher re-evaluation (%s) wrote %d change(s)", trigger.value, len(result.changes)
            )
        self.complete_read(sequence, list(result.vouchers))
        return result

    def _drain_duplicates(self) -> int:
        # One cycle observes everything queued before it starts.
        drained = 0
        while True:
            try:
                self._queue.get_nowait()
            except asyncio.QueueEmpty:
                return drained
            self._queue.task_done()
            drained += 1

    async def _consume(self) -> None:
        while True:
            trigger = await self._queue.get()
            try:
                coalesced = self._drain_duplicates()
                if coalesced:
                    logger.debug("Coalesced %d pending trigger(s) into %s", coalesced, trigger.value)
                await self.run_cycle(trigger)
            except Exception:
                logger.exception("Voucher re-evaluation (%s) crashed; waiting for the next trigger", trigger.value)
            finally:
                self._queue.task_done()

    async def _tick(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            self.notify(Trigger.TIMER)

    def start(self) -> None:
        if self._tasks:
            return
        self._tasks = [
            asyncio.create_task(self._consume(), name="voucher-reevaluation"),
            asyncio.create_task(self._tick(), name="voucher-reevaluation-timer"),
        ]
        logger.info("Voucher re-evaluation started (every %ss)", self._interval)

    async def stop(self) -> None:
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    async def join(self) -> None:
        """Wait until every queued trigger has been processed."""
        await self._queue.join()

    async def __aenter__(self) -> "ReevaluationScheduler":
        self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()

"""Tests for the voucher re-evaluation scheduler.

Run with: pytest tests/test_scheduler.py -v
"""

import asyncio
from datetime import date

import pytest

from conftest import InMemoryVoucherStore, make_voucher
from scheduling.domain import VoucherId, VoucherStatus
from scheduling.domain.errors import StoreUnavailableError
from scheduling.services.scheduler import ReevaluationScheduler, Trigger
from scheduling.services.voucher_service import VoucherService


@pytest.fixture
def store():
    return InMemoryVoucherStore(
        [
            make_voucher("x1", date(2024, 1, 1), date(2024, 1, 31)),
            make_voucher("x2", date(2024, 1, 10), date(2024, 2, 10)),
        ]
    )


@pytest.fixture
def scheduler(store):
    service = VoucherService(store, clock=lambda: date(2024, 1, 15))
    return ReevaluationScheduler(service, interval_seconds=3600)


class TestRunCycle:
    def test_cycle_writes_changes_and_keeps_fresh_state(self, scheduler, store):
        result = asyncio.run(scheduler.run_cycle(Trigger.MANUAL))
        assert [c.voucher_id for c in result.changes] == [VoucherId("x1")]
        assert scheduler.cycles == 1
        assert {v.id.value: v.status for v in scheduler.vouchers} == {
            "x1": VoucherStatus.DISABLED,
            "x2": VoucherStatus.ENABLED,
        }

    def test_failed_cycle_keeps_previous_state(self, scheduler, store):
        asyncio.run(scheduler.refresh())
        before = scheduler.vouchers

        def unavailable():
            raise StoreUnavailableError()

        store.list_vouchers = unavailable
        assert asyncio.run(scheduler.run_cycle(Trigger.TIMER)) is None
        assert scheduler.cycles == 0
        assert scheduler.vouchers == before

    def test_on_refresh_receives_vouchers(self, store):
        seen = []
        service = VoucherService(store, clock=lambda: date(2024, 1, 15))
        scheduler = ReevaluationScheduler(service, interval_seconds=3600, on_refresh=seen.append)
        asyncio.run(scheduler.refresh())
        assert len(seen) == 1
        assert len(seen[0]) == 2


class TestStaleReads:
    def test_older_completion_is_dropped(self, scheduler):
        older, newer = scheduler.begin_read(), scheduler.begin_read()
        fresh = [make_voucher("x2", date(2024, 1, 10), date(2024, 2, 10))]
        stale = [make_voucher("x1", date(2024, 1, 1), date(2024, 1, 31))]
        assert scheduler.complete_read(newer, fresh)
        assert not scheduler.complete_read(older, stale)
        assert scheduler.vouchers == fresh


class TestTriggers:
    def test_queued_triggers_coalesce_into_one_cycle(self, scheduler, store):
        async def scenario():
            scheduler.notify(Trigger.FOCUS)
            scheduler.notify(Trigger.NAVIGATION)
            scheduler.notify(Trigger.MANUAL)
            async with scheduler:
                await scheduler.join()
            return scheduler.pending

        assert asyncio.run(scenario()) == 0
        assert scheduler.cycles == 1
        assert len(store.status_writes) == 1

    def test_timer_triggers_cycles(self, store):
        service = VoucherService(store, clock=lambda: date(2024, 1, 15))
        scheduler = ReevaluationScheduler(service, interval_seconds=0.01)

        async def scenario():
            async with scheduler:
                for _ in range(200):
                    if scheduler.cycles >= 2:
                        break
                    await asyncio.sleep(0.01)

        asyncio.run(scenario())
        assert scheduler.cycles >= 2
        assert len(store.status_writes) == 1

    def test_context_manager_stops_tasks(self, scheduler):
        async def scenario():
            async with scheduler:
                assert scheduler.running
            return scheduler.running

        assert asyncio.run(scenario()) is False

    def test_consumer_survives_a_failing_cycle(self, store):
        calls = []

        def flaky_refresh(vouchers):
            calls.append(vouchers)
            if len(calls) == 1:
                raise RuntimeError("console went away")

        service = VoucherService(store, clock=lambda: date(2024, 1, 15))
        scheduler = ReevaluationScheduler(service, interval_seconds=3600, on_refresh=flaky_refresh)

        async def scenario():
            async with scheduler:
                scheduler.notify(Trigger.MANUAL)
                await scheduler.join()
                scheduler.notify(Trigger.FOCUS)
                scheduler.notify(Trigger.NAVIGATION)
                await asyncio.wait_for(scheduler.join(), timeout=5)
                return scheduler.pending, scheduler.running

        assert asyncio.run(scenario()) == (0, True)
        assert len(calls) == 2
        assert scheduler.cycles == 2

"""
Automation scheduler - runs the periodic scans inside the API process

Two cadences:
- fast (default 15 min): booking reminders, pending forms, low inventory
- slow (default 1 hour): overdue form status sweep

Each cycle opens its own session and isolates every scan, so one failing scan
never stops the others or the loop. Missed cycles are not caught up.
"""

import asyncio
import logging
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.orm import Session

from ..config import (
    AUTOMATION_FAST_INTERVAL_SECONDS,
    AUTOMATION_INITIAL_DELAY_SECONDS,
    AUTOMATION_SLOW_INTERVAL_SECONDS,
)
from ..domain.automations.engine import AutomationDispatcher
from .automation_scanners import (
    scan_booking_reminders,
    scan_low_inventory,
    scan_overdue_forms,
    scan_pending_forms,
)

logger = logging.getLogger(__name__)

FAST_CADENCE = "fast"
SLOW_CADENCE = "slow"


def next_delay(interval: float, elapsed: float) -> float:
    """Sleep that keeps ticks on a fixed period; 0 when a cycle overran"""
    return max(0.0, interval - elapsed)


class AutomationScheduler:
    def __init__(
        self,
        session_factory: Callable[[], Session],
        dispatcher: AutomationDispatcher,
        fast_interval: float = AUTOMATION_FAST_INTERVAL_SECONDS,
        slow_interval: float = AUTOMATION_SLOW_INTERVAL_SECONDS,
        initial_delay: float = AUTOMATION_INITIAL_DELAY_SECONDS,
    ):
        self.session_factory = session_factory
        self.dispatcher = dispatcher
        self.fast_interval = fast_interval
        self.slow_interval = slow_interval
        self.initial_delay = initial_delay
        self._tasks: list[asyncio.Task] = []

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    async def run_fast_cycle(self, now: Optional[datetime] = None) -> dict:
        """Booking reminders, pending forms and low inventory, in that order"""
        scans = {
            "booking_reminders": lambda db: scan_booking_reminders(db, self.dispatcher, now=now),
            "pending_forms": lambda db: scan_pending_forms(db, self.dispatcher, now=now),
            "low_inventory": lambda db: scan_low_inventory(db, self.dispatcher, now=now),
        }
        return await self._run_cycle(FAST_CADENCE, scans)

    async def run_slow_cycle(self, now: Optional[datetime] = None) -> dict:
        scans = {"overdue_forms": lambda db: scan_overdue_forms(db, now=now)}
        return await self._run_cycle(SLOW_CADENCE, scans)

    async def run_cycle(self, cadence: str, now: Optional[datetime] = None) -> dict:
        if cadence == FAST_CADENCE:
            return await self.run_fast_cycle(now=now)
        if cadence == SLOW_CADENCE:
            return await self.run_slow_cycle(now=now)
        raise ValueError(f"Unknown cadence: {cadence}")

    async def _run_cycle(self, cadence: str, scans: dict) -> dict:
        logger.info(f"🔄 Running {cadence} automation cycle")
        results = {}
        db = self.session_factory()
        try:
            for name, scan in scans.items():
                try:
                    results[name] = await scan(db)
                except Exception as e:
                    logger.error(f"❌ {name} scan failed: {e}")
                    db.rollback()
                    results[name] = {"error": str(e)}
        finally:
            db.close()

        logger.info(f"✅ {cadence.capitalize()} automation cycle complete")
        return results

    async def _loop(self, cadence: str, interval: float) -> None:
        await asyncio.sleep(self.initial_delay)
        loop = asyncio.get_running_loop()
        while True:
            started = loop.time()
            try:
                await self.run_cycle(cadence)
            except Exception as e:
                logger.error(f"❌ {cadence} automation cycle crashed: {e}")
            await asyncio.sleep(next_delay(interval, loop.time() - started))

    def start(self) -> None:
        if self.running:
            logger.warning("⚠️ Automation scheduler already running")
            return

        self._tasks = [
            asyncio.create_task(self._loop(FAST_CADENCE, self.fast_interval)),
            asyncio.create_task(self._loop(SLOW_CADENCE, self.slow_interval)),
        ]
        logger.info(
            f"⏰ Automation scheduler started "
            f"(fast every {self.fast_interval}s, slow every {self.slow_interval}s)"
        )

    async def stop(self) -> None:
        for task in self._tasks:
            task.cancel()
        for task in self._tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._tasks = []
        logger.info("🛑 Automation scheduler stopped")

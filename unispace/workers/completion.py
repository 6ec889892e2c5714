"""
Booking completion worker.

Periodically marks approved bookings whose end time has passed as
Completed and notifies the requesters.
"""

import asyncio
import logging
import threading
from typing import Callable, Optional

from sqlalchemy.orm import Session

from unispace.config import Settings, settings as default_settings
from unispace.db import SessionLocal
from unispace.notifications import Notifier, default_notifier
from unispace.services.bookings import BookingService
from unispace.utils.auth import SYSTEM_ACTOR
from unispace.utils.clock import Clock, system_clock

logger = logging.getLogger(__name__)


class BookingCompletionWorker:
    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        clock: Clock = system_clock,
        notifier: Notifier = default_notifier,
        settings: Optional[Settings] = None,
    ):
        self.session_factory = session_factory
        self.clock = clock
        self.notifier = notifier
        self.settings = settings or default_settings
        # read from the sweep thread, so not an asyncio.Event
        self._stop = threading.Event()
        self._wake: Optional[asyncio.Event] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def run_once(self) -> int:
        """One sweep with its own session. Blocking."""
        db = self.session_factory()
        try:
            service = BookingService(
                db,
                SYSTEM_ACTOR,
                clock=self.clock,
                notifier=self.notifier,
                settings=self.settings,
            )
            return service.complete_expired_bookings(should_stop=self._stop.is_set)
        finally:
            db.close()

    async def run(self):
        """
        Main worker loop - sweeps every ``completion_interval_seconds``
        until ``stop`` is called
        """
        logger.info("Booking completion worker started")
        while not self._stop.is_set():
            delay = self.settings.completion_interval_seconds
            try:
                await asyncio.to_thread(self.run_once)
            except Exception as e:
                logger.error(f"Error in booking completion worker: {e}")
                delay = self.settings.completion_retry_seconds

            try:
                await asyncio.wait_for(self._wake.wait(), timeout=delay)
            except asyncio.TimeoutError:
                pass
        logger.info("Booking completion worker stopped")

    def start(self) -> asyncio.Task:
        if self.running:
            return self._task
        self._stop.clear()
        self._wake = asyncio.Event()
        self._task = asyncio.create_task(self.run())
        return self._task

    async def stop(self):
        """Wake the loop and wait for it; a sweep in progress finishes its current booking."""
        self._stop.set()
        if self._wake is not None:
            self._wake.set()
        if self._task is not None:
            await self._task
            self._task = None

"""Polling delivery of reminder and thank-you emails.

Each message kind has its own ``PollingJob``. A tick loads the due pending
rows, then handles them one at a time: the row is claimed by flipping it to
``failed`` (only if still ``pending``), the email is sent, and on success the
row becomes ``sent``. A crash or a second scheduler process can therefore
never send the same row twice, and a terminal status is never retried.
"""
import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.config import settings
from app.models.appointment import Appointment
from app.models.scheduled_message import MessageStatus, Reminder, ThankYouMessage
from app.services import email_service
from app.services.slot_service import utc_naive_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MessageKind:
    name: str
    model: Any
    due_column: Any
    send: Callable[[Any, Appointment], bool]


@dataclass
class TickResult:
    sent: int = 0
    failed: int = 0


def _send_reminder(reminder: Reminder, appointment: Appointment) -> bool:
    return email_service.send_reminder_email(
        client_name=appointment.client_name,
        client_email=appointment.client_email,
        appointment_date=appointment.appointment_date,
        details=appointment.details,
        message=reminder.message,
    )


def _send_thank_you(thank_you: ThankYouMessage, appointment: Appointment) -> bool:
    return email_service.send_thank_you_email(
        client_name=appointment.client_name,
        client_email=appointment.client_email,
        appointment_date=appointment.appointment_date,
        message=thank_you.message,
    )


REMINDERS = MessageKind("reminder", Reminder, Reminder.reminder_time, _send_reminder)
THANK_YOUS = MessageKind("thank-you", ThankYouMessage, ThankYouMessage.send_time, _send_thank_you)


async def _set_status(
    session_maker: async_sessionmaker[AsyncSession],
    kind: MessageKind,
    message_id: int,
    status: MessageStatus,
    *,
    expected: MessageStatus,
) -> bool:
    async with session_maker() as session:
        result = await session.execute(
            update(kind.model)
            .where(kind.model.id == message_id, kind.model.status == expected.value)
            .values(status=status.value)
        )
        await session.commit()
        return result.rowcount == 1


async def process_due_messages(
    session_maker: async_sessionmaker[AsyncSession],
    kind: MessageKind,
    now: datetime | None = None,
) -> TickResult:
    """Deliver every pending message of ``kind`` whose send time has passed.

    Errors loading the due set propagate and abort the tick; errors on a
    single row are logged and do not affect the others.
    """
    now = now or utc_naive_now()
    async with session_maker() as session:
        result = await session.execute(
            select(kind.model, Appointment)
            .join(Appointment, Appointment.id == kind.model.appointment_id)
            .where(kind.model.status == MessageStatus.PENDING.value, kind.due_column <= now)
            .order_by(kind.due_column, kind.model.id)
        )
        due = list(result.all())

    outcome = TickResult()
    if not due:
        logger.debug("No due %s messages found.", kind.name)
        return outcome
    logger.info("Found %d due %s messages.", len(due), kind.name)

    for message, appointment in due:
        try:
            claimed = await _set_status(
                session_maker, kind, message.id, MessageStatus.FAILED, expected=MessageStatus.PENDING
            )
            if not claimed:
                # Deleted or handled elsewhere since the due set was loaded
                continue
            try:
                delivered = await asyncio.to_thread(kind.send, message, appointment)
            except Exception as e:
                logger.exception("Sending %s %s raised: %s", kind.name, message.id, e)
                delivered = False
            if delivered:
                await _set_status(
                    session_maker, kind, message.id, MessageStatus.SENT, expected=MessageStatus.FAILED
                )
                outcome.sent += 1
                logger.info("Sent %s %s for appointment %s", kind.name, message.id, appointment.id)
            else:
                outcome.failed += 1
                logger.warning("Failed to send %s %s for appointment %s", kind.name, message.id, appointment.id)
        except Exception as e:
            logger.exception("Error processing %s %s: %s", kind.name, message.id, e)
    return outcome


class PollingJob:
    """Runs ``tick`` every ``interval_seconds`` on the event loop.

    Ticks never overlap: a call to ``run_once`` while one is in flight is
    skipped, and a slow tick pushes back the next one.
    """

    def __init__(self, name: str, interval_seconds: float, tick: Callable[[], Awaitable[Any]]) -> None:
        self.name = name
        self.interval_seconds = interval_seconds
        self._tick = tick
        self._running = False
        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def started(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> bool:
        """Run one tick now. Returns False if a tick was already in progress."""
        if self._running:
            logger.warning("%s job still running, skipping tick", self.name)
            return False
        self._running = True
        try:
            await self._tick()
        except Exception as e:
            logger.exception("%s job tick failed: %s", self.name, e)
        finally:
            self._running = False
        return True

    async def _loop(self) -> None:
        loop = asyncio.get_running_loop()
        while True:
            started_at = loop.time()
            await self.run_once()
            elapsed = loop.time() - started_at
            await asyncio.sleep(max(0.0, self.interval_seconds - elapsed))

    def start(self) -> None:
        if self.started:
            return
        self._task = asyncio.create_task(self._loop(), name=f"{self.name}-job")
        logger.info("%s job started, runs every %s seconds", self.name, self.interval_seconds)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("%s job stopped", self.name)


def build_jobs(session_maker: async_sessionmaker[AsyncSession]) -> list[PollingJob]:
    """The reminder and thank-you jobs, not yet started."""

    async def reminders_tick() -> TickResult:
        return await process_due_messages(session_maker, REMINDERS)

    async def thank_yous_tick() -> TickResult:
        return await process_due_messages(session_maker, THANK_YOUS)

    return [
        PollingJob("reminder", settings.reminder_poll_seconds, reminders_tick),
        PollingJob("thank-you", settings.thank_you_poll_seconds, thank_yous_tick),
    ]

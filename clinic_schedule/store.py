"""Snapshot holder between the backend and the view code.

The snapshot is an immutable tuple swapped wholesale after each fetch; if two
fetches overlap, whichever resolves last wins. Completing an appointment is
delegated to the backend and the snapshot is left alone until the next fetch.
"""
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Protocol

import httpx

from . import client
from .classify import Status, has_status, is_open_slot
from .models import AppointmentRecord
from .queries import with_status
from .temporal import as_day

logger = logging.getLogger(__name__)


class AppointmentBackend(Protocol):
    async def fetch_scheduled_appointments(self) -> list[AppointmentRecord]: ...

    async def complete_appointment(self, appointment_id: str) -> AppointmentRecord | None: ...


class CompletionError(ValueError):
    """A completion attempt the user has to be told about; never retried."""

    def __init__(self, message: str, reason: str):
        super().__init__(message)
        self.message = message
        self.reason = reason


def check_completion_eligibility(record: AppointmentRecord, today: date | datetime | None = None) -> None:
    """Raise CompletionError unless ``record`` may be marked completed on ``today``."""
    if is_open_slot(record):
        raise CompletionError(
            "Cannot complete an available slot. Only appointments with patients can be marked as completed.",
            "open_slot",
        )
    if has_status(record.status, Status.CANCELLED):
        raise CompletionError(
            "Cannot complete a cancelled appointment. Cancelled appointments cannot be marked as completed.",
            "cancelled",
        )
    day = as_day(today) or date.today()
    instant = record.instant
    if instant is None or instant.date() != day:
        raise CompletionError(
            "Appointments can only be completed on the day they take place.",
            "wrong_day",
        )


class AppointmentStore:
    def __init__(self, backend: AppointmentBackend | None = None):
        # the client module itself satisfies AppointmentBackend
        self._backend = backend if backend is not None else client
        self._appointments: tuple[AppointmentRecord, ...] = ()
        self.is_loading = False
        self.error: str | None = None

    @property
    def appointments(self) -> tuple[AppointmentRecord, ...]:
        return self._appointments

    def get(self, appointment_id: str) -> AppointmentRecord | None:
        for record in self._appointments:
            if record.id == appointment_id:
                return record
        return None

    def clear_error(self) -> None:
        self.error = None

    async def fetch_appointments(self, status: Status | str | None = None) -> None:
        """Replace the snapshot; on failure keep the previous one and set ``error``."""
        self.is_loading = True
        self.error = None
        try:
            records = await self._backend.fetch_scheduled_appointments()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Failed to load appointments: %s", exc)
            self.error = str(exc) or "Failed to load appointments. Please try again."
            return
        finally:
            self.is_loading = False
        self._appointments = tuple(with_status(records, status))

    def check_completion(self, appointment_id: str, today: date | datetime | None = None) -> AppointmentRecord:
        if not appointment_id or not str(appointment_id).strip():
            raise CompletionError("Appointment ID is required.", "missing_id")
        record = self.get(str(appointment_id))
        if record is None:
            raise CompletionError(f"Appointment {appointment_id} was not found.", "not_found")
        check_completion_eligibility(record, today)
        return record

    async def complete_appointment(
        self, appointment_id: str, today: date | datetime | None = None
    ) -> AppointmentRecord | None:
        """Validate locally, then ask the backend to mark the appointment completed."""
        self.check_completion(appointment_id, today)
        self.error = None
        try:
            result = await self._backend.complete_appointment(str(appointment_id))
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Failed to complete appointment %s: %s", appointment_id, exc)
            self.error = str(exc) or "Failed to complete appointment. Please try again."
            raise
        logger.info("Appointment %s marked completed", appointment_id)
        return result

"""Async client for the clinic backend's doctor appointment endpoints.

Implements the two operations the schedule engine consumes: reading the
doctor's scheduled appointments/slots and marking one appointment completed.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta

import httpx
from pydantic import ValidationError

from . import config
from .classify import AVAILABLE_SLOT_NAME
from .models import AppointmentRecord, ScheduledAppointmentPayload
from .temporal import normalize

logger = logging.getLogger(__name__)

SCHEDULED_PATH = "/appointment/doctor/scheduled"
SCHEDULE_PATH = "/appointment/doctor/schedule"
COMPLETE_PATH = "/appointment/doctor/complete"


def _headers() -> dict[str, str]:
    headers = {"Accept": "application/json"}
    if config.CLINIC_API_TOKEN:
        headers["Authorization"] = f"Bearer {config.CLINIC_API_TOKEN}"
    return headers


def _client() -> httpx.AsyncClient:
    return httpx.AsyncClient(base_url=config.CLINIC_API_BASE_URL, http2=True, timeout=config.CLINIC_API_TIMEOUT)


def to_record(payload: ScheduledAppointmentPayload) -> AppointmentRecord:
    """Map a backend appointment onto a record; raises ValueError on a bad date."""
    instant = normalize(payload.appointment_date)
    if instant is None:
        raise ValueError(f"Failed to parse appointment date: {payload.appointment_date}")

    patient_id = str(payload.patient_id) if payload.patient_id is not None else "0"
    if payload.patient_name and payload.patient_name.strip():
        patient_name = payload.patient_name.strip()
    elif patient_id != "0":
        patient_name = f"Patient #{patient_id}"
    else:
        patient_name = AVAILABLE_SLOT_NAME

    appointment_type = (payload.appointment_type or "").strip().replace("_", " ").title() or None
    return AppointmentRecord(
        id=payload.id,
        doctor_id=payload.doctor_id,
        subject_id=patient_id,
        subject_name=patient_name,
        calendar_date=payload.appointment_date,
        time_of_day=f"{instant:%H:%M}",
        status=payload.appointment_status,
        appointment_type=appointment_type,
        notes=f"Type: {appointment_type}" if appointment_type else None,
    )


def _demo_records() -> list[AppointmentRecord]:
    base = datetime.now().replace(hour=9, minute=0, second=0, microsecond=0)

    def at(offset: timedelta) -> str:
        return (base + offset).isoformat(timespec="seconds")

    payloads = [
        {"id": 1, "patientId": 7, "patientName": "Jane Doe", "appointmentDate": at(timedelta()), "appointmentStatus": "scheduled"},
        {"id": 2, "patientId": None, "appointmentDate": at(timedelta(hours=1)), "appointmentStatus": "scheduled"},
        {"id": 3, "patientId": 8, "patientName": "John Roe", "appointmentDate": at(timedelta(days=-1)), "appointmentStatus": "completed"},
        {"id": 4, "patientId": 9, "appointmentDate": at(timedelta(days=2, hours=5)), "appointmentStatus": "scheduled"},
    ]
    return [to_record(ScheduledAppointmentPayload.model_validate(p)) for p in payloads]


async def fetch_scheduled_appointments() -> list[AppointmentRecord]:
    """Return every appointment and open slot of the authenticated doctor."""
    if config.OFFLINE_MODE:
        return _demo_records()

    async with _client() as client:
        resp = await client.get(SCHEDULED_PATH, headers=_headers())
        resp.raise_for_status()
        data = resp.json()

    if not data:
        return []
    if isinstance(data, dict):
        data = [data]

    records = []
    for item in data:
        if not item:
            continue
        try:
            records.append(to_record(ScheduledAppointmentPayload.model_validate(item)))
        except (ValidationError, ValueError) as exc:
            logger.warning("Skipping unmappable appointment: %s", exc)
    logger.info("Fetched %d appointments", len(records))
    return records


async def complete_appointment(appointment_id: str) -> AppointmentRecord | None:
    """Mark an appointment completed on the backend and return its new state."""
    if not str(appointment_id).isdigit() or int(appointment_id) <= 0:
        raise ValueError(f"Invalid appointment ID: {appointment_id}. ID must be a positive number.")
    if config.OFFLINE_MODE:
        return None

    async with _client() as client:
        resp = await client.put(COMPLETE_PATH, headers=_headers(), params={"appointmentId": int(appointment_id)})
        resp.raise_for_status()
        payload = resp.json() if resp.content else None

    if not payload:
        return None
    return to_record(ScheduledAppointmentPayload.model_validate(payload))


async def open_slot(appointment_date: str) -> None:
    """Open a bookable slot at ``YYYY-MM-DDTHH:MM:SS``."""
    if normalize(appointment_date) is None or "T" not in appointment_date:
        raise ValueError(f'Invalid datetime format. Expected "YYYY-MM-DDTHH:mm:ss", got: {appointment_date}')
    if config.OFFLINE_MODE:
        return

    async with _client() as client:
        resp = await client.post(SCHEDULE_PATH, headers=_headers(), json={"appointment_date": appointment_date})
        resp.raise_for_status()

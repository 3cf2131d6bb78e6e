from datetime import date

import httpx
import pytest

from clinic_schedule.store import AppointmentStore, CompletionError, check_completion_eligibility


class FakeBackend:
    def __init__(self, records=None, error=None):
        self.records = records or []
        self.error = error
        self.completed = []

    async def fetch_scheduled_appointments(self):
        if self.error:
            raise self.error
        return list(self.records)

    async def complete_appointment(self, appointment_id):
        if self.error:
            raise self.error
        self.completed.append(appointment_id)
        return None


TODAY = date(2025, 3, 10)


@pytest.mark.asyncio
async def test_fetch_swaps_snapshot(make_record):
    first, second = make_record(), make_record(status="completed")
    backend = FakeBackend([first, second])
    store = AppointmentStore(backend)

    await store.fetch_appointments()
    assert store.appointments == (first, second)
    assert store.is_loading is False and store.error is None

    await store.fetch_appointments(status="Completed")
    assert store.appointments == (second,)


@pytest.mark.asyncio
async def test_failed_fetch_keeps_previous_snapshot(make_record):
    record = make_record()
    backend = FakeBackend([record])
    store = AppointmentStore(backend)
    await store.fetch_appointments()

    backend.error = httpx.ConnectError("connection refused")
    await store.fetch_appointments()

    assert store.appointments == (record,)
    assert store.error == "connection refused"
    assert store.is_loading is False

    store.clear_error()
    assert store.error is None


def test_booked_scheduled_today_is_eligible(make_record):
    check_completion_eligibility(make_record(), TODAY)


@pytest.mark.parametrize(
    "overrides,reason",
    [
        ({"status": "cancelled"}, "cancelled"),
        ({"calendar_date": "2025-03-09"}, "wrong_day"),
        ({"calendar_date": "broken"}, "wrong_day"),
        ({"subject_id": "0"}, "open_slot"),
        ({"subject_name": "Available Slot"}, "open_slot"),
    ],
)
def test_ineligible_completions_have_distinct_reasons(make_record, overrides, reason):
    with pytest.raises(CompletionError) as excinfo:
        check_completion_eligibility(make_record(**overrides), TODAY)
    assert excinfo.value.reason == reason


def test_cancelled_and_wrong_day_messages_differ(make_record):
    messages = []
    for overrides in ({"status": "cancelled"}, {"calendar_date": "2025-03-09"}):
        with pytest.raises(CompletionError) as excinfo:
            check_completion_eligibility(make_record(**overrides), TODAY)
        messages.append(str(excinfo.value))
    assert messages[0] != messages[1]
    assert "cancelled" in messages[0]


@pytest.mark.asyncio
async def test_complete_delegates_without_mutating_snapshot(make_record):
    record = make_record()
    backend = FakeBackend([record])
    store = AppointmentStore(backend)
    await store.fetch_appointments()

    await store.complete_appointment(record.id, TODAY)

    assert backend.completed == [record.id]
    assert store.appointments == (record,)
    assert store.get(record.id).status.value == "Scheduled"


@pytest.mark.asyncio
@pytest.mark.parametrize("appointment_id,reason", [("", "missing_id"), ("   ", "missing_id"), ("999", "not_found")])
async def test_complete_rejects_unknown_ids(make_record, appointment_id, reason):
    backend = FakeBackend([make_record()])
    store = AppointmentStore(backend)
    await store.fetch_appointments()

    with pytest.raises(CompletionError) as excinfo:
        await store.complete_appointment(appointment_id, TODAY)

    assert excinfo.value.reason == reason
    assert backend.completed == []


@pytest.mark.asyncio
async def test_backend_failure_on_complete_is_surfaced(make_record):
    record = make_record()
    backend = FakeBackend([record])
    store = AppointmentStore(backend)
    await store.fetch_appointments()
    backend.error = httpx.ReadTimeout("timed out")

    with pytest.raises(httpx.ReadTimeout):
        await store.complete_appointment(record.id, TODAY)

    assert store.error == "timed out"
    assert store.appointments == (record,)


@pytest.mark.asyncio
@pytest.mark.parametrize("everything", ["all", " ALL ", "All"])
async def test_fetch_with_all_filter_keeps_every_record(make_record, everything):
    records = [make_record(), make_record(status="completed")]
    store = AppointmentStore(FakeBackend(records))

    await store.fetch_appointments(status=everything)

    assert store.appointments == tuple(records)

import pytest

from clinic_schedule.models import AppointmentRecord


@pytest.fixture
def make_record():
    counter = {"value": 0}

    def _make(**overrides):
        counter["value"] += 1
        fields = {
            "id": str(counter["value"]),
            "subject_id": "7",
            "subject_name": "Jane Doe",
            "calendar_date": "2025-03-10",
            "time_of_day": "14:30",
            "status": "scheduled",
        }
        fields.update(overrides)
        return AppointmentRecord(**fields)

    return _make

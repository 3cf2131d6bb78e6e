from __future__ import annotations

from datetime import date, datetime
from functools import cached_property
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from .classify import Category, Status, category_of, normalize_status
from .temporal import normalize

T = TypeVar("T")


class ScheduledAppointmentPayload(BaseModel):
    """Appointment as returned by the backend's scheduled-appointments endpoint."""
    id: int | str
    doctor_id: int | str | None = Field(None, alias="doctorId")
    patient_id: int | str | None = Field(None, alias="patientId")
    patient_name: str | None = Field(None, alias="patientName")
    appointment_date: str = Field(alias="appointmentDate")  # "2024-12-20T10:00:00"
    appointment_type: str | None = Field(None, alias="appointmentType")
    appointment_status: str | None = Field(None, alias="appointmentStatus")

    model_config = {"populate_by_name": True}


class AppointmentRecord(BaseModel):
    """One booked appointment or open slot. Immutable once ingested."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    subject_id: str | None = Field(None, alias="subjectId")
    subject_name: str | None = Field(None, alias="subjectName")
    calendar_date: str = Field(alias="calendarDate")  # YYYY-MM-DD or full timestamp
    time_of_day: str = Field("", alias="timeOfDay")  # HH:MM, 24h
    duration_minutes: int | None = Field(None, alias="durationMinutes")
    status: Status = Status.SCHEDULED
    doctor_id: str | None = Field(None, alias="doctorId")
    appointment_type: str | None = Field(None, alias="appointmentType")
    notes: str | None = None

    @field_validator("id", "subject_id", "doctor_id", mode="before")
    @classmethod
    def _stringify_ids(cls, value):
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value):
        return normalize_status(value)

    @computed_field
    @property
    def category(self) -> Category:
        return category_of(self.subject_id, self.subject_name)

    @cached_property
    def instant(self) -> datetime | None:
        return normalize(self.calendar_date, self.time_of_day)

    @property
    def is_open_slot(self) -> bool:
        return self.category is Category.OPEN_SLOT


class WeekWindow(BaseModel):
    """Monday-start, Sunday-end span holding at least one record."""
    start: date
    end: date
    index: int = 0
    records: list[AppointmentRecord] = Field(default_factory=list)


class DayBucket(BaseModel):
    key: str  # YYYY-MM-DD
    day: date
    records: list[AppointmentRecord] = Field(default_factory=list)


class DayView(BaseModel):
    key: str
    day: date
    bookings: list[AppointmentRecord] = Field(default_factory=list)
    open_slots: list[AppointmentRecord] = Field(default_factory=list)

    @property
    def records(self) -> list[AppointmentRecord]:
        return [*self.bookings, *self.open_slots]


class Band(BaseModel):
    """Vertical band of one record on the week time-grid (pixels)."""
    record: AppointmentRecord
    top: float
    height: float
    category: Category


class DayColumn(BaseModel):
    key: str
    day: date
    is_today: bool = False
    bands: list[Band] = Field(default_factory=list)


class WeekGrid(BaseModel):
    start: date
    end: date
    label: str
    total_height: float
    hour_labels: list[str] = Field(default_factory=list)
    columns: list[DayColumn] = Field(default_factory=list)


class MonthCell(BaseModel):
    key: str
    day: date
    in_month: bool
    is_today: bool = False
    booked_count: int = 0
    open_slot_count: int = 0
    records: list[AppointmentRecord] = Field(default_factory=list)


class MonthView(BaseModel):
    year: int
    month: int
    title: str  # "March 2025"
    weeks: list[list[MonthCell]] = Field(default_factory=list)


class WeekPageView(BaseModel):
    """One page of a week-by-week list (upcoming or past appointments)."""
    week_count: int
    week_index: int
    label: str | None = None
    window: WeekWindow | None = None
    days: list[DayBucket] = Field(default_factory=list)
    has_previous: bool = False
    has_next: bool = False


class Page(BaseModel, Generic[T]):
    items: list[T]
    page: int
    total_pages: int
    total_items: int
    should_paginate: bool


class DashboardStats(BaseModel):
    total_appointments: int
    today_appointments_count: int
    today_scheduled_count: int
    completed_count: int
    booked_count: int
    expired_count: int
    completed_percentage: int
    expired_percentage: int


class TimeRange(BaseModel):
    start: datetime
    end: datetime


class BlockedRange(BaseModel):
    start: datetime
    end: datetime
    records: list[AppointmentRecord] = Field(default_factory=list)


class SlotAvailability(BaseModel):
    """Whether a candidate start time on the slot-opening picker is free."""
    time: str  # HH:MM
    is_blocked: bool
    max_duration: int | None = None  # minutes until the next booking
    reason: str | None = None

import logging
from datetime import date, datetime, timedelta
from typing import Optional

import httpx
from fastapi import Depends, FastAPI, HTTPException, Query

from . import config
from .conflicts import slot_availability
from .layout import GridConfig
from .models import AppointmentRecord, DashboardStats, DayView, MonthView, SlotAvailability, WeekGrid, WeekPageView
from .queries import dashboard_stats, today as todays_appointments, upcoming_within_hours
from .store import AppointmentStore, CompletionError
from .temporal import as_day
from .views import day_view, month_view, past_weeks_view, upcoming_weeks_view, week_view

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

app = FastAPI(title="Clinic Schedule Service")

_store = AppointmentStore()


def get_store() -> AppointmentStore:
    return _store


def _day_param(value: Optional[str]) -> date:
    if not value:
        return date.today()
    day = as_day(value)
    if day is None:
        raise HTTPException(status_code=422, detail=f"Invalid date: {value}")
    return day


def _snapshot(store: AppointmentStore) -> dict:
    return {
        "appointments": [r.model_dump() for r in store.appointments],
        "is_loading": store.is_loading,
        "error": store.error,
    }


@app.get("/appointments")
async def list_appointments(
    status: Optional[str] = Query(None, description="Scheduled, Completed, Cancelled, Expired or All"),
    store: AppointmentStore = Depends(get_store),
):
    """Refresh the snapshot from the backend and return it with any load error."""
    await store.fetch_appointments(status)
    return _snapshot(store)


@app.get("/appointments/today", response_model=list[AppointmentRecord])
async def list_today(store: AppointmentStore = Depends(get_store)):
    return todays_appointments(store.appointments)


@app.get("/appointments/upcoming", response_model=list[AppointmentRecord])
async def list_upcoming(
    hours: float = Query(24, gt=0),
    store: AppointmentStore = Depends(get_store),
):
    return upcoming_within_hours(store.appointments, datetime.now(), hours)


@app.post("/appointments/{appointment_id}/complete")
async def complete(appointment_id: str, store: AppointmentStore = Depends(get_store)):
    """Mark an appointment completed. Only allowed on the appointment's own day."""
    try:
        await store.complete_appointment(appointment_id)
    except CompletionError as exc:
        raise HTTPException(status_code=409, detail={"message": exc.message, "reason": exc.reason})
    except (httpx.HTTPError, ValueError) as exc:
        raise HTTPException(status_code=502, detail=str(exc) or "Failed to complete appointment")
    return {"message": "completed", "appointment_id": appointment_id}


# Calendar views ------------------------------------------------------------

@app.get("/views/day", response_model=DayView)
async def get_day_view(
    day: Optional[str] = Query(None, alias="date", description="YYYY-MM-DD, defaults to today"),
    status: Optional[str] = Query(None),
    store: AppointmentStore = Depends(get_store),
):
    return day_view(store.appointments, _day_param(day), status)


@app.get("/views/week", response_model=WeekGrid)
async def get_week_view(
    day: Optional[str] = Query(None, alias="date"),
    status: Optional[str] = Query(None),
    store: AppointmentStore = Depends(get_store),
):
    return week_view(store.appointments, _day_param(day), status, GridConfig())


@app.get("/views/month", response_model=MonthView)
async def get_month_view(
    day: Optional[str] = Query(None, alias="date"),
    status: Optional[str] = Query(None),
    store: AppointmentStore = Depends(get_store),
):
    return month_view(store.appointments, _day_param(day), status)


@app.get("/views/upcoming", response_model=WeekPageView)
async def get_upcoming_weeks(
    week_index: Optional[int] = Query(None, ge=0),
    grace_minutes: Optional[int] = Query(None, ge=0, description="Leave out today's overrun bookings"),
    store: AppointmentStore = Depends(get_store),
):
    grace_period = timedelta(minutes=grace_minutes) if grace_minutes is not None else None
    return upcoming_weeks_view(store.appointments, datetime.now(), week_index, grace_period)


@app.get("/views/past", response_model=WeekPageView)
async def get_past_weeks(
    week_index: int = Query(0, ge=0),
    grace_minutes: Optional[int] = Query(None, ge=0, description="Also count today's overrun bookings"),
    store: AppointmentStore = Depends(get_store),
):
    options = {}
    if grace_minutes is not None:
        options = {"now": datetime.now(), "grace_period": timedelta(minutes=grace_minutes)}
    return past_weeks_view(store.appointments, date.today(), week_index, **options)


@app.get("/stats", response_model=DashboardStats)
async def get_stats(store: AppointmentStore = Depends(get_store)):
    return dashboard_stats(store.appointments)


@app.get("/availability", response_model=list[SlotAvailability])
async def get_availability(
    day: Optional[str] = Query(None, alias="date"),
    duration: int = Query(config.DEFAULT_APPOINTMENT_DURATION, gt=0),
    store: AppointmentStore = Depends(get_store),
):
    """Candidate start times for opening a new slot on a day."""
    return slot_availability(_day_param(day), store.appointments, slot_duration=duration)

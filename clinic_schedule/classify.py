"""Booked-vs-open-slot classification and the appointment status taxonomy."""
from __future__ import annotations

import logging
from enum import Enum

logger = logging.getLogger(__name__)

AVAILABLE_SLOT_NAME = "Available Slot"
_EMPTY_SUBJECT_IDS = ("", "0")


class Status(str, Enum):
    SCHEDULED = "Scheduled"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    EXPIRED = "Expired"


class Category(str, Enum):
    BOOKED = "Booked"
    OPEN_SLOT = "OpenSlot"


# Order matters: a raw value matching several statuses resolves to the first hit.
STATUS_PRECEDENCE = (Status.CANCELLED, Status.COMPLETED, Status.EXPIRED)


def _norm(value) -> str:
    if isinstance(value, Status):
        value = value.value
    return str(value).strip().lower()


def has_status(raw_status, target) -> bool:
    """True when the normalized target is contained in the normalized raw status.

    ``has_status("CANCELLED_LATE", "Cancelled")`` is True.
    """
    if not raw_status or not target:
        return False
    return _norm(target) in _norm(raw_status)


def normalize_status(raw_status) -> Status:
    """Map any upstream status string onto exactly one ``Status``."""
    if isinstance(raw_status, Status):
        return raw_status
    if not raw_status or not isinstance(raw_status, str):
        logger.warning("Missing appointment status %r, defaulting to Scheduled", raw_status)
        return Status.SCHEDULED
    for status in STATUS_PRECEDENCE:
        if has_status(raw_status, status):
            return status
    if not has_status(raw_status, Status.SCHEDULED):
        logger.warning("Unknown appointment status %r, defaulting to Scheduled", raw_status)
    return Status.SCHEDULED


# Badge/colour derivation consults statuses in the same fixed order.
status_badge = normalize_status


def category_of(subject_id, subject_name) -> Category:
    """Open slot when the id is empty/absent/zero or the name is the reserved one."""
    if subject_id is None or str(subject_id).strip() in _EMPTY_SUBJECT_IDS:
        return Category.OPEN_SLOT
    if subject_name == AVAILABLE_SLOT_NAME:
        return Category.OPEN_SLOT
    return Category.BOOKED


def is_open_slot(record) -> bool:
    return category_of(record.subject_id, record.subject_name) is Category.OPEN_SLOT


def is_booked(record) -> bool:
    return not is_open_slot(record)

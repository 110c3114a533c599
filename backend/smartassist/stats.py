# smartassist/stats.py
from datetime import datetime, timezone
from typing import Iterable, Optional

CLOSED_BOOKING_STATUSES = {"cancelled", "completed"}


def as_utc(dt: datetime) -> datetime:
    """SQLite hands back naive datetimes; treat those as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def compute_stats(appliances: Iterable, diagnoses: Iterable, bookings: Iterable,
                  now: Optional[datetime] = None) -> dict:
    """
    Dashboard counters, derived on read:
      totalDevices     - every appliance
      activeDiagnoses  - diagnoses with status 'open'
      upcomingBookings - not cancelled/completed and scheduled strictly after now
    """
    now = as_utc(now or datetime.now(timezone.utc))
    return {
        "totalDevices": sum(1 for _ in appliances),
        "activeDiagnoses": sum(1 for d in diagnoses if d.status == "open"),
        "upcomingBookings": sum(
            1 for b in bookings
            if b.status not in CLOSED_BOOKING_STATUSES and as_utc(b.scheduled_date) > now
        ),
    }

"""Read side of the schedule: calendar dots and per-day listings.

Nothing here caches; every call reads the current appointment rows, so a
cancellation shows up on the very next call.
"""
import calendar
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from sqlalchemy import func, or_, select

from grooming import db
from grooming.models.appointment import Appointment, AppointmentStatus
from grooming.scheduling.errors import ValidationError

LEVEL_NONE = 'none'
LEVEL_LOW = 'low'
LEVEL_MEDIUM = 'medium'
LEVEL_HIGH = 'high'

# Bookable groomer minutes in one business day
MINUTES_PER_DAY = 480


@dataclass(frozen=True)
class DayDensity:
    count: int
    booked_minutes: int
    level: str

    def to_dict(self):
        return {'count': self.count, 'booked_minutes': self.booked_minutes, 'level': self.level}


@dataclass(frozen=True)
class CalendarEntry:
    appointment_id: str
    date: date
    time: time
    status: str
    pet_name: str
    groomer_name: str

    def to_dict(self):
        return {
            'id': self.appointment_id,
            'date': self.date.isoformat(),
            'time': self.time.strftime('%H:%M'),
            'status': self.status,
            'pet_name': self.pet_name,
            'groomer_name': self.groomer_name,
        }


def density_level(count, low_max=2, medium_max=5):
    if count <= 0:
        return LEVEL_NONE
    if count <= low_max:
        return LEVEL_LOW
    if count <= medium_max:
        return LEVEL_MEDIUM
    return LEVEL_HIGH


def month_bounds(year, month):
    """First instant of the month and of the month after it."""
    try:
        year, month = int(year), int(month)
        start = datetime(year, month, 1)
        end = start + timedelta(days=calendar.monthrange(year, month)[1])
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f"Invalid month '{year}-{month}'.", guard='month')
    return start, end


def day_bounds(day):
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


def _not_cancelled():
    return func.lower(Appointment.status) != AppointmentStatus.CANCELLED.value.lower()


class BookingCalendar:
    def __init__(self, low_max=2, medium_max=5):
        self.low_max = low_max
        self.medium_max = medium_max

    @classmethod
    def from_config(cls, config):
        return cls(
            low_max=config.get('DENSITY_LOW_MAX', 2),
            medium_max=config.get('DENSITY_MEDIUM_MAX', 5),
        )

    def booking_density(self, year, month):
        """Per-day count of live (non-cancelled) appointments for every day of the month."""
        start, end = month_bounds(year, month)
        rows = db.session.execute(
            select(Appointment.scheduled_at, Appointment.duration_minutes).where(
                Appointment.scheduled_at >= start,
                Appointment.scheduled_at < end,
                _not_cancelled(),
            )
        ).all()

        counts = defaultdict(int)
        minutes = defaultdict(int)
        for scheduled_at, duration in rows:
            counts[scheduled_at.date()] += 1
            minutes[scheduled_at.date()] += duration or 0

        density = {}
        day = start.date()
        while day < end.date():
            density[day] = DayDensity(
                count=counts[day],
                booked_minutes=minutes[day],
                level=density_level(counts[day], self.low_max, self.medium_max),
            )
            day += timedelta(days=1)
        return density

    def appointments_for_date(self, actor_id, day):
        """All appointments on ``day`` where ``actor_id`` is the customer or the groomer, earliest first."""
        start, end = day_bounds(day)
        return db.session.scalars(
            select(Appointment)
            .where(
                or_(Appointment.customer_id == actor_id, Appointment.staff_id == actor_id),
                Appointment.scheduled_at >= start,
                Appointment.scheduled_at < end,
            )
            .order_by(Appointment.scheduled_at, Appointment.id)
        ).all()

    def appointments_for_month(self, customer_id, year, month):
        start, end = month_bounds(year, month)
        appointments = db.session.scalars(
            select(Appointment)
            .where(
                Appointment.customer_id == customer_id,
                Appointment.scheduled_at >= start,
                Appointment.scheduled_at < end,
            )
            .order_by(Appointment.scheduled_at, Appointment.id)
        ).all()
        return [
            CalendarEntry(
                appointment_id=a.id,
                date=a.scheduled_at.date(),
                time=a.scheduled_at.time(),
                status=a.current_status.value,
                pet_name=a.pet.name,
                groomer_name=a.groomer_name,
            )
            for a in appointments
        ]

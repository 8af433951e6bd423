"""Appointment identifiers: ``AP`` followed by a zero-padded sequence number."""
from sqlalchemy import select, update

from grooming import db
from grooming.models.appointment import Appointment, IdSequence

APPOINTMENT_PREFIX = 'AP'
APPOINTMENT_SEQUENCE = 'appointment'


def format_appointment_id(number):
    return f"{APPOINTMENT_PREFIX}{number:03d}"


def parse_appointment_number(appointment_id):
    """Return the numeric suffix of an ``AP###`` id, or None if it has none."""
    if not appointment_id or not appointment_id.startswith(APPOINTMENT_PREFIX):
        return None
    try:
        number = int(appointment_id[len(APPOINTMENT_PREFIX):])
    except ValueError:
        return None
    return number if number > 0 else None


class AppointmentIdSequence:
    """Hands out appointment ids from a persisted counter.

    The counter is bumped with a single UPDATE inside the caller's
    transaction, so an id is only consumed if the appointment commits.
    The first call seeds the counter from the highest id already stored.
    """

    def __init__(self, name=APPOINTMENT_SEQUENCE):
        self.name = name

    def highest_existing(self):
        numbers = (parse_appointment_number(i) for i in db.session.scalars(select(Appointment.id)))
        return max((n for n in numbers if n is not None), default=0)

    def _ensure_seeded(self):
        if db.session.get(IdSequence, self.name) is None:
            db.session.add(IdSequence(self.name, self.highest_existing()))
            db.session.flush()

    def next_id(self):
        self._ensure_seeded()
        db.session.execute(
            update(IdSequence)
            .where(IdSequence.name == self.name)
            .values(value=IdSequence.value + 1)
        )
        value = db.session.execute(
            select(IdSequence.value).where(IdSequence.name == self.name)
        ).scalar_one()
        return format_appointment_id(value)

"""Choosing the groomer for a booking."""
from flask import current_app
from sqlalchemy import func, select

from grooming import db
from grooming.models.user import User, ROLE_STAFF
from grooming.models.appointment import Appointment, AppointmentStatus
from grooming.scheduling.errors import AssignmentError

ANY_GROOMER = 'any'


def is_any_groomer(staff_id):
    return staff_id is None or str(staff_id).strip().lower() in ('', ANY_GROOMER)


class GroomerAssignmentPolicy:
    """Resolve an explicit groomer or pick one for "any available".

    By default the policy neither checks the groomer's existing schedule nor
    complains about an unknown explicit groomer (the appointment is simply
    left unassigned). ``strict`` turns the unknown groomer into an
    ``AssignmentError``; ``prevent_overlap`` refuses groomers that already
    hold a non-cancelled appointment overlapping the requested slot.
    """

    def __init__(self, strict=False, prevent_overlap=False):
        self.strict = strict
        self.prevent_overlap = prevent_overlap

    @classmethod
    def from_config(cls, config):
        return cls(
            strict=config.get('SCHEDULING_STRICT_GROOMER', False),
            prevent_overlap=config.get('SCHEDULING_PREVENT_OVERLAP', False),
        )

    def assign(self, staff_id, start, end):
        if is_any_groomer(staff_id):
            return self._first_available(start, end)
        return self._explicit(staff_id, start, end)

    def _explicit(self, staff_id, start, end):
        groomer = self._find_staff(staff_id)
        if groomer is None:
            if self.strict:
                raise AssignmentError(f"Groomer '{staff_id}' does not exist.")
            current_app.logger.warning(f"Requested groomer {staff_id} not found; leaving appointment unassigned")
            return None
        if self.prevent_overlap and self.is_busy(groomer.id, start, end):
            raise AssignmentError(
                f"Groomer '{groomer.get_full_name()}' has a conflict for the timeslot "
                f"{start:%H:%M} - {end:%H:%M}.",
                guard='overlap',
            )
        return groomer

    def _first_available(self, start, end):
        for groomer in self.assignable_staff():
            if self.prevent_overlap and self.is_busy(groomer.id, start, end):
                continue
            return groomer
        if self.prevent_overlap:
            raise AssignmentError(
                'Could not find an available groomer at the selected time. '
                'Please try another time or choose a groomer.',
                guard='overlap',
            )
        current_app.logger.warning('No staff available for assignment; leaving appointment unassigned')
        return None

    @staticmethod
    def assignable_staff():
        return db.session.scalars(
            select(User).where(User.role == ROLE_STAFF, User.is_active.is_(True)).order_by(User.id)
        ).all()

    @staticmethod
    def _find_staff(staff_id):
        try:
            staff_id = int(staff_id)
        except (TypeError, ValueError):
            return None
        return db.session.scalars(
            select(User).where(User.id == staff_id, User.role == ROLE_STAFF)
        ).first()

    @staticmethod
    def is_busy(staff_id, start, end):
        candidates = db.session.scalars(
            select(Appointment).where(
                Appointment.staff_id == staff_id,
                func.lower(Appointment.status) != AppointmentStatus.CANCELLED.value.lower(),
                Appointment.scheduled_at < end,
            )
        ).all()
        return any(a.overlaps(start, end) for a in candidates)

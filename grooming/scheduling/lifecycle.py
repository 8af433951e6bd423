"""Booking and status transitions for appointments.

An appointment is created ``Confirmed`` and moves once, either to
``Completed`` (by its groomer, on the day, after the service has run) or to
``Cancelled`` (more than 24 hours ahead). Guard failures come back as
``Rejection`` values; only an unknown appointment id or a persistence fault
raises.
"""
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from grooming import db
from grooming.models.user import User
from grooming.models.pet import Pet
from grooming.models.service import Service
from grooming.models.appointment import Appointment
from grooming.scheduling.assignment import GroomerAssignmentPolicy, is_any_groomer
from grooming.scheduling.errors import (
    SchedulingError,
    ValidationError,
    NotFoundError,
    OwnershipError,
    InvalidTransitionError,
    Rejection,
)
from grooming.scheduling.events import (
    appointment_created,
    appointment_cancelled,
    appointment_completed,
    emit,
)
from grooming.scheduling.ids import AppointmentIdSequence
from grooming.scheduling.loyalty import LoyaltyLedger, POINTS_PER_BOOKING, POINTS_PER_CANCELLATION

CANCELLATION_NOTICE = timedelta(hours=24)


def _as_int(value, entity):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise NotFoundError(entity, value)


@dataclass
class BookingRequest:
    """What the customer (or an admin on their behalf) asked for.

    Every pet becomes its own appointment. ``pet_services`` and
    ``pet_groomers`` override the request-wide service and groomer for
    single pets; ``sequential`` books the pets back to back on ``staff_id``
    and ignores ``pet_groomers``.
    """
    customer_id: int
    pet_ids: List[int]
    service_id: Optional[int]
    scheduled_at: datetime
    staff_id: Optional[str] = None
    notes: str = ''
    pet_services: Dict[int, int] = field(default_factory=dict)
    pet_groomers: Dict[int, str] = field(default_factory=dict)
    sequential: bool = False

    @classmethod
    def from_parts(cls, customer_id, pet_ids, service_id, day, at, **kwargs):
        return cls(
            customer_id=customer_id,
            pet_ids=list(pet_ids),
            service_id=service_id,
            scheduled_at=datetime.combine(day, at),
            **kwargs
        )

    def service_for(self, pet_id):
        return self.pet_services.get(pet_id, self.service_id)

    def groomer_for(self, pet_id):
        if self.sequential:
            return self.staff_id
        groomer = self.pet_groomers.get(pet_id)
        if is_any_groomer(groomer):
            return self.staff_id
        return groomer


@dataclass
class BookingResult:
    appointments: List[Appointment] = field(default_factory=list)
    failures: List[Rejection] = field(default_factory=list)

    @property
    def ok(self):
        return bool(self.appointments) and not self.failures

    @property
    def partial(self):
        return bool(self.appointments) and bool(self.failures)

    @property
    def points_awarded(self):
        return len(self.appointments) * POINTS_PER_BOOKING

    def to_dict(self):
        return {
            'appointments': [a.to_dict() for a in self.appointments],
            'failures': [f.to_dict() for f in self.failures],
            'points_awarded': self.points_awarded,
        }


@dataclass
class TransitionResult:
    appointment: Appointment
    rejection: Optional[Rejection] = None

    @property
    def ok(self):
        return self.rejection is None

    def to_dict(self):
        if self.rejection is not None:
            data = self.rejection.to_dict()
            data['appointment_id'] = self.appointment.id
            return data
        return {'appointment': self.appointment.to_dict()}


class AppointmentLifecycle:
    def __init__(self, clock=None, ledger=None, policy=None, id_sequence=None):
        self.clock = clock or datetime.now
        self.ledger = ledger or LoyaltyLedger()
        self.policy = policy or GroomerAssignmentPolicy()
        self.ids = id_sequence or AppointmentIdSequence()

    @classmethod
    def from_app(cls, app=None):
        app = app or current_app
        return cls(
            clock=app.config.get('SCHEDULING_CLOCK'),
            policy=GroomerAssignmentPolicy.from_config(app.config),
        )

    # -- booking ---------------------------------------------------------

    def book(self, request):
        """Create one Confirmed appointment per pet, crediting points for each.

        Pets are committed one at a time; a pet that fails is reported in
        ``failures`` while the others still go through.
        """
        result = BookingResult()
        try:
            customer = self._bookable_customer(request.customer_id)
            if not request.pet_ids:
                raise ValidationError('Select at least one pet to book.', guard='pets')
            if request.sequential and is_any_groomer(request.staff_id):
                raise ValidationError(
                    'You must select a specific groomer to book pets one after another.',
                    guard='groomer',
                )
        except SchedulingError as error:
            current_app.logger.warning(f"Booking for customer {request.customer_id} refused: {error.message}")
            for pet_id in request.pet_ids or [None]:
                result.failures.append(error.to_rejection(pet_id=pet_id))
            return result

        customer_id = customer.id
        start = request.scheduled_at
        for pet_id in request.pet_ids:
            try:
                appointment = self._book_pet(customer_id, pet_id, request, start)
            except SchedulingError as error:
                db.session.rollback()
                current_app.logger.warning(f"Booking pet {pet_id} for customer {request.customer_id} refused: {error.message}")
                result.failures.append(error.to_rejection(pet_id=pet_id))
                continue
            except SQLAlchemyError:
                db.session.rollback()
                raise

            result.appointments.append(appointment)
            emit(appointment_created, self, appointment)
            if request.sequential:
                start = appointment.end_time

        return result

    def _book_pet(self, customer_id, pet_id, request, start):
        pet = db.session.get(Pet, _as_int(pet_id, 'Pet'))
        if pet is None:
            raise NotFoundError('Pet', pet_id)
        if not pet.belongs_to(customer_id):
            raise OwnershipError(f"Pet '{pet.name}' does not belong to this customer.", guard='pet_owner')

        service = self._bookable_service(request.service_for(pet_id))

        now = self.clock()
        if start <= now:
            raise ValidationError(
                'You cannot book an appointment for a time that has already passed.',
                guard='future_time',
            )

        end = start + timedelta(minutes=service.duration_minutes)
        groomer = self.policy.assign(request.groomer_for(pet_id), start, end)

        appointment = Appointment(
            id=self.ids.next_id(),
            customer_id=customer_id,
            pet_id=pet.id,
            service_id=service.id,
            staff_id=groomer.id if groomer else None,
            scheduled_at=start,
            duration_minutes=service.duration_minutes,
            special_request=request.notes or '',
            created_at=now,
        )
        db.session.add(appointment)
        self.ledger.credit(customer_id, POINTS_PER_BOOKING)
        db.session.commit()

        current_app.logger.info(
            f"Booked {appointment.id} for pet {pet.id} at {start:%Y-%m-%d %H:%M} "
            f"with groomer {appointment.staff_id or 'unassigned'}"
        )
        return appointment

    @staticmethod
    def _bookable_customer(customer_id):
        customer = db.session.get(User, _as_int(customer_id, 'Customer'))
        if customer is None or not customer.is_customer():
            raise NotFoundError('Customer', customer_id)
        if not customer.is_active:
            raise ValidationError(
                'Appointments can only be created for active customers.',
                guard='customer_status',
            )
        return customer

    @staticmethod
    def _bookable_service(service_id):
        if service_id is None:
            raise ValidationError('Select a service to book.', guard='service')
        service = db.session.get(Service, _as_int(service_id, 'Service'))
        if service is None:
            raise NotFoundError('Service', service_id)
        if not service.is_active:
            raise ValidationError(f"Service '{service.name}' is no longer offered.", guard='service')
        return service

    # -- transitions -----------------------------------------------------

    def complete(self, appointment_id, staff_id):
        """Mark an appointment done. Only its groomer, only on the day, only once the service has run."""
        appointment = self.get(appointment_id)
        now = self.clock()
        try:
            self._check_open(appointment, 'completed')
            if appointment.staff_id is None or appointment.staff_id != staff_id:
                raise InvalidTransitionError(
                    'You can only complete appointments assigned to you.',
                    guard='assigned_staff',
                )
            scheduled_day = appointment.scheduled_at.date()
            if now.date() != scheduled_day:
                when = 'has not arrived yet' if now.date() < scheduled_day else 'has already passed'
                raise InvalidTransitionError(
                    f"Appointments can only be completed on the scheduled day "
                    f"({scheduled_day:%b %d, %Y}), which {when}.",
                    guard='scheduled_day',
                )
            if now < appointment.end_time:
                remaining = math.ceil((appointment.end_time - now).total_seconds() / 60)
                raise InvalidTransitionError(
                    f"Cannot complete appointment yet. The service finishes at "
                    f"{appointment.end_time:%I:%M %p} ({remaining} minutes remaining).",
                    guard='service_duration',
                    minutes_remaining=remaining,
                )
        except SchedulingError as error:
            return self._reject(appointment, error)

        return self._transition(appointment, appointment.complete, appointment_completed)

    def cancel(self, appointment_id, actor):
        """Cancel more than 24 hours ahead and take the booking points back."""
        appointment = self.get(appointment_id)
        now = self.clock()
        try:
            self._check_open(appointment, 'cancelled')
            self._check_actor(appointment, actor)
            if appointment.scheduled_at - now <= CANCELLATION_NOTICE:
                raise InvalidTransitionError(
                    'Appointments can only be cancelled more than 24 hours before the scheduled time.',
                    guard='cancellation_window',
                )
        except SchedulingError as error:
            return self._reject(appointment, error)

        def apply():
            appointment.cancel()
            self.ledger.debit(appointment.customer_id, POINTS_PER_CANCELLATION)

        return self._transition(appointment, apply, appointment_cancelled)

    def get(self, appointment_id):
        key = (appointment_id or '').strip().upper()
        appointment = db.session.get(Appointment, key) if key else None
        if appointment is None:
            raise NotFoundError('Appointment', appointment_id)
        return appointment

    @staticmethod
    def _check_open(appointment, target):
        status = appointment.current_status
        if status.is_terminal:
            raise InvalidTransitionError(
                f"Appointment {appointment.id} is already {status.value.lower()} and cannot be {target}.",
                guard='terminal_state',
            )

    @staticmethod
    def _check_actor(appointment, actor):
        if actor.is_admin():
            return
        if actor.is_customer() and appointment.customer_id == actor.id:
            return
        if actor.is_staff() and appointment.staff_id == actor.id:
            return
        raise OwnershipError('You can only cancel your own appointments.', guard='actor')

    def _reject(self, appointment, error):
        current_app.logger.warning(f"Transition on {appointment.id} refused ({error.guard}): {error.message}")
        return TransitionResult(appointment, error.to_rejection())

    def _transition(self, appointment, apply, signal):
        try:
            apply()
            db.session.commit()
        except StaleDataError:
            db.session.rollback()
            current_app.logger.warning(f"Concurrent update on {appointment.id}; transition dropped")
            error = InvalidTransitionError(
                'This appointment was changed by another request. Please reload and try again.',
                guard='concurrent_update',
            )
            return TransitionResult(appointment, error.to_rejection())
        except (SchedulingError, SQLAlchemyError):
            db.session.rollback()
            raise

        current_app.logger.info(f"Appointment {appointment.id} is now {appointment.status}")
        emit(signal, self, appointment)
        return TransitionResult(appointment)

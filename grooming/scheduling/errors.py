"""Error taxonomy for the scheduling core.

Guard failures are raised internally as ``SchedulingError`` subclasses and
turned into ``Rejection`` values at the operation boundary, so that batch
bookings can collect them per pet. Persistence faults are never wrapped.
"""
from dataclasses import dataclass
from typing import Optional


class SchedulingError(Exception):
    status_code = 400
    default_guard = None

    def __init__(self, message, guard=None):
        super().__init__(message)
        self.message = message
        self.guard = guard or self.default_guard

    @property
    def error_type(self):
        return type(self).__name__

    def to_rejection(self, pet_id=None):
        return Rejection(
            error=self.error_type,
            message=self.message,
            guard=self.guard,
            pet_id=pet_id,
            minutes_remaining=getattr(self, 'minutes_remaining', None),
        )

    def to_dict(self):
        return self.to_rejection().to_dict()


class ValidationError(SchedulingError):
    status_code = 400
    default_guard = 'input'


class NotFoundError(SchedulingError):
    status_code = 404
    default_guard = 'exists'

    def __init__(self, entity, identity, message=None):
        super().__init__(message or f"{entity} '{identity}' was not found.")
        self.entity = entity
        self.identity = identity


class OwnershipError(SchedulingError):
    status_code = 403
    default_guard = 'ownership'


class InvalidTransitionError(SchedulingError):
    status_code = 409
    default_guard = 'terminal_state'

    def __init__(self, message, guard=None, minutes_remaining=None):
        super().__init__(message, guard)
        self.minutes_remaining = minutes_remaining


class AssignmentError(SchedulingError):
    status_code = 409
    default_guard = 'groomer'


@dataclass
class Rejection:
    """Structured, caller-facing form of a failed guard."""
    error: str
    message: str
    guard: Optional[str] = None
    pet_id: Optional[int] = None
    minutes_remaining: Optional[int] = None

    @property
    def status_code(self):
        return _STATUS_CODES.get(self.error, 400)

    def to_dict(self):
        data = {'error': self.error, 'message': self.message}
        if self.guard:
            data['guard'] = self.guard
        if self.pet_id is not None:
            data['pet_id'] = self.pet_id
        if self.minutes_remaining is not None:
            data['minutes_remaining'] = self.minutes_remaining
        return data


_STATUS_CODES = {
    cls.__name__: cls.status_code
    for cls in (ValidationError, NotFoundError, OwnershipError, InvalidTransitionError, AssignmentError)
}

import enum
from datetime import datetime, timedelta

from grooming import db
from grooming.scheduling.errors import ValidationError

UNASSIGNED_LABEL = 'Not assigned'


class AppointmentStatus(str, enum.Enum):
    CONFIRMED = 'Confirmed'
    COMPLETED = 'Completed'
    CANCELLED = 'Cancelled'

    @classmethod
    def parse(cls, value):
        """Case-insensitive lookup for statuses arriving as free text."""
        if isinstance(value, cls):
            return value
        text = (value or '').strip().lower()
        for status in cls:
            if status.value.lower() == text:
                return status
        raise ValidationError(f"Unknown appointment status '{value}'.")

    @property
    def is_terminal(self):
        return self in (AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED)


class Appointment(db.Model):
    __tablename__ = 'appointments'

    id = db.Column(db.String(15), primary_key=True)  # AP001, AP002, ...
    customer_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    pet_id = db.Column(db.Integer, db.ForeignKey('pets.id'), nullable=False)
    service_id = db.Column(db.Integer, db.ForeignKey('services.id'), nullable=False)
    staff_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    scheduled_at = db.Column(db.DateTime, nullable=False, index=True)
    duration_minutes = db.Column(db.Integer, nullable=False)
    special_request = db.Column(db.String(500), nullable=True)
    status = db.Column(db.String(20), nullable=False, default=AppointmentStatus.CONFIRMED.value)
    created_at = db.Column(db.DateTime, default=datetime.now)
    updated_at = db.Column(db.DateTime, default=datetime.now, onupdate=datetime.now)
    version = db.Column(db.Integer, nullable=False)

    __mapper_args__ = {'version_id_col': version}

    def __init__(self, id, customer_id, pet_id, service_id, scheduled_at, duration_minutes,
                 staff_id=None, special_request=None, created_at=None):
        self.id = id
        self.customer_id = customer_id
        self.pet_id = pet_id
        self.service_id = service_id
        self.staff_id = staff_id
        self.scheduled_at = scheduled_at
        self.duration_minutes = duration_minutes
        self.special_request = special_request
        self.status = AppointmentStatus.CONFIRMED.value
        if created_at is not None:
            self.created_at = created_at

    @property
    def current_status(self):
        return AppointmentStatus.parse(self.status)

    @property
    def end_time(self):
        return self.scheduled_at + timedelta(minutes=self.duration_minutes)

    @property
    def groomer_name(self):
        return self.staff.get_full_name() if self.staff else UNASSIGNED_LABEL

    def overlaps(self, start, end):
        return start < self.end_time and end > self.scheduled_at

    def cancel(self):
        self.status = AppointmentStatus.CANCELLED.value

    def complete(self):
        self.status = AppointmentStatus.COMPLETED.value

    def to_dict(self):
        return {
            'id': self.id,
            'customer_id': self.customer_id,
            'pet_id': self.pet_id,
            'pet_name': self.pet.name if self.pet else None,
            'service_id': self.service_id,
            'service_name': self.service.name if self.service else None,
            'staff_id': self.staff_id,
            'groomer_name': self.groomer_name,
            'scheduled_at': self.scheduled_at.isoformat(),
            'end_time': self.end_time.isoformat(),
            'duration_minutes': self.duration_minutes,
            'special_request': self.special_request,
            'status': self.current_status.value,
        }

    def __repr__(self):
        return f'<Appointment {self.id}: {self.scheduled_at} [{self.status}]>'


class IdSequence(db.Model):
    """Persisted counter behind generated identifiers."""
    __tablename__ = 'id_sequences'

    name = db.Column(db.String(50), primary_key=True)
    value = db.Column(db.Integer, nullable=False, default=0)

    def __init__(self, name, value=0):
        self.name = name
        self.value = value

    def __repr__(self):
        return f'<IdSequence {self.name}={self.value}>'

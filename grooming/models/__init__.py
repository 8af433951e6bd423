# Import all models here for easier imports elsewhere
from .user import User
from .pet import Pet
from .service import Service
from .appointment import Appointment, AppointmentStatus, IdSequence
from .audit import AuditLog

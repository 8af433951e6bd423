"""Appointment scheduling core: booking, lifecycle transitions, loyalty and calendar reads.

Only the error types are re-exported here; the services are imported from
their modules (``grooming.scheduling.lifecycle`` and friends) so that the
models can depend on this package without an import cycle.
"""
from .errors import (
    SchedulingError,
    ValidationError,
    NotFoundError,
    OwnershipError,
    InvalidTransitionError,
    AssignmentError,
    Rejection,
)

"""Lifecycle signals for collaborators such as mailers and audit trails.

Receivers get the lifecycle as sender and the appointment as ``appointment``::

    @appointment_created.connect
    def on_created(sender, appointment, **extra):
        ...
"""
from blinker import Namespace
from flask import current_app

scheduling_signals = Namespace()

appointment_created = scheduling_signals.signal('appointment-created')
appointment_cancelled = scheduling_signals.signal('appointment-cancelled')
appointment_completed = scheduling_signals.signal('appointment-completed')


def emit(signal, sender, appointment, **extra):
    """Send a signal after commit; a failing receiver is logged, never propagated."""
    try:
        signal.send(sender, appointment=appointment, **extra)
    except Exception:
        current_app.logger.error(
            f"Receiver for {signal.name} failed on appointment {appointment.id}", exc_info=True
        )

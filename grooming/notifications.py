"""Mail notifications hung off the scheduling signals.

Delivery is best effort: the appointment is already committed when these
run, and a mail failure is only logged.
"""
from flask import current_app
from flask_mail import Message

from grooming import mail
from grooming.scheduling.events import appointment_created, appointment_cancelled, appointment_completed


def send_email(subject, recipients, text_body):
    """General email sending function; a no-op unless MAIL_ENABLED is set"""
    if not current_app.config.get('MAIL_ENABLED'):
        return False
    msg = Message(subject, recipients=recipients)
    msg.body = text_body
    mail.send(msg)
    return True


def describe(appointment):
    start = appointment.scheduled_at
    hour = start.strftime('%I').lstrip('0')
    return (
        f"Date & Time: {start:%A}, {start:%B} {start.day}, {start.year} at {hour}:{start:%M} {start:%p}\n"
        f"Pet: {appointment.pet.name}\n"
        f"Service: {appointment.service.name} ({appointment.duration_minutes} minutes)\n"
        f"Groomer: {appointment.groomer_name}\n"
        f"Appointment ID: {appointment.id}\n"
    )


def notify_created(sender, appointment, **extra):
    send_email(
        f"Appointment {appointment.id} confirmed",
        [appointment.customer.email],
        "Your grooming appointment is confirmed.\n\n" + describe(appointment) +
        "\nIf you need to cancel, please do so at least 24 hours in advance.\n",
    )


def notify_cancelled(sender, appointment, **extra):
    send_email(
        f"Appointment {appointment.id} cancelled",
        [appointment.customer.email],
        "Your grooming appointment has been cancelled.\n\n" + describe(appointment) +
        "\nWe hope to see you again soon!\n",
    )


def notify_completed(sender, appointment, **extra):
    send_email(
        f"Thanks for visiting - {appointment.pet.name} is all done",
        [appointment.customer.email],
        "Your grooming appointment is complete.\n\n" + describe(appointment),
    )


def register_notifications(app):
    """Connect the mailers to the lifecycle signals."""
    appointment_created.connect(notify_created)
    appointment_cancelled.connect(notify_cancelled)
    appointment_completed.connect(notify_completed)
    app.logger.info(f"Mail notifications {'enabled' if app.config.get('MAIL_ENABLED') else 'disabled'}")

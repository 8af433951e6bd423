from datetime import datetime

from flask import current_app, jsonify

from grooming.scheduling.errors import ValidationError
from grooming.scheduling.loyalty import POINTS_PER_BOOKING
from grooming.utils.audit import log_audit, appointment_audit_details


def today():
    return current_app.config['SCHEDULING_CLOCK']().date()


def parse_day(value, default=None):
    """Parse a YYYY-MM-DD query value, falling back to ``default`` when absent"""
    if not value:
        return default if default is not None else today()
    try:
        return datetime.strptime(value, '%Y-%m-%d').date()
    except ValueError:
        raise ValidationError(f"Invalid date '{value}', expected YYYY-MM-DD.", guard='date')


def parse_month(args):
    """Year and month from query args, defaulting to the current month"""
    current = today()
    try:
        year = int(args.get('year', current.year))
        month = int(args.get('month', current.month))
    except ValueError:
        raise ValidationError('Year and month must be numbers.', guard='month')
    return year, month


def form_errors_response(form, message='Invalid request.'):
    return jsonify({'error': 'ValidationError', 'message': message, 'fields': form.errors}), 400


def booking_response(result):
    """201 when every pet was booked, 207 when only some were, else the first failure's status"""
    for appointment in result.appointments:
        log_audit('book', 'appointment', entity_id=appointment.id,
                  details=appointment_audit_details(appointment, points_awarded=POINTS_PER_BOOKING))

    if result.ok:
        status = 201
    elif result.partial:
        status = 207
    elif result.failures:
        status = result.failures[0].status_code
    else:
        status = 400
    return jsonify(result.to_dict()), status


def transition_response(result, action):
    if not result.ok:
        return jsonify(result.to_dict()), result.rejection.status_code

    log_audit(action, 'appointment', entity_id=result.appointment.id,
              details=appointment_audit_details(result.appointment))
    return jsonify(result.to_dict()), 200

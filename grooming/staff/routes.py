from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from functools import wraps
from grooming.models.appointment import AppointmentStatus
from grooming.staff.forms import AppointmentStatusForm
from grooming.scheduling.lifecycle import AppointmentLifecycle
from grooming.scheduling.availability import BookingCalendar
from grooming.scheduling.errors import InvalidTransitionError
from grooming.utils.common import parse_day, form_errors_response, transition_response

staff_bp = Blueprint('staff', __name__, url_prefix='/staff')


# Custom decorator to ensure only staff can access these routes
def staff_required(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated or not current_user.is_staff():
            return jsonify({'error': 'Forbidden', 'message': 'Access denied. This area is for staff only.'}), 403
        return f(*args, **kwargs)
    return decorated_function


@staff_bp.route('/appointments')
@login_required
@staff_required
def appointments():
    """The groomer's appointments on one day (default today)"""
    day = parse_day(request.args.get('date'))
    listing = BookingCalendar().appointments_for_date(current_user.id, day)
    return jsonify({'date': day.isoformat(), 'appointments': [a.to_dict() for a in listing]})


@staff_bp.route('/appointments/<appointment_id>/complete', methods=['POST'])
@login_required
@staff_required
def complete_appointment(appointment_id):
    result = AppointmentLifecycle.from_app().complete(appointment_id, current_user.id)
    return transition_response(result, 'complete')


@staff_bp.route('/appointments/<appointment_id>/cancel', methods=['POST'])
@login_required
@staff_required
def cancel_appointment(appointment_id):
    result = AppointmentLifecycle.from_app().cancel(appointment_id, current_user)
    return transition_response(result, 'cancel')


@staff_bp.route('/appointments/<appointment_id>/status', methods=['POST'])
@login_required
@staff_required
def update_appointment_status(appointment_id):
    """Update the status of an appointment from a status dropdown"""
    form = AppointmentStatusForm()
    if not form.validate_on_submit():
        return form_errors_response(form)

    status = AppointmentStatus.parse(form.status.data)
    if status == AppointmentStatus.COMPLETED:
        return complete_appointment(appointment_id)
    if status == AppointmentStatus.CANCELLED:
        return cancel_appointment(appointment_id)
    raise InvalidTransitionError(
        f"Appointments cannot be moved back to {status.value}.", guard='target_status'
    )

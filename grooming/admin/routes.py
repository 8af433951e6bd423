from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required, current_user
from functools import wraps
from sqlalchemy import func, or_, select
from grooming import db
from grooming.models.user import User, ROLE_CUSTOMER, ROLE_STAFF
from grooming.models.appointment import Appointment, AppointmentStatus
from grooming.admin.forms import AdminBookingForm
from grooming.scheduling.lifecycle import AppointmentLifecycle, BookingRequest
from grooming.scheduling.availability import BookingCalendar, MINUTES_PER_DAY, day_bounds
from grooming.scheduling.errors import ValidationError
from grooming.utils.common import (
    parse_day, parse_month, form_errors_response, booking_response, transition_response,
)

admin_bp = Blueprint('admin', __name__, url_prefix='/admin')


# Custom decorator to ensure only admins can access these routes
def admin_required(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated or not current_user.is_admin():
            return jsonify({'error': 'Forbidden', 'message': 'Access denied. This area is for administrators only.'}), 403
        return f(*args, **kwargs)
    return decorated_function


@admin_bp.route('/dashboard')
@login_required
@admin_required
def dashboard():
    """Overview counts for the front desk"""
    now = current_app.config['SCHEDULING_CLOCK']()

    status_counts = dict(
        db.session.execute(
            select(func.lower(Appointment.status), func.count(Appointment.id))
            .group_by(func.lower(Appointment.status))
        ).all()
    )
    upcoming = db.session.scalar(
        select(func.count(Appointment.id)).where(
            Appointment.scheduled_at > now,
            func.lower(Appointment.status) == AppointmentStatus.CONFIRMED.value.lower(),
        )
    )
    total_customers = db.session.scalar(
        select(func.count(User.id)).where(User.role == ROLE_CUSTOMER)
    )
    active_groomers = db.session.scalar(
        select(func.count(User.id)).where(User.role == ROLE_STAFF, User.is_active.is_(True))
    )

    return jsonify({
        'total_customers': total_customers,
        'active_groomers': active_groomers,
        'appointments_by_status': {s.value: status_counts.get(s.value.lower(), 0) for s in AppointmentStatus},
        'upcoming_appointments': upcoming,
    })


@admin_bp.route('/booking-density')
@login_required
@admin_required
def booking_density():
    """Calendar dots for the booking form's date picker"""
    year, month = parse_month(request.args)
    density = BookingCalendar.from_config(current_app.config).booking_density(year, month)
    return jsonify({
        'year': year,
        'month': month,
        'total_minutes_per_day': MINUTES_PER_DAY,
        'days': {day.isoformat(): d.to_dict() for day, d in density.items()},
    })


@admin_bp.route('/appointments')
@login_required
@admin_required
def appointments():
    """All appointments with filtering options"""
    query = select(Appointment)

    status_filter = request.args.get('status', 'all')
    if status_filter.lower() != 'all':
        status = AppointmentStatus.parse(status_filter)
        query = query.where(func.lower(Appointment.status) == status.value.lower())

    staff_filter = request.args.get('staff_id')
    if staff_filter:
        if staff_filter.lower() == 'unassigned':
            query = query.where(Appointment.staff_id.is_(None))
        else:
            try:
                staff_id = int(staff_filter)
            except ValueError:
                raise ValidationError(f"Invalid groomer '{staff_filter}'.", guard='staff_id')
            query = query.where(Appointment.staff_id == staff_id)

    date_filter = request.args.get('date')
    if date_filter:
        start, end = day_bounds(parse_day(date_filter))
        query = query.where(Appointment.scheduled_at >= start, Appointment.scheduled_at < end)

    id_filter = request.args.get('appointment_id')
    if id_filter:
        query = query.where(Appointment.id.contains(id_filter.strip().upper()))

    name_filter = request.args.get('customer_name')
    if name_filter:
        pattern = f"%{name_filter.strip()}%"
        query = query.join(User, Appointment.customer_id == User.id).where(
            or_(User.first_name.ilike(pattern), User.last_name.ilike(pattern))
        )

    listing = db.session.scalars(query.order_by(Appointment.scheduled_at.desc(), Appointment.id)).all()
    return jsonify({'appointments': [a.to_dict() for a in listing]})


@admin_bp.route('/appointments', methods=['POST'])
@login_required
@admin_required
def create_appointments():
    """Book on behalf of a customer"""
    form = AdminBookingForm()
    if not form.validate_on_submit():
        return form_errors_response(form, 'Please check the booking details.')

    booking = BookingRequest.from_parts(
        customer_id=form.customer_id.data,
        pet_ids=form.pet_ids.data,
        service_id=form.service_id.data,
        day=form.appointment_date.data,
        at=form.appointment_time.data,
        staff_id=form.staff_id.data,
        notes=form.notes.data or '',
        sequential=form.sequential.data,
    )
    result = AppointmentLifecycle.from_app().book(booking)
    return booking_response(result)


@admin_bp.route('/appointments/<appointment_id>/cancel', methods=['POST'])
@login_required
@admin_required
def cancel_appointment(appointment_id):
    result = AppointmentLifecycle.from_app().cancel(appointment_id, current_user)
    return transition_response(result, 'cancel')

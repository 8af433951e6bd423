from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from functools import wraps
from grooming import db
from grooming.models.pet import Pet
from grooming.customer.forms import BookingForm
from grooming.scheduling.lifecycle import AppointmentLifecycle, BookingRequest
from grooming.scheduling.availability import BookingCalendar
from grooming.scheduling.loyalty import LoyaltyLedger
from grooming.utils.audit import log_audit
from grooming.utils.common import (
    parse_day, parse_month, form_errors_response, booking_response, transition_response,
)

customer_bp = Blueprint('customer', __name__, url_prefix='/customer')


# Custom decorator to ensure only customers can access these routes
def customer_required(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated or not current_user.is_customer():
            return jsonify({'error': 'Forbidden', 'message': 'Access denied. This area is for customers only.'}), 403
        return f(*args, **kwargs)
    return decorated_function


@customer_bp.route('/book', methods=['POST'])
@login_required
@customer_required
def book_appointment():
    """Book one appointment per selected pet"""
    form = BookingForm()
    if not form.validate_on_submit():
        return form_errors_response(form, 'Please check the booking details.')

    booking = BookingRequest.from_parts(
        customer_id=current_user.id,
        pet_ids=form.pet_ids.data,
        service_id=form.service_id.data,
        day=form.appointment_date.data,
        at=form.appointment_time.data,
        staff_id=form.staff_id.data,
        notes=form.notes.data or '',
    )
    result = AppointmentLifecycle.from_app().book(booking)
    return booking_response(result)


@customer_bp.route('/appointments/<appointment_id>/cancel', methods=['POST'])
@login_required
@customer_required
def cancel_appointment(appointment_id):
    """Cancel one of the customer's own appointments"""
    result = AppointmentLifecycle.from_app().cancel(appointment_id, current_user)
    return transition_response(result, 'cancel')


@customer_bp.route('/appointments')
@login_required
@customer_required
def appointments():
    """Appointments on one day (default today), earliest first"""
    day = parse_day(request.args.get('date'))
    listing = BookingCalendar().appointments_for_date(current_user.id, day)
    return jsonify({'date': day.isoformat(), 'appointments': [a.to_dict() for a in listing]})


@customer_bp.route('/calendar')
@login_required
@customer_required
def calendar():
    """Date and status of every appointment in a month, for calendar rendering"""
    year, month = parse_month(request.args)
    entries = BookingCalendar().appointments_for_month(current_user.id, year, month)
    return jsonify({'year': year, 'month': month, 'appointments': [e.to_dict() for e in entries]})


@customer_bp.route('/loyalty')
@login_required
@customer_required
def loyalty():
    return jsonify({'customer_id': current_user.id, 'loyalty_points': LoyaltyLedger().balance(current_user.id)})


@customer_bp.route('/pets/<int:pet_id>', methods=['DELETE'])
@login_required
@customer_required
def delete_pet(pet_id):
    """Remove a pet, unless it has any appointment on record"""
    pet = db.session.get(Pet, pet_id)
    if pet is None or not pet.belongs_to(current_user.id):
        return jsonify({'error': 'NotFoundError', 'message': f"Pet '{pet_id}' was not found."}), 404

    if pet.has_appointments():
        return jsonify({
            'error': 'ValidationError',
            'message': f"{pet.name} has appointment history and cannot be deleted.",
        }), 409

    audit_details = {'name': pet.name, 'species': pet.species, 'breed': pet.breed}
    db.session.delete(pet)
    db.session.commit()
    log_audit('delete', 'pet', entity_id=pet_id, details=audit_details)
    return jsonify({'deleted': pet_id}), 200

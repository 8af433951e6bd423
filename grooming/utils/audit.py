from flask import request, current_app, has_request_context
from flask_login import current_user
from grooming.models.audit import AuditLog
from grooming import db


def log_audit(action, entity_type, entity_id=None, details=None):
    """
    Log an audit entry

    Parameters:
    - action: The action performed (e.g., 'book', 'cancel', 'complete')
    - entity_type: The type of entity affected (e.g., 'appointment', 'pet')
    - entity_id: ID of the affected entity (optional)
    - details: Additional details about the action (optional)

    Runs in its own commit after the scheduling change is already stored,
    so a failure here never rolls the appointment back.
    """
    try:
        user_id = None
        ip_address = None
        if has_request_context():
            if current_user and current_user.is_authenticated:
                user_id = current_user.id
            ip_address = request.remote_addr

        audit_entry = AuditLog(
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details,
            ip_address=ip_address
        )

        db.session.add(audit_entry)
        db.session.commit()

        return True
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Failed to log audit entry: {e}", exc_info=True)
        return False


def appointment_audit_details(appointment, **extra):
    """Common audit payload for an appointment state change"""
    details = {
        'customer_id': appointment.customer_id,
        'pet_id': appointment.pet_id,
        'service_id': appointment.service_id,
        'staff_id': appointment.staff_id,
        'appointment_time': appointment.scheduled_at.strftime('%Y-%m-%d %H:%M'),
        'status': appointment.status,
    }
    details.update(extra)
    return details

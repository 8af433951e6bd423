from flask import Blueprint, jsonify, redirect, url_for
from flask_login import current_user
from sqlalchemy import select
from grooming import db
from grooming.models.user import User, ROLE_STAFF
from grooming.models.service import Service

main_bp = Blueprint('main', __name__)


@main_bp.route('/')
def index():
    """Public listing of services and groomers"""
    services = db.session.scalars(
        select(Service).where(Service.is_active.is_(True)).order_by(Service.name)
    ).all()
    groomers = db.session.scalars(
        select(User).where(User.role == ROLE_STAFF, User.is_active.is_(True)).order_by(User.id)
    ).all()
    return jsonify({
        'services': [
            {'id': s.id, 'name': s.name, 'category': s.category, 'price': float(s.price),
             'duration_minutes': s.duration_minutes}
            for s in services
        ],
        'groomers': [{'id': g.id, 'name': g.get_full_name(), 'position': g.position} for g in groomers],
    })


@main_bp.route('/dashboard')
def dashboard():
    """Redirect to appropriate dashboard based on user role"""
    if not current_user.is_authenticated:
        return redirect(url_for('auth.login'))

    if current_user.is_admin():
        return redirect(url_for('admin.dashboard'))
    elif current_user.is_staff():
        return redirect(url_for('staff.appointments'))
    else:
        return redirect(url_for('customer.appointments'))

from flask import Blueprint, jsonify, request
from flask_login import login_user, logout_user, login_required, current_user
from sqlalchemy import select
from grooming import db
from grooming.models.user import User
from grooming.auth.forms import LoginForm
from grooming.utils.audit import log_audit
from grooming.utils.common import form_errors_response

auth_bp = Blueprint('auth', __name__, url_prefix='/auth')


@auth_bp.route('/login', methods=['POST'])
def login():
    if current_user.is_authenticated:
        return jsonify({'id': current_user.id, 'role': current_user.role})

    form = LoginForm()
    if not form.validate_on_submit():
        return form_errors_response(form)

    user = db.session.scalars(select(User).where(User.email == form.email.data)).first()
    if user is None or not user.check_password(form.password.data):
        log_audit('attempt', 'login', details={'email': form.email.data, 'reason': 'bad_credentials',
                                               'ip_address': request.remote_addr})
        return jsonify({'error': 'Unauthorized', 'message': 'Invalid email or password.'}), 401

    if not user.is_active:
        log_audit('attempt', 'login', entity_id=user.id, details={'email': user.email, 'reason': 'account_inactive'})
        return jsonify({'error': 'Forbidden', 'message': 'Your account is currently deactivated. Please contact support.'}), 403

    login_user(user, remember=form.remember_me.data)
    log_audit('perform', 'login', entity_id=user.id, details={'email': user.email, 'ip_address': request.remote_addr})
    return jsonify({'id': user.id, 'role': user.role, 'name': user.get_full_name()})


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    log_audit('perform', 'logout', entity_id=current_user.id)
    logout_user()
    return jsonify({'logged_out': True})

from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash
from datetime import datetime
from grooming import db, login_manager

# User roles
ROLE_CUSTOMER = 'customer'
ROLE_STAFF = 'staff'
ROLE_ADMIN = 'admin'


class User(UserMixin, db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(150), unique=True, nullable=False)
    password_hash = db.Column(db.String(256), nullable=False)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    phone = db.Column(db.String(20), nullable=True)
    role = db.Column(db.String(20), default=ROLE_CUSTOMER, nullable=False)
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Customer specific fields
    loyalty_points = db.Column(db.Integer, default=0, nullable=False)

    # Staff specific fields
    position = db.Column(db.String(100), nullable=True)  # e.g. "Groomer", "Senior Groomer"

    # Relationships
    pets = db.relationship('Pet', backref='owner', lazy='dynamic')
    appointments_as_customer = db.relationship('Appointment', foreign_keys='Appointment.customer_id', backref='customer', lazy='dynamic')
    appointments_as_staff = db.relationship('Appointment', foreign_keys='Appointment.staff_id', backref='staff', lazy='dynamic')

    def __init__(self, email, first_name, last_name, password, role=ROLE_CUSTOMER, phone=None, position=None):
        self.email = email
        self.first_name = first_name
        self.last_name = last_name
        self.set_password(password)
        self.role = role
        self.phone = phone
        self.position = position
        self.loyalty_points = 0
        self.is_active = True

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    def is_admin(self):
        return self.role == ROLE_ADMIN

    def is_staff(self):
        return self.role == ROLE_STAFF

    def is_customer(self):
        return self.role == ROLE_CUSTOMER

    def get_full_name(self):
        return f"{self.first_name} {self.last_name}"

    def __repr__(self):
        return f'<User {self.email}>'


@login_manager.user_loader
def load_user(id):
    return db.session.get(User, int(id))

"""Pytest configuration and fixtures."""

from datetime import datetime

import pytest

from grooming import create_app, db
from grooming.models import Appointment, Pet, Service, User
from grooming.models.user import ROLE_ADMIN, ROLE_STAFF
from grooming.scheduling.lifecycle import AppointmentLifecycle

PASSWORD = 'groom-secret-1'
NOW = datetime(2025, 1, 8, 9, 0)


class FakeClock:
    """Settable stand-in for datetime.now."""

    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def set(self, now):
        self.now = now


@pytest.fixture
def clock():
    return FakeClock(NOW)


@pytest.fixture
def app(clock):
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite://',
        'WTF_CSRF_ENABLED': False,
        'SCHEDULING_CLOCK': clock,
        'MAIL_ENABLED': False,
    })
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def _user(email, first, last, role='customer', position=None):
    user = User(email=email, first_name=first, last_name=last, password=PASSWORD, role=role, position=position)
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def customer(app):
    return _user('amy@example.com', 'Amy', 'Tan')


@pytest.fixture
def other_customer(app):
    return _user('ben@example.com', 'Ben', 'Lee')


@pytest.fixture
def groomer(app):
    return _user('gina@example.com', 'Gina', 'Groomer', role=ROLE_STAFF, position='Groomer')


@pytest.fixture
def second_groomer(groomer):
    return _user('hugo@example.com', 'Hugo', 'Clipper', role=ROLE_STAFF, position='Senior Groomer')


@pytest.fixture
def admin(app):
    return _user('admin@example.com', 'Ada', 'Admin', role=ROLE_ADMIN)


def _pet(name, owner, species='Dog'):
    pet = Pet(name=name, customer_id=owner.id, species=species, breed='Mixed')
    db.session.add(pet)
    db.session.commit()
    return pet


@pytest.fixture
def pet(customer):
    return _pet('Biscuit', customer)


@pytest.fixture
def second_pet(customer):
    return _pet('Mochi', customer, species='Cat')


@pytest.fixture
def stranger_pet(other_customer):
    return _pet('Rex', other_customer)


@pytest.fixture
def service(app):
    svc = Service(name='Full Groom', price=120, duration_minutes=60, category='Haircut')
    db.session.add(svc)
    db.session.commit()
    return svc


@pytest.fixture
def long_service(app):
    svc = Service(name='Spa Package', price=280, duration_minutes=90, category='Spa')
    db.session.add(svc)
    db.session.commit()
    return svc


@pytest.fixture
def lifecycle(app, clock):
    return AppointmentLifecycle(clock=clock)


@pytest.fixture
def make_appointment(app):
    """Insert an appointment directly, bypassing booking guards."""

    def _make(appointment_id, pet, service, scheduled_at, staff=None, status='Confirmed'):
        appointment = Appointment(
            id=appointment_id,
            customer_id=pet.customer_id,
            pet_id=pet.id,
            service_id=service.id,
            staff_id=staff.id if staff else None,
            scheduled_at=scheduled_at,
            duration_minutes=service.duration_minutes,
        )
        appointment.status = status
        db.session.add(appointment)
        db.session.commit()
        return appointment

    return _make


@pytest.fixture
def login_as(client):
    def _login(user):
        response = client.post('/auth/login', data={'email': user.email, 'password': PASSWORD})
        assert response.status_code == 200, response.get_json()
        return response

    return _login

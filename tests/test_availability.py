"""Tests for the booking calendar read side."""

from datetime import date, datetime

import pytest

from grooming.scheduling.availability import (
    BookingCalendar,
    density_level,
    LEVEL_HIGH,
    LEVEL_LOW,
    LEVEL_MEDIUM,
    LEVEL_NONE,
)
from grooming.scheduling.errors import ValidationError
from grooming.scheduling.lifecycle import BookingRequest


@pytest.fixture
def calendar():
    return BookingCalendar()


class TestDensityLevels:
    @pytest.mark.parametrize('count, level', [
        (0, LEVEL_NONE),
        (1, LEVEL_LOW),
        (2, LEVEL_LOW),
        (3, LEVEL_MEDIUM),
        (5, LEVEL_MEDIUM),
        (6, LEVEL_HIGH),
    ])
    def test_default_thresholds(self, count, level):
        assert density_level(count) == level

    def test_custom_thresholds(self):
        assert density_level(2, low_max=1, medium_max=2) == LEVEL_MEDIUM
        assert density_level(3, low_max=1, medium_max=2) == LEVEL_HIGH


class TestBookingDensity:
    def test_every_day_of_month(self, calendar, app):
        density = calendar.booking_density(2024, 2)
        assert len(density) == 29
        assert min(density) == date(2024, 2, 1)
        assert max(density) == date(2024, 2, 29)
        assert all(d.level == LEVEL_NONE for d in density.values())

    def test_counts_and_minutes(self, calendar, pet, service, long_service, make_appointment):
        make_appointment('AP001', pet, service, datetime(2025, 1, 10, 9, 0))
        make_appointment('AP002', pet, long_service, datetime(2025, 1, 10, 11, 0))
        make_appointment('AP003', pet, service, datetime(2025, 1, 10, 15, 0))
        make_appointment('AP004', pet, service, datetime(2025, 1, 11, 9, 0))
        make_appointment('AP005', pet, service, datetime(2025, 2, 1, 9, 0))

        density = calendar.booking_density(2025, 1)

        assert density[date(2025, 1, 10)].count == 3
        assert density[date(2025, 1, 10)].booked_minutes == 210
        assert density[date(2025, 1, 10)].level == LEVEL_MEDIUM
        assert density[date(2025, 1, 11)].level == LEVEL_LOW
        assert density[date(2025, 1, 31)].count == 0
        assert date(2025, 2, 1) not in density

    def test_cancelled_not_counted(self, calendar, pet, service, make_appointment):
        make_appointment('AP001', pet, service, datetime(2025, 1, 10, 9, 0), status='Cancelled')
        make_appointment('AP002', pet, service, datetime(2025, 1, 10, 10, 0), status='cancelled')
        make_appointment('AP003', pet, service, datetime(2025, 1, 10, 11, 0), status='Completed')

        assert calendar.booking_density(2025, 1)[date(2025, 1, 10)].count == 1

    def test_reflects_cancellation_immediately(self, calendar, lifecycle, customer, pet, second_pet, service):
        result = lifecycle.book(BookingRequest(customer.id, [pet.id, second_pet.id], service.id,
                                               datetime(2025, 1, 20, 10, 0)))
        assert calendar.booking_density(2025, 1)[date(2025, 1, 20)].count == 2

        lifecycle.cancel(result.appointments[0].id, customer)

        assert calendar.booking_density(2025, 1)[date(2025, 1, 20)].count == 1

    @pytest.mark.parametrize('year, month', [(2025, 0), (2025, 13), ('abc', 1), (9999, 12)])
    def test_invalid_month(self, calendar, app, year, month):
        with pytest.raises(ValidationError):
            calendar.booking_density(year, month)


class TestListings:
    def test_for_date_sorted(self, calendar, customer, pet, service, groomer, make_appointment):
        make_appointment('AP001', pet, service, datetime(2025, 1, 10, 15, 0), staff=groomer)
        make_appointment('AP002', pet, service, datetime(2025, 1, 10, 9, 0), staff=groomer)
        make_appointment('AP003', pet, service, datetime(2025, 1, 11, 9, 0), staff=groomer)

        listing = calendar.appointments_for_date(customer.id, date(2025, 1, 10))
        assert [a.id for a in listing] == ['AP002', 'AP001']

    def test_for_date_as_groomer(self, calendar, pet, stranger_pet, service, groomer, second_groomer,
                                 make_appointment):
        make_appointment('AP001', pet, service, datetime(2025, 1, 10, 9, 0), staff=groomer)
        make_appointment('AP002', stranger_pet, service, datetime(2025, 1, 10, 10, 0), staff=groomer)
        make_appointment('AP003', pet, service, datetime(2025, 1, 10, 11, 0), staff=second_groomer)

        listing = calendar.appointments_for_date(groomer.id, date(2025, 1, 10))
        assert [a.id for a in listing] == ['AP001', 'AP002']

    def test_for_date_only_own(self, calendar, other_customer, pet, service, make_appointment):
        make_appointment('AP001', pet, service, datetime(2025, 1, 10, 9, 0))
        assert calendar.appointments_for_date(other_customer.id, date(2025, 1, 10)) == []

    def test_month_projection(self, calendar, customer, pet, service, groomer, make_appointment):
        make_appointment('AP001', pet, service, datetime(2025, 1, 10, 9, 0), staff=groomer)
        make_appointment('AP002', pet, service, datetime(2025, 1, 3, 14, 30), status='Cancelled')
        make_appointment('AP003', pet, service, datetime(2025, 2, 3, 14, 30))

        entries = calendar.appointments_for_month(customer.id, 2025, 1)

        assert [e.appointment_id for e in entries] == ['AP002', 'AP001']
        assert entries[0].to_dict() == {
            'id': 'AP002',
            'date': '2025-01-03',
            'time': '14:30',
            'status': 'Cancelled',
            'pet_name': 'Biscuit',
            'groomer_name': 'Not assigned',
        }
        assert entries[1].groomer_name == 'Gina Groomer'

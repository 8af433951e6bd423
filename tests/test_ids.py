"""Tests for appointment identifiers and status parsing."""

import random
from datetime import datetime

import pytest

from grooming import db
from grooming.models.appointment import AppointmentStatus
from grooming.scheduling.errors import ValidationError
from grooming.scheduling.ids import (
    AppointmentIdSequence,
    format_appointment_id,
    parse_appointment_number,
)


class TestFormat:
    def test_zero_padded(self):
        assert format_appointment_id(1) == 'AP001'
        assert format_appointment_id(42) == 'AP042'

    def test_past_three_digits(self):
        assert format_appointment_id(1000) == 'AP1000'

    @pytest.mark.parametrize('raw, expected', [
        ('AP007', 7),
        ('AP1000', 1000),
        ('AP000', None),
        ('APX12', None),
        ('XY123', None),
        ('', None),
        (None, None),
    ])
    def test_parse(self, raw, expected):
        assert parse_appointment_number(raw) == expected


class TestSequence:
    def test_first_id(self, app):
        seq = AppointmentIdSequence()
        assert seq.next_id() == 'AP001'
        assert seq.next_id() == 'AP002'

    def test_seeded_from_highest_existing(self, pet, service, make_appointment):
        numbers = list(range(1, 8))
        random.Random(7).shuffle(numbers)
        for n in numbers:
            make_appointment(format_appointment_id(n), pet, service, datetime(2025, 2, n, 10, 0))

        assert AppointmentIdSequence().next_id() == 'AP008'

    def test_ignores_foreign_ids(self, pet, service, make_appointment):
        make_appointment('AP003', pet, service, datetime(2025, 2, 1, 10, 0))
        make_appointment('APX99', pet, service, datetime(2025, 2, 2, 10, 0))
        make_appointment('ZZ900', pet, service, datetime(2025, 2, 3, 10, 0))

        assert AppointmentIdSequence().next_id() == 'AP004'

    def test_rolled_back_id_is_reused(self, app):
        seq = AppointmentIdSequence()
        assert seq.next_id() == 'AP001'
        db.session.rollback()
        assert seq.next_id() == 'AP001'


class TestStatus:
    @pytest.mark.parametrize('text', ['Cancelled', 'cancelled', 'CANCELLED', ' cancelled '])
    def test_parse_any_casing(self, text):
        assert AppointmentStatus.parse(text) is AppointmentStatus.CANCELLED

    def test_parse_unknown(self):
        with pytest.raises(ValidationError):
            AppointmentStatus.parse('Booked')

    def test_terminal_states(self):
        assert not AppointmentStatus.CONFIRMED.is_terminal
        assert AppointmentStatus.COMPLETED.is_terminal
        assert AppointmentStatus.CANCELLED.is_terminal

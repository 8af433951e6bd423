"""Loyalty point ledger, moved only by booking and cancellation."""
from sqlalchemy import case, select, update

from grooming import db
from grooming.models.user import User, ROLE_CUSTOMER
from grooming.scheduling.errors import NotFoundError, ValidationError

POINTS_PER_BOOKING = 10
POINTS_PER_CANCELLATION = 10


class LoyaltyLedger:
    """Applies point changes in the current session without committing.

    The caller commits the ledger change together with the appointment
    write it belongs to.
    """

    def credit(self, customer_id, points=POINTS_PER_BOOKING):
        self._check_points(points)
        self._apply(customer_id, User.loyalty_points + points)

    def debit(self, customer_id, points=POINTS_PER_CANCELLATION):
        """Take points away; the balance stops at zero instead of failing."""
        self._check_points(points)
        remaining = User.loyalty_points - points
        self._apply(customer_id, case((remaining < 0, 0), else_=remaining))

    def balance(self, customer_id):
        points = db.session.execute(
            select(User.loyalty_points).where(User.id == customer_id, User.role == ROLE_CUSTOMER)
        ).scalar_one_or_none()
        if points is None:
            raise NotFoundError('Customer', customer_id)
        return points

    def _apply(self, customer_id, new_value):
        result = db.session.execute(
            update(User)
            .where(User.id == customer_id, User.role == ROLE_CUSTOMER)
            .values(loyalty_points=new_value)
            .execution_options(synchronize_session='fetch')
        )
        if result.rowcount == 0:
            raise NotFoundError('Customer', customer_id)

    @staticmethod
    def _check_points(points):
        if points < 0:
            raise ValidationError('Loyalty point amounts must not be negative.')

from wtforms import IntegerField, BooleanField
from wtforms.validators import DataRequired
from grooming.customer.forms import BookingForm


class AdminBookingForm(BookingForm):
    """Form for booking on behalf of a customer at the front desk"""
    customer_id = IntegerField('Customer', validators=[DataRequired()])
    sequential = BooleanField('One groomer, pets back to back')

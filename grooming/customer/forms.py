from flask_wtf import FlaskForm
from wtforms import StringField, TextAreaField, IntegerField, SelectMultipleField, DateField, TimeField
from wtforms.validators import DataRequired, Length, Optional


class BookingForm(FlaskForm):
    """Form for booking one or more pets into the same slot"""
    appointment_date = DateField('Date', validators=[DataRequired()], format='%Y-%m-%d')
    appointment_time = TimeField('Time', validators=[DataRequired()], format='%H:%M')
    service_id = IntegerField('Service', validators=[DataRequired()])
    # Ownership is checked per pet by the booking itself, not by the form
    pet_ids = SelectMultipleField('Pets', validators=[DataRequired()], coerce=int, validate_choice=False)
    staff_id = StringField('Groomer', validators=[Optional(), Length(max=20)], default='any')
    notes = TextAreaField('Special Requests', validators=[Length(max=500)])

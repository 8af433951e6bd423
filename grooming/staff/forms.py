from flask_wtf import FlaskForm
from wtforms import StringField
from wtforms.validators import DataRequired, Length


class AppointmentStatusForm(FlaskForm):
    """Form for moving an appointment to a new status (free text, any casing)"""
    status = StringField('Status', validators=[DataRequired(), Length(max=20)])

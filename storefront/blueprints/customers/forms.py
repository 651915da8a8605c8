from flask_wtf import FlaskForm
from wtforms import StringField
from wtforms.validators import Length, Optional


class ProfileForm(FlaskForm):
    phone = StringField('Phone number', validators=[Optional(), Length(max=20)])
    address = StringField('Address', validators=[Optional(), Length(max=200)])
    city = StringField('City', validators=[Optional(), Length(max=100)])
    postal_code = StringField('Postal code', validators=[Optional(), Length(max=20)])
    country = StringField('Country', validators=[Optional(), Length(max=100)])

from flask_wtf import FlaskForm
from wtforms import IntegerField, StringField
from wtforms.validators import InputRequired, Length, NumberRange, Optional

from storefront.utils.forms import JSONBooleanField


class ReviewForm(FlaskForm):
    rating = IntegerField('Rating', validators=[InputRequired(message="Rating is required."), NumberRange(min=1, max=5, message="Rating must be between 1 and 5.")])
    comment = StringField('Comment', validators=[Optional(), Length(max=1000, message="Comment can't be more than 1000 characters.")])


class ApprovalForm(FlaskForm):
    approve = JSONBooleanField('Approve')

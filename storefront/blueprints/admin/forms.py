from flask_wtf import FlaskForm
from wtforms import Field, StringField
from wtforms.validators import DataRequired, Length, ValidationError

from storefront.utils.forms import JSONBooleanField


class IntegerListField(Field):
    """JSON array of ids, e.g. {"review_ids": [1, 2, 3]}"""

    def process_formdata(self, valuelist):
        try:
            self.data = [int(value) for value in valuelist]
        except (TypeError, ValueError) as exc:
            self.data = []
            raise ValueError("Every id must be an integer.") from exc

    def pre_validate(self, form):
        if any(value < 1 for value in self.data or []):
            raise ValidationError("Every id must be greater than 0.")


class RoleForm(FlaskForm):
    role = StringField('Role', validators=[DataRequired(), Length(max=50)])


class BulkApprovalForm(FlaskForm):
    review_ids = IntegerListField('Reviews')
    approve = JSONBooleanField('Approve')

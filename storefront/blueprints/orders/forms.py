from flask_wtf import FlaskForm
from wtforms import IntegerField, StringField
from wtforms.validators import AnyOf, DataRequired, InputRequired, Length, NumberRange, Optional

from storefront.services.orders import OrderStatus, MAX_LINE_QUANTITY

STATUS_VALUES = [status.value for status in OrderStatus]


class OrderForm(FlaskForm):
    notes = StringField('Notes', validators=[Optional(), Length(max=500)])
    shipping_address = StringField('Shipping address', validators=[Optional(), Length(max=300)])


class OrderItemForm(FlaskForm):
    product_id = IntegerField('Product', validators=[InputRequired(), NumberRange(min=1, message="Product ID must be greater than 0")])
    quantity = IntegerField('Quantity', validators=[InputRequired(), NumberRange(min=1, max=MAX_LINE_QUANTITY, message=f"Quantity must be between 1 and {MAX_LINE_QUANTITY}")])


class OrderUpdateForm(FlaskForm):
    status = StringField('Status', validators=[DataRequired(), AnyOf(STATUS_VALUES)])
    notes = StringField('Notes', validators=[Optional(), Length(max=1000)])
    shipping_address = StringField('Shipping address', validators=[Optional(), Length(max=500)])


class OrderStatusForm(FlaskForm):
    status = StringField('Status', validators=[DataRequired(), AnyOf(STATUS_VALUES)])


class OrderListForm(FlaskForm):
    status = StringField('Status', validators=[Optional(), AnyOf(STATUS_VALUES)])
    page_number = IntegerField('Page', validators=[Optional()])
    page_size = IntegerField('Page size', validators=[Optional()])

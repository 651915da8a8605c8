from decimal import Decimal

from flask_wtf import FlaskForm
from wtforms import DecimalField, IntegerField, StringField
from wtforms.validators import DataRequired, InputRequired, Length, NumberRange, Optional

from storefront.utils.forms import JSONBooleanField

MIN_PRICE = Decimal("0.01")


class ProductFilterForm(FlaskForm):
    name = StringField('Name', validators=[Optional(), Length(max=100)])
    search_query = StringField('Search', validators=[Optional(), Length(max=100)])
    category_id = IntegerField('Category', validators=[Optional()])
    min_price = DecimalField('Minimum price', validators=[Optional(), NumberRange(min=0)])
    max_price = DecimalField('Maximum price', validators=[Optional(), NumberRange(min=0)])
    in_stock = JSONBooleanField('In stock only')
    include_reviews = JSONBooleanField('Include reviews')
    page_number = IntegerField('Page', validators=[Optional()])
    page_size = IntegerField('Page size', validators=[Optional()])


class ProductForm(FlaskForm):
    name = StringField('Name', validators=[DataRequired(message="Product name is required."), Length(max=100)])
    description = StringField('Description', validators=[Optional(), Length(max=500)])
    price = DecimalField('Price', validators=[InputRequired(message="Price is required."), NumberRange(min=MIN_PRICE, message="Price must be greater than 0.")])
    stock_quantity = IntegerField('Stock quantity', validators=[InputRequired(message="Stock quantity is required."), NumberRange(min=0, message="Stock quantity must be 0 or greater.")])
    sku = StringField('SKU', validators=[Optional(), Length(max=50)])
    image_url = StringField('Image URL', validators=[Optional(), Length(max=255)])
    active = JSONBooleanField('Active')
    category_id = IntegerField('Category', validators=[InputRequired(message="Category ID is required.")])


class ProductPatchForm(FlaskForm):
    name = StringField('Name', validators=[Optional(), Length(max=100)])
    description = StringField('Description', validators=[Optional(), Length(max=500)])
    price = DecimalField('Price', validators=[Optional(), NumberRange(min=MIN_PRICE, message="Price must be greater than 0.")])
    stock_quantity = IntegerField('Stock quantity', validators=[Optional(), NumberRange(min=0, message="Stock quantity must be 0 or greater.")])
    sku = StringField('SKU', validators=[Optional(), Length(max=50)])
    image_url = StringField('Image URL', validators=[Optional(), Length(max=255)])
    active = JSONBooleanField('Active')
    category_id = IntegerField('Category', validators=[Optional()])


class StockForm(FlaskForm):
    stock_quantity = IntegerField('Stock quantity', validators=[InputRequired(), NumberRange(min=0, message="Stock quantity must be 0 or greater")])


class CategoryForm(FlaskForm):
    name = StringField('Name', validators=[DataRequired(), Length(min=2, max=100)])
    description = StringField('Description', validators=[Optional(), Length(max=500)])
    active = JSONBooleanField('Active')


class CategoryUpdateForm(FlaskForm):
    name = StringField('Name', validators=[Optional(), Length(min=2, max=100)])
    description = StringField('Description', validators=[Optional(), Length(max=500)])
    active = JSONBooleanField('Active')

from flask import Blueprint
from storefront.blueprints import register_blueprint

bp = Blueprint('reviews', __name__)

from . import routes

register_blueprint(bp)

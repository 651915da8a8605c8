from flask import Blueprint
from storefront.blueprints import register_blueprint

bp = Blueprint('admin', __name__)

from . import routes

register_blueprint(bp, url_prefix='/admin')

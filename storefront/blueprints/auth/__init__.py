from flask import Blueprint
from storefront.blueprints import register_blueprint

bp = Blueprint('auth', __name__)

from . import routes

register_blueprint(bp, url_prefix='/authentication')

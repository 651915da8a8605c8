from flask import jsonify, Response

from flask_login import login_required

from . import bp
from . import forms
from storefront.blueprints import created, no_content
from storefront.services import customers
from storefront.services.policy import current_caller
from storefront.utils.forms import arg_flag, bind, submitted


@bp.route("/profile", methods=["POST"])
@login_required
def create_profile() -> tuple[Response, int]:
    form = bind(forms.ProfileForm)
    profile = customers.create_profile(current_caller(), submitted(form))
    return created(profile.to_dict())


@bp.route("/profile", methods=["GET"])
@bp.route("/my-profile", methods=["GET"])
@login_required
def my_profile() -> Response:
    return jsonify(customers.get_profile_by_account(current_caller()).to_dict())


@bp.route("/profile", methods=["PUT"])
@login_required
def update_profile():
    form = bind(forms.ProfileForm)
    customers.update_profile(current_caller(), submitted(form))
    return no_content()


@bp.route("", methods=["GET"])
@login_required
def list_profiles() -> Response:
    return jsonify([profile.to_dict() for profile in customers.list_profiles(current_caller())])


@bp.route("/<int:profile_id>", methods=["GET"])
@login_required
def get_profile(profile_id: int) -> Response:
    profile = customers.get_profile(current_caller(), profile_id, include_orders=arg_flag("include_orders"))
    return jsonify(profile.to_dict())


@bp.route("/<int:profile_id>", methods=["DELETE"])
@login_required
def delete_profile(profile_id: int):
    customers.delete_profile(current_caller(), profile_id)
    return no_content()

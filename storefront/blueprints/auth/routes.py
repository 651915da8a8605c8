from flask import jsonify, Response

from flask_login import login_required

from . import bp
from . import forms
from storefront.blueprints import created, no_content
from storefront.services import accounts, admin
from storefront.services.policy import current_caller
from storefront.utils.forms import bind


@bp.route("/register", methods=["POST"])
def register() -> tuple[Response, int]:
    form = bind(forms.RegistrationForm)
    account = accounts.register(form.data)
    return created(account.to_dict())


@bp.route("/login", methods=["POST"])
def login() -> Response:
    form = bind(forms.LoginForm)
    account = accounts.authenticate(form.username.data, form.password.data)
    return jsonify(accounts.issue_token(account))


@bp.route("", methods=["GET"])
@login_required
def list_accounts() -> Response:
    return jsonify([account.to_dict() for account in admin.list_users(current_caller())])


@bp.route("/<int:account_id>", methods=["GET"])
@login_required
def get_account(account_id: int) -> Response:
    return jsonify(accounts.get_account(current_caller(), account_id).to_dict())


@bp.route("/<int:account_id>", methods=["DELETE"])
@login_required
def delete_account(account_id: int):
    accounts.delete_account(current_caller(), account_id)
    return no_content()

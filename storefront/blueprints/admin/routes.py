from flask import jsonify, request, Response

from flask_login import login_required

from functools import wraps
from typing import Callable, Any

from . import bp
from . import forms
from storefront.blueprints import no_content
from storefront.services import admin
from storefront.services.policy import current_caller, require_admin
from storefront.blueprints.orders.forms import OrderListForm, OrderStatusForm
from storefront.utils.forms import bind, submitted


def admin_required(f: Callable[..., Any]) -> Callable[..., Any]:
    @wraps(f)
    @login_required
    def decorated_view(*args: Any, **kwargs: Any) -> Any:
        require_admin(current_caller())
        return f(*args, **kwargs)
    return decorated_view


@bp.route("/dashboard", methods=["GET"])
@admin_required
def dashboard() -> Response:
    return jsonify(admin.dashboard_stats(current_caller()))


@bp.route("/users", methods=["GET"])
@admin_required
def users() -> Response:
    return jsonify([account.to_dict() for account in admin.list_users(current_caller())])


@bp.route("/users/<int:account_id>/role", methods=["PATCH"])
@admin_required
def update_role(account_id: int):
    form = bind(forms.RoleForm)
    admin.update_user_role(current_caller(), account_id, form.role.data)
    return no_content()


@bp.route("/reviews/pending", methods=["GET"])
@admin_required
def pending_reviews() -> Response:
    return jsonify([review.to_dict() for review in admin.list_pending_reviews(current_caller())])


@bp.route("/reviews/bulk-approve", methods=["PATCH"])
@admin_required
def bulk_approve() -> Response:
    form = bind(forms.BulkApprovalForm)
    approve = submitted(form).get("approve", True)
    updated = admin.bulk_approve_reviews(current_caller(), form.review_ids.data, approve)
    return jsonify(updated_count=updated)


@bp.route("/products", methods=["GET"])
@admin_required
def all_products() -> Response:
    return jsonify([product.to_dict() for product in admin.list_all_products(current_caller())])


@bp.route("/orders", methods=["GET"])
@admin_required
def all_orders() -> Response:
    args = submitted(bind(OrderListForm, formdata=request.args))
    found, pagination = admin.list_orders(
        current_caller(),
        status=args.get("status"),
        page_number=args.get("page_number"),
        page_size=args.get("page_size"),
    )
    response = jsonify([order.to_dict() for order in found])
    response.headers["X-Pagination"] = pagination.header()
    return response


@bp.route("/orders/<int:order_id>/status", methods=["PATCH"])
@admin_required
def order_status(order_id: int):
    form = bind(OrderStatusForm)
    admin.update_order_status(current_caller(), order_id, form.status.data)
    return no_content()

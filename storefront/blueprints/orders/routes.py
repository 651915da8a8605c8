from typing import Any, Dict, List

from flask import jsonify, request, Response

from flask_login import login_required

from . import bp
from . import forms
from storefront.blueprints import created
from storefront.services import orders
from storefront.services.policy import current_caller
from storefront.utils.exceptions import ValidationError
from storefront.utils.forms import arg_flag, bind, json_formdata, json_payload, submitted


def _order_items(payload: Dict[str, Any]) -> List[Dict[str, int]]:
    """Validate every line of the 'items' array, reporting all bad lines at once."""
    raw_items = payload.get("items")
    if not isinstance(raw_items, list) or not raw_items:
        raise ValidationError("Order must contain at least one item.")

    items, errors = [], {}
    for index, raw in enumerate(raw_items):
        if not isinstance(raw, dict):
            errors[f"items[{index}]"] = ["Each item must be an object."]
            continue
        form = forms.OrderItemForm(formdata=json_formdata(raw))
        if not form.validate():
            errors[f"items[{index}]"] = form.errors
            continue
        items.append({"product_id": form.product_id.data, "quantity": form.quantity.data})
    if errors:
        raise ValidationError("Invalid input", **errors)
    return items


@bp.route("", methods=["GET"])
@login_required
def list_orders() -> Response:
    form = bind(forms.OrderListForm, formdata=request.args)
    args = submitted(form)
    found, pagination = orders.list_orders(
        current_caller(),
        status=args.get("status"),
        page_number=args.get("page_number"),
        page_size=args.get("page_size"),
    )
    response = jsonify([order.to_dict() for order in found])
    response.headers["X-Pagination"] = pagination.header()
    return response


@bp.route("", methods=["POST"])
@login_required
def create_order() -> tuple[Response, int]:
    payload = json_payload()
    form = bind(forms.OrderForm, formdata=json_formdata(payload))
    order = orders.create_order(
        current_caller(),
        _order_items(payload),
        notes=form.notes.data,
        shipping_address=form.shipping_address.data,
    )
    return created(order.to_dict())


@bp.route("/my-orders", methods=["GET"])
@login_required
def my_orders() -> Response:
    return jsonify([order.to_dict() for order in orders.list_my_orders(current_caller())])


@bp.route("/<int:order_id>", methods=["GET"])
@login_required
def get_order(order_id: int) -> Response:
    order = orders.get_order(current_caller(), order_id, include_items=arg_flag("include_items", True))
    return jsonify(order.to_dict())


@bp.route("/<int:order_id>", methods=["PUT", "PATCH"])
@login_required
def update_order(order_id: int) -> Response:
    form = bind(forms.OrderUpdateForm)
    order = orders.update_order(
        current_caller(),
        order_id,
        status=form.status.data,
        notes=form.notes.data,
        shipping_address=form.shipping_address.data,
    )
    return jsonify(order.to_dict())


@bp.route("/<int:order_id>/cancel", methods=["PATCH"])
@login_required
def cancel_order(order_id: int) -> Response:
    return jsonify(orders.cancel_order(current_caller(), order_id).to_dict())

from flask import jsonify, request, Response

from flask_login import login_required

from . import bp
from . import forms
from storefront.blueprints import created, no_content
from storefront.services import catalog
from storefront.services.policy import current_caller
from storefront.utils.forms import arg_flag, bind, submitted


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------

@bp.route("/products", methods=["GET"])
def list_products() -> Response:
    form = bind(forms.ProductFilterForm, formdata=request.args)
    filters = submitted(form)
    products, pagination = catalog.list_products(
        filters,
        page_number=filters.get("page_number"),
        page_size=filters.get("page_size"),
    )
    response = jsonify([product.to_dict() for product in products])
    response.headers["X-Pagination"] = pagination.header()
    return response


@bp.route("/products/<int:product_id>", methods=["GET"])
def get_product(product_id: int) -> Response:
    product = catalog.get_product(product_id, include_reviews=arg_flag("include_reviews"))
    return jsonify(product.to_dict())


@bp.route("/products", methods=["POST"])
@login_required
def create_product() -> tuple[Response, int]:
    form = bind(forms.ProductForm)
    product = catalog.create_product(current_caller(), submitted(form))
    return created(product.to_dict())


@bp.route("/products/<int:product_id>", methods=["PUT"])
@login_required
def update_product(product_id: int):
    form = bind(forms.ProductForm)
    catalog.update_product(current_caller(), product_id, submitted(form))
    return no_content()


@bp.route("/products/<int:product_id>", methods=["PATCH"])
@login_required
def partially_update_product(product_id: int):
    form = bind(forms.ProductPatchForm)
    catalog.partial_update_product(current_caller(), product_id, submitted(form))
    return no_content()


@bp.route("/products/<int:product_id>/stock", methods=["PATCH"])
@login_required
def update_stock(product_id: int):
    form = bind(forms.StockForm)
    catalog.update_stock(current_caller(), product_id, form.stock_quantity.data)
    return no_content()


@bp.route("/products/<int:product_id>", methods=["DELETE"])
@login_required
def delete_product(product_id: int):
    catalog.delete_product(current_caller(), product_id)
    return no_content()


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------

@bp.route("/categories", methods=["GET"])
def list_categories() -> Response:
    return jsonify([category.to_dict() for category in catalog.list_categories()])


@bp.route("/categories/<int:category_id>", methods=["GET"])
def get_category(category_id: int) -> Response:
    category = catalog.get_category(category_id, include_products=arg_flag("include_products"))
    return jsonify(category.to_dict())


@bp.route("/categories", methods=["POST"])
@login_required
def create_category() -> tuple[Response, int]:
    form = bind(forms.CategoryForm)
    category = catalog.create_category(current_caller(), submitted(form))
    return created(category.to_dict())


@bp.route("/categories/<int:category_id>", methods=["PUT"])
@login_required
def update_category(category_id: int):
    form = bind(forms.CategoryUpdateForm)
    catalog.update_category(current_caller(), category_id, submitted(form))
    return no_content()


@bp.route("/categories/<int:category_id>", methods=["DELETE"])
@login_required
def delete_category(category_id: int):
    catalog.delete_category(current_caller(), category_id)
    return no_content()

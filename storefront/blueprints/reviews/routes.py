from flask import jsonify, Response

from flask_login import login_required

from . import bp
from . import forms
from storefront.blueprints import created, no_content
from storefront.services import reviews
from storefront.services.policy import current_caller
from storefront.utils.forms import bind, submitted


@bp.route("/products/<int:product_id>/reviews", methods=["GET"])
def list_reviews(product_id: int) -> Response:
    return jsonify([review.to_dict() for review in reviews.list_reviews(product_id)])


@bp.route("/products/<int:product_id>/reviews/<int:review_id>", methods=["GET"])
def get_review(product_id: int, review_id: int) -> Response:
    review = reviews.get_review(current_caller(), product_id, review_id)
    return jsonify(review.to_dict())


@bp.route("/products/<int:product_id>/reviews", methods=["POST"])
@login_required
def create_review(product_id: int) -> tuple[Response, int]:
    form = bind(forms.ReviewForm)
    review = reviews.create_review(current_caller(), product_id, form.rating.data, form.comment.data)
    return created(review.to_dict())


@bp.route("/products/<int:product_id>/reviews/<int:review_id>/approve", methods=["PATCH"])
@login_required
def approve_review(product_id: int, review_id: int):
    form = bind(forms.ApprovalForm)
    # An empty body approves
    approve = submitted(form).get("approve", True)
    reviews.approve_review(current_caller(), product_id, review_id, approve)
    return no_content()


@bp.route("/products/<int:product_id>/reviews/<int:review_id>", methods=["DELETE"])
@login_required
def delete_review(product_id: int, review_id: int):
    reviews.delete_review(current_caller(), product_id, review_id)
    return no_content()

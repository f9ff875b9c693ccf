from flask import Blueprint

from . import json_body, services
from ..responses import created, ok
from ..reviews import review_stats

bp = Blueprint('reviews', __name__)


@bp.route('/product/<product_id>', methods=['GET'])
def product_reviews(product_id):
    svc = services().reviews
    reviews = svc.for_product(product_id)
    return ok({'reviews': reviews, 'stats': review_stats(reviews)}, 'Reviews retrieved')


@bp.route('/<review_id>', methods=['GET'])
def get_review(review_id):
    svc = services().reviews
    return ok(svc.enrich(svc.get(review_id)), 'Review retrieved')


@bp.route('', methods=['POST'])
def create_review():
    return created(services().reviews.create(json_body()), 'Review created')


@bp.route('/<review_id>', methods=['PUT'])
def update_review(review_id):
    return ok(services().reviews.update(review_id, json_body()), 'Review updated')


@bp.route('/<review_id>', methods=['DELETE'])
def delete_review(review_id):
    return ok(services().reviews.delete(review_id), 'Review deleted')


@bp.route('/<review_id>/helpful', methods=['POST'])
def mark_helpful(review_id):
    return ok(services().reviews.mark_helpful(review_id), 'Review marked as helpful')

from flask import Blueprint

from . import json_body, services
from ..responses import ok

bp = Blueprint('carts', __name__)


@bp.route('/<user_id>', methods=['GET'])
def get_cart(user_id):
    svc = services().carts
    return ok(svc.enrich(svc.get_or_create(user_id)), 'Cart retrieved')


@bp.route('/<user_id>/items', methods=['POST'])
def add_item(user_id):
    svc = services().carts
    data = json_body()
    cart = svc.add_item(user_id, data.get('productId'), data.get('quantity', 1))
    return ok(svc.enrich(cart), 'Item added to cart')


@bp.route('/<user_id>/items/<product_id>', methods=['PUT'])
def update_item(user_id, product_id):
    svc = services().carts
    cart = svc.update_item(user_id, product_id, json_body().get('quantity'))
    return ok(svc.enrich(cart), 'Cart updated')


@bp.route('/<user_id>/items/<product_id>', methods=['DELETE'])
def remove_item(user_id, product_id):
    svc = services().carts
    return ok(svc.enrich(svc.remove_item(user_id, product_id)), 'Item removed from cart')


@bp.route('/<user_id>', methods=['DELETE'])
def clear_cart(user_id):
    svc = services().carts
    return ok(svc.enrich(svc.clear(user_id)), 'Cart cleared')


@bp.route('/<user_id>/checkout', methods=['POST'])
def checkout(user_id):
    return ok(services().carts.checkout(user_id, json_body()), 'Checkout complete')

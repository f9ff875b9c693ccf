from flask import Blueprint, request

from . import json_body, page_args, services
from ..responses import created, ok, paginated

bp = Blueprint('products', __name__)


@bp.route('', methods=['GET'])
def list_products():
    svc = services().products
    page, limit = page_args()
    return paginated([svc.format(p) for p in svc.list()], page, limit, 'Products retrieved')


@bp.route('/featured', methods=['GET'])
def featured_products():
    svc = services().products
    return ok([svc.format(p) for p in svc.featured()], 'Featured products retrieved')


@bp.route('/search', methods=['GET'])
def search_products():
    svc = services().products
    results = svc.search(
        query=request.args.get('q'),
        category=request.args.get('category'),
        min_price=request.args.get('minPrice'),
        max_price=request.args.get('maxPrice'),
    )
    return ok([svc.format(p) for p in results], f'Found {len(results)} products')


@bp.route('/category/<category_id>', methods=['GET'])
def products_by_category(category_id):
    svc = services().products
    return ok([svc.format(p) for p in svc.by_category(category_id)], 'Products retrieved')


@bp.route('/<product_id>', methods=['GET'])
def get_product(product_id):
    svc = services().products
    return ok(svc.detail(svc.get(product_id)), 'Product retrieved')


@bp.route('', methods=['POST'])
def create_product():
    product = services().products.create(json_body())
    return created(product, 'Product created')


@bp.route('/<product_id>', methods=['PUT', 'PATCH'])
def update_product(product_id):
    product = services().products.update(product_id, json_body())
    return ok(product, 'Product updated')


@bp.route('/<product_id>/stock', methods=['PATCH'])
def set_stock(product_id):
    product = services().products.set_stock(product_id, json_body().get('quantity'))
    return ok(product, 'Stock updated')


@bp.route('/<product_id>', methods=['DELETE'])
def delete_product(product_id):
    product = services().products.delete(product_id)
    return ok(product, 'Product deleted')

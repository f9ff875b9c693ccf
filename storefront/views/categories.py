from flask import Blueprint

from . import json_body, services
from ..responses import created, ok

bp = Blueprint('categories', __name__)


@bp.route('', methods=['GET'])
def list_categories():
    svc = services().categories
    return ok([svc.enrich(c) for c in svc.list()], 'Categories retrieved')


@bp.route('/tree', methods=['GET'])
def category_tree():
    return ok(services().categories.tree(), 'Category tree retrieved')


@bp.route('/<category_id>', methods=['GET'])
def get_category(category_id):
    svc = services().categories
    return ok(svc.enrich(svc.get(category_id)), 'Category retrieved')


@bp.route('/<category_id>/products', methods=['GET'])
def category_products(category_id):
    svc = services()
    products = svc.categories.products(category_id)
    return ok([svc.products.format(p) for p in products], 'Category products retrieved')


@bp.route('', methods=['POST'])
def create_category():
    return created(services().categories.create(json_body()), 'Category created')


@bp.route('/<category_id>', methods=['PUT'])
def update_category(category_id):
    return ok(services().categories.update(category_id, json_body()), 'Category updated')


@bp.route('/<category_id>', methods=['DELETE'])
def delete_category(category_id):
    return ok(services().categories.delete(category_id), 'Category deleted')

from flask import Blueprint, request

from . import json_body, page_args, services
from ..responses import created, ok, paginated

bp = Blueprint('orders', __name__)


@bp.route('', methods=['GET'])
def list_orders():
    svc = services().orders
    page, limit = page_args()
    orders = svc.list(status=request.args.get('status'), user_id=request.args.get('userId'))
    return paginated([svc.enrich(o) for o in orders], page, limit, 'Orders retrieved')


@bp.route('', methods=['POST'])
def create_order():
    svc = services().orders
    order = svc.create(json_body())
    return created(svc.enrich(order), 'Order created')


@bp.route('/<order_id>', methods=['GET'])
def get_order(order_id):
    svc = services().orders
    return ok(svc.enrich(svc.get(order_id)), 'Order retrieved')


@bp.route('/<order_id>', methods=['PUT'])
def modify_order(order_id):
    svc = services().orders
    return ok(svc.enrich(svc.modify(order_id, json_body())), 'Order updated')


@bp.route('/<order_id>/tracking', methods=['GET'])
def order_tracking(order_id):
    return ok(services().orders.tracking(order_id), 'Tracking info retrieved')


@bp.route('/<order_id>/invoice', methods=['GET'])
def order_invoice(order_id):
    return ok(services().orders.invoice(order_id), 'Invoice generated')


@bp.route('/<order_id>/status', methods=['PATCH'])
def update_status(order_id):
    svc = services().orders
    order = svc.transition(order_id, json_body().get('status'))
    return ok(svc.enrich(order), 'Order status updated')


@bp.route('/<order_id>/cancel', methods=['POST'])
def cancel_order(order_id):
    svc = services().orders
    return ok(svc.enrich(svc.cancel(order_id)), 'Order cancelled')

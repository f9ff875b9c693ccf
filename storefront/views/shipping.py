from flask import Blueprint, request

from . import json_body, services
from ..responses import created, ok
from ..shipping import calculate_rates
from ..validators import parse_float

bp = Blueprint('shipping', __name__)


@bp.route('/rates', methods=['GET'])
def shipping_rates():
    weight = parse_float(request.args.get('weight')) or 1.0
    return ok(calculate_rates(weight, request.args.get('destination')), 'Shipping rates calculated')


@bp.route('/carriers', methods=['GET'])
def carriers():
    return ok(services().shipping.carriers(), 'Carriers retrieved')


@bp.route('', methods=['POST'])
def create_shipment():
    return created(services().shipping.create(json_body()), 'Shipment created')


@bp.route('/order/<order_id>', methods=['GET'])
def order_shipment(order_id):
    shipment = services().shipping.for_order(order_id)
    return ok(shipment, 'Shipment retrieved' if shipment else 'No shipment for this order')


@bp.route('/tracking/<tracking_number>', methods=['GET'])
def track(tracking_number):
    return ok(services().shipping.tracking(tracking_number), 'Tracking info retrieved')


@bp.route('/<shipment_id>/status', methods=['PATCH'])
def update_status(shipment_id):
    data = json_body()
    shipment = services().shipping.update_status(shipment_id, data.get('status'), data.get('location'))
    return ok(shipment, 'Shipment status updated')

from flask import Blueprint

from . import json_body, services
from ..responses import created, ok

bp = Blueprint('payments', __name__)


@bp.route('/methods/available', methods=['GET'])
def available_methods():
    return ok(services().payments.available_methods(), 'Payment methods retrieved')


@bp.route('', methods=['POST'])
def process_payment():
    return created(services().payments.process(json_body()), 'Payment processed')


@bp.route('/<payment_id>', methods=['GET'])
def get_payment(payment_id):
    return ok(services().payments.get(payment_id), 'Payment retrieved')


@bp.route('/order/<order_id>', methods=['GET'])
def order_payments(order_id):
    return ok(services().payments.for_order(order_id), 'Order payments retrieved')


@bp.route('/<payment_id>/refund', methods=['POST'])
def refund_payment(payment_id):
    refund = services().payments.refund(payment_id, json_body().get('amount'))
    return ok(refund, 'Refund processed')

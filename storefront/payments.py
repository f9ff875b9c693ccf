"""
Simulated payments. No gateway is called: card-shaped input is checked, a
transaction id is made up, and the charge always goes through.
"""

import logging
import re
from datetime import datetime, timezone

from .config import REFUND_WINDOW_DAYS
from .errors import NotFoundError, StateError, ValidationError
from .helpers import format_price, gen_id, gen_refund_id, gen_transaction_id, mask_card, utcnow
from .models import CARD_METHODS, Payment, PaymentMethod, PaymentStatus, PaymentUpdate
from .validators import error, parse_float, require, validate_payment, validate_price

log = logging.getLogger(__name__)

CVV_RE = re.compile(r'^\d{3,4}$')

AVAILABLE_METHODS = [
    {'id': 'credit_card', 'name': 'Credit Card', 'icon': 'credit-card', 'enabled': True},
    {'id': 'debit_card', 'name': 'Debit Card', 'icon': 'credit-card', 'enabled': True},
    {'id': 'paypal', 'name': 'PayPal', 'icon': 'paypal', 'enabled': True},
    {'id': 'bank_transfer', 'name': 'Bank Transfer', 'icon': 'bank', 'enabled': True},
]


def is_valid_card_number(card_number):
    digits = re.sub(r'\D', '', str(card_number or ''))
    return 13 <= len(digits) <= 19


def is_valid_expiry_date(expiry, now=None):
    """MM/YY, valid while the first day of that month is still ahead."""
    try:
        month, year = expiry.split('/')
        expires = datetime(2000 + int(year), int(month), 1, tzinfo=timezone.utc)
    except (AttributeError, ValueError):
        return False
    return expires > (now or utcnow())


def is_valid_cvv(cvv):
    return isinstance(cvv, str) and CVV_RE.match(cvv) is not None


def check_card_details(data):
    if not data.get('cardNumber') or not is_valid_card_number(data['cardNumber']):
        raise ValidationError([error('cardNumber', 'Invalid card number')])
    if not data.get('expiryDate') or not is_valid_expiry_date(data['expiryDate']):
        raise ValidationError([error('expiryDate', 'Invalid expiry date')])
    if not data.get('cvv') or not is_valid_cvv(str(data['cvv'])):
        raise ValidationError([error('cvv', 'Invalid CVV')])


def days_since(moment, now=None):
    return int(((now or utcnow()) - moment).total_seconds() // 86400)


class PaymentService:

    def __init__(self, store, orders):
        self.store = store
        self.orders = orders

    def get(self, payment_id):
        payment = self.store.find_by_id('payments', payment_id)
        if not payment:
            raise NotFoundError('Payment', payment_id)
        return payment

    def for_order(self, order_id):
        self.orders.get(order_id)
        return self.store.filter('payments', order_id=order_id)

    def available_methods(self):
        return AVAILABLE_METHODS

    def process(self, data):
        require(validate_payment(data))
        order = self.orders.get(data['orderId'])
        method = PaymentMethod(data['method'])
        if method in CARD_METHODS:
            check_card_details(data)

        amount = parse_float(data['amount'])
        card_number = data.get('cardNumber')
        payment = Payment(
            order_id=order.id,
            method=method,
            amount=amount,
            formatted_amount=format_price(amount),
            transaction_id=gen_transaction_id(),
            status=PaymentStatus.COMPLETED,
            card_number=mask_card(re.sub(r'\D', '', str(card_number))) if card_number else None,
        )
        with self.store.transaction():
            payment = self.store.insert('payments', payment)
            self.orders.set_payment_status(order.id, 'paid')
        log.info('payment %s (%s) completed for order %s: %s', payment.id, method.value, order.id, payment.formatted_amount)
        return payment

    def refund(self, payment_id, amount=None):
        """Refund a payment; with no amount the whole payment is refunded."""
        if amount is not None and not validate_price(amount):
            raise ValidationError([error('amount', 'Refund amount must be a positive number')])
        with self.store.transaction():
            payment = self.get(payment_id)
            if payment.status != PaymentStatus.COMPLETED or days_since(payment.created_at) > REFUND_WINDOW_DAYS:
                raise StateError('Payment cannot be refunded')
            refund_amount = payment.amount if amount is None else parse_float(amount)
            if refund_amount > payment.amount:
                raise StateError('Refund amount exceeds payment amount')
            self.store.update('payments', payment_id, PaymentUpdate(status=PaymentStatus.REFUNDED))
        log.info('payment %s refunded: %s', payment_id, format_price(refund_amount))
        return {
            'id': gen_id(),
            'paymentId': payment.id,
            'orderId': payment.order_id,
            'refundId': gen_refund_id(),
            'amount': refund_amount,
            'formattedAmount': format_price(refund_amount),
            'status': 'completed',
            'createdAt': utcnow().isoformat(),
        }

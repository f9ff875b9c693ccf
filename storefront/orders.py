r"""
Order lifecycle.

    pending -> confirmed -> processing -> shipped -> delivered
       \           \            \
        +-----------+------------+--> cancelled

Stock is taken when an order is created and given back when it is cancelled.
Both happen under the store lock together with the checks that guard them,
so a failed create leaves neither an order nor a stock change behind.
"""

import logging
from datetime import timedelta

from .config import DEFAULT_SHIPPING_METHOD, DELIVERY_DAYS
from .errors import NotFoundError, StateError
from .helpers import format_price, utcnow
from .models import Order, OrderItem, OrderStatus, OrderUpdate, ProductUpdate
from .pricing import calculate_totals
from .responses import serialize
from .validators import parse_address, parse_float, parse_int, require, validate_order

log = logging.getLogger(__name__)

TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}

CANCELLABLE = {OrderStatus.PENDING, OrderStatus.CONFIRMED, OrderStatus.PROCESSING}
MODIFIABLE = {OrderStatus.PENDING, OrderStatus.CONFIRMED}

STATUS_INFO = {
    OrderStatus.PENDING: {'label': 'Pending', 'progress': 10},
    OrderStatus.CONFIRMED: {'label': 'Confirmed', 'progress': 25},
    OrderStatus.PROCESSING: {'label': 'Processing', 'progress': 50},
    OrderStatus.SHIPPED: {'label': 'Shipped', 'progress': 75},
    OrderStatus.DELIVERED: {'label': 'Delivered', 'progress': 100},
    OrderStatus.CANCELLED: {'label': 'Cancelled', 'progress': 0},
}

# timestamp field set when an order enters each status
STATUS_TIMESTAMPS = {
    OrderStatus.CONFIRMED: 'confirmed_at',
    OrderStatus.PROCESSING: 'processing_at',
    OrderStatus.SHIPPED: 'shipped_at',
    OrderStatus.DELIVERED: 'delivered_at',
    OrderStatus.CANCELLED: 'cancelled_at',
}


def parse_status(value):
    try:
        return OrderStatus(value)
    except ValueError:
        return None


def is_valid_transition(current, requested):
    if not isinstance(requested, OrderStatus):
        requested = parse_status(requested)
    return requested is not None and requested in TRANSITIONS.get(current, set())


def parse_items(raw_items):
    return [
        OrderItem(
            product_id=item['productId'],
            quantity=parse_int(item['quantity']),
            weight=parse_float(item.get('weight')),
            discount_percent=parse_float(item.get('discountPercent')),
        )
        for item in raw_items
    ]


class OrderService:

    def __init__(self, store):
        self.store = store

    # ---------- reads ----------

    def get(self, order_id):
        order = self.store.find_by_id('orders', order_id)
        if not order:
            raise NotFoundError('Order', order_id)
        return order

    def list(self, status=None, user_id=None):
        orders = self.store.find_all('orders')
        if status:
            orders = [o for o in orders if o.status == status]
        if user_id:
            orders = [o for o in orders if o.user_id == user_id]
        return orders

    def enrich(self, order):
        return dict(serialize(order), statusInfo=STATUS_INFO.get(order.status, {'label': 'Unknown', 'progress': 0}))

    def tracking(self, order_id):
        order = self.get(order_id)
        events = [{'description': 'Order placed', 'timestamp': order.created_at}]
        if order.status != OrderStatus.PENDING:
            events.append({'description': 'Order confirmed', 'timestamp': order.confirmed_at or utcnow()})
        days = DELIVERY_DAYS.get(order.shipping_method or DEFAULT_SHIPPING_METHOD, 5)
        return {
            'orderId': order.id,
            'events': serialize(events),
            'estimatedDelivery': (order.created_at + timedelta(days=days)).isoformat(),
        }

    def invoice(self, order_id):
        order = self.get(order_id)
        line_items = [
            {
                'lineNumber': number,
                'productId': item.product_id,
                'productName': item.name,
                'quantity': item.quantity,
                'unitPrice': format_price(item.price),
                'total': format_price(item.price * item.quantity),
            }
            for number, item in enumerate(order.items, start=1)
        ]
        return {
            'invoiceNumber': f'INV-{order.id[:8].upper()}',
            'orderId': order.id,
            'date': utcnow().isoformat(),
            'lineItems': line_items,
            'totals': serialize(order.totals or calculate_totals(order.items)),
        }

    # ---------- writes ----------

    def _check_stock(self, items):
        # lines for the same product draw on one stock count
        wanted = {}
        for item in items:
            wanted[item.product_id] = wanted.get(item.product_id, 0) + item.quantity
        for product_id, quantity in wanted.items():
            product = self.store.find_by_id('products', product_id)
            if not product:
                raise StateError(f'Product {product_id} not found')
            if product.stock < quantity:
                raise StateError(f'Insufficient stock for {product.name}')

    def _adjust_stock(self, items, direction):
        for item in items:
            product = self.store.find_by_id('products', item.product_id)
            if product:
                self.store.update('products', product.id, ProductUpdate(stock=product.stock + direction * item.quantity))

    def create(self, data):
        """Place an order from a request payload (camelCase keys)."""
        require(validate_order(data))
        items = parse_items(data['items'])
        with self.store.transaction():
            # validate everything before touching anything
            self._check_stock(items)
            for item in items:
                product = self.store.find_by_id('products', item.product_id)
                item.name = product.name
                item.price = product.price
                if item.weight is None:
                    item.weight = product.weight
            order = Order(
                user_id=data['userId'],
                items=items,
                shipping_address=parse_address(data['shippingAddress']),
                shipping_method=data.get('shippingMethod') or DEFAULT_SHIPPING_METHOD,
                totals=calculate_totals(items),
            )
            order = self.store.insert('orders', order)
            self._adjust_stock(items, -1)
        log.info('order %s created for user %s, total %s', order.id, order.user_id, order.totals.total)
        return order

    def modify(self, order_id, data):
        """Change shipping details. Items, status and identity are not editable."""
        changes = OrderUpdate()
        if isinstance(data.get('shippingAddress'), dict):
            changes.shipping_address = parse_address(data['shippingAddress'])
        if data.get('shippingMethod'):
            changes.shipping_method = data['shippingMethod']
        with self.store.transaction():
            order = self.get(order_id)
            if order.status not in MODIFIABLE:
                raise StateError('Order cannot be modified')
            updated = self.store.update('orders', order_id, changes)
        log.info('order %s modified', order_id)
        return updated

    def transition(self, order_id, status):
        requested = parse_status(status)
        if requested == OrderStatus.CANCELLED:
            return self.cancel(order_id)
        with self.store.transaction():
            order = self.get(order_id)
            if not is_valid_transition(order.status, requested):
                raise StateError('Invalid status transition')
            changes = OrderUpdate(status=requested)
            setattr(changes, STATUS_TIMESTAMPS[requested], utcnow())
            updated = self.store.update('orders', order_id, changes)
        log.info('order %s %s -> %s', order_id, order.status.value, requested.value)
        return updated

    def cancel(self, order_id):
        with self.store.transaction():
            order = self.get(order_id)
            if order.status not in CANCELLABLE:
                raise StateError('Order cannot be cancelled')
            updated = self.store.update(
                'orders', order_id,
                OrderUpdate(status=OrderStatus.CANCELLED, cancelled_at=utcnow()),
            )
            self._adjust_stock(order.items, +1)
        log.info('order %s cancelled, stock restored', order_id)
        return updated

    def set_payment_status(self, order_id, status):
        return self.store.update('orders', order_id, OrderUpdate(payment_status=status))

    def set_shipping_status(self, order_id, status):
        return self.store.update('orders', order_id, OrderUpdate(shipping_status=status))

"""
Shopping carts, one per user, created on first access.

Stock checks here are point-in-time: adding to a cart reserves nothing. The
check is repeated at checkout, and checkout creates the order while still
holding the store lock so nothing can slip in between.
"""

import logging
from dataclasses import replace

from .errors import NotFoundError, StateError, ValidationError
from .helpers import format_price, utcnow
from .models import Cart, CartItem, CartUpdate
from .pricing import calculate_totals
from .responses import serialize
from .validators import error, parse_int

log = logging.getLogger(__name__)

SHIPPING_OPTIONS = [
    {'id': 'express', 'name': 'Express (2 days)', 'price': 15.99},
    {'id': 'standard', 'name': 'Standard (5 days)', 'price': 5.99},
    {'id': 'economy', 'name': 'Economy (10 days)', 'price': 2.99},
]


def _quantity(value, allow_zero=False):
    quantity = parse_int(value)
    if quantity is None or (quantity < 1 and not allow_zero):
        raise ValidationError([error('quantity', 'Quantity must be a positive integer')])
    return quantity


class CartService:

    def __init__(self, store, orders):
        self.store = store
        self.orders = orders

    def _product(self, product_id):
        product = self.store.find_by_id('products', product_id)
        if not product:
            raise NotFoundError('Product', product_id)
        return product

    def get_or_create(self, user_id):
        with self.store.transaction():
            cart = self.store.find_one('carts', user_id=user_id)
            if cart is None:
                now = utcnow()
                cart = self.store.insert('carts', Cart(user_id=user_id, items=[], created_at=now, updated_at=now))
                log.info('cart %s created for user %s', cart.id, user_id)
            return cart

    def _save(self, cart, items):
        return self.store.update('carts', cart.id, CartUpdate(items=items))

    def enrich(self, cart):
        items = []
        for item in cart.items:
            product = self.store.find_by_id('products', item.product_id)
            items.append(dict(
                serialize(item),
                name=product.name if product else 'Unknown',
                currentStock=product.stock if product else 0,
                formattedPrice=format_price(item.price),
                formattedTotal=format_price((item.price or 0) * (item.quantity or 1)),
            ))
        return dict(
            serialize(cart),
            items=items,
            totals=serialize(calculate_totals(cart.items)),
            itemCount=sum(item.quantity for item in cart.items),
        )

    def add_item(self, user_id, product_id, quantity):
        quantity = _quantity(quantity)
        with self.store.transaction():
            product = self._product(product_id)
            if product.stock < quantity:
                raise StateError('Insufficient stock')
            cart = self.get_or_create(user_id)
            items = list(cart.items)
            for index, item in enumerate(items):
                if item.product_id == product_id:
                    items[index] = replace(item, quantity=item.quantity + quantity)
                    break
            else:
                items.append(CartItem(
                    product_id=product.id,
                    name=product.name,
                    price=product.price,
                    quantity=quantity,
                    added_at=utcnow(),
                ))
            cart = self._save(cart, items)
        log.info('cart %s: +%s x %s', cart.id, quantity, product_id)
        return cart

    def update_item(self, user_id, product_id, quantity):
        quantity = _quantity(quantity, allow_zero=True)
        if quantity <= 0:
            return self.remove_item(user_id, product_id)
        with self.store.transaction():
            product = self._product(product_id)
            if product.stock < quantity:
                raise StateError('Insufficient stock')
            cart = self.get_or_create(user_id)
            items = list(cart.items)
            for index, item in enumerate(items):
                if item.product_id == product_id:
                    items[index] = replace(item, quantity=quantity)
                    break
            else:
                raise NotFoundError('Cart item', product_id)
            cart = self._save(cart, items)
        log.info('cart %s: %s set to %s', cart.id, product_id, quantity)
        return cart

    def remove_item(self, user_id, product_id):
        with self.store.transaction():
            cart = self.get_or_create(user_id)
            cart = self._save(cart, [i for i in cart.items if i.product_id != product_id])
        log.info('cart %s: removed %s', cart.id, product_id)
        return cart

    def clear(self, user_id):
        with self.store.transaction():
            cart = self.get_or_create(user_id)
            cart = self._save(cart, [])
        log.info('cart %s cleared', cart.id)
        return cart

    def _check_line(self, item):
        product = self.store.find_by_id('products', item.product_id)
        if not product:
            raise StateError(f'Product {item.product_id} no longer available')
        if product.stock < item.quantity:
            raise StateError(f'Insufficient stock for {product.name}')

    def checkout(self, user_id, data):
        """Turn the cart into an order and empty it.

        `data` carries shippingAddress and optional shippingMethod.
        """
        with self.store.transaction():
            cart = self.store.find_one('carts', user_id=user_id)
            if cart is None or not cart.items:
                raise StateError('Cart is empty')
            # stock may have moved since the items were added
            for item in cart.items:
                self._check_line(item)
            summary = self.enrich(cart)
            order = self.orders.create({
                'userId': user_id,
                'items': [{'productId': i.product_id, 'quantity': i.quantity} for i in cart.items],
                'shippingAddress': data.get('shippingAddress'),
                'shippingMethod': data.get('shippingMethod'),
            })
            self._save(cart, [])
        log.info('cart %s checked out as order %s', cart.id, order.id)
        return {
            'cartId': cart.id,
            'items': summary['items'],
            'totals': summary['totals'],
            'shippingOptions': SHIPPING_OPTIONS,
            'selectedShipping': data.get('shippingMethod') or 'standard',
            'order': self.orders.enrich(order),
        }

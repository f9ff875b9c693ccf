"""Tests for the order lifecycle."""

import warnings
from pathlib import Path

import pytest

import storefront.orders
from storefront.errors import NotFoundError, StateError, ValidationError
from storefront.models import OrderStatus, OrderUpdate
from storefront.orders import CANCELLABLE, TRANSITIONS, is_valid_transition

ALLOWED = {
    ('pending', 'confirmed'), ('pending', 'cancelled'),
    ('confirmed', 'processing'), ('confirmed', 'cancelled'),
    ('processing', 'shipped'), ('processing', 'cancelled'),
    ('shipped', 'delivered'),
}


def stock_of(store, product):
    return store.find_by_id('products', product.id).stock


def force_status(store, order, status):
    return store.update('orders', order.id, OrderUpdate(status=status))


class TestTransitionTable:
    @pytest.mark.parametrize('current', list(OrderStatus))
    @pytest.mark.parametrize('requested', list(OrderStatus))
    def test_every_pair(self, current, requested):
        expected = (current.value, requested.value) in ALLOWED
        assert is_valid_transition(current, requested) is expected

    def test_unknown_status_rejected(self):
        assert not is_valid_transition(OrderStatus.PENDING, 'teleported')

    def test_terminal_states(self):
        assert TRANSITIONS[OrderStatus.DELIVERED] == set()
        assert TRANSITIONS[OrderStatus.CANCELLED] == set()


class TestCreate:
    def test_creates_pending_order_and_takes_stock(self, store, orders, product, order_payload):
        order = orders.create(order_payload(quantity=2))
        assert order.status == OrderStatus.PENDING
        assert order.items[0].price == 10.00
        assert order.items[0].name == 'Widget'
        assert order.totals.total == '$28.09'
        assert stock_of(store, product) == 3

    def test_price_comes_from_product(self, orders, order_payload, product):
        data = order_payload()
        data['items'][0]['price'] = 0.01
        assert orders.create(data).items[0].price == product.price

    def test_insufficient_stock_changes_nothing(self, store, orders, product, other_product, user):
        data = {
            'userId': user.id,
            'items': [
                {'productId': product.id, 'quantity': 1},
                {'productId': other_product.id, 'quantity': 4},
            ],
            'shippingAddress': {'street': 's', 'city': 'c', 'zipCode': 'z'},
        }
        with pytest.raises(StateError, match='Insufficient stock for Gadget'):
            orders.create(data)
        assert store.count('orders') == 0
        assert stock_of(store, product) == 5
        assert stock_of(store, other_product) == 3

    def test_unknown_product(self, store, orders, order_payload):
        data = order_payload()
        data['items'][0]['productId'] = 'missing'
        with pytest.raises(StateError, match='Product missing not found'):
            orders.create(data)
        assert store.count('orders') == 0

    def test_validation(self, orders):
        with pytest.raises(ValidationError) as exc:
            orders.create({'items': []})
        fields = {e['field'] for e in exc.value.errors}
        assert fields == {'userId', 'items', 'shippingAddress'}

    def test_zero_quantity_rejected(self, orders, order_payload):
        with pytest.raises(ValidationError):
            orders.create(order_payload(quantity=0))

    def test_repeated_product_lines_share_stock(self, store, orders, product, order_payload):
        data = order_payload()
        data['items'] = [{'productId': product.id, 'quantity': 3}, {'productId': product.id, 'quantity': 3}]
        with pytest.raises(StateError, match='Insufficient stock for Widget'):
            orders.create(data)
        assert store.count('orders') == 0
        assert stock_of(store, product) == 5

    def test_repeated_product_lines_within_stock(self, store, orders, product, order_payload):
        data = order_payload()
        data['items'] = [{'productId': product.id, 'quantity': 2}, {'productId': product.id, 'quantity': 3}]
        orders.create(data)
        assert stock_of(store, product) == 0

    @pytest.mark.parametrize('quantity', [2.7, True, '1.5'])
    def test_non_integer_quantity_rejected(self, store, orders, product, order_payload, quantity):
        with pytest.raises(ValidationError) as exc:
            orders.create(order_payload(quantity=quantity))
        assert exc.value.errors[0]['field'] == 'items[0].quantity'
        assert stock_of(store, product) == 5

    def test_whole_float_quantity_accepted(self, orders, order_payload):
        assert orders.create(order_payload(quantity=2.0)).items[0].quantity == 2


class TestTransitions:
    def test_happy_path_sets_timestamps(self, orders, order_payload):
        order = orders.create(order_payload())
        for status in ('confirmed', 'processing', 'shipped', 'delivered'):
            order = orders.transition(order.id, status)
            assert order.status.value == status
        assert order.confirmed_at and order.processing_at and order.shipped_at and order.delivered_at

    def test_skip_rejected(self, orders, order_payload):
        order = orders.create(order_payload())
        with pytest.raises(StateError, match='Invalid status transition'):
            orders.transition(order.id, 'shipped')

    def test_cancel_through_status_restores_stock(self, store, orders, product, order_payload):
        order = orders.create(order_payload(quantity=2))
        order = orders.transition(order.id, 'cancelled')
        assert order.status == OrderStatus.CANCELLED
        assert stock_of(store, product) == 5

    def test_unknown_order(self, orders):
        with pytest.raises(NotFoundError):
            orders.transition('nope', 'confirmed')


class TestCancel:
    def test_restores_exact_quantities(self, store, orders, product, order_payload):
        order = orders.create(order_payload(quantity=4))
        assert stock_of(store, product) == 1
        cancelled = orders.cancel(order.id)
        assert cancelled.cancelled_at is not None
        assert stock_of(store, product) == 5

    def test_second_cancel_fails(self, store, orders, product, order_payload):
        order = orders.create(order_payload())
        orders.cancel(order.id)
        with pytest.raises(StateError, match='Order cannot be cancelled'):
            orders.cancel(order.id)
        assert stock_of(store, product) == 5

    @pytest.mark.parametrize('status', [OrderStatus.SHIPPED, OrderStatus.DELIVERED])
    def test_not_cancellable_once_shipped(self, store, orders, order_payload, status):
        assert status not in CANCELLABLE
        order = orders.create(order_payload())
        force_status(store, order, status)
        with pytest.raises(StateError):
            orders.cancel(order.id)


class TestModify:
    def test_change_shipping(self, orders, order_payload):
        order = orders.create(order_payload())
        updated = orders.modify(order.id, {
            'shippingAddress': {'street': '2 Side St', 'city': 'Shelbyville', 'zipCode': '54321'},
            'shippingMethod': 'express',
            'status': 'delivered',
        })
        assert updated.shipping_address.city == 'Shelbyville'
        assert updated.shipping_method == 'express'
        assert updated.status == OrderStatus.PENDING

    def test_processing_order_is_frozen(self, store, orders, order_payload):
        order = orders.create(order_payload())
        force_status(store, order, OrderStatus.PROCESSING)
        with pytest.raises(StateError, match='Order cannot be modified'):
            orders.modify(order.id, {'shippingMethod': 'express'})


class TestReads:
    def test_invoice(self, orders, order_payload):
        order = orders.create(order_payload())
        invoice = orders.invoice(order.id)
        assert invoice['invoiceNumber'] == f'INV-{order.id[:8].upper()}'
        assert invoice['lineItems'][0]['total'] == '$20.00'
        assert invoice['totals']['total'] == '$28.09'

    def test_tracking(self, orders, order_payload):
        order = orders.create(order_payload())
        tracking = orders.tracking(order.id)
        assert len(tracking['events']) == 1
        orders.transition(order.id, 'confirmed')
        assert len(orders.tracking(order.id)['events']) == 2

    def test_list_filters(self, orders, order_payload, user):
        first = orders.create(order_payload(quantity=1))
        orders.create(order_payload(quantity=1))
        orders.transition(first.id, 'confirmed')
        assert [o.id for o in orders.list(status='confirmed')] == [first.id]
        assert len(orders.list(user_id=user.id)) == 2
        assert orders.list(user_id='someone-else') == []


class TestOrdersApi:
    def test_create_and_fetch(self, client, order_payload):
        response = client.post('/api/orders', json=order_payload())
        assert response.status_code == 201
        body = response.get_json()
        assert body['success'] is True
        order = body['data']
        assert order['totals']['rawTotal'] == pytest.approx(28.09)
        assert order['statusInfo'] == {'label': 'Pending', 'progress': 10}
        assert order['shippingAddress']['zipCode'] == '12345'

        fetched = client.get(f"/api/orders/{order['id']}").get_json()['data']
        assert fetched['id'] == order['id']

    def test_invalid_transition_is_400(self, client, order_payload):
        order = client.post('/api/orders', json=order_payload()).get_json()['data']
        response = client.patch(f"/api/orders/{order['id']}/status", json={'status': 'delivered'})
        assert response.status_code == 400
        assert response.get_json()['message'] == 'Invalid status transition'

    def test_cancel_endpoint(self, client, order_payload):
        order = client.post('/api/orders', json=order_payload()).get_json()['data']
        response = client.post(f"/api/orders/{order['id']}/cancel")
        assert response.status_code == 200
        assert response.get_json()['data']['status'] == 'cancelled'
        assert client.post(f"/api/orders/{order['id']}/cancel").status_code == 400

    def test_insufficient_stock_is_400(self, client, order_payload):
        response = client.post('/api/orders', json=order_payload(quantity=99))
        assert response.status_code == 400
        assert response.get_json()['success'] is False

    def test_unknown_order_is_404(self, client):
        response = client.get('/api/orders/nope')
        assert response.status_code == 404
        assert response.get_json()['message'] == 'Order not found'


class TestModuleSource:
    def test_compiles_without_escape_warnings(self):
        source = Path(storefront.orders.__file__).read_text()
        with warnings.catch_warnings():
            warnings.simplefilter('error')
            compile(source, storefront.orders.__file__, 'exec')

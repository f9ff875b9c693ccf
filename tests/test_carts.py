"""Tests for carts and checkout."""

import pytest

from storefront.carts import CartService
from storefront.errors import NotFoundError, StateError, ValidationError
from storefront.models import ProductUpdate

ADDRESS = {'street': '1 Main St', 'city': 'Springfield', 'zipCode': '12345'}


@pytest.fixture
def carts(store, orders):
    return CartService(store, orders)


class TestCart:
    def test_created_lazily_once(self, store, carts):
        first = carts.get_or_create('u1')
        second = carts.get_or_create('u1')
        assert first.id == second.id
        assert store.count('carts') == 1
        assert first.items == []

    def test_adding_same_product_merges_lines(self, carts, product):
        carts.add_item('u1', product.id, 1)
        cart = carts.add_item('u1', product.id, 2)
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 3
        assert cart.items[0].price == product.price

    def test_add_more_than_stock(self, carts, product):
        with pytest.raises(StateError, match='Insufficient stock'):
            carts.add_item('u1', product.id, 6)

    def test_add_unknown_product(self, carts):
        with pytest.raises(NotFoundError):
            carts.add_item('u1', 'missing', 1)

    def test_add_bad_quantity(self, carts, product):
        with pytest.raises(ValidationError):
            carts.add_item('u1', product.id, 0)

    @pytest.mark.parametrize('quantity', [2.7, True])
    def test_add_non_integer_quantity(self, carts, product, quantity):
        with pytest.raises(ValidationError):
            carts.add_item('u1', product.id, quantity)
        assert carts.get_or_create('u1').items == []

    def test_update_fractional_quantity(self, carts, product):
        carts.add_item('u1', product.id, 1)
        with pytest.raises(ValidationError):
            carts.update_item('u1', product.id, 1.5)
        assert carts.get_or_create('u1').items[0].quantity == 1

    def test_update_sets_quantity(self, carts, product):
        carts.add_item('u1', product.id, 1)
        cart = carts.update_item('u1', product.id, 4)
        assert cart.items[0].quantity == 4

    def test_update_to_zero_removes(self, carts, product):
        carts.add_item('u1', product.id, 1)
        assert carts.update_item('u1', product.id, 0).items == []

    def test_update_item_not_in_cart(self, carts, product):
        with pytest.raises(NotFoundError, match='Cart item not found'):
            carts.update_item('u1', product.id, 1)

    def test_remove_and_clear(self, carts, product, other_product):
        carts.add_item('u1', product.id, 1)
        carts.add_item('u1', other_product.id, 1)
        cart = carts.remove_item('u1', product.id)
        assert [i.product_id for i in cart.items] == [other_product.id]
        assert carts.clear('u1').items == []

    def test_adding_does_not_reserve_stock(self, store, carts, product):
        carts.add_item('u1', product.id, 2)
        assert store.find_by_id('products', product.id).stock == 5

    def test_enrich(self, carts, product):
        cart = carts.add_item('u1', product.id, 2)
        view = carts.enrich(cart)
        assert view['itemCount'] == 2
        assert view['items'][0]['formattedTotal'] == '$20.00'
        assert view['items'][0]['currentStock'] == 5
        assert view['totals']['subtotal'] == '$20.00'


class TestCheckout:
    def test_empty_cart(self, carts):
        with pytest.raises(StateError, match='Cart is empty'):
            carts.checkout('u1', {'shippingAddress': ADDRESS})

    def test_creates_order_and_empties_cart(self, store, carts, product, user):
        carts.add_item(user.id, product.id, 2)
        result = carts.checkout(user.id, {'shippingAddress': ADDRESS, 'shippingMethod': 'express'})
        assert result['order']['status'] == 'pending'
        assert result['order']['shippingMethod'] == 'express'
        assert result['selectedShipping'] == 'express'
        assert result['totals']['subtotal'] == '$20.00'
        assert store.count('orders') == 1
        assert store.find_by_id('products', product.id).stock == 3
        assert carts.get_or_create(user.id).items == []

    def test_stock_rechecked(self, store, carts, product, user):
        carts.add_item(user.id, product.id, 4)
        store.update('products', product.id, ProductUpdate(stock=2))
        with pytest.raises(StateError, match='Insufficient stock for Widget'):
            carts.checkout(user.id, {'shippingAddress': ADDRESS})
        assert store.count('orders') == 0
        assert len(carts.get_or_create(user.id).items) == 1

    def test_missing_address_keeps_cart(self, carts, product, user):
        carts.add_item(user.id, product.id, 1)
        with pytest.raises(ValidationError):
            carts.checkout(user.id, {})
        assert len(carts.get_or_create(user.id).items) == 1


class TestCartApi:
    def test_add_and_view(self, client, product):
        response = client.post('/api/cart/u1/items', json={'productId': product.id, 'quantity': 2})
        assert response.status_code == 200
        cart = client.get('/api/cart/u1').get_json()['data']
        assert cart['items'][0]['productId'] == product.id
        assert cart['itemCount'] == 2

    def test_update_and_delete_item(self, client, product):
        client.post('/api/cart/u1/items', json={'productId': product.id})
        response = client.put(f'/api/cart/u1/items/{product.id}', json={'quantity': 3})
        assert response.get_json()['data']['items'][0]['quantity'] == 3
        response = client.delete(f'/api/cart/u1/items/{product.id}')
        assert response.get_json()['data']['items'] == []

    def test_checkout(self, client, product, user):
        client.post(f'/api/cart/{user.id}/items', json={'productId': product.id, 'quantity': 1})
        response = client.post(f'/api/cart/{user.id}/checkout', json={'shippingAddress': ADDRESS})
        assert response.status_code == 200
        assert response.get_json()['data']['order']['userId'] == user.id

    def test_checkout_empty_cart(self, client):
        response = client.post('/api/cart/u1/checkout', json={'shippingAddress': ADDRESS})
        assert response.status_code == 400
        assert response.get_json()['message'] == 'Cart is empty'

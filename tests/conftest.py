"""Pytest fixtures for storefront tests."""

import pytest

from storefront import RecordStore, create_app
from storefront.models import Category, Product, User
from storefront.orders import OrderService

ADDRESS = {'street': '1 Main St', 'city': 'Springfield', 'zipCode': '12345'}


@pytest.fixture
def store():
    """Empty record store."""
    return RecordStore()


@pytest.fixture
def app(store):
    """App over the `store` fixture, no seed data."""
    return create_app(store, {'TESTING': True, 'SEED_DATA': False})


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def seeded_client():
    """Client for an app with the sample catalog and users loaded."""
    return create_app(config={'TESTING': True}).test_client()


@pytest.fixture
def category(store):
    return store.insert('categories', Category(id='cat-1', name='Electronics', slug='electronics'))


@pytest.fixture
def product(store, category):
    return store.insert('products', Product(name='Widget', price=10.00, category_id=category.id, stock=5, weight=1))


@pytest.fixture
def other_product(store, category):
    return store.insert('products', Product(name='Gadget', price=25.00, category_id=category.id, stock=3))


@pytest.fixture
def user(store):
    return store.insert('users', User(email='jane@example.com', name='Jane'))


@pytest.fixture
def orders(store):
    return OrderService(store)


@pytest.fixture
def order_payload(user, product):
    """Builds a valid order request body for `product`."""
    def build(quantity=2, **overrides):
        data = {
            'userId': user.id,
            'items': [{'productId': product.id, 'quantity': quantity}],
            'shippingAddress': dict(ADDRESS),
        }
        data.update(overrides)
        return data
    return build

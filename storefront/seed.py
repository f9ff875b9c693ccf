import logging

from .models import Category, Product, User

log = logging.getLogger(__name__)


def init_data(store):
    # sample categories, fixed ids so the products below can point at them
    store.insert('categories', Category(id='cat-1', name='Electronics', description='Electronic devices', slug='electronics'))
    store.insert('categories', Category(id='cat-2', name='Accessories', description='Product accessories', slug='accessories'))

    # sample products
    store.insert('products', Product(name='Laptop', price=999.99, category_id='cat-1', stock=50))
    store.insert('products', Product(name='Phone', price=699.99, category_id='cat-1', stock=100))
    store.insert('products', Product(name='Headphones', price=199.99, category_id='cat-2', stock=200))

    # sample users, no password set so they can't log in
    store.insert('users', User(email='john@example.com', name='John Doe', role='customer'))
    store.insert('users', User(email='admin@example.com', name='Admin User', role='admin'))

    log.info(
        'seed data loaded: %d products, %d categories, %d users',
        store.count('products'), store.count('categories'), store.count('users'),
    )

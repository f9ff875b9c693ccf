"""
Storefront API
Demo e-commerce REST service: products, users, orders, cart, categories,
reviews, payments, shipping and analytics, all kept in memory.

Run with `python app.py`. PORT and SECRET_KEY come from the environment.
"""

import logging

from storefront import create_app
from storefront.config import PORT, VERSION

logging.basicConfig(level=logging.INFO, format='%(message)s')

app = create_app()

if __name__ == '__main__':
    store = app.extensions['storefront'].store
    print("=" * 50)
    print(f"Storefront API v{VERSION}")
    print("=" * 50)
    print(f"Loaded {store.count('products')} products")
    print(f"Loaded {store.count('categories')} categories")
    print(f"Loaded {store.count('users')} users")
    print(f"Server running on port {PORT}")
    print("=" * 50)
    app.run(host='0.0.0.0', port=PORT)

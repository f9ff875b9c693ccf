"""
Storefront settings.

Everything here is a plain constant. Only the port and the signing key come
from the environment, the rest can be overridden per app through
create_app(config={...}).
"""

import os

# ============== SERVER ==============
PORT = int(os.environ.get('PORT', '3000'))
SECRET_KEY = os.environ.get('SECRET_KEY', 'storefront-dev-secret')
VERSION = '1.0.0'

# ============== PRICING ==============
TAX_RATE = 0.08
BASE_SHIPPING_RATE = 5.99
WEIGHT_SURCHARGE = 0.5  # per unit of weight
DEFAULT_ITEM_WEIGHT = 0.5
CATALOG_DISCOUNT = 0.10  # advertised "discounted" price on product pages

# ============== ORDERS / PAYMENTS ==============
REFUND_WINDOW_DAYS = 30
DEFAULT_SHIPPING_METHOD = 'standard'
DELIVERY_DAYS = {'express': 2, 'standard': 5, 'economy': 10}

# ============== CATALOG ==============
LOW_STOCK_THRESHOLD = 10
FEATURED_MIN_PRICE = 500
FEATURED_MAX_STOCK = 20

# ============== USERS ==============
PASSWORD_MIN_LENGTH = 8
TOKEN_MAX_AGE_SECONDS = 3600

# ============== PAGINATION ==============
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

# ============== REQUEST LOG ==============
LOG_URL_MAX_LENGTH = 100


def flask_defaults():
    """Keys copied into app.config by the factory."""
    return {
        'SECRET_KEY': SECRET_KEY,
        'SEED_DATA': True,
        'TOKEN_MAX_AGE_SECONDS': TOKEN_MAX_AGE_SECONDS,
        'DEFAULT_PAGE_SIZE': DEFAULT_PAGE_SIZE,
        'MAX_PAGE_SIZE': MAX_PAGE_SIZE,
    }

import logging

from flask import Flask, current_app, request
from werkzeug.exceptions import HTTPException

from .analytics import AnalyticsService
from .carts import CartService
from .catalog import CategoryService, ProductService
from .config import LOG_URL_MAX_LENGTH, VERSION, flask_defaults
from .errors import StorefrontError, ValidationError
from .helpers import utcnow
from .orders import OrderService
from .payments import PaymentService
from .responses import fail
from .reviews import ReviewService
from .seed import init_data
from .shipping import ShippingService
from .store import RecordStore
from .users import UserService

log = logging.getLogger(__name__)
request_log = logging.getLogger('storefront.requests')


class Services:
    """Everything a request handler needs, sharing one store."""

    def __init__(self, store, config):
        self.store = store
        self.orders = OrderService(store)
        self.products = ProductService(store)
        self.categories = CategoryService(store)
        self.users = UserService(store, config['SECRET_KEY'], config['TOKEN_MAX_AGE_SECONDS'])
        self.carts = CartService(store, self.orders)
        self.reviews = ReviewService(store)
        self.payments = PaymentService(store, self.orders)
        self.shipping = ShippingService(store, self.orders)
        self.analytics = AnalyticsService(store)


def request_url():
    url = request.full_path if request.query_string else request.path
    if len(url) > LOG_URL_MAX_LENGTH:
        url = url[:LOG_URL_MAX_LENGTH - 3] + '...'
    return url


def log_request():
    # authorization header value is never written out
    auth = ' authorization=[REDACTED]' if 'Authorization' in request.headers else ''
    request_log.info('[%s] %s %s%s', utcnow().isoformat(), request.method.upper().ljust(7), request_url(), auth)


def register_error_handlers(app):

    @app.errorhandler(StorefrontError)
    def handle_storefront_error(e):
        errors = e.errors if isinstance(e, ValidationError) else None
        return fail(e.message, e.status_code, errors)

    @app.errorhandler(404)
    def not_found(e):
        return fail('Endpoint not found', 404)

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return fail(e.description, e.code)

    @app.errorhandler(Exception)
    def handle_exception(e):
        # in debug mode, let it bubble up
        if current_app.debug:
            raise e
        log.exception('[ERROR] %s - %s %s - %s', utcnow().isoformat(), request.method, request_url(), e)
        return fail('An unexpected error occurred', 500)


def register_blueprints(app):
    from .views import analytics, carts, categories, orders, payments, products, reviews, shipping, users

    app.register_blueprint(products.bp, url_prefix='/api/products')
    app.register_blueprint(users.bp, url_prefix='/api/users')
    app.register_blueprint(orders.bp, url_prefix='/api/orders')
    app.register_blueprint(carts.bp, url_prefix='/api/cart')
    app.register_blueprint(categories.bp, url_prefix='/api/categories')
    app.register_blueprint(reviews.bp, url_prefix='/api/reviews')
    app.register_blueprint(payments.bp, url_prefix='/api/payments')
    app.register_blueprint(shipping.bp, url_prefix='/api/shipping')
    app.register_blueprint(analytics.bp, url_prefix='/api/analytics')


def create_app(store=None, config=None):
    """Build the storefront app around `store` (a fresh RecordStore if None)."""
    app = Flask(__name__)
    app.config.update(flask_defaults())
    if config:
        app.config.update(config)

    store = store if store is not None else RecordStore()
    if app.config['SEED_DATA']:
        init_data(store)
    app.extensions['storefront'] = Services(store, app.config)

    app.before_request(log_request)
    register_error_handlers(app)
    register_blueprints(app)

    @app.route('/api/health')
    def health():
        return {
            'status': 'healthy',
            'version': VERSION,
            'timestamp': utcnow().isoformat(),
            'database': {'connected': True, 'records': {
                name: store.count(name) for name in ('products', 'users', 'orders')
            }},
        }

    return app

from flask import Blueprint, request

from . import services
from ..responses import ok

bp = Blueprint('analytics', __name__)


@bp.route('/dashboard', methods=['GET'])
def dashboard():
    return ok(services().analytics.dashboard(), 'Dashboard data retrieved')


@bp.route('/sales', methods=['GET'])
def sales():
    report = services().analytics.sales(request.args.get('startDate'), request.args.get('endDate'))
    return ok(report, 'Sales analytics retrieved')


@bp.route('/products', methods=['GET'])
def products():
    return ok(services().analytics.products(), 'Product analytics retrieved')


@bp.route('/customers', methods=['GET'])
def customers():
    return ok(services().analytics.customers(), 'Customer analytics retrieved')


@bp.route('/orders', methods=['GET'])
def orders():
    return ok(services().analytics.orders(), 'Order analytics retrieved')


@bp.route('/revenue', methods=['GET'])
def revenue():
    return ok(services().analytics.revenue(), 'Revenue analytics retrieved')

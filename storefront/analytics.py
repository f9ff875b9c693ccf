"""
Read-only reports over the store. Nothing here writes.

Order value is totals.raw_total when the order has one, else the plain
subtotal of its items.
"""

from datetime import datetime, timedelta, timezone

from .config import LOW_STOCK_THRESHOLD
from .helpers import format_price, round_to_decimals, utcnow
from .models import OrderStatus
from .pricing import calculate_subtotal
from .responses import serialize

NEW_CUSTOMER_DAYS = 30
TREND_DAYS = 7


def parse_date(value):
    """ISO date or datetime -> aware datetime, None if missing or unparseable"""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def order_value(order):
    if order.totals and order.totals.raw_total:
        return order.totals.raw_total
    return calculate_subtotal(order.items)


def money(amount):
    return {'value': amount, 'formatted': format_price(amount)}


def percentage_change(previous, current):
    if previous == 0:
        return 100 if current > 0 else 0
    return int(round_to_decimals((current - previous) / previous * 100, 0))


def total_revenue(orders):
    return money(sum(order_value(o) for o in orders))


def average_order_value(orders):
    if not orders:
        return money(0)
    average = sum(order_value(o) for o in orders) / len(orders)
    return {'value': round_to_decimals(average, 2), 'formatted': format_price(average)}


def orders_by_status(orders):
    counts = {status.value: 0 for status in OrderStatus}
    for o in orders:
        counts[o.status.value] += 1
    return counts


def top_products(orders, limit):
    sales = {}
    for o in orders:
        for item in o.items:
            entry = sales.setdefault(item.product_id, {
                'productId': item.product_id,
                'productName': item.name,
                'quantity': 0,
                'revenue': 0,
            })
            entry['quantity'] += item.quantity or 1
            entry['revenue'] += (item.price or 0) * (item.quantity or 1)
    return sorted(sales.values(), key=lambda e: e['quantity'], reverse=True)[:limit]


class AnalyticsService:

    def __init__(self, store):
        self.store = store

    def _orders(self):
        return self.store.find_all('orders')

    def _customers(self):
        return self.store.filter('users', role='customer')

    def dashboard(self):
        orders = self._orders()
        recent = sorted(orders, key=lambda o: o.created_at, reverse=True)[:5]
        return {
            'totalOrders': len(orders),
            'totalRevenue': total_revenue(orders),
            'totalProducts': self.store.count('products'),
            'totalCustomers': len(self._customers()),
            'recentOrders': [
                {
                    'id': o.id,
                    'status': o.status.value,
                    'total': o.totals.total if o.totals else format_price(0),
                    'createdAt': o.created_at.isoformat(),
                }
                for o in recent
            ],
            'topProducts': top_products(orders, 5),
            'ordersByStatus': orders_by_status(orders),
        }

    def sales(self, start_date=None, end_date=None):
        start = parse_date(start_date) or datetime.fromtimestamp(0, timezone.utc)
        end = parse_date(end_date) or utcnow()
        orders = [o for o in self._orders() if start <= o.created_at <= end]

        by_day = {}
        by_category = {}
        for o in orders:
            day = by_day.setdefault(o.created_at.date().isoformat(), {'orders': 0, 'revenue': 0})
            day['orders'] += 1
            day['revenue'] += order_value(o)
            for item in o.items:
                product = self.store.find_by_id('products', item.product_id)
                category = by_category.setdefault(product.category_id if product else 'unknown', {'quantity': 0, 'revenue': 0})
                category['quantity'] += item.quantity or 1
                category['revenue'] += (item.price or 0) * (item.quantity or 1)

        return {
            'totalSales': total_revenue(orders),
            'orderCount': len(orders),
            'averageOrderValue': average_order_value(orders),
            'salesByDay': by_day,
            'salesByCategory': by_category,
        }

    def products(self):
        products = self.store.find_all('products')
        by_category = {}
        for p in products:
            by_category.setdefault(p.category_id or 'uncategorized', []).append(p)
        return {
            'totalProducts': len(products),
            'inStock': len([p for p in products if p.stock > 0]),
            'outOfStock': len([p for p in products if p.stock == 0]),
            'lowStock': len([p for p in products if 0 < p.stock < LOW_STOCK_THRESHOLD]),
            'topSelling': top_products(self._orders(), 10),
            'byCategory': serialize(by_category),
        }

    def customers(self):
        customers = self._customers()
        orders = self._orders()
        since = utcnow() - timedelta(days=NEW_CUSTOMER_DAYS)

        segments = {'noOrders': 0, 'oneOrder': 0, 'multipleOrders': 0}
        for c in customers:
            count = len([o for o in orders if o.user_id == c.id])
            if count == 0:
                segments['noOrders'] += 1
            elif count == 1:
                segments['oneOrder'] += 1
            else:
                segments['multipleOrders'] += 1

        spending = {}
        for o in orders:
            entry = spending.setdefault(o.user_id, {'userId': o.user_id, 'totalSpent': 0, 'orderCount': 0})
            entry['totalSpent'] += order_value(o)
            entry['orderCount'] += 1

        return {
            'totalCustomers': len(customers),
            'newCustomers': len([c for c in customers if c.created_at >= since]),
            'customersByOrders': segments,
            'topCustomers': sorted(spending.values(), key=lambda e: e['totalSpent'], reverse=True)[:10],
        }

    def orders(self):
        orders = self._orders()
        now = utcnow()
        week_ago = now - timedelta(days=TREND_DAYS)
        two_weeks_ago = now - timedelta(days=2 * TREND_DAYS)
        current = len([o for o in orders if o.created_at >= week_ago])
        previous = len([o for o in orders if two_weeks_ago <= o.created_at < week_ago])
        delivered = len([o for o in orders if o.status == OrderStatus.DELIVERED])
        return {
            'totalOrders': len(orders),
            'byStatus': orders_by_status(orders),
            'averageOrderValue': average_order_value(orders),
            'orderTrends': {
                'currentPeriod': current,
                'previousPeriod': previous,
                'percentageChange': percentage_change(previous, current),
            },
            'fulfillmentRate': int(round_to_decimals(delivered / len(orders) * 100, 0)) if orders else 0,
        }

    def revenue(self):
        orders = self._orders()
        by_month = {}
        for o in sorted(orders, key=lambda o: o.created_at):
            key = o.created_at.strftime('%Y-%m')
            by_month[key] = by_month.get(key, 0) + order_value(o)

        # projection: last month grown by the mean month-over-month rate
        months = list(by_month)
        projected = 0
        if len(months) >= 2:
            growth = 0
            for prev, curr in zip(months, months[1:]):
                base = by_month[prev] or 1
                growth += (by_month[curr] - base) / base
            projected = by_month[months[-1]] * (1 + growth / (len(months) - 1))

        now = utcnow()
        month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        prev_month_start = (month_start - timedelta(days=1)).replace(day=1)
        current = sum(order_value(o) for o in orders if o.created_at >= month_start)
        previous = sum(order_value(o) for o in orders if prev_month_start <= o.created_at < month_start)

        return {
            'totalRevenue': total_revenue(orders),
            'revenueByMonth': by_month,
            'projectedRevenue': {'value': round_to_decimals(projected, 2), 'formatted': format_price(projected)},
            'revenueGrowth': {
                'currentMonth': money(current),
                'previousMonth': money(previous),
                'percentageChange': percentage_change(previous, current),
            },
        }

"""
Simulated shipments: tracking numbers are generated locally and every status
change appends a tracking event. Events are never edited or removed.
"""

import logging
from datetime import timedelta

from .errors import ConflictError, NotFoundError, ValidationError
from .helpers import format_price, gen_tracking_number, round_to_decimals, utcnow
from .models import Address, Shipment, ShipmentStatus, ShipmentUpdate, TrackingEvent
from .responses import serialize
from .validators import error

log = logging.getLogger(__name__)

BASE_RATES = [
    {'id': 'express', 'name': 'Express Shipping', 'basePrice': 15.99, 'perPound': 2.50, 'days': 2},
    {'id': 'standard', 'name': 'Standard Shipping', 'basePrice': 5.99, 'perPound': 1.00, 'days': 5},
    {'id': 'economy', 'name': 'Economy Shipping', 'basePrice': 2.99, 'perPound': 0.50, 'days': 10},
]

DESTINATION_MULTIPLIERS = {
    'domestic': 1.0,
    'canada': 1.5,
    'international': 2.5,
}

STATUS_DESCRIPTIONS = {
    ShipmentStatus.CREATED: 'Shipment created',
    ShipmentStatus.PICKED_UP: 'Package picked up',
    ShipmentStatus.IN_TRANSIT: 'Package in transit',
    ShipmentStatus.OUT_FOR_DELIVERY: 'Out for delivery',
    ShipmentStatus.DELIVERED: 'Package delivered',
}

CARRIERS = [
    {'id': 'ups', 'name': 'UPS', 'logo': 'ups-logo.png', 'trackingUrl': 'https://ups.com/track'},
    {'id': 'fedex', 'name': 'FedEx', 'logo': 'fedex-logo.png', 'trackingUrl': 'https://fedex.com/track'},
    {'id': 'usps', 'name': 'USPS', 'logo': 'usps-logo.png', 'trackingUrl': 'https://usps.com/track'},
    {'id': 'dhl', 'name': 'DHL', 'logo': 'dhl-logo.png', 'trackingUrl': 'https://dhl.com/track'},
]

WAREHOUSE = Address(
    street='123 Warehouse St',
    city='Distribution City',
    state='CA',
    zip_code='90210',
    country='USA',
)

# attempts at drawing an unused tracking number before giving up
TRACKING_NUMBER_ATTEMPTS = 5


def calculate_rates(weight, destination=None):
    multiplier = DESTINATION_MULTIPLIERS.get(destination or 'domestic', 1.0)
    rates = []
    for rate in BASE_RATES:
        cost = round_to_decimals((rate['basePrice'] + weight * rate['perPound']) * multiplier, 2)
        rates.append(dict(rate, cost=cost, formattedCost=format_price(cost), estimatedDays=rate['days']))
    return rates


def make_event(status, location):
    return TrackingEvent(
        status=status.value,
        description=STATUS_DESCRIPTIONS.get(status, status.value),
        location=location,
        timestamp=utcnow(),
    )


class ShippingService:

    def __init__(self, store, orders):
        self.store = store
        self.orders = orders

    def carriers(self):
        return CARRIERS

    def get(self, shipment_id):
        shipment = self.store.find_by_id('shipments', shipment_id)
        if not shipment:
            raise NotFoundError('Shipment', shipment_id)
        return shipment

    def for_order(self, order_id):
        self.orders.get(order_id)
        return self.store.find_one('shipments', order_id=order_id)

    def tracking(self, tracking_number):
        shipment = self.store.find_one('shipments', tracking_number=tracking_number)
        if not shipment:
            raise NotFoundError('Shipment', tracking_number)
        events = shipment.tracking_events
        days = next((r['days'] for r in BASE_RATES if r['id'] == shipment.shipping_method), 5)
        return {
            'trackingNumber': shipment.tracking_number,
            'carrier': shipment.carrier,
            'status': events[-1].status if events else 'pending',
            'estimatedDelivery': (shipment.created_at + timedelta(days=days)).isoformat(),
            'events': [
                dict(serialize(e), formattedDate=e.timestamp.strftime('%Y-%m-%d %H:%M:%S'))
                for e in events
            ],
        }

    def create(self, data):
        errors = []
        if not data.get('orderId'):
            errors.append(error('orderId', 'Order ID is required'))
        if not data.get('carrier'):
            errors.append(error('carrier', 'Carrier is required'))
        if errors:
            raise ValidationError(errors)

        order = self.orders.get(data['orderId'])
        with self.store.transaction():
            for attempt in range(TRACKING_NUMBER_ATTEMPTS):
                try:
                    shipment = self.store.insert('shipments', Shipment(
                        order_id=order.id,
                        carrier=data['carrier'],
                        shipping_method=order.shipping_method or 'standard',
                        tracking_number=gen_tracking_number(),
                        origin=WAREHOUSE,
                        destination=order.shipping_address,
                        tracking_events=[TrackingEvent('created', 'Shipment created', 'Warehouse', utcnow())],
                    ))
                    break
                except ConflictError:
                    if attempt == TRACKING_NUMBER_ATTEMPTS - 1:
                        raise
            self.orders.set_shipping_status(order.id, 'shipped')
        log.info('shipment %s (%s) created for order %s', shipment.tracking_number, shipment.carrier, order.id)
        return shipment

    def update_status(self, shipment_id, status, location=None):
        try:
            status = ShipmentStatus(status)
        except ValueError:
            raise ValidationError([error('status', 'Valid shipment status is required')]) from None
        with self.store.transaction():
            shipment = self.get(shipment_id)
            events = shipment.tracking_events + [make_event(status, location or 'Unknown')]
            shipment = self.store.update('shipments', shipment_id, ShipmentUpdate(status=status, tracking_events=events))
            if status == ShipmentStatus.DELIVERED:
                self.orders.set_shipping_status(shipment.order_id, 'delivered')
        log.info('shipment %s -> %s', shipment.tracking_number, status.value)
        return shipment

"""
Records kept in the store.

Every entity is a dataclass. Mutations go through the matching *Update
struct: fields left at UNSET are not touched.
"""

from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import List, Optional

from .config import DEFAULT_ITEM_WEIGHT, DEFAULT_SHIPPING_METHOD


class _Unset:
    def __repr__(self):
        return 'UNSET'

    def __bool__(self):
        return False


UNSET = _Unset()


class OrderStatus(str, Enum):
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    PROCESSING = 'processing'
    SHIPPED = 'shipped'
    DELIVERED = 'delivered'
    CANCELLED = 'cancelled'


class PaymentMethod(str, Enum):
    CREDIT_CARD = 'credit_card'
    DEBIT_CARD = 'debit_card'
    PAYPAL = 'paypal'
    BANK_TRANSFER = 'bank_transfer'


class PaymentStatus(str, Enum):
    PENDING = 'pending'
    COMPLETED = 'completed'
    REFUNDED = 'refunded'
    FAILED = 'failed'


class ShipmentStatus(str, Enum):
    CREATED = 'created'
    PICKED_UP = 'picked_up'
    IN_TRANSIT = 'in_transit'
    OUT_FOR_DELIVERY = 'out_for_delivery'
    DELIVERED = 'delivered'


CARD_METHODS = (PaymentMethod.CREDIT_CARD, PaymentMethod.DEBIT_CARD)


# ============== ENTITIES ==============

@dataclass
class Address:
    street: str
    city: str
    zip_code: str
    state: Optional[str] = None
    country: Optional[str] = None


@dataclass
class Product:
    name: str
    price: float
    category_id: str
    stock: int
    description: str = ''
    weight: float = DEFAULT_ITEM_WEIGHT
    average_rating: Optional[float] = None
    review_count: Optional[int] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class User:
    email: str
    name: str
    password: Optional[str] = None  # hash, never serialized
    role: str = 'customer'
    addresses: List[Address] = field(default_factory=list)
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class OrderItem:
    product_id: str
    quantity: int
    price: float = 0.0
    name: Optional[str] = None
    weight: Optional[float] = None
    discount_percent: Optional[float] = None


@dataclass
class OrderTotals:
    subtotal: str
    tax: str
    shipping: str
    total: str
    raw_total: float


@dataclass
class Order:
    user_id: str
    items: List[OrderItem]
    shipping_address: Address
    shipping_method: str = DEFAULT_SHIPPING_METHOD
    status: OrderStatus = OrderStatus.PENDING
    payment_status: str = 'unpaid'
    shipping_status: Optional[str] = None
    totals: Optional[OrderTotals] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None
    processing_at: Optional[datetime] = None
    shipped_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class CartItem:
    product_id: str
    price: float
    quantity: int
    name: Optional[str] = None
    added_at: Optional[datetime] = None


@dataclass
class Cart:
    user_id: str
    items: List[CartItem] = field(default_factory=list)
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class Category:
    name: str
    description: str = ''
    parent_id: Optional[str] = None
    slug: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class Review:
    user_id: str
    product_id: str
    rating: int
    title: str = ''
    content: str = ''
    helpful_count: int = 0
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class Payment:
    order_id: str
    method: PaymentMethod
    amount: float
    status: PaymentStatus
    formatted_amount: Optional[str] = None
    transaction_id: Optional[str] = None
    card_number: Optional[str] = None  # masked
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class TrackingEvent:
    status: str
    description: str
    location: str
    timestamp: datetime


@dataclass
class Shipment:
    order_id: str
    carrier: str
    shipping_method: str
    tracking_number: str
    origin: Address
    destination: Address
    status: ShipmentStatus = ShipmentStatus.CREATED
    tracking_events: List[TrackingEvent] = field(default_factory=list)
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ============== UPDATE STRUCTS ==============

@dataclass
class ProductUpdate:
    name: object = UNSET
    price: object = UNSET
    category_id: object = UNSET
    stock: object = UNSET
    description: object = UNSET
    weight: object = UNSET
    average_rating: object = UNSET
    review_count: object = UNSET


@dataclass
class UserUpdate:
    email: object = UNSET
    name: object = UNSET
    password: object = UNSET
    addresses: object = UNSET


@dataclass
class OrderUpdate:
    shipping_address: object = UNSET
    shipping_method: object = UNSET
    status: object = UNSET
    payment_status: object = UNSET
    shipping_status: object = UNSET
    confirmed_at: object = UNSET
    processing_at: object = UNSET
    shipped_at: object = UNSET
    delivered_at: object = UNSET
    cancelled_at: object = UNSET


@dataclass
class CartUpdate:
    items: object = UNSET


@dataclass
class CategoryUpdate:
    name: object = UNSET
    description: object = UNSET
    parent_id: object = UNSET
    slug: object = UNSET


@dataclass
class ReviewUpdate:
    rating: object = UNSET
    title: object = UNSET
    content: object = UNSET
    helpful_count: object = UNSET


@dataclass
class PaymentUpdate:
    status: object = UNSET


@dataclass
class ShipmentUpdate:
    status: object = UNSET
    tracking_events: object = UNSET


def changed_fields(update):
    """Return {name: value} for the fields of an update struct that are set."""
    return {
        f.name: getattr(update, f.name)
        for f in fields(update)
        if getattr(update, f.name) is not UNSET
    }

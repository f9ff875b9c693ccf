"""Input checks for request payloads.

The validate_* functions return a list of {'field', 'message'} dicts, empty
when the payload is fine. `require` raises ValidationError on a non-empty list.
"""

import re

from .config import PASSWORD_MIN_LENGTH
from .errors import ValidationError
from .models import Address, PaymentMethod

EMAIL_RE = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')


def error(field, message):
    return {'field': field, 'message': message}


def require(errors):
    if errors:
        raise ValidationError(errors)


def validate_required_field(value):
    return value is not None and value != ''


def parse_float(value):
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    return None if result != result else result  # NaN


def parse_int(value):
    """Whole numbers only: bools and fractional floats give None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and not value.is_integer():
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def validate_price(price):
    parsed = parse_float(price)
    return parsed is not None and parsed > 0


def validate_stock(stock):
    parsed = parse_int(stock)
    return parsed is not None and parsed >= 0


def validate_email_format(email):
    return isinstance(email, str) and EMAIL_RE.match(email) is not None


def validate_password(password):
    return isinstance(password, str) and len(password) >= PASSWORD_MIN_LENGTH


def validate_shipping_address(address):
    if not isinstance(address, dict):
        return False
    return all(validate_required_field(address.get(k)) for k in ('street', 'city', 'zipCode'))


def parse_address(data):
    return Address(
        street=data.get('street', ''),
        city=data.get('city', ''),
        zip_code=data.get('zipCode', ''),
        state=data.get('state'),
        country=data.get('country'),
    )


def validate_product(data):
    errors = []
    if not validate_required_field(data.get('name')):
        errors.append(error('name', 'Product name is required'))
    if not validate_price(data.get('price')):
        errors.append(error('price', 'Valid price is required'))
    if not validate_stock(data.get('stock')):
        errors.append(error('stock', 'Valid stock quantity is required'))
    if data.get('weight') is not None and not validate_price(data['weight']):
        errors.append(error('weight', 'Valid weight is required'))
    return errors


def validate_user(data):
    errors = []
    email = data.get('email')
    if not validate_required_field(email):
        errors.append(error('email', 'Email is required'))
    elif not validate_email_format(email):
        errors.append(error('email', 'Invalid email format'))
    if not validate_required_field(data.get('name')):
        errors.append(error('name', 'Name is required'))
    if not validate_password(data.get('password')):
        errors.append(error('password', f'Password must be at least {PASSWORD_MIN_LENGTH} characters'))
    return errors


def validate_order(data):
    errors = []
    if not validate_required_field(data.get('userId')):
        errors.append(error('userId', 'User ID is required'))
    items = data.get('items')
    if not isinstance(items, list) or not items:
        errors.append(error('items', 'Order must have at least one item'))
    else:
        for i, item in enumerate(items):
            if not isinstance(item, dict) or not validate_required_field(item.get('productId')):
                errors.append(error(f'items[{i}].productId', 'Product ID is required'))
            elif parse_int(item.get('quantity')) is None or parse_int(item.get('quantity')) < 1:
                errors.append(error(f'items[{i}].quantity', 'Quantity must be at least 1'))
    if not validate_shipping_address(data.get('shippingAddress')):
        errors.append(error('shippingAddress', 'Valid shipping address is required'))
    return errors


def validate_payment(data):
    errors = []
    if not validate_required_field(data.get('orderId')):
        errors.append(error('orderId', 'Order ID is required'))
    if data.get('method') not in [m.value for m in PaymentMethod]:
        errors.append(error('method', 'Valid payment method is required'))
    if not validate_price(data.get('amount')):
        errors.append(error('amount', 'Valid payment amount is required'))
    return errors


def validate_rating(rating):
    parsed = parse_int(rating)
    return parsed is not None and 1 <= parsed <= 5

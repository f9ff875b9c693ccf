import hashlib
import math
import random
import re
import string
import time
from datetime import datetime, timezone

ID_ALPHABET = string.ascii_lowercase + string.digits
CODE_ALPHABET = string.ascii_uppercase + string.digits


def utcnow():
    return datetime.now(timezone.utc)


def _millis():
    return int(time.time() * 1000)


def _base36(number):
    digits = []
    while True:
        number, rem = divmod(number, 36)
        digits.append(ID_ALPHABET[rem])
        if not number:
            break
    return ''.join(reversed(digits))


def _random_chars(length, alphabet=ID_ALPHABET):
    return ''.join(random.choice(alphabet) for _ in range(length))


def gen_id():
    """base36 millisecond timestamp + 8 random chars, e.g. 'lx2k9c1a-4f0qz81m'"""
    return f'{_base36(_millis())}-{_random_chars(8)}'


def gen_request_id():
    return f'req-{_millis()}-{_random_chars(9)}'


def gen_transaction_id():
    return f'TXN-{_millis()}-{_random_chars(9, CODE_ALPHABET)}'


def gen_refund_id():
    return f'REF-{_millis()}-{_random_chars(9, CODE_ALPHABET)}'


def gen_tracking_number():
    # TRK + last 10 digits of the clock + 4 random chars
    return f'TRK{str(_millis())[-10:]}{_random_chars(4, CODE_ALPHABET)}'


def round_to_decimals(value, decimals=2):
    """round half up (builtin round() is half-even)"""
    multiplier = 10 ** decimals
    return math.floor(value * multiplier + 0.5) / multiplier


def format_price(amount):
    """format as currency string, e.g. '$1999.98'"""
    try:
        amount = float(amount)
    except (TypeError, ValueError):
        amount = 0.0
    if math.isnan(amount):
        amount = 0.0
    return f'${round_to_decimals(amount, 2):.2f}'


def hash_password(password):
    return hashlib.sha256(password.encode()).hexdigest()


def mask_card(card_number):
    """mask card number for display, keeps the last 4 digits"""
    return f'****-****-****-{card_number[-4:]}'


def slugify(name):
    slug = re.sub(r'\s+', '-', name.lower())
    return re.sub(r'[^a-z0-9-]', '', slug)

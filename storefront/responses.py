"""
Response envelopes.

    {success, message, data, metadata: {timestamp, requestId}}

Paginated responses add a `pagination` block. Records are turned into
camelCase JSON here, nowhere else.
"""

import math
from dataclasses import fields, is_dataclass
from datetime import datetime
from enum import Enum

from flask import jsonify

from .helpers import gen_request_id, utcnow

# never leaves the process
HIDDEN_FIELDS = {'password'}


def camel(name):
    head, *rest = name.split('_')
    return head + ''.join(part.title() for part in rest)


def serialize(value):
    """Convert records (and anything containing them) to JSON-ready values."""
    if is_dataclass(value) and not isinstance(value, type):
        return {
            camel(f.name): serialize(getattr(value, f.name))
            for f in fields(value)
            if f.name not in HIDDEN_FIELDS
        }
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: serialize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize(v) for v in value]
    return value


def metadata():
    return {'timestamp': utcnow().isoformat(), 'requestId': gen_request_id()}


def envelope(data, message='Success'):
    return {
        'success': data is not None,
        'message': message,
        'data': serialize(data),
        'metadata': metadata(),
    }


def error_envelope(message, errors=None):
    body = {
        'success': False,
        'message': message or 'An unexpected error occurred',
        'data': None,
        'metadata': metadata(),
    }
    if errors:
        body['errors'] = errors
    return body


def pagination(page, limit, total):
    total_pages = math.ceil(total / limit) if limit else 0
    return {
        'currentPage': page,
        'limit': limit,
        'totalItems': total,
        'totalPages': total_pages,
        'hasNextPage': page < total_pages,
        'hasPreviousPage': page > 1,
    }


def ok(data, message='Success', status=200):
    return jsonify(envelope(data, message)), status


def created(data, message='Created'):
    return ok(data, message, 201)


def paginated(items, page, limit, message='Success'):
    """Slice `items` to the requested page and wrap it."""
    start = (page - 1) * limit
    body = envelope(items[start:start + limit], message)
    body['pagination'] = pagination(page, limit, len(items))
    return jsonify(body), 200


def fail(message, status, errors=None):
    return jsonify(error_envelope(message, errors)), status

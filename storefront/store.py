"""
In-memory record store.

One ordered list per collection. Nothing survives a restart.

The store is created by the app factory and handed to every service, so tests
get their own instance. Calls are individually atomic; anything that reads and
then writes (stock checks, cart checkout, uniqueness checks done by callers)
must run inside `with store.transaction():`.
"""

import logging
import threading
from contextlib import contextmanager
from dataclasses import fields, replace

from .errors import ConflictError
from .helpers import gen_id, utcnow
from .models import changed_fields

log = logging.getLogger(__name__)

COLLECTIONS = (
    'products',
    'users',
    'orders',
    'carts',
    'categories',
    'reviews',
    'payments',
    'shipments',
)

# collection -> (index name, key function, conflict message)
UNIQUE_INDEXES = {
    'users': [('email', lambda r: r.email.lower(), 'Email already exists')],
    'carts': [('user_id', lambda r: r.user_id, 'User already has a cart')],
    'reviews': [
        ('user_product', lambda r: (r.user_id, r.product_id), 'User already reviewed this product'),
    ],
    'shipments': [('tracking_number', lambda r: r.tracking_number, 'Tracking number already in use')],
}


class RecordStore:

    def __init__(self):
        self._lock = threading.RLock()
        self._collections = {name: [] for name in COLLECTIONS}

    def _records(self, collection):
        try:
            return self._collections[collection]
        except KeyError:
            raise KeyError(f'Unknown collection: {collection}') from None

    @contextmanager
    def transaction(self):
        """Hold the store lock for a multi-step read/modify/write."""
        with self._lock:
            yield self

    def reset(self):
        with self._lock:
            for records in self._collections.values():
                records.clear()

    def count(self, collection):
        return len(self._records(collection))

    # ---------- reads ----------

    def find_all(self, collection):
        with self._lock:
            return list(self._records(collection))

    def find_by_id(self, collection, record_id):
        with self._lock:
            for record in self._records(collection):
                if record.id == record_id:
                    return record
        return None

    def filter(self, collection, **criteria):
        with self._lock:
            return [
                r for r in self._records(collection)
                if all(getattr(r, k) == v for k, v in criteria.items())
            ]

    def find_one(self, collection, **criteria):
        matches = self.filter(collection, **criteria)
        return matches[0] if matches else None

    # ---------- writes ----------

    def _check_unique(self, collection, candidate, ignore_id=None):
        for name, key, message in UNIQUE_INDEXES.get(collection, []):
            wanted = key(candidate)
            for existing in self._records(collection):
                if existing.id != ignore_id and key(existing) == wanted:
                    raise ConflictError(message)

    def insert(self, collection, record):
        """Store a new record. Assigns an id if it has none and stamps created_at."""
        with self._lock:
            records = self._records(collection)
            record = replace(record, id=record.id or gen_id(), created_at=record.created_at or utcnow())
            self._check_unique(collection, record)
            records.append(record)
        log.debug('insert %s %s', collection, record.id)
        return record

    def update(self, collection, record_id, changes):
        """Apply an update struct to a record.

        Returns the new record, or None if no record has that id.
        """
        updates = changed_fields(changes)
        with self._lock:
            records = self._records(collection)
            for index, record in enumerate(records):
                if record.id != record_id:
                    continue
                known = {f.name for f in fields(record)}
                unknown = set(updates) - known
                if unknown:
                    raise TypeError(f'{type(record).__name__} has no field(s) {sorted(unknown)}')
                updated = replace(record, **updates, updated_at=utcnow())
                self._check_unique(collection, updated, ignore_id=record_id)
                records[index] = updated
                log.debug('update %s %s %s', collection, record_id, sorted(updates))
                return updated
        return None

    def delete(self, collection, record_id):
        """Remove a record. Returns it, or None if no record has that id."""
        with self._lock:
            records = self._records(collection)
            for index, record in enumerate(records):
                if record.id == record_id:
                    log.debug('delete %s %s', collection, record_id)
                    return records.pop(index)
        return None

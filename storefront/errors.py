"""Exceptions raised by the storefront services.

Each one knows the HTTP status it maps to; the app's error handlers turn them
into the standard error envelope.
"""


class StorefrontError(Exception):
    """Base exception for all storefront errors."""

    status_code = 500

    def __init__(self, message):
        self.message = message
        super().__init__(message)


class ValidationError(StorefrontError):
    """Raised when input is missing or malformed."""

    status_code = 400

    def __init__(self, errors, message=None):
        # errors: list of {'field': ..., 'message': ...}
        self.errors = list(errors)
        if message is None:
            message = '; '.join(e['message'] for e in self.errors) or 'Validation failed'
        super().__init__(message)


class AuthenticationError(StorefrontError):
    """Raised on bad credentials."""

    status_code = 401


class NotFoundError(StorefrontError):
    """Raised when an id doesn't resolve to a record."""

    status_code = 404

    def __init__(self, kind, record_id=None):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f'{kind} not found')


class ConflictError(StorefrontError):
    """Raised when a write would break a uniqueness rule."""

    status_code = 409


class StateError(StorefrontError):
    """Raised when the current state forbids the operation.

    Invalid status transitions, insufficient stock, empty carts and
    non-refundable payments all land here.
    """

    status_code = 400

"""User accounts and login."""

import logging

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from .errors import AuthenticationError, NotFoundError, ValidationError
from .helpers import hash_password
from .models import User, UserUpdate
from .validators import (
    error, parse_address, require, validate_email_format, validate_password,
    validate_required_field, validate_shipping_address, validate_user,
)

log = logging.getLogger(__name__)

TOKEN_SALT = 'storefront-login'


class UserService:

    def __init__(self, store, secret_key, token_max_age):
        self.store = store
        self.token_max_age = token_max_age
        self._signer = URLSafeTimedSerializer(secret_key, salt=TOKEN_SALT)

    def get(self, user_id):
        user = self.store.find_by_id('users', user_id)
        if not user:
            raise NotFoundError('User', user_id)
        return user

    def list(self):
        return self.store.find_all('users')

    def orders(self, user_id):
        self.get(user_id)
        return self.store.filter('orders', user_id=user_id)

    def addresses(self, user_id):
        return self.get(user_id).addresses

    def create(self, data):
        require(validate_user(data))
        # the unique index on email turns a duplicate into a 409
        user = self.store.insert('users', User(
            email=data['email'].strip().lower(),
            name=data['name'],
            password=hash_password(data['password']),
            role='customer',
        ))
        log.info('user %s registered: %s', user.id, user.email)
        return user

    def authenticate(self, email, password):
        if not validate_required_field(email) or not validate_required_field(password):
            raise ValidationError([error('credentials', 'Email and password required')])
        user = self.store.find_one('users', email=str(email).strip().lower())
        if not user or user.password is None or user.password != hash_password(str(password)):
            log.info('failed login for %s', email)
            raise AuthenticationError('Invalid credentials')
        log.info('user %s logged in', user.id)
        return user

    def issue_token(self, user):
        return self._signer.dumps({'userId': user.id, 'email': user.email, 'role': user.role})

    def verify_token(self, token):
        """Return the token payload, or None when it is forged or expired."""
        try:
            return self._signer.loads(token, max_age=self.token_max_age)
        except (SignatureExpired, BadSignature):
            return None

    def update(self, user_id, data):
        """Profile changes. Password and role are never changed here."""
        self.get(user_id)
        errors = []
        changes = UserUpdate()
        if 'name' in data:
            if not validate_required_field(data['name']):
                errors.append(error('name', 'Name is required'))
            changes.name = data['name']
        if 'email' in data:
            if not validate_email_format(data['email']):
                errors.append(error('email', 'Invalid email format'))
            else:
                changes.email = data['email'].strip().lower()
        if 'addresses' in data:
            addresses = data['addresses']
            if not isinstance(addresses, list) or not all(validate_shipping_address(a) for a in addresses):
                errors.append(error('addresses', 'Each address needs street, city and zipCode'))
            else:
                changes.addresses = [parse_address(a) for a in addresses]
        require(errors)
        updated = self.store.update('users', user_id, changes)
        log.info('user %s updated', user_id)
        return updated

    def change_password(self, user_id, current_password, new_password):
        user = self.get(user_id)
        if not current_password or user.password != hash_password(str(current_password)):
            raise AuthenticationError('Current password incorrect')
        if not validate_password(new_password):
            raise ValidationError([error('newPassword', 'Password must be at least 8 characters')])
        self.store.update('users', user_id, UserUpdate(password=hash_password(new_password)))
        log.info('user %s changed password', user_id)

    def delete(self, user_id):
        self.get(user_id)
        deleted = self.store.delete('users', user_id)
        log.info('user %s deleted', user_id)
        return deleted

from flask import Blueprint

from . import json_body, page_args, services
from ..responses import created, ok, paginated

bp = Blueprint('users', __name__)


@bp.route('', methods=['GET'])
def list_users():
    page, limit = page_args()
    return paginated(services().users.list(), page, limit, 'Users retrieved')


@bp.route('', methods=['POST'])
def register():
    user = services().users.create(json_body())
    return created(user, 'User created')


@bp.route('/login', methods=['POST'])
def login():
    data = json_body()
    svc = services().users
    user = svc.authenticate(data.get('email'), data.get('password'))
    return ok({'user': user, 'token': svc.issue_token(user)}, 'Login successful')


@bp.route('/<user_id>', methods=['GET'])
def get_user(user_id):
    return ok(services().users.get(user_id), 'User retrieved')


@bp.route('/<user_id>', methods=['PUT'])
def update_user(user_id):
    user = services().users.update(user_id, json_body())
    return ok(user, 'User updated')


@bp.route('/<user_id>/password', methods=['PATCH'])
def change_password(user_id):
    data = json_body()
    services().users.change_password(user_id, data.get('currentPassword'), data.get('newPassword'))
    return ok({'id': user_id}, 'Password changed')


@bp.route('/<user_id>', methods=['DELETE'])
def delete_user(user_id):
    user = services().users.delete(user_id)
    return ok(user, 'User deleted')


@bp.route('/<user_id>/orders', methods=['GET'])
def user_orders(user_id):
    svc = services()
    return ok([svc.orders.enrich(o) for o in svc.users.orders(user_id)], 'User orders retrieved')


@bp.route('/<user_id>/addresses', methods=['GET'])
def user_addresses(user_id):
    return ok(services().users.addresses(user_id), 'Addresses retrieved')

from flask import current_app, request

from ..validators import parse_int


def services():
    return current_app.extensions['storefront']


def json_body():
    # missing or malformed body is treated as empty, validation reports what's absent
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def page_args():
    """(page, limit) from the query string, clamped to sane values."""
    page = parse_int(request.args.get('page')) or 1
    limit = parse_int(request.args.get('limit')) or current_app.config['DEFAULT_PAGE_SIZE']
    return max(page, 1), min(max(limit, 1), current_app.config['MAX_PAGE_SIZE'])

"""Tests for the app factory, envelopes and error handling."""

import logging
import re

from storefront import RecordStore, create_app


class TestEnvelope:
    def test_success_envelope(self, seeded_client):
        body = seeded_client.get('/api/categories').get_json()
        assert body['success'] is True
        assert body['message'] == 'Categories retrieved'
        assert re.fullmatch(r'req-\d+-[a-z0-9]{9}', body['metadata']['requestId'])
        assert body['metadata']['timestamp']

    def test_unknown_route(self, client):
        response = client.get('/api/nothing-here')
        assert response.status_code == 404
        body = response.get_json()
        assert body == {
            'success': False,
            'message': 'Endpoint not found',
            'data': None,
            'metadata': body['metadata'],
        }

    def test_method_not_allowed_passes_through(self, client):
        assert client.delete('/api/products').status_code == 405

    def test_unexpected_error_is_500(self, app, client, monkeypatch):
        def boom():
            raise RuntimeError('kaboom')

        monkeypatch.setattr(app.extensions['storefront'].analytics, 'dashboard', boom)
        response = client.get('/api/analytics/dashboard')
        assert response.status_code == 500
        assert response.get_json()['message'] == 'An unexpected error occurred'

    def test_missing_body_reports_fields(self, client):
        response = client.post('/api/orders', data='not json', content_type='text/plain')
        assert response.status_code == 400
        assert {e['field'] for e in response.get_json()['errors']} == {'userId', 'items', 'shippingAddress'}


class TestFactory:
    def test_seed_data(self, seeded_client):
        body = seeded_client.get('/api/products').get_json()
        assert [p['name'] for p in body['data']] == ['Laptop', 'Phone', 'Headphones']
        assert body['pagination']['totalItems'] == 3

    def test_seed_can_be_disabled(self, client):
        assert client.get('/api/products').get_json()['data'] == []

    def test_apps_do_not_share_state(self):
        first = create_app(config={'TESTING': True}).test_client()
        second = create_app(config={'TESTING': True}).test_client()
        first.post('/api/categories', json={'name': 'Extra'})
        assert len(first.get('/api/categories').get_json()['data']) == 3
        assert len(second.get('/api/categories').get_json()['data']) == 2

    def test_injected_store(self):
        store = RecordStore()
        client = create_app(store, {'TESTING': True}).test_client()
        client.post('/api/categories', json={'name': 'Extra'})
        assert store.count('categories') == 3

    def test_health(self, client):
        body = client.get('/api/health').get_json()
        assert body['status'] == 'healthy'
        assert body['database']['connected'] is True


class TestRequestLog:
    def test_line_format(self, client, caplog):
        with caplog.at_level(logging.INFO, logger='storefront.requests'):
            client.get('/api/products?page=1')
        line = caplog.records[0].getMessage()
        assert re.fullmatch(r'\[\S+\] GET     /api/products\?page=1', line)

    def test_long_url_truncated(self, client, caplog):
        with caplog.at_level(logging.INFO, logger='storefront.requests'):
            client.get('/api/products/' + 'x' * 200)
        url = caplog.records[0].getMessage().split(' ', 2)[-1].strip()
        assert len(url) == 100
        assert url.endswith('...')

    def test_authorization_redacted(self, client, caplog):
        with caplog.at_level(logging.INFO, logger='storefront.requests'):
            client.get('/api/health', headers={'Authorization': 'Bearer secret-token'})
        line = caplog.records[0].getMessage()
        assert 'secret-token' not in line
        assert '[REDACTED]' in line

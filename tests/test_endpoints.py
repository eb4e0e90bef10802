import json

import pytest
import requests

from gramcheck.models import StorageEntry, User
from gramcheck.session import DatabaseStore
from gramcheck.session.constants import SESSIONS_KEY


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code
        self.text = str(payload)

    def json(self):
        return self._payload


@pytest.fixture()
def alice(make_user):
    return make_user('alice')


def test_register(client):
    r = client.post('/api/auth/register', json={
        'username': 'newbie', 'email': 'newbie@example.com', 'password': 'secret123'})
    assert r.status_code == 201
    assert r.get_json()['data']['role'] == 'user'

    r = client.post('/api/auth/register', json={
        'username': 'newbie', 'email': 'other@example.com', 'password': 'secret123'})
    assert r.status_code == 409

    r = client.post('/api/auth/register', json={
        'username': 'shorty', 'email': 'shorty@example.com', 'password': '123'})
    assert r.status_code == 400

    r = client.post('/api/auth/register', data={
        'username': 'formuser', 'email': 'form@example.com', 'password': 'secret123'})
    assert r.status_code == 201


def test_login_binds_session_to_tab(client, alice, login_as):
    r = login_as('alice', tab='tab_a')
    assert r.status_code == 200
    body = r.get_json()
    assert body['data']['tabId'] == 'tab_a'
    assert body['data']['user']['userId'] == alice
    assert body['data']['redirect'] == '/grammar-checker'
    assert r.headers['X-Tab-Id'] == 'tab_a'

    r = client.get('/api/auth/me', headers={'X-Tab-Id': 'tab_a'})
    assert r.status_code == 200
    assert r.get_json()['data']['account']['username'] == 'alice'

    # same browser, different tab: not logged in
    r = client.get('/api/auth/me', headers={'X-Tab-Id': 'tab_b'})
    assert r.status_code == 401


def test_login_rejects_bad_credentials(client, alice, login_as):
    assert login_as('alice', password='wrong').status_code == 401
    assert login_as('nobody').status_code == 401
    assert client.post('/api/auth/login', json={'username': 'alice'}).status_code == 400


def test_inactive_account_cannot_login(make_user, login_as):
    make_user('frozen', status='suspended')
    assert login_as('frozen').status_code == 403


def test_request_without_tab_header_gets_one(client):
    r = client.get('/api/auth/sessions')
    assert r.status_code == 401
    assert r.headers['X-Tab-Id'].startswith('tab_')


def test_logout_without_session(client):
    r = client.post('/api/auth/logout', headers={'X-Tab-Id': 'tab_a'})
    assert r.status_code == 401
    assert r.get_json()['success'] is False


def test_cross_tab_logout(client, alice, login_as):
    assert login_as('alice', tab='tab_a').status_code == 200
    assert login_as('alice', tab='tab_b').status_code == 200

    r = client.get('/api/auth/sessions', headers={'X-Tab-Id': 'tab_a'})
    tabs = {row['tabId']: row['isCurrent'] for row in r.get_json()['data']}
    assert tabs == {'tab_a': True, 'tab_b': False}

    r = client.post('/api/auth/logout', headers={'X-Tab-Id': 'tab_a'})
    assert r.status_code == 200

    r = client.get('/grammar-checker', headers={'X-Tab-Id': 'tab_b'})
    assert r.status_code == 302
    assert r.headers['Location'].endswith('/login?message=logout_sync')

    r = client.get('/api/auth/me', headers={'X-Tab-Id': 'tab_b'})
    assert r.status_code == 401


def test_logout_does_not_reach_other_browsers(app, client, alice, login_as):
    other_browser = app.test_client()
    r = other_browser.post('/api/auth/login', json={'username': 'alice', 'password': 'secret123'},
                           headers={'X-Tab-Id': 'tab_a'})
    assert r.status_code == 200
    login_as('alice', tab='tab_a')

    assert client.post('/api/auth/logout', headers={'X-Tab-Id': 'tab_a'}).status_code == 200
    assert client.get('/api/auth/me', headers={'X-Tab-Id': 'tab_a'}).status_code == 401

    r = other_browser.get('/api/auth/me', headers={'X-Tab-Id': 'tab_a'})
    assert r.status_code == 200


def test_login_survives_foreign_entry_with_unreadable_time(app, client, alice, login_as):
    assert login_as('alice', tab='tab_a').status_code == 200
    with app.app_context():
        store = DatabaseStore(StorageEntry.query.first().namespace)
        sessions = json.loads(store.get(SESSIONS_KEY))
        sessions['tab_z'] = {'userId': alice, 'username': 'alice', 'userRole': 'user',
                             'lastActive': 'yesterday'}
        store.set(SESSIONS_KEY, json.dumps(sessions))

    assert login_as('alice', tab='tab_b').status_code == 200
    assert client.get('/grammar-checker', headers={'X-Tab-Id': 'tab_b'}).status_code == 200
    r = client.get('/api/auth/sessions', headers={'X-Tab-Id': 'tab_b'})
    assert {row['tabId'] for row in r.get_json()['data']} == {'tab_a', 'tab_b'}


def test_relogin_after_sync_logout(client, alice, login_as):
    login_as('alice', tab='tab_a')
    login_as('alice', tab='tab_b')
    client.post('/api/auth/logout', headers={'X-Tab-Id': 'tab_a'})
    assert client.get('/api/auth/me', headers={'X-Tab-Id': 'tab_b'}).status_code == 401

    login_as('alice', tab='tab_b')
    assert client.get('/api/auth/me', headers={'X-Tab-Id': 'tab_b'}).status_code == 200


def test_logout_all(client, alice, login_as):
    login_as('alice', tab='tab_a')
    login_as('alice', tab='tab_b')
    r = client.post('/api/auth/logout-all', headers={'X-Tab-Id': 'tab_b'})
    assert r.status_code == 200
    for tab in ('tab_a', 'tab_b'):
        assert client.get('/api/auth/me', headers={'X-Tab-Id': tab}).status_code == 401


def test_activity_ping(client, alice, login_as):
    assert client.post('/api/auth/activity', headers={'X-Tab-Id': 'tab_a'}).status_code == 401
    login_as('alice', tab='tab_a')
    r = client.post('/api/auth/activity', headers={'X-Tab-Id': 'tab_a'})
    assert r.get_json()['success'] is True


def test_grammar_checker_page_requires_login(client, alice, login_as):
    r = client.get('/grammar-checker', headers={'X-Tab-Id': 'tab_a'})
    assert r.status_code == 302
    assert r.headers['Location'].endswith('/login?message=login_required')

    login_as('alice', tab='tab_a')
    r = client.get('/grammar-checker', headers={'X-Tab-Id': 'tab_a'})
    assert r.status_code == 200
    assert r.get_json()['user']['username'] == 'alice'


def test_admin_page_delays_redirect(client, alice, login_as):
    login_as('alice', tab='tab_a')
    r = client.get('/admin', headers={'X-Tab-Id': 'tab_a'})
    assert r.status_code == 403
    assert r.headers['Refresh'] == '3; url=/login?message=admin_required'
    assert r.get_json()['redirectDelayMs'] == 3000

    login_as('admin', password='admin123', tab='tab_b')
    r = client.get('/admin', headers={'X-Tab-Id': 'tab_b'})
    assert r.status_code == 200
    assert r.get_json()['user']['userRole'] == 'admin'


def test_login_page_explains_reason(client):
    r = client.get('/login?message=logout_sync')
    assert r.get_json()['message'] == 'You were logged out in another tab.'


def test_index_redirects(client, login_as):
    assert client.get('/', headers={'X-Tab-Id': 'tab_a'}).headers['Location'].endswith('/login')
    login_as('admin', password='admin123', tab='tab_a')
    assert client.get('/', headers={'X-Tab-Id': 'tab_a'}).headers['Location'].endswith('/admin')


def test_admin_api_access_control(client, alice, login_as):
    assert client.get('/api/admin/users', headers={'X-Tab-Id': 'tab_a'}).status_code == 401

    login_as('alice', tab='tab_a')
    r = client.get('/api/admin/users', headers={'X-Tab-Id': 'tab_a'})
    assert r.status_code == 403

    login_as('admin', password='admin123', tab='tab_b')
    r = client.get('/api/admin/users', headers={'X-Tab-Id': 'tab_b'})
    assert r.status_code == 200
    usernames = {u['username'] for u in r.get_json()['data']}
    assert usernames == {'admin', 'alice'}


def test_admin_user_management(app, client, alice, login_as):
    login_as('admin', password='admin123', tab='tab_a')
    headers = {'X-Tab-Id': 'tab_a'}

    r = client.post('/api/admin/users', headers=headers, json={
        'username': 'bob', 'password': 'secret123', 'email': 'bob@example.com',
        'fullName': 'Bob Builder', 'accountType': 'premium'})
    assert r.status_code == 201
    bob_id = r.get_json()['data']['id']

    r = client.post('/api/admin/users', headers=headers, json={
        'username': 'bob', 'password': 'x', 'email': 'bob2@example.com', 'fullName': 'Bob'})
    assert r.status_code == 409

    r = client.post('/api/admin/users', headers=headers, json={
        'username': 'carl', 'password': 'x', 'email': 'carl@example.com', 'fullName': 'Carl', 'role': 'root'})
    assert r.status_code == 400

    r = client.get('/api/admin/users?search=build', headers=headers)
    assert [u['username'] for u in r.get_json()['data']] == ['bob']

    r = client.put(f'/api/admin/users/{bob_id}', headers=headers, json={
        'username': 'bob', 'email': 'bob@example.com', 'fullName': 'Robert', 'role': 'admin'})
    assert r.status_code == 200
    assert r.get_json()['data']['role'] == 'admin'

    r = client.put(f'/api/admin/users/{bob_id}', headers=headers, json={
        'username': 'alice', 'email': 'bob@example.com', 'fullName': 'Robert'})
    assert r.status_code == 409

    r = client.get('/api/admin/stats', headers=headers)
    stats = r.get_json()['data']
    assert stats['totalUsers'] == 3
    assert stats['admins'] == 2
    assert stats['premiumUsers'] == 1
    assert stats['openTabs'] == 1

    assert client.delete(f'/api/admin/users/{bob_id}', headers=headers).status_code == 200
    assert client.delete(f'/api/admin/users/{bob_id}', headers=headers).status_code == 404

    with app.app_context():
        admin_id = User.query.filter_by(username='admin').first().id
    assert client.delete(f'/api/admin/users/{admin_id}', headers=headers).status_code == 400


def test_grammar_check_requires_login(client):
    r = client.post('/api/grammar/check', json={'text': 'Helo world'}, headers={'X-Tab-Id': 'tab_a'})
    assert r.status_code == 401


def test_grammar_check_uses_languagetool_and_caches(client, alice, login_as, monkeypatch):
    calls = []

    def fake_request(method, url, **kwargs):
        calls.append((method, url, kwargs.get('data')))
        return FakeResponse({'matches': [{'offset': 0, 'length': 4, 'message': 'Possible spelling mistake'}]})

    monkeypatch.setattr('gramcheck.grammar.services.requests.request', fake_request)
    login_as('alice', tab='tab_a')
    headers = {'X-Tab-Id': 'tab_a'}

    r = client.post('/api/grammar/check', json={'text': 'Helo world'}, headers=headers)
    assert r.status_code == 200
    assert len(r.get_json()['data']['matches']) == 1
    assert calls == [('POST', 'http://languagetool.test/v2/check', {'text': 'Helo world', 'language': 'auto'})]

    client.post('/api/grammar/check', json={'text': 'Helo world'}, headers=headers)
    assert len(calls) == 1

    r = client.post('/api/grammar/check', json={'text': '   '}, headers=headers)
    assert r.status_code == 400


def test_grammar_check_reports_languagetool_timeout(client, alice, login_as, monkeypatch):
    def fake_request(method, url, **kwargs):
        raise requests.exceptions.Timeout()

    monkeypatch.setattr('gramcheck.grammar.services.requests.request', fake_request)
    login_as('alice', tab='tab_a')
    r = client.post('/api/grammar/check', json={'text': 'Helo world'}, headers={'X-Tab-Id': 'tab_a'})
    assert r.status_code == 408
    assert 'timed out' in r.get_json()['error']


def test_grammar_health(client, monkeypatch):
    monkeypatch.setattr('gramcheck.grammar.services.requests.request',
                        lambda method, url, **kwargs: FakeResponse({'error': 'down'}, status_code=503))
    r = client.get('/api/grammar/health')
    assert r.status_code == 503
    assert r.get_json()['status'] == 'unavailable'

    monkeypatch.setattr('gramcheck.grammar.services.requests.request',
                        lambda method, url, **kwargs: FakeResponse([{'name': 'English', 'code': 'en'}]))
    r = client.get('/api/grammar/health')
    assert r.status_code == 200
    assert client.get('/api/grammar/languages').get_json()['data'][0]['code'] == 'en'

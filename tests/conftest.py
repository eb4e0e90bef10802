import pytest

from gramcheck import create_app
from gramcheck.config import TestConfig
from gramcheck.extensions import db
from gramcheck.models import User
from gramcheck.session import MemoryStore, Tab


class FakeClock:
    def __init__(self, now=1_700_000_000_000):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def store():
    """Persistent store shared by every tab of one browser profile."""
    return MemoryStore()


@pytest.fixture()
def open_tab(store, clock):
    tabs = []

    def _open(path='/'):
        tab = Tab(store, path=path, clock=clock)
        tabs.append(tab)
        return tab

    yield _open
    for tab in tabs:
        tab.close()


def user_record(user_id=42, username='alice', role='user'):
    return {
        'userId': user_id,
        'username': username,
        'userRole': role,
        'email': f'{username}@example.com',
        'phone': '',
        'fullName': username.title(),
    }


@pytest.fixture()
def app():
    return create_app(TestConfig)


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def make_user(app):
    def _make(username, password='secret123', role='user', status='active'):
        with app.app_context():
            user = User(username=username, email=f'{username}@example.com',
                        full_name=username.title(), role=role, status=status)
            user.set_password(password)
            db.session.add(user)
            db.session.commit()
            return user.id
    return _make


def login(client, username, password='secret123', tab='tab_a'):
    return client.post('/api/auth/login', json={'username': username, 'password': password},
                       headers={'X-Tab-Id': tab})


@pytest.fixture()
def record():
    """Factory for login data as the auth coordinator receives it."""
    return user_record


@pytest.fixture()
def login_as(client):
    def _login(username, password='secret123', tab='tab_a'):
        return login(client, username, password, tab)
    return _login

import time
import uuid
import jwt as pyjwt
import pytest
from config import config, TestingConfig
from clinic_api import create_app
from clinic_api.extensions import db
from clinic_api.models.user_models import User, PATIENT
from clinic_api.utils import email_util
from clinic_api.utils.email_util import mailer

@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()

@pytest.fixture
def make_app(monkeypatch):
    """Builds an app on TestingConfig with some settings overridden."""
    created = []

    def _make_app(**overrides):
        config_class = type('OverriddenTestingConfig', (TestingConfig,), overrides)
        monkeypatch.setitem(config, 'overridden-testing', config_class)
        app = create_app('overridden-testing')
        with app.app_context():
            db.create_all()
        created.append(app)
        return app

    yield _make_app
    mailer.shutdown()
    for app in created:
        with app.app_context():
            db.session.remove()
            db.drop_all()

@pytest.fixture
def client(app):
    return app.test_client()

@pytest.fixture
def make_user(app):
    def _make_user(username='alice', email='alice@example.com', password='Secret123!',
                   user_type=PATIENT, password_changed_at=None):
        with app.app_context():
            user = User(username=username, email=email, user_type=user_type)
            user.set_password(password)
            user.password_changed_at = password_changed_at
            db.session.add(user)
            db.session.commit()
            return user.id
    return _make_user

@pytest.fixture
def sent_emails(monkeypatch):
    sent = []

    def fake_send(recipient_email, username, reset_url):
        sent.append({'to': recipient_email, 'username': username, 'reset_url': reset_url})

    monkeypatch.setattr(email_util, 'send_password_reset_email', fake_send)
    return sent

def auth_header(token):
    return {'Authorization': f'Bearer {token}'}

def login(client, email='alice@example.com', password='Secret123!'):
    r = client.post('/api/auth/login', json={'email': email, 'password': password})
    assert r.status_code == 200, r.get_json()
    return r.get_json()['token']

def issue_token(app, user_id, issued_seconds_ago=0, lifetime_seconds=3600, secret=None, issued_at=None):
    """Encodes an access token by hand so tests can control `iat` and `exp`."""
    if issued_at is None:
        issued_at = int(time.time()) - issued_seconds_ago
    payload = {
        'fresh': False,
        'iat': issued_at,
        'jti': str(uuid.uuid4()),
        'type': 'access',
        'sub': str(user_id),
        'nbf': issued_at,
        'exp': issued_at + lifetime_seconds,
    }
    return pyjwt.encode(payload, secret or app.config['JWT_SECRET_KEY'], algorithm='HS256')

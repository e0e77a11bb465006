from datetime import timedelta
import pytest
from flask_jwt_extended import decode_token
from config import Config, TestingConfig
from clinic_api import create_app
from clinic_api.exceptions import ConfigurationError
from clinic_api.utils.token_util import create_send_token, sign_token

def test_sign_token_embeds_id_and_ninety_day_expiry(app):
    with app.app_context():
        claims = decode_token(sign_token(42))
    assert claims['sub'] == '42'
    assert claims['exp'] - claims['iat'] == int(timedelta(days=90).total_seconds())

def test_sign_token_requires_secret(app):
    with app.app_context():
        app.config['JWT_SECRET_KEY'] = None
        with pytest.raises(ConfigurationError):
            sign_token(1)

def test_create_send_token_builds_success_envelope(app):
    with app.test_request_context():
        response, status_code = create_send_token(7, 201)
        body = response.get_json()
        assert status_code == 201
        assert body['status'] == 'success'
        assert decode_token(body['token'])['sub'] == '7'

def test_app_refuses_to_start_without_jwt_secret(monkeypatch):
    monkeypatch.setattr(TestingConfig, 'JWT_SECRET_KEY', None)
    with pytest.raises(ConfigurationError):
        create_app('testing')

def test_production_password_hashing_cost():
    assert Config.BCRYPT_LOG_ROUNDS >= 12
    assert Config.JWT_ACCESS_TOKEN_EXPIRES == timedelta(days=90)
    assert Config.PASSWORD_RESET_EXPIRES == timedelta(hours=1)

def test_unknown_route_returns_json_404(client):
    r = client.get('/api/nope')
    assert r.status_code == 404
    assert r.get_json()['status'] == 'fail'

def test_health(client):
    assert client.get('/api/health').get_json() == {'status': 'ok'}

def test_server_errors_do_not_leak_configuration_detail(app, client, make_user):
    make_user()
    app.config['JWT_SECRET_KEY'] = None
    r = client.post('/api/auth/login', json={'email': 'alice@example.com', 'password': 'Secret123!'})
    assert r.status_code == 500
    assert r.get_json() == {'status': 'error', 'message': 'Internal server error'}
    assert 'JWT_SECRET_KEY' not in r.get_data(as_text=True)

# /clinic_api/utils/token_util.py
from flask import current_app, jsonify
from flask_jwt_extended import create_access_token
from clinic_api.exceptions import ConfigurationError

def sign_token(user_id) -> str:
    """
    Issues a signed session token for a user.

    The token carries the user id as its subject plus `iat` and `exp`
    claims; expiry comes from JWT_ACCESS_TOKEN_EXPIRES.
    """
    if not current_app.config.get('JWT_SECRET_KEY'):
        raise ConfigurationError('JWT_SECRET_KEY is not configured')
    return create_access_token(identity=str(user_id))

def create_send_token(user_id, status_code):
    """Builds the `{status, token}` response for a freshly authenticated user."""
    token = sign_token(user_id)
    return jsonify({'status': 'success', 'token': token}), status_code

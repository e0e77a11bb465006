from flask import request, jsonify, url_for, current_app, g
from sqlalchemy import or_
from clinic_api.extensions import db
from clinic_api.exceptions import Conflict, Unauthenticated, ValidationError
from clinic_api.models.user_models import User, PATIENT
from clinic_api.utils.email_util import mailer
from clinic_api.utils.token_util import create_send_token

def _get_json():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}

def _has_text(data, *fields):
    """True when every field is a non-blank string."""
    return all(isinstance(data.get(field), str) and data[field].strip() for field in fields)

def signup():
    """Creates a patient account and logs it in."""
    data = _get_json()

    if not _has_text(data, 'username', 'email', 'password', 'passwordConfirm'):
        raise ValidationError('Please provide username, email, password and passwordConfirm')

    if data['password'] != data['passwordConfirm']:
        raise ValidationError('Passwords do not match')

    username = data['username'].strip()
    email = data['email'].strip().lower()

    if User.query.filter(or_(User.username == username, User.email == email)).first():
        raise Conflict('Username or email already in use')

    # The role is never taken from the request body
    user = User(username=username, email=email, user_type=PATIENT)
    user.set_password(data['password'])

    db.session.add(user)
    db.session.commit()
    g.audit_user_id = user.id

    return create_send_token(user.id, 201)

def login():
    """Exchanges an email and password for a session token."""
    data = _get_json()
    if not _has_text(data, 'email', 'password'):
        raise ValidationError('Please provide email and password')

    user = User.query.filter_by(email=data['email'].strip().lower()).first()

    # Same answer, and the same bcrypt cost, for unknown email and wrong password
    if not user:
        User.check_dummy_password(data['password'])
        raise Unauthenticated('Incorrect email or password')
    if not user.check_password(data['password']):
        raise Unauthenticated('Incorrect email or password')

    g.audit_user_id = user.id
    return create_send_token(user.id, 200)

def forgot_password():
    """Issues a reset token and emails it to the account owner, if any."""
    data = _get_json()
    if not _has_text(data, 'email'):
        raise ValidationError('Please provide your email address')

    user = User.query.filter_by(email=data['email'].strip().lower()).first()

    if user:
        reset_token = user.create_password_reset_token()
        db.session.commit()
        g.audit_user_id = user.id

        reset_url = url_for('api.reset_password', token=reset_token, _external=True)
        mailer.dispatch(user.email, user.username, reset_url)
    else:
        current_app.logger.info("Password reset requested for an unknown email address")

    return jsonify({'status': 'success', 'message': 'Token sent to email!'}), 200

def reset_password(token):
    """Consumes a reset token and sets a new password."""
    data = _get_json()

    user = User.find_by_reset_token(token)
    if not user:
        raise ValidationError('Token is invalid or has expired')

    g.audit_user_id = user.id

    # The token is single use, even if the new password is rejected below.
    # A concurrent request that claimed it first leaves nothing to clear.
    if not User.claim_password_reset_token(user.id, token):
        db.session.rollback()
        raise ValidationError('Token is invalid or has expired')
    db.session.commit()

    if not _has_text(data, 'password', 'passwordConfirm'):
        raise ValidationError('Please provide password and passwordConfirm')
    if data['password'] != data['passwordConfirm']:
        raise ValidationError('Passwords do not match')

    user.set_password(data['password'])
    db.session.commit()

    return create_send_token(user.id, 200)

def update_password():
    """Changes the logged-in user's password after checking the current one."""
    user = g.current_user
    data = _get_json()

    current_password = data.get('currentPassword')
    new_password = data.get('newPassword')
    new_password_confirm = data.get('newPasswordConfirm')

    if not _has_text(data, 'currentPassword', 'newPassword', 'newPasswordConfirm'):
        raise ValidationError('Please provide currentPassword, newPassword and newPasswordConfirm')

    if not user.check_password(current_password):
        raise Unauthenticated('Your current password is wrong')

    if new_password != new_password_confirm:
        raise ValidationError('Passwords do not match')

    user.set_password(new_password)
    db.session.commit()

    return create_send_token(user.id, 200)

# /clinic_api/api/routes.py

from flask import jsonify
from . import api_bp
from clinic_api.extensions import limiter
from clinic_api.models.user_models import ADMIN
from clinic_api.utils.decorators import audit_log, protect, restrict_to
from .controllers import auth_controller, user_controller


# --- Authentication Endpoints ---
@api_bp.route('/auth/signup', methods=['POST'])
@limiter.limit("5 per hour")
@audit_log("USER_SIGNUP", "users")
def signup():
    return auth_controller.signup()

@api_bp.route('/auth/login', methods=['POST'])
@limiter.limit("10 per minute")
@audit_log("USER_LOGIN", "authentication")
def login():
    return auth_controller.login()

@api_bp.route('/auth/forgot-password', methods=['POST'])
@limiter.limit("5 per hour")
@audit_log("PASSWORD_FORGOT", "authentication")
def forgot_password():
    return auth_controller.forgot_password()

@api_bp.route('/auth/reset-password/<string:token>', methods=['PATCH'])
@limiter.limit("10 per hour")
@audit_log("PASSWORD_RESET", "authentication")
def reset_password(token):
    return auth_controller.reset_password(token)

@api_bp.route('/auth/update-password', methods=['PATCH'])
@protect
@audit_log("PASSWORD_CHANGE", "authentication")
def update_password():
    return auth_controller.update_password()


# --- User Endpoints ---
@api_bp.route('/users/me', methods=['GET'])
@protect
def get_current_user_route():
    return user_controller.get_current_user_details()

@api_bp.route('/users', methods=['GET'])
@protect
@restrict_to(ADMIN)
@audit_log("VIEW_ALL_USERS", "users")
def get_users_route():
    return user_controller.get_all_users()


@api_bp.route('/health', methods=['GET'])
def health():
    return jsonify({'status': 'ok'}), 200

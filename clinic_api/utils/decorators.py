from functools import wraps
from flask import request, current_app, make_response, g
from flask_jwt_extended import get_jwt, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException, NoAuthorizationError
from jwt.exceptions import PyJWTError
from sqlalchemy.exc import SQLAlchemyError
from clinic_api.extensions import db
from clinic_api.exceptions import AppError, Forbidden, Unauthenticated
from clinic_api.models.system_models import AuditLog
from clinic_api.models.user_models import User

def audit_log(action, resource):
    """Records authentication events in the audit table and audit log."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            ip_address = request.remote_addr
            user_agent = (request.headers.get('User-Agent') or '')[:255]

            try:
                raw_response = f(*args, **kwargs)
                response = make_response(raw_response)

                success = response.status_code < 400
                details = f"Request successful. Status: {response.status_code}"
                user_id = _audited_user_id()

                log_entry = AuditLog(
                    user_id=user_id,
                    action=action,
                    resource=resource,
                    ip_address=ip_address,
                    user_agent=user_agent,
                    success=success,
                    details=details
                )
                db.session.add(log_entry)
                db.session.commit()
                current_app.audit_logger.info(
                    f"Action='{action}', Resource='{resource}', UserID='{user_id}', Success='{success}', Details='{details}'"
                )

                return response

            except Exception as e:
                if isinstance(e, AppError):
                    details = f"Rejected. Status: {e.status_code} ({e.message})"
                else:
                    details = f"An error occurred: {str(e)}"
                user_id = _audited_user_id()
                try:
                    db.session.rollback()
                    db.session.add(AuditLog(
                        user_id=user_id,
                        action=action,
                        resource=resource,
                        ip_address=ip_address,
                        user_agent=user_agent,
                        success=False,
                        details=details
                    ))
                    db.session.commit()
                except SQLAlchemyError as db_error:
                    current_app.audit_logger.error(f"Failed to log audit entry due to DB error: {db_error}")
                    db.session.rollback()

                current_app.audit_logger.error(
                    f"Action='{action}', Resource='{resource}', UserID='{user_id}', Success='False', Details='{details}'"
                )

                raise

        return decorated_function
    return decorator

def _audited_user_id():
    """The authenticated user, or the account a public auth endpoint resolved."""
    current_user = g.get('current_user')
    if current_user is not None:
        return current_user.id
    return g.get('audit_user_id')

def protect(f):
    """
    Requires a valid bearer token and loads its user into `g.current_user`.

    Rejects the request with Unauthenticated when the header is missing,
    the token fails verification, the user no longer exists, or the
    password was changed after the token was issued.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth_header = request.headers.get('Authorization', '')
        if not auth_header.startswith('Bearer ') or not auth_header[7:].strip():
            raise Unauthenticated('You are not logged in! Please log in to get access')

        try:
            verify_jwt_in_request()
        except NoAuthorizationError:
            raise Unauthenticated('You are not logged in! Please log in to get access')
        except (JWTExtendedException, PyJWTError):
            raise Unauthenticated('Invalid or expired token. Please log in again')

        claims = get_jwt()
        try:
            user_id = int(claims['sub'])
            issued_at = int(claims['iat'])
        except (KeyError, TypeError, ValueError):
            raise Unauthenticated('Invalid or expired token. Please log in again')

        current_user = db.session.get(User, user_id)
        if not current_user:
            raise Unauthenticated('The user belonging to this token no longer exists')

        if current_user.changed_password_after(issued_at):
            raise Unauthenticated('User recently changed password. Please log in again')

        g.current_user = current_user
        return f(*args, **kwargs)
    return decorated_function

def is_role_allowed(role, allowed_roles) -> bool:
    return role in allowed_roles

def restrict_to(*roles):
    """Allows only users whose `user_type` is one of `roles`. Stack below `protect`."""
    allowed_roles = frozenset(roles)

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            current_user = g.get('current_user')
            if current_user is None:
                raise Unauthenticated('You are not logged in! Please log in to get access')

            if not is_role_allowed(current_user.user_type, allowed_roles):
                raise Forbidden('You do not have permission to perform this action')

            return f(*args, **kwargs)
        return decorated_function
    return decorator

# /clinic_api/utils/error_handlers.py
from flask import jsonify, current_app
from clinic_api.extensions import db
from clinic_api.exceptions import AppError

def register_error_handlers(app):
    @app.errorhandler(AppError)
    def handle_app_error(error):
        if error.status_code >= 500:
            # Server-side detail goes to the log, never to the client
            current_app.logger.error(f"{type(error).__name__}: {error.message}")
            return jsonify({'status': 'error', 'message': 'Internal server error'}), error.status_code
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'status': 'fail', 'message': 'Resource not found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({'status': 'fail', 'message': 'Method not allowed'}), 405

    @app.errorhandler(429)
    def rate_limited(error):
        return jsonify({'status': 'fail', 'message': 'Too many requests. Please try again later'}), 429

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        current_app.audit_logger.error(f"Internal server error: {str(error)}")
        return jsonify({'status': 'error', 'message': 'Internal server error'}), 500

import os
from flask import Flask
from clinic_api.extensions import db, bcrypt, jwt, limiter, cors
from clinic_api.exceptions import ConfigurationError
from clinic_api.utils.email_util import mailer
from clinic_api.utils.error_handlers import register_error_handlers
from clinic_api.commands import register_commands
from config import config

def create_app(config_name=None):
    config_name = config_name or os.getenv('FLASK_CONFIG', 'default')
    config_class = config[config_name]

    app = Flask(__name__)
    app.config.from_object(config_class)

    if not app.config.get('JWT_SECRET_KEY'):
        raise ConfigurationError('JWT_SECRET_KEY must be set to sign session tokens')

    # Initialize extensions
    db.init_app(app)
    bcrypt.init_app(app)
    jwt.init_app(app)
    limiter.init_app(app)
    cors.init_app(
        app,
        origins=app.config['ALLOWED_ORIGINS'],
        allow_headers=['Content-Type', 'Authorization'],
        methods=['GET', 'POST', 'PATCH', 'PUT', 'DELETE', 'OPTIONS']
    )

    # Initialize custom utilities
    mailer.init_app(app)

    # Initialize app with config
    config_class.init_app(app)

    # Register blueprints
    from clinic_api.api import api_bp
    app.register_blueprint(api_bp, url_prefix='/api')

    # Make sure every model is registered before create_all
    from clinic_api import models  # noqa: F401

    # Register error handlers and commands
    register_error_handlers(app)
    register_commands(app)

    return app

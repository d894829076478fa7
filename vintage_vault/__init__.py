import logging
import os
import time

import click
import sentry_sdk
from flask import Flask, request
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_login import LoginManager
from flask_socketio import SocketIO
from flask_sqlalchemy import SQLAlchemy
from flask_talisman import Talisman

from config.config import config

# SQLAlchemy - database interface
db = SQLAlchemy()
login_manager = LoginManager()
socketio = SocketIO(cors_allowed_origins="*")
limiter = Limiter(key_func=get_remote_address)


def create_app(config_name: str = 'default') -> Flask:
    app = Flask(__name__)
    app.config.from_object(config[config_name])

    if app.config.get('SENTRY_DSN'):
        def before_send(event, hint):
            """Filter out Engine.IO stale session noise before sending to Sentry"""
            for exception in event.get('exception', {}).get('values', []):
                if 'Invalid session' in exception.get('value', ''):
                    return None
            if 'Invalid session' in event.get('logentry', {}).get('message', ''):
                return None
            return event

        sentry_sdk.init(
            dsn=app.config['SENTRY_DSN'],
            send_default_pii=False,
            traces_sample_rate=float(os.environ.get('SENTRY_TRACES_SAMPLE_RATE', '0.1')),
            environment=os.environ.get('FLASK_ENV', config_name),
            before_send=before_send,
        )

    # Handle HTTPS proxy headers (for production behind reverse proxy)
    from werkzeug.middleware.proxy_fix import ProxyFix
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)

    db.init_app(app)
    if app.config.get('USE_DIRECT_POSTGRES', False):
        app.logger.info("Using direct PostgreSQL connection via SQLAlchemy")
    else:
        app.logger.info("Using SQLAlchemy database")

    _init_login(app)

    socketio.init_app(
        app,
        async_mode='threading',
        ping_timeout=120,
        ping_interval=25,
        logger=False,
        engineio_logger=False
    )
    logging.getLogger('socketio').setLevel(logging.ERROR)
    logging.getLogger('engineio').setLevel(logging.ERROR)

    limiter.init_app(app)

    Talisman(
        app,
        force_https=app.config.get('FORCE_HTTPS', False),
        strict_transport_security=True,
        strict_transport_security_max_age=31536000,  # 1 year
        content_security_policy={'default-src': "'self'"},
        referrer_policy='strict-origin-when-cross-origin',
        feature_policy={
            'camera': "'none'",
            'microphone': "'none'",
            'geolocation': "'none'"
        }
    )

    from vintage_vault.utils.error_handlers import api_error_response

    @app.errorhandler(429)
    def ratelimit_handler(e):
        return api_error_response(
            f"Too many requests, limit is {e.description}", 429, 'RATE_LIMITED')

    from vintage_vault.services.moderation_orchestrator import ContentModerator
    ContentModerator(app, socketio)

    from vintage_vault.routes.forum import forum_bp
    from vintage_vault.routes.moderation import moderation_bp
    from vintage_vault.routes.monitoring import monitoring_bp
    from vintage_vault.routes import websocket  # noqa: F401 registers Socket.IO handlers

    app.register_blueprint(moderation_bp, url_prefix='/api/moderation')
    app.register_blueprint(forum_bp, url_prefix='/api/forum')
    app.register_blueprint(monitoring_bp)

    _register_commands(app)

    # Database initialization with retry logic (only in main process, not reloader)
    if not os.environ.get('WERKZEUG_RUN_MAIN'):
        with app.app_context():
            _initialize_database_with_retry(app)

    return app


def _init_login(app: Flask) -> None:
    """Identity comes from bearer tokens signed by the auth service"""
    from vintage_vault.models.user import User
    from vintage_vault.services.database_service import db_service
    from vintage_vault.utils.auth import bearer_token
    from vintage_vault.utils.error_handlers import api_error_response

    login_manager.init_app(app)

    @login_manager.user_loader
    def load_user(user_id):
        return db_service.get_user_by_id(user_id)

    @login_manager.request_loader
    def load_user_from_request(req):
        token = bearer_token(req)
        if not token:
            return None
        user_id = User.user_id_from_token(token)
        if not user_id:
            return None
        user = db_service.get_user_by_id(user_id)
        if user is None or not user.is_active:
            return None
        return user

    @login_manager.unauthorized_handler
    def unauthorized():
        app.logger.info(f"Unauthenticated request to {request.path}")
        return api_error_response('Authentication required', 401, 'AUTH_REQUIRED')


def _register_commands(app: Flask) -> None:
    @app.cli.command('seed-moderation')
    def seed_moderation_command():
        """Insert the default moderation rules and settings if none exist."""
        from config.default_rules import seed_moderation_data
        from vintage_vault.services.database_service import db_service

        db.create_all()
        created = seed_moderation_data(db_service)
        if created:
            click.echo(f"Seeded {created} moderation rules")
        else:
            click.echo("Moderation rules already present, nothing seeded")


def _initialize_database_with_retry(app: Flask, max_retries: int = 3, delay: int = 5) -> None:
    """Initialize database with retry logic for connection pool issues"""
    logger = logging.getLogger(__name__)
    for attempt in range(max_retries):
        try:
            logger.info(f"Attempting database initialization (attempt {attempt + 1}/{max_retries})")
            db.create_all()
            _seed_moderation(app)
            _create_default_admin(app)
            logger.info("Database initialization successful")
            return
        except Exception as e:
            db.session.rollback()
            logger.warning(f"Database initialization failed on attempt {attempt + 1}: {e}")
            if attempt < max_retries - 1:
                logger.info(f"Retrying in {delay} seconds...")
                time.sleep(delay)
                delay *= 2  # Exponential backoff
            else:
                # Allow the app to start without DB init
                logger.error("Database initialization failed after all retries")


def _seed_moderation(app: Flask) -> None:
    if not app.config.get('SEED_MODERATION_DATA'):
        return

    from config.default_rules import seed_moderation_data
    from vintage_vault.services.database_service import db_service

    created = seed_moderation_data(db_service)
    if created:
        logging.getLogger(__name__).info(f"Seeded {created} default moderation rules")


def _create_default_admin(app: Flask) -> None:
    """Create default admin user"""
    logger = logging.getLogger(__name__)
    admin_email = app.config.get('ADMIN_EMAIL')
    if not admin_email:
        return

    from vintage_vault.services.database_service import db_service

    if db_service.get_user_by_email(admin_email):
        return

    db_service.create_user(
        name='admin',
        email=admin_email,
        password=app.config.get('ADMIN_PASSWORD'),
        is_admin=True
    )
    logger.info(f"Created default admin user: {admin_email}")

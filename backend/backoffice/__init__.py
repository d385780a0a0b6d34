from flask import Flask, current_app
from werkzeug.exceptions import HTTPException
from flask_jwt_extended import JWTManager
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlalchemy.orm import sessionmaker, scoped_session
from dotenv import load_dotenv
from datetime import timedelta
from typing import Optional, Dict, Any
import os

load_dotenv()

db_engine = None
SessionLocal = None
jwt = JWTManager()

CATALOG_EXTENSION = 'permission_catalog'


def _default_config() -> Dict[str, Any]:
    return {
        'JWT_SECRET_KEY': os.getenv('JWT_SECRET_KEY', 'dev-secret'),
        'JWT_ACCESS_TOKEN_EXPIRES': timedelta(hours=int(os.getenv('JWT_ACCESS_TOKEN_EXPIRES_HOURS', '24'))),
        'DATABASE_URL': os.getenv('DATABASE_URL', 'sqlite:///dev.db'),
        'LOG_LEVEL': os.getenv('LOG_LEVEL', 'INFO'),
        # module -> menu -> descriptors; None means constants.permissions.PERMISSIONS_MASTER
        'PERMISSION_CATALOG_SOURCE': None,
    }


def _init_catalog(app: Flask):
    """Build and validate the catalog; a CatalogIntegrityError stops the app from being created."""
    from .services.catalog import build_catalog, get_catalog, count_permissions
    source = app.config['PERMISSION_CATALOG_SOURCE']
    catalog = build_catalog(source) if source is not None else get_catalog()
    app.extensions[CATALOG_EXTENSION] = catalog
    app.logger.info('Permission catalog loaded: %d permissions defined', count_permissions(catalog))


def _init_db(app: Flask):
    global db_engine, SessionLocal
    db_url = app.config['DATABASE_URL']
    if db_url.endswith(':memory:'):
        # One shared in-memory SQLite database across all sessions
        db_engine = create_engine(
            db_url,
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        db_engine = create_engine(db_url, future=True)
    SessionLocal = scoped_session(sessionmaker(bind=db_engine, expire_on_commit=False, autoflush=False))


def _register_error_handlers(app: Flask):
    @app.errorhandler(Exception)
    def handle_errors(e):  # type: ignore
        if isinstance(e, HTTPException):
            return {'error': {'status': e.code, 'title': e.name, 'detail': e.description}}, e.code
        # Includes MalformedPermissionCode raised by a route: a bug, never a denial
        app.logger.exception('Unhandled exception on %s', e.__class__.__name__)
        if SessionLocal is not None:
            SessionLocal.rollback()
        return {'error': {'status': 500, 'title': 'Internal Server Error', 'detail': 'Unexpected error'}}, 500


def create_app(config: Optional[Dict[str, Any]] = None):
    app = Flask(__name__)
    app.config.update(_default_config())
    if config:
        # allow tests or callers to override default config values
        app.config.update(config)
    app.logger.setLevel(app.config['LOG_LEVEL'])

    _init_catalog(app)
    _init_db(app)
    jwt.init_app(app)

    from .routes.iam import iam_bp
    app.register_blueprint(iam_bp, url_prefix='/iam')

    @app.route('/healthz')
    def health():
        from .services.catalog import count_permissions
        return {'status': 'ok', 'permissions': count_permissions(get_permission_catalog())}

    _register_error_handlers(app)
    return app


def get_db():
    return SessionLocal()


def get_permission_catalog():
    return current_app.extensions[CATALOG_EXTENSION]

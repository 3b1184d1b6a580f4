"""
Tenant Admin API - Flask Application Factory

Builds the Flask application with OpenAPI 3.0 support, wires repositories and
use cases for the configured storage backend, and registers the middleware and
routes of the multi-tenant administration backend.
"""

import os
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from flask import jsonify
from flask_openapi3 import OpenAPI, Info, Tag

from . import __version__
from .container import build_repositories, build_use_cases
from .middleware.error_handler import ErrorHandlerMiddleware
from .observability.config import setup_observability
from .observability.middleware import add_observability_middleware
from .services.hal import create_hal_formatter
from .services.identity import BCRYPT_ROUNDS
from .services.mongodb import MongoDBService

logger = logging.getLogger(__name__)

info = Info(
    title="Tenant Admin API",
    version=__version__,
    description="Multi-tenant business data administration API with HAL responses"
)

tags = [
    Tag(name="Persons", description="Tenant-scoped persons, contacts and fiscal addresses"),
    Tag(name="Configurations", description="Tenant configuration types and their values"),
    Tag(name="Authentication", description="Login, sessions and password management"),
    Tag(name="Security", description="Security alerts and metrics (admin only)"),
    Tag(name="Settings", description="Per-user preferences"),
    Tag(name="Users", description="Platform user management"),
    Tag(name="Health", description="System health and status")
]


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == 'true'


def load_config(overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Read configuration from the environment; ``overrides`` win."""
    environment = os.getenv('ENVIRONMENT', 'development')
    config = {
        'ENVIRONMENT': environment,
        'DEBUG': environment == 'development',
        'DOCS_ENABLED': _flag('DOCS_ENABLED', 'true'),
        'OTEL_ENABLED': _flag('OTEL_ENABLED', 'true'),
        'SERVICE_VERSION': os.getenv('SERVICE_VERSION', __version__),

        # Storage
        'STORAGE_BACKEND': os.getenv('STORAGE_BACKEND', 'memory'),
        'MONGODB_URI': os.getenv('MONGODB_URI', 'mongodb://localhost:27017/tenant_admin_dev'),
        'MONGODB_DATABASE': os.getenv('MONGODB_DATABASE', 'tenant_admin_dev'),
        'MONGODB_CREATE_INDEXES': _flag('MONGODB_CREATE_INDEXES', 'true'),

        # API
        'BASE_URL': os.getenv('BASE_URL', 'http://localhost:5000'),

        # Sessions and credentials
        'SESSION_TTL_HOURS': int(os.getenv('SESSION_TTL_HOURS', '24')),
        'REMEMBER_ME_TTL_DAYS': int(os.getenv('REMEMBER_ME_TTL_DAYS', '30')),
        'BCRYPT_ROUNDS': int(os.getenv('BCRYPT_ROUNDS', str(BCRYPT_ROUNDS)))
    }
    if overrides:
        config.update(overrides)
    if 'DEBUG' not in (overrides or {}):
        config['DEBUG'] = config['ENVIRONMENT'] == 'development'
    return config


def create_app(config: Optional[Dict[str, Any]] = None, repositories=None) -> OpenAPI:
    """
    Create and configure the Flask application.

    Args:
        config: Configuration overrides applied on top of the environment
        repositories: Prebuilt repository set; built from ``STORAGE_BACKEND`` when omitted
    """
    settings = load_config(config)
    setup_observability(settings['ENVIRONMENT'], settings['OTEL_ENABLED'])

    app = OpenAPI(
        __name__,
        info=info,
        tags=tags,
        doc_ui=settings['DOCS_ENABLED'],
        validation_error_status=400
    )
    app.config.update(settings)

    add_observability_middleware(app)

    mongodb_service = None
    if repositories is None:
        if app.config['STORAGE_BACKEND'] == 'mongodb':
            mongodb_service = MongoDBService(app.config['MONGODB_URI'], app.config['MONGODB_DATABASE'])
            if app.config['MONGODB_CREATE_INDEXES']:
                mongodb_service.create_indexes()
        repositories = build_repositories(app.config['STORAGE_BACKEND'], mongodb_service)

    hal_formatter = create_hal_formatter(app.config['BASE_URL'])
    ErrorHandlerMiddleware(app, hal_formatter)

    # Make services available to routes
    app.repositories = repositories
    app.mongodb_service = mongodb_service
    app.hal_formatter = hal_formatter
    app.use_cases = build_use_cases(
        repositories,
        session_ttl=timedelta(hours=app.config['SESSION_TTL_HOURS']),
        remember_me_ttl=timedelta(days=app.config['REMEMBER_ME_TTL_DAYS']),
        bcrypt_rounds=app.config['BCRYPT_ROUNDS']
    )

    from .routes.auth import auth_bp
    from .routes.configurations import configurations_bp
    from .routes.persons import persons_bp
    from .routes.security import security_bp
    from .routes.settings import settings_bp
    from .routes.users import users_bp

    app.register_api(persons_bp)
    app.register_api(configurations_bp)
    app.register_api(auth_bp)
    app.register_api(security_bp)
    app.register_api(settings_bp)
    app.register_api(users_bp)

    health_tag = Tag(name="Health", description="System health and status")

    @app.get('/api/healthz', tags=[health_tag])
    def health_check():
        """Health check with storage backend status."""
        storage = {'backend': app.config['STORAGE_BACKEND'], 'status': 'healthy'}
        if app.mongodb_service is not None:
            storage.update(app.mongodb_service.health_check())

        status = 'healthy' if storage['status'] == 'healthy' else 'unhealthy'
        health_data = {
            'status': status,
            'service': 'tenant-admin-api',
            'version': app.config['SERVICE_VERSION'],
            'environment': app.config['ENVIRONMENT'],
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'dependencies': {'storage': storage}
        }
        body = app.hal_formatter.format_resource(health_data, "/api/healthz")
        return jsonify(body), 200 if status == 'healthy' else 503

    logger.info(
        f"Tenant Admin API initialized (environment={app.config['ENVIRONMENT']}, "
        f"storage={app.config['STORAGE_BACKEND']})"
    )
    return app

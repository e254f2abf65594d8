# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
CityBeatFlow API - Flask Application Factory

Builds the Flask application with OpenAPI 3.0 support, wires the record
store, notification dispatcher and domain services, and registers the
HTTP routes.
"""

import os
import atexit
import logging
from datetime import datetime
from typing import Optional

from flask import jsonify, send_from_directory
from flask_openapi3 import OpenAPI, Info

from config import AppConfig
from observability.config import setup_observability
from observability.middleware import add_observability_middleware
from middleware.cors import configure_cors
from middleware.error_handler import register_error_handlers
from services.mongodb import MongoDBService
from services.auth import AuthService
from services.notifications import NotificationDispatcher, ReporterNotifier, create_mail_transport
from services.storage import AttachmentStorage
from services.issues import IssueLifecycleService
from services.claims import ClaimCoordinator
from services.escalation import EscalationScanner
from services.community import EventService, NgoDirectory, ProfileService
from services.health import HealthCheckService, SERVICE_NAME, SERVICE_VERSION

logger = logging.getLogger(__name__)

# Multipart uploads larger than this are rejected with 413
MAX_UPLOAD_BYTES = 10 * 1024 * 1024

info = Info(
    title="CityBeatFlow API",
    version=SERVICE_VERSION,
    description="Civic issue reporting with NGO claims, community events and reporter notifications"
)


def create_app(config: Optional[AppConfig] = None,
               mongodb_service: Optional[MongoDBService] = None,
               mail_transport=None) -> OpenAPI:
    """
    Create and configure the application.

    Args:
        config: Settings; read from the environment when omitted
        mongodb_service: Record store; built from ``config`` when omitted
        mail_transport: Email transport; built from ``config.mail`` when omitted

    Returns:
        Configured OpenAPI (Flask) application
    """
    config = config or AppConfig.from_env()

    setup_observability(config)

    app = OpenAPI(__name__, info=info)
    app.config['ENVIRONMENT'] = config.environment
    app.config['DEBUG'] = config.debug
    app.config['MAX_CONTENT_LENGTH'] = MAX_UPLOAD_BYTES

    add_observability_middleware(app, instrument=config.otel_enabled)

    # Record store
    if mongodb_service is None:
        mongodb_service = MongoDBService(config.mongodb_uri, config.mongodb_db)
    try:
        mongodb_service.create_indexes()
    except Exception as e:
        logger.error(f"Index creation failed: {str(e)}")

    # Reporter notifications
    transport = mail_transport or create_mail_transport(app, config.mail)
    dispatcher = NotificationDispatcher(transport, max_queue_size=config.notify_queue_size)
    # Send whatever is still queued when the interpreter exits
    atexit.register(dispatcher.shutdown)
    notifier = ReporterNotifier(mongodb_service, dispatcher)

    upload_dir = os.path.abspath(config.upload_dir)
    storage = AttachmentStorage(upload_dir)

    # Make services available to routes
    app.config_obj = config
    app.mongodb_service = mongodb_service
    app.dispatcher = dispatcher
    app.auth_service = AuthService(
        mongodb_service,
        config.jwt_secret,
        expires_days=config.jwt_expires_days,
        ngo_passcode=config.ngo_passcode,
        admin_passcode=config.admin_passcode,
        bcrypt_rounds=config.bcrypt_rounds
    )
    app.issue_service = IssueLifecycleService(mongodb_service, notifier, storage)
    app.claim_coordinator = ClaimCoordinator(mongodb_service, notifier)
    app.escalation_scanner = EscalationScanner(mongodb_service, config.escalation_days)
    app.event_service = EventService(mongodb_service)
    app.ngo_directory = NgoDirectory(mongodb_service)
    app.profile_service = ProfileService(mongodb_service)
    app.health_service = HealthCheckService(mongodb_service, dispatcher, config.environment)

    register_error_handlers(app)
    configure_cors(app, allowed_origins=config.cors_allowed_origins)

    from routes.auth import auth_bp
    from routes.ngo import ngo_bp
    from routes.issues import issues_bp, stats_bp
    from routes.events import events_bp
    from routes.ngos import ngos_bp
    from routes.profile import profile_bp

    app.register_api(auth_bp)
    app.register_api(ngo_bp)
    app.register_api(issues_bp)
    app.register_api(stats_bp)
    app.register_api(events_bp)
    app.register_api(ngos_bp)
    app.register_api(profile_bp)

    @app.route('/api/healthz')
    @app.route('/health')
    def health_check():
        """Health check with dependency monitoring; 503 when unhealthy."""
        try:
            health_data = app.health_service.get_comprehensive_health()
        except Exception as e:
            logger.error(f"Health check failed: {str(e)}")
            return jsonify({
                "status": "unhealthy",
                "service": SERVICE_NAME,
                "version": SERVICE_VERSION,
                "environment": config.environment,
                "timestamp": datetime.utcnow().isoformat() + "Z",
                "error": f"Health check service failed: {str(e)}"
            }), 503

        status_code = 503 if health_data["status"] == "unhealthy" else 200
        return jsonify(health_data), status_code

    @app.route('/uploads/<path:filename>')
    def serve_upload(filename):
        return send_from_directory(upload_dir, filename)

    logger.info(
        "Application created",
        extra={"environment": config.environment, "mail_enabled": dispatcher.enabled}
    )
    return app

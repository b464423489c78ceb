# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from flask import Flask, send_from_directory
from flask_cors import CORS
from werkzeug.middleware.proxy_fix import ProxyFix

from userhub.container import Container
from userhub.interfaces.http.responses import api_response
from userhub.shared.config import AppConfig, load_config
from userhub.shared.logging import logger, setup_logging
from userhub.shared.middleware.error_handler import configure_error_handling
from userhub.shared.middleware.rate_limit import init_rate_limiting
from userhub.shared.middleware.request_logger import configure_request_logging

MAX_UPLOAD_BYTES = 10 * 1024 * 1024


def create_app(config: AppConfig | None = None) -> Flask:
    config = config or load_config()
    setup_logging(config.log_level, debug_mode=config.debug_logging, log_file=config.log_file)
    config.ensure_directories()

    container = Container(config)
    container.database.init_db()

    app = Flask(__name__)
    app.config.update(
        SECRET_KEY=config.secret_key,
        MAX_CONTENT_LENGTH=MAX_UPLOAD_BYTES,
        RATE_LIMIT_ENABLED=config.security.enable_rate_limit,
    )
    app.extensions["userhub.container"] = container

    if config.security.trusted_proxy_count:
        hops = config.security.trusted_proxy_count
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=hops, x_proto=hops)  # type: ignore[method-assign]

    init_rate_limiting(app)

    configure_error_handling(app, debug_mode=config.debug_logging)
    configure_request_logging(app, debug_mode=config.debug_logging)

    cors_kwargs: dict[str, object] = {
        "resources": {r"/api/*": {"origins": config.security.allowed_origins}}
    }
    if any(o != "*" for o in config.security.allowed_origins):
        cors_kwargs["supports_credentials"] = True
    CORS(app, **cors_kwargs)

    app.register_blueprint(container.users_controller.as_blueprint())

    if config.media.backend == "local" and config.media.media_base_url.startswith("/"):
        media_root = config.media.media_root.resolve()
        media_prefix = config.media.media_base_url.rstrip("/") or "/media"

        @app.get(f"{media_prefix}/<path:name>")
        def _media(name: str):
            return send_from_directory(media_root, name)

    @app.get("/api/v1/healthcheck")
    def _healthcheck():
        return api_response(HTTPStatus.OK, {"status": "ok"}, "OK")

    @app.after_request
    def _add_security_headers(resp):
        resp.headers.setdefault("X-Frame-Options", "DENY")

        resp.headers.setdefault("Referrer-Policy", "no-referrer")

        resp.headers.setdefault("X-Content-Type-Options", "nosniff")

        resp.headers.setdefault("Cross-Origin-Opener-Policy", "same-origin")

        if config.security.enable_hsts:
            resp.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains; preload",
            )

        return resp

    @app.teardown_appcontext
    def _remove_db_session(_exc):
        container.database.SessionLocal.remove()

    logger.info(f"Flask app initialized env={config.app_env} media={config.media.backend}")
    return app


def get_container(app: Flask) -> Container:
    return app.extensions["userhub.container"]


__all__ = ["create_app", "get_container"]

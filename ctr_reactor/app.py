# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

import importlib
from typing import Any, Protocol, cast

import click
from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from ctr_reactor.domain.users.repositories import AuthStore
from ctr_reactor.infrastructure.admin import install_admin_filter
from ctr_reactor.infrastructure.container import Container
from ctr_reactor.shared.config import AppConfig, load_config
from ctr_reactor.shared.logging import logger, setup_logging
from ctr_reactor.shared.middleware.error_handler import configure_error_handling
from ctr_reactor.shared.middleware.rate_limit import RATE_LIMIT_ENABLED_KEY
from ctr_reactor.shared.middleware.request_logger import configure_request_logging

EXTENSION_KEY = "ctr_reactor"


class _CORSCallable(Protocol):
    def __call__(self, app: Flask, **kwargs: Any) -> Any: ...


_flask_cors = importlib.import_module("flask_cors")
CORS = cast(_CORSCallable, _flask_cors.CORS)


def get_container(app: Flask) -> Container:
    return cast(Container, app.extensions[EXTENSION_KEY])


def _register_cli(app: Flask) -> None:
    @app.cli.command("purge-sessions")
    def purge_sessions_command() -> None:
        """Delete every session whose expiry has passed."""
        removed = get_container(app).purge_sessions_use_case.execute()
        click.echo(f"removed {removed} expired sessions")


def create_app(config: AppConfig | None = None, *, store: AuthStore | None = None) -> Flask:
    config = config or load_config()
    setup_logging(config.log_level, log_file=config.log_file)

    container = Container(config, store=store)
    # resolve the backend up front so a dead store fails startup, not the first request
    auth_store = container.auth_store

    app = Flask(__name__)
    hops = config.security.trusted_proxy_hops
    if hops:
        app.wsgi_app = ProxyFix(  # type: ignore[method-assign]
            app.wsgi_app, x_for=hops, x_proto=hops, x_host=hops
        )
    configure_error_handling(app, debug_mode=config.debug_logging)
    configure_request_logging(app, debug_mode=config.debug_logging)

    app.config.update(
        SECRET_KEY=config.secret_key,
        SESSION_COOKIE_SECURE=config.cookie_secure,
        SESSION_COOKIE_SAMESITE=config.security.cookie_samesite,
    )
    app.config[RATE_LIMIT_ENABLED_KEY] = config.security.enable_rate_limit
    app.extensions[EXTENSION_KEY] = container

    cors_kwargs: dict[str, object] = {
        "resources": {r"/api/*": {"origins": list(config.security.origins)}}
    }
    if any(o != "*" for o in config.security.origins):
        cors_kwargs["supports_credentials"] = True
    CORS(app, **cors_kwargs)

    install_admin_filter(app, container.admin_gate)

    app.register_blueprint(container.misc_controller.as_blueprint())
    app.register_blueprint(container.auth_controller.as_blueprint())
    app.register_blueprint(container.secure_controller.as_blueprint())

    _register_cli(app)

    @app.after_request
    def _add_security_headers(resp):
        resp.headers.setdefault("X-Frame-Options", "DENY")
        resp.headers.setdefault("Referrer-Policy", "no-referrer")
        resp.headers.setdefault("X-Content-Type-Options", "nosniff")
        resp.headers.setdefault("Cross-Origin-Resource-Policy", "same-origin")
        resp.headers.setdefault("Cross-Origin-Opener-Policy", "same-origin")
        resp.headers.setdefault(
            "Permissions-Policy",
            "geolocation=(), microphone=(), camera=(), payment=(), usb=()",
        )

        if config.security.enable_hsts:
            resp.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains",
            )

        return resp

    logger.info(f"Flask app initialized (env={config.app_env}, backend={auth_store.name})")
    return app


def main() -> None:
    create_app().run(host="0.0.0.0", port=5000, debug=False)


if __name__ == "__main__":
    main()

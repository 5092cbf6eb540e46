from __future__ import annotations

from flask import Flask

from tokenpaint.host import Host


def create_app(host: Host, config: dict | None = None) -> Flask:
    """Create and configure the Flask app around an initialized host."""
    app = Flask(__name__)
    app.config.update(config or {})

    app.extensions["host"] = host

    # Register blueprints
    from tokenpaint.web.routes.preview import preview_bp
    from tokenpaint.web.routes.session import session_bp

    app.register_blueprint(session_bp)
    app.register_blueprint(preview_bp)

    return app

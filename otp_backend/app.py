"""
FLASK APP ENTRY POINT - OTP BACKEND SERVER
==========================================

Builds the Flask app that serves OTP codes as JSON for a front-end view.

- create_app() factory, configured from otp_backend.config
- CORS enabled so a front end on another origin can call the API
- /api routes registered from otp_backend.routes
"""

import logging
from typing import Optional, Union

from flask import Flask
from flask_cors import CORS

from .config import Config
from .routes import otp_bp

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(app: Flask) -> None:
    """Attach one stream handler to the otp_* loggers at the configured level."""
    level = logging.getLevelName(str(app.config.get("LOG_LEVEL", "INFO")).upper())
    if not isinstance(level, int):
        level = logging.INFO
    for name in ("otp_engine", "otp_backend"):
        log = logging.getLogger(name)
        log.setLevel(level)
        if not any(getattr(h, "_otp_handler", False) for h in log.handlers):
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            handler._otp_handler = True
            log.addHandler(handler)
    app.logger.setLevel(level)


def create_app(config: Optional[Union[type, dict]] = None) -> Flask:
    app = Flask(__name__)
    app.config.from_object(Config)
    if isinstance(config, dict):
        app.config.update(config)
    elif config is not None:
        app.config.from_object(config)

    configure_logging(app)

    # Allow a front end served from another domain/port to call the API
    CORS(app, resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}})

    app.register_blueprint(otp_bp)
    app.logger.info("OTP backend ready (digits=%s, period=%s, algorithm=%s)",
                    app.config["OTP_DEFAULT_DIGITS"], app.config["OTP_DEFAULT_PERIOD"],
                    app.config["OTP_DEFAULT_ALGORITHM"])
    return app


if __name__ == "__main__":
    create_app().run(debug=True, host="0.0.0.0", port=5000)

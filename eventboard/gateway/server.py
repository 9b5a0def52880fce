"""
API gateway: combines users, organizations, and events blueprints.
This is the local entrypoint for development.
"""

import logging
import os
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from flask import Flask, jsonify
from flask_cors import CORS

from eventboard.database.init_db import init_db
from eventboard.database.json_store import DATA_DIR, JsonFileStore

load_dotenv()

# Basic console logging during API requests
logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(asctime)s - %(message)s")

DEFAULT_CORS_ORIGINS = [
    "http://localhost:5500",  # Local development (some editors)
    "http://localhost:5050",  # Local development gateway (if served from same host)
    "http://localhost:8080",  # Local static server
]


def env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_config() -> Dict[str, Any]:
    """
    Read gateway settings from the environment.

    Returns:
        dict: Values for app.config.
    """
    origins = os.getenv("CORS_ORIGINS")
    return {
        "DATA_DIR": DATA_DIR,
        "CORS_ORIGINS": [o.strip() for o in origins.split(",") if o.strip()] if origins else DEFAULT_CORS_ORIGINS,
        "OMIT_PRIVATE_EVENTS_FOR_ANONYMOUS": env_flag("OMIT_PRIVATE_EVENTS_FOR_ANONYMOUS"),
        "SINGLE_ORGANIZATION_PER_USER": env_flag("SINGLE_ORGANIZATION_PER_USER"),
        "REVALIDATE_EVENT_ORGANIZATION": env_flag("REVALIDATE_EVENT_ORGANIZATION"),
    }


def create_app(config: Optional[Dict[str, Any]] = None) -> Flask:
    """
    Application factory for creating the Flask app.

    Args:
        config (dict, optional): Overrides applied on top of the
            environment settings. Pass "STORE" to supply a storage backend;
            otherwise a JsonFileStore over DATA_DIR is used.

    Returns:
        Flask: The configured Flask application.
    """
    app = Flask(__name__)
    app.config.update(load_config())
    if config:
        app.config.update(config)

    if app.config.get("STORE") is None:
        app.config["STORE"] = JsonFileStore(app.config["DATA_DIR"])
    init_db(app.config["STORE"])

    CORS(app, resources={
        r"/*": {
            "origins": app.config["CORS_ORIGINS"],
            "methods": ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization"],
            "expose_headers": ["Content-Type", "Authorization"],
            "supports_credentials": True
        }
    })

    # --- REGISTER BLUEPRINTS ---
    from eventboard.users_service.routes import users_bp
    from eventboard.organizations_service.routes import organizations_bp
    from eventboard.events_service.routes import events_bp

    app.register_blueprint(users_bp, url_prefix="/users")
    app.register_blueprint(organizations_bp, url_prefix="/organizations")
    app.register_blueprint(events_bp, url_prefix="/events")

    logging.info("All blueprints registered successfully.")

    # --- BASIC HEALTH CHECKPOINTS ---
    @app.route("/")
    def ping():
        """
        Root URL for simple 'online' check.
        """
        return jsonify({"status": "gateway_ok"}), 200

    @app.route("/health")
    def health():
        """
        Health check endpoint.
        """
        return jsonify({"status": "ok"}), 200

    return app


if __name__ == "__main__":
    app = create_app()
    port = int(os.getenv("GATEWAY_PORT", 5050))
    app.run(host="0.0.0.0", port=port, debug=True)

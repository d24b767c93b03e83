"""
Flask application factory for the notetaker API.
"""

from __future__ import annotations

from typing import Optional

from flask import Flask, jsonify
from flask_cors import CORS
from flask_jwt_extended import JWTManager

from .config import Settings, get_settings
from .database import configure_engine
from .models import Base
from .routes import api_bp


def create_app(settings: Optional[Settings] = None) -> Flask:
    settings = settings or get_settings()

    app = Flask(__name__)
    app.config["SECRET_KEY"] = settings.secret_key
    app.config["JWT_SECRET_KEY"] = settings.jwt_secret_key
    app.config["ACCESS_TOKEN_EXPIRES_MINUTES"] = settings.access_token_expires_minutes

    CORS(app)
    jwt = JWTManager(app)

    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):  # type: ignore[override]
        return jsonify({"error": "token-expired", "message": "Session expired, please log in again"}), 401

    @jwt.unauthorized_loader
    def missing_token_callback(reason: str):  # type: ignore[override]
        return jsonify({"error": "unauthorized", "message": reason}), 401

    @jwt.invalid_token_loader
    def invalid_token_callback(reason: str):  # type: ignore[override]
        return jsonify({"error": "unauthorized", "message": reason}), 401

    engine = configure_engine(settings.database_url, echo=settings.debug)
    Base.metadata.create_all(bind=engine)

    app.register_blueprint(api_bp, url_prefix=settings.api_prefix)

    @app.get("/health")
    def health():
        return jsonify({"status": "ok"})

    return app


__all__ = ["create_app"]

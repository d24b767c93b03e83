"""
Authentication helpers for password hashing and JWT management.
"""

from __future__ import annotations

import datetime as dt
from typing import Any

from flask import current_app
from flask_jwt_extended import create_access_token, get_jwt_identity
from werkzeug.security import check_password_hash, generate_password_hash


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return check_password_hash(password_hash, password)


def create_jwt(identity: Any) -> str:
    minutes = current_app.config["ACCESS_TOKEN_EXPIRES_MINUTES"]
    expires = dt.timedelta(minutes=minutes)
    return create_access_token(identity=str(identity), expires_delta=expires)


def current_user_id() -> int:
    identity = get_jwt_identity()
    try:
        return int(identity)
    except (TypeError, ValueError) as exc:
        raise ValueError("Invalid user identity in token") from exc


__all__ = ["hash_password", "verify_password", "create_jwt", "current_user_id"]

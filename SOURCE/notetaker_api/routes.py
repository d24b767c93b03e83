"""
API route definitions for topics and notes.

Each route corresponds to one procedure of the UI client
(`topic.getAll`, `note.create`, ...). Every query is scoped to the user
identified by the bearer token; rows owned by someone else answer 404.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from .auth import create_jwt, current_user_id, hash_password, verify_password
from .database import session_scope
from .models import Note, Topic, User
from .schemas import (
    LoginRequest,
    NoteCreateRequest,
    NoteResponse,
    RegisterRequest,
    TokenResponse,
    TopicCreateRequest,
    TopicResponse,
)


logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__)


def parse_request(model_cls, payload: Optional[dict] = None):
    """Utility to build and validate Pydantic models from request JSON."""
    payload = payload or request.get_json(silent=True) or {}
    return model_cls.model_validate(payload)


def error_response(code: str, message: str, status: int, **extra: Any):
    body: Dict[str, Any] = {"error": code, "message": message}
    body.update(extra)
    return jsonify(body), status


def serialize_topic(topic: Topic) -> Dict[str, Any]:
    return TopicResponse.model_validate(topic).model_dump(mode="json")


def serialize_note(note: Note) -> Dict[str, Any]:
    return NoteResponse.model_validate(note).model_dump(mode="json")


def _owned_topic(session, user_id: int, topic_id: int) -> Optional[Topic]:
    return session.execute(
        select(Topic).where(Topic.topic_id == topic_id, Topic.user_id == user_id)
    ).scalar_one_or_none()


def _find_user(session, username: str) -> Optional[User]:
    return session.execute(
        select(User).where(User.username == username)
    ).scalar_one_or_none()


@api_bp.errorhandler(ValidationError)
def handle_validation_error(err: ValidationError):  # type: ignore[override]
    problems = "; ".join(
        f"{'.'.join(str(part) for part in e['loc'])}: {e['msg']}" if e["loc"] else e["msg"]
        for e in err.errors()
    )
    return error_response(
        "invalid-request",
        problems or "Invalid request",
        400,
        details=err.errors(include_url=False, include_context=False),
    )


@api_bp.route("/register", methods=["POST"])
def register_user():
    data = parse_request(RegisterRequest)
    with session_scope() as session:
        if _find_user(session, data.username) is not None:
            return error_response("username-taken", "Username is already taken", 409)

        user = User(
            username=data.username,
            password_hash=hash_password(data.password),
        )
        session.add(user)
        try:
            session.flush()
        except IntegrityError:
            # a concurrent registration claimed the name after the lookup
            session.rollback()
            return error_response("username-taken", "Username is already taken", 409)
        logger.info("Registered user %s (id=%s)", user.username, user.user_id)
        token = TokenResponse(
            access_token=create_jwt(identity=user.user_id),
            user_id=user.user_id,
            username=user.username,
        )
        return jsonify(token.model_dump()), 201


@api_bp.route("/login", methods=["POST"])
def login_user():
    data = parse_request(LoginRequest)
    with session_scope() as session:
        user = _find_user(session, data.username)
        if user is None or not verify_password(data.password, user.password_hash):
            logger.warning("Failed login for %r", data.username)
            return error_response("invalid-credentials", "Invalid username or password", 401)

        user.touch_last_login()
        session.add(user)
        token = TokenResponse(
            access_token=create_jwt(identity=user.user_id),
            user_id=user.user_id,
            username=user.username,
        )
        return jsonify(token.model_dump()), 200


@api_bp.route("/topics", methods=["GET"])
@jwt_required()
def list_topics():
    user_id = current_user_id()
    with session_scope() as session:
        topics = session.execute(
            select(Topic).where(Topic.user_id == user_id).order_by(Topic.topic_id.asc())
        ).scalars().all()
        return jsonify({"topics": [serialize_topic(topic) for topic in topics]})


@api_bp.route("/topics", methods=["POST"])
@jwt_required()
def create_topic():
    user_id = current_user_id()
    data = parse_request(TopicCreateRequest)
    with session_scope() as session:
        topic = Topic(user_id=user_id, title=data.title)
        session.add(topic)
        session.flush()
        logger.info("User %s created topic %s", user_id, topic.topic_id)
        return jsonify(serialize_topic(topic)), 201


@api_bp.route("/topics/<int:topic_id>", methods=["DELETE"])
@jwt_required()
def delete_topic(topic_id: int):
    user_id = current_user_id()
    with session_scope() as session:
        topic = _owned_topic(session, user_id, topic_id)
        if topic is None:
            return error_response("not-found", "Topic not found", 404)
        session.delete(topic)
        logger.info("User %s deleted topic %s", user_id, topic_id)
        return jsonify({"status": "deleted", "id": topic_id}), 200


@api_bp.route("/notes", methods=["GET"])
@jwt_required()
def list_notes():
    user_id = current_user_id()
    topic_id = request.args.get("topic_id", type=int)
    if topic_id is None:
        return error_response("invalid-request", "topic_id is required", 400)
    with session_scope() as session:
        if _owned_topic(session, user_id, topic_id) is None:
            return error_response("not-found", "Topic not found", 404)
        notes = session.execute(
            select(Note)
            .where(Note.user_id == user_id, Note.topic_id == topic_id)
            .order_by(Note.note_id.asc())
        ).scalars().all()
        return jsonify({"notes": [serialize_note(note) for note in notes]})


@api_bp.route("/notes", methods=["POST"])
@jwt_required()
def create_note():
    user_id = current_user_id()
    data = parse_request(NoteCreateRequest)
    with session_scope() as session:
        if _owned_topic(session, user_id, data.topic_id) is None:
            return error_response("not-found", "Topic not found", 404)
        note = Note(
            user_id=user_id,
            topic_id=data.topic_id,
            title=data.title,
            content=data.content,
        )
        session.add(note)
        session.flush()
        logger.info("User %s created note %s in topic %s", user_id, note.note_id, data.topic_id)
        return jsonify(serialize_note(note)), 201


@api_bp.route("/notes/<int:note_id>", methods=["DELETE"])
@jwt_required()
def delete_note(note_id: int):
    user_id = current_user_id()
    with session_scope() as session:
        note = session.execute(
            select(Note).where(Note.note_id == note_id, Note.user_id == user_id)
        ).scalar_one_or_none()
        if note is None:
            return error_response("not-found", "Note not found", 404)
        session.delete(note)
        logger.info("User %s deleted note %s", user_id, note_id)
        return jsonify({"status": "deleted", "id": note_id}), 200


__all__ = ["api_bp"]

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from tokenpaint.errors import (
    MalformedMessageError,
    NoActiveSessionError,
    SessionAlreadyOpenError,
    TokenPaintError,
)
from tokenpaint.session.messages import parse_message

session_bp = Blueprint("session", __name__)


def _host():
    return current_app.extensions["host"]


@session_bp.after_request
def add_cors_headers(response):
    """Allow the front end to call the API from another origin."""
    response.headers["Access-Control-Allow-Origin"] = "*"
    response.headers["Access-Control-Allow-Headers"] = "Content-Type"
    response.headers["Access-Control-Allow-Methods"] = "GET, POST, DELETE, OPTIONS"
    return response


@session_bp.route("/session", methods=["POST"])
def open_session():
    """Open the styling session and return its first view state."""
    data = request.get_json(silent=True) or {}
    theme = data.get("theme") if isinstance(data, dict) else None
    try:
        session = _host().open_session(theme if isinstance(theme, str) else None)
    except SessionAlreadyOpenError as exc:
        return jsonify({"error": str(exc)}), 409
    return jsonify(session.view_state().to_dict()), 201


@session_bp.route("/session/state")
def session_state():
    """Current view state of the open session."""
    try:
        session = _host().require_session()
    except NoActiveSessionError as exc:
        return jsonify({"error": str(exc)}), 404
    return jsonify(session.view_state().to_dict())


@session_bp.route("/session/messages", methods=["POST"])
def post_message():
    """Apply one typed UI message and return the new view state."""
    try:
        message = parse_message(request.get_json(silent=True))
    except MalformedMessageError as exc:
        return jsonify({"error": str(exc)}), 400
    try:
        session = _host().require_session()
    except NoActiveSessionError as exc:
        return jsonify({"error": str(exc)}), 404
    return jsonify(session.handle(message))


@session_bp.route("/session", methods=["DELETE"])
def close_session():
    """Close the session, rolling back unsaved edits."""
    try:
        _host().close_session()
    except NoActiveSessionError as exc:
        return jsonify({"error": str(exc)}), 404
    except TokenPaintError as exc:
        return jsonify({"error": str(exc)}), 500
    return "", 204


@session_bp.route("/notifications")
def notifications():
    """Drain pending user notifications."""
    return jsonify([n.to_dict() for n in _host().inbox.drain()])

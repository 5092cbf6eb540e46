from __future__ import annotations

from flask import Blueprint, current_app, jsonify

preview_bp = Blueprint("preview", __name__)


@preview_bp.route("/preview/<language_id>")
def raw_preview(language_id: str):
    """Example source text for a language."""
    snippet = current_app.extensions["host"].preview(language_id)
    return jsonify(snippet.to_dict())

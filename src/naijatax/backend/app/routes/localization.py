"""Expose translation catalogues to front-end consumers."""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from naijatax.backend.app.localization import load_translations

blueprint = Blueprint("translations", __name__, url_prefix="/api/v1/translations")


@blueprint.get("/")
def get_default_translations():
    """Return translations for ``?locale=`` or the browser's preferred language."""

    locale_hint = request.args.get("locale")
    if not locale_hint:
        accept_language = request.headers.get("Accept-Language", "")
        locale_hint = accept_language.split(",")[0].strip() or None
    payload = load_translations(locale_hint)
    return jsonify(payload), 200


@blueprint.get("/<locale>")
def get_locale_translations(locale: str):
    """Return translations for a specific locale slug."""

    payload = load_translations(locale)
    return jsonify(payload), 200

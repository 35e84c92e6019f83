"""HTTP function endpoint for AI art QR codes.

``POST /generate-art-qr`` takes ``{"content": ..., "style": ...}`` and
answers ``{"imageUrl": ..., "style": ..., "message": ...}`` or
``{"error": ...}`` with a status that tells the caller what went wrong.
"""

import logging
from typing import Callable

from flask import Flask, jsonify, request

from qrthis.api_client import ART_STYLES, BaseArtClient, generate_art_qr
from qrthis.errors import ArtGenerationError, QRGenerationError

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


def _error(message: str, status: int):
    response = jsonify({"error": message})
    response.status_code = status
    return response


def create_app(client_factory: Callable[[], BaseArtClient], allowed_origin: str = "*") -> Flask:
    """Build the Flask app.

    ``client_factory`` is called per request so a missing API key surfaces
    as a 500 ``AI service not configured`` rather than a startup crash.
    """
    app = Flask(__name__)

    @app.after_request
    def add_cors_headers(response):
        response.headers.update(CORS_HEADERS)
        response.headers["Access-Control-Allow-Origin"] = allowed_origin
        return response

    @app.route("/generate-art-qr", methods=["POST", "OPTIONS"])
    def generate_art_qr_endpoint():
        if request.method == "OPTIONS":
            return "", 204

        payload = request.get_json(silent=True) or {}
        if not isinstance(payload, dict):
            return _error("Content is required", 400)
        content = payload.get("content")
        style = payload.get("style")
        logger.info(
            "Generating AI Art QR: content=%r style=%s",
            content[:50] if isinstance(content, str) else content,
            style,
        )

        if not content or not isinstance(content, str) or not content.strip():
            return _error("Content is required", 400)
        if not style or style not in ART_STYLES:
            return _error("Invalid style selected", 400)

        try:
            result = generate_art_qr(content, style, client_factory())
        except ArtGenerationError as e:
            return _error(str(e), e.status_code)
        except QRGenerationError as e:
            return _error(str(e), 400)
        except Exception as e:
            logger.exception("Error in generate-art-qr")
            return _error(str(e) or "Unknown error occurred", 500)

        return jsonify(result.to_dict())

    @app.route("/styles", methods=["GET"])
    def list_styles():
        return jsonify([
            {"id": s.id, "name": s.name, "description": s.description}
            for s in ART_STYLES.values()
        ])

    @app.route("/health", methods=["GET"])
    def health():
        return jsonify({"status": "ok"})

    return app

from __future__ import annotations

from typing import Any, Dict

from dotenv import load_dotenv
from flask import Blueprint, Flask, current_app, jsonify, request

from .config import load_config
from .engine import TransferEngine
from .errors import AccountResolutionFailure, AlreadyRunning
from .logger import apply_log_level, get_logger

logger = get_logger(__name__)

EXTENSION_KEY = "flowstream.engine"

stream_api = Blueprint("stream_api", __name__)


def _engine():
    return current_app.extensions[EXTENSION_KEY]


def _json_ok(data: Dict[str, Any], status_code: int = 200):
    payload = {"ok": True}
    payload.update(data)
    return jsonify(payload), status_code


def _json_err(message: str, status_code: int = 400, **extra):
    payload = {"ok": False, "error": message}
    if extra:
        payload.update(extra)
    return jsonify(payload), status_code


@stream_api.route("/start", methods=["POST"])
def api_start():
    body = request.get_json(silent=True) or {}
    user_pubkey = body.get("userPubkey")
    uploader_pubkey = body.get("uploaderPubkey")
    if not user_pubkey:
        return _json_err("missing_user_pubkey", 400)
    try:
        _engine().start(user_pubkey, uploader_pubkey)
    except AlreadyRunning as exc:
        return _json_err("already_running", 409, reason=str(exc))
    except AccountResolutionFailure as exc:
        return _json_err("invalid_account", 400, role=exc.role, reason=str(exc))
    # first transfer lands on the next tick; answer immediately
    return _json_ok({"status": "starting"})


@stream_api.route("/stop", methods=["POST"])
def api_stop():
    _engine().stop()
    return _json_ok({})


@stream_api.route("/logs", methods=["GET"])
def api_logs():
    return jsonify([entry.as_public() for entry in _engine().get_logs()]), 200


@stream_api.route("/status", methods=["GET"])
def api_status():
    return jsonify(_engine().get_status().as_public()), 200


@stream_api.route("/health", methods=["GET"])
def health():
    return jsonify({"status": "ok"}), 200


def create_app(engine) -> Flask:
    app = Flask(__name__)
    app.extensions[EXTENSION_KEY] = engine
    app.register_blueprint(stream_api)
    return app


def main() -> int:
    load_dotenv()
    # module loggers were built at import time, before .env was read
    apply_log_level()

    settings = load_config()
    engine = TransferEngine(settings)
    app = create_app(engine)
    logger.info("flowstream listening on %s:%d", settings.host, settings.port)
    try:
        app.run(host=settings.host, port=settings.port)
    finally:
        engine.stop()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

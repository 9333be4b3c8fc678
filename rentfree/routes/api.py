"""Flask blueprint exposing the room directory and name registry."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from flask import Blueprint, jsonify, request

from ..errors import RateLimited, RentfreeError
from ..middleware.errors import error_response, json_error
from ..services.directory import DirectoryService
from ..services.names import NameUpdateService

logger = logging.getLogger("rentfree.api")


def iso(timestamp: float) -> str:
    moment = datetime.fromtimestamp(timestamp, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def create_blueprint(directory: DirectoryService, names: NameUpdateService) -> Blueprint:
    bp = Blueprint("rentfree_api", __name__)

    def _directory_payload(mint: Optional[str], *, legacy: bool = False) -> Dict[str, Any]:
        lookup = directory.get_directory(mint)
        snapshot = lookup.snapshot
        entries = [a.to_dict() for a in snapshot.assignments]
        if legacy:
            for entry in entries:
                entry["walletAddress"] = entry["wallet"]
        return {
            ("rooms" if legacy else "entries"): entries,
            "cached": lookup.cached,
            "mint": snapshot.mint_id,
            "capturedAt": iso(snapshot.captured_at),
        }

    def _serve_directory(legacy: bool):
        mint = request.args.get("mint") or None
        try:
            return jsonify(_directory_payload(mint, legacy=legacy))
        except RentfreeError as exc:
            if exc.status >= 500 and not isinstance(exc, RateLimited):
                logger.error(
                    "Directory request for %s failed: %s", mint or directory.default_mint, exc, exc_info=exc
                )
            return error_response(exc, "Failed to load directory")
        except Exception:
            logger.exception("Error in %s", request.path)
            return json_error("Failed to load directory", 500)

    def _save_display_name():
        body = request.get_json(force=True, silent=True)
        if not isinstance(body, dict):
            body = {}
        wallet = body.get("walletAddress")
        display_name = body.get("displayName")
        try:
            record = names.update_display_name(
                wallet,
                display_name,
                body.get("message"),
                body.get("signature"),
            )
        except RentfreeError as exc:
            return error_response(exc, "Failed to save display name")
        except Exception:
            logger.exception("Error in %s", request.path)
            return json_error("Failed to save display name", 500)
        return jsonify({"ok": True, "walletAddress": record.wallet, "displayName": record.name})

    @bp.route("/health", methods=["GET"])
    def health():
        return jsonify({"status": "ok", "mint": directory.default_mint})

    @bp.route("/directory", methods=["GET"])
    def get_directory():
        return _serve_directory(legacy=False)

    @bp.route("/display-name", methods=["POST"])
    def update_display_name():
        return _save_display_name()

    @bp.route("/api/rooms", methods=["GET"])
    def legacy_rooms():
        return _serve_directory(legacy=True)

    @bp.route("/api/display-name", methods=["POST"])
    def legacy_display_name():
        return _save_display_name()

    return bp

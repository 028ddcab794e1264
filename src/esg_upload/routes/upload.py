import logging
import traceback

from flask import Blueprint, current_app, jsonify, request

from esg_upload.observability.metrics import inc
from esg_upload.observability.request_context import log_debug
from esg_upload.services.exceptions import UploadError
from esg_upload.services.upload_service import handle_upload

upload_bp = Blueprint("upload", __name__)


@upload_bp.route("/storage", methods=["POST"])
def upload_spreadsheet():
    """
    Accept one spreadsheet plus ESG metadata fields and store it as a blob.
    Every outcome is a JSON body with a boolean "success".
    """
    inc("upload_requests")
    log_debug("Storage upload request received")

    settings = current_app.config["SETTINGS"]
    store = current_app.extensions.get("blob_store")

    try:
        result = handle_upload(
            request.headers.get("Content-Type"),
            lambda: request.get_data(cache=False),
            store,
            key_prefix=settings.key_prefix,
        )
    except UploadError as e:
        if e.status_code >= 500:
            inc("upload_failures")
            log_debug(f"Upload failed: {e}", level=logging.ERROR)
        else:
            inc("upload_rejected")
            log_debug(f"Upload rejected: {e}", level=logging.WARNING)
        return jsonify(e.to_dict()), e.status_code
    except Exception as e:
        inc("upload_failures")
        log_debug(f"Unexpected error: {e}\n{traceback.format_exc()}", level=logging.ERROR)
        return jsonify({"success": False, "error": "Internal server error", "details": str(e)}), 500

    inc("upload_success")
    inc("upload_bytes", result.size)
    log_debug(f"File uploaded successfully: {result.file_name}")
    return jsonify(result.to_dict()), 200

from flask import Blueprint, current_app, jsonify

from esg_upload.observability.metrics import snapshot

metrics_bp = Blueprint("metrics", __name__)


@metrics_bp.route("/metrics", methods=["GET"])
def upload_metrics():
    """Upload counters plus where uploads are going."""
    settings = current_app.config["SETTINGS"]
    return jsonify({
        "container": settings.container_name,
        "storageConfigured": current_app.extensions.get("blob_store") is not None,
        "counters": snapshot(),
    })

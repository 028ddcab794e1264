from flask import Flask
import os
from esg_upload.cli import check_storage_command
from esg_upload.config import load_settings
from esg_upload.observability.request_context import configure_logging, log_debug, start_request, end_request
from esg_upload.routes.message import message_bp
from esg_upload.routes.metrics import metrics_bp
from esg_upload.routes.upload import upload_bp
from esg_upload.services.blob_store import AzureBlobStore

def create_app(settings=None, blob_store=None):
    # settings and the blob store are resolved once here, never per request
    settings = settings or load_settings()
    app = Flask(__name__)
    app.config["SETTINGS"] = settings

    configure_logging(settings.log_dir, settings.log_level)

    if blob_store is None and settings.connection_string:
        blob_store = AzureBlobStore.from_connection_string(settings.connection_string, settings.container_name)
    app.extensions["blob_store"] = blob_store
    if blob_store is None:
        log_debug("Azure Storage connection string not found; uploads will fail", request_id="startup")

    app.register_blueprint(message_bp, url_prefix="/api")
    app.register_blueprint(upload_bp, url_prefix="/api")
    app.register_blueprint(metrics_bp, url_prefix="/api")
    app.cli.add_command(check_storage_command)

    @app.before_request
    def _before():
        start_request()

    @app.after_request
    def _after(response):
        return end_request(response)

    return app

if __name__ == "__main__":
    app = create_app()
    app.run(host="0.0.0.0", port=int(os.environ.get("PORT", 8080)))

import logging
import os
import time
import uuid
from logging.handlers import RotatingFileHandler

from flask import g, request

logger = logging.getLogger("esg_upload")

LOG_FILE_NAME = "upload_debug.log"


def configure_logging(log_dir, log_level="INFO"):
    """Console logging plus a rotating debug log under log_dir.

    Calling again with another log_dir moves the file handler there.
    """
    level = getattr(logging, str(log_level).upper(), logging.INFO)
    logging.basicConfig(level=level)
    logger.setLevel(level)

    os.makedirs(log_dir, exist_ok=True)
    log_path = os.path.abspath(os.path.join(log_dir, LOG_FILE_NAME))

    for h in list(logger.handlers):
        if isinstance(h, RotatingFileHandler):
            if h.baseFilename == log_path:
                return
            logger.removeHandler(h)
            h.close()

    handler = RotatingFileHandler(log_path, maxBytes=5 * 1024 * 1024, backupCount=5, encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
    logger.addHandler(handler)


def log_debug(msg, request_id=None, level=logging.INFO):
    rid = request_id or getattr(g, "request_id", "unknown")
    logger.log(level, "[%s] %s", rid, msg)


def start_request():
    g.request_id = uuid.uuid4().hex[:12]
    g.start_time = time.time()


def end_request(response):
    duration_ms = int((time.time() - g.start_time) * 1000)

    log = {
        "request_id": g.request_id,
        "method": request.method,
        "path": request.path,
        "status": response.status_code,
        "duration_ms": duration_ms,
        "content_length": request.content_length
    }

    logger.info("[REQUEST] %s", log)
    return response

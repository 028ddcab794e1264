"""In-process upload counters, shared by every request thread."""
import threading

UPLOAD_COUNTERS = (
    "upload_requests",
    "upload_rejected",
    "upload_failures",
    "upload_success",
    "upload_bytes",
)

_lock = threading.Lock()
METRICS = dict.fromkeys(UPLOAD_COUNTERS, 0)


def inc(key, value=1):
    with _lock:
        METRICS[key] = METRICS.get(key, 0) + value


def snapshot():
    with _lock:
        return dict(METRICS)


def reset():
    with _lock:
        for key in METRICS:
            METRICS[key] = 0

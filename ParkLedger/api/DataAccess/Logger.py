from logging.handlers import TimedRotatingFileHandler
import os
import logging
import json
from datetime import datetime, timezone

LOG_DIR = os.environ.get("PARKLEDGER_LOG_DIR") or os.path.join(os.getcwd(), "logs")

# extra= keys copied into the JSON line when present
_EXTRA_FIELDS = ("endpoint", "user", "role", "lot_id", "session_id", "reservation_id",
                 "payment_id", "licenseplate", "amount", "duration_ms")


def setup_logger(log_dir=None):
    log_dir = log_dir or LOG_DIR
    os.makedirs(log_dir, exist_ok=True)

    logger = logging.getLogger("ParkLedger")
    logger.setLevel(logging.INFO)

    if logger.handlers:
        return logger

    handler = TimedRotatingFileHandler(
        os.path.join(log_dir, "parkledger.log"),
        when="midnight",
        utc=True
    )
    handler.namer = lambda name: name.replace("parkledger.log.", "parkledger-") + ".log"

    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)

    return logger


def log_access(username: str, role: str, endpoint: str):
    logger = logging.getLogger("ParkLedger.access")

    logger.info(
        "access",
        extra={
            "endpoint": endpoint,
            "user": username,
            "role": role,
        }
    )


class JsonFormatter(logging.Formatter):
    def format(self, record):
        log_entry = {
            "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in _EXTRA_FIELDS:
            if hasattr(record, field):
                log_entry[field] = getattr(record, field)
        if record.exc_info:
            log_entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=str)

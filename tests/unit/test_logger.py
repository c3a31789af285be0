import json
import logging

from ParkLedger.api.DataAccess.Logger import JsonFormatter, log_access, setup_logger


def test_json_formatter_includes_extra_fields():
    record = logging.LogRecord("ParkLedger.test", logging.INFO, __file__, 1, "paid %s", ("x",), None)
    record.payment_id = 7
    record.amount = 26.25

    entry = json.loads(JsonFormatter().format(record))

    assert entry["level"] == "INFO"
    assert entry["logger"] == "ParkLedger.test"
    assert entry["message"] == "paid x"
    assert entry["payment_id"] == 7
    assert entry["amount"] == 26.25
    assert "user" not in entry


def test_access_log_lands_in_file(tmp_path):
    logger = logging.getLogger("ParkLedger")
    saved = logger.handlers[:]
    logger.handlers.clear()
    try:
        setup_logger(str(tmp_path))
        log_access("admin", "ADMIN", "/billing")
        for handler in logger.handlers:
            handler.flush()

        lines = (tmp_path / "parkledger.log").read_text().splitlines()
        entry = json.loads(lines[-1])
        assert entry["logger"] == "ParkLedger.access"
        assert entry["user"] == "admin"
        assert entry["endpoint"] == "/billing"
    finally:
        for handler in logger.handlers:
            handler.close()
        logger.handlers = saved

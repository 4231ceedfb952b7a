import logging
import json
import sys
from unittest.mock import mock_open, patch

from services.common.core import logging_config, request_context


def _record(msg="Test message", **extra):
    record = logging.LogRecord(
        name="test_logger",
        level=logging.INFO,
        pathname="test_path.py",
        lineno=10,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_custom_json_formatter_includes_request_id():
    """Ensure the formatter includes the RequestID from context."""
    req_id_str = request_context.generate_request_id()

    log_json = json.loads(logging_config.CustomJsonFormatter().format(_record()))

    assert log_json["message"] == "Test message"
    assert log_json["level"] == "INFO"
    assert log_json["logger"] == "test_logger"
    assert log_json["request_id"] == req_id_str
    assert "_time" in log_json

    request_context.clear_request_id()


def test_custom_json_formatter_extra_fields():
    """Extra attributes are emitted; explicit request_id wins over context."""
    request_context.clear_request_id()

    record = _record(step="Dispatch", endpoint="categories", request_id="req-1", status=502)
    log_json = json.loads(logging_config.CustomJsonFormatter().format(record))

    assert log_json["step"] == "Dispatch"
    assert log_json["endpoint"] == "categories"
    assert log_json["request_id"] == "req-1"
    assert log_json["status"] == 502
    assert "msg" not in log_json
    assert "args" not in log_json


def test_custom_json_formatter_exception():
    try:
        raise ValueError("broken")
    except ValueError:
        record = _record(msg="failed")
        record.exc_info = sys.exc_info()

    log_json = json.loads(logging_config.CustomJsonFormatter().format(record))

    assert "ValueError: broken" in log_json["exception"]


def test_setup_logging_missing_file_falls_back_to_basic_config():
    with patch("logging.basicConfig") as mock_basic:
        logging_config.setup_logging("/nonexistent/logging.yml")

    mock_basic.assert_called_once_with(level=logging.INFO)


def test_setup_logging_substitutes_log_level(monkeypatch):
    yaml_content = """
version: 1
root:
  level: ${LOG_LEVEL}
"""
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")

    with patch("os.path.exists", return_value=True), patch(
        "builtins.open", mock_open(read_data=yaml_content)
    ), patch("logging.config.dictConfig") as mock_dict_config:
        logging_config.setup_logging("logging.yml")

    config = mock_dict_config.call_args[0][0]
    assert config["root"]["level"] == "DEBUG"

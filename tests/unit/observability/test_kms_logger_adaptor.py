import pytest
from loguru import logger

from kms_sdk.observability.logger_adaptor import KMSLoggerAdapter, get_logger


@pytest.fixture
def captured():
    """Collect records emitted through loguru while the test runs."""
    records = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)


def test_get_logger_is_cached():
    assert get_logger("kms_sdk.test") is get_logger("kms_sdk.test")
    assert get_logger("kms_sdk.test").name == "kms_sdk.test"


def test_default_name():
    assert get_logger().name == "kms_sdk.observability.logger_adaptor"


def test_records_carry_logger_name(captured):
    KMSLoggerAdapter("kms_sdk.clients.kms").info("client created")

    assert captured[-1]["message"] == "client created"
    assert captured[-1]["extra"]["logger_name"] == "kms_sdk.clients.kms"


@pytest.mark.parametrize("level", ["debug", "info", "warning", "error", "critical"])
def test_levels(captured, level):
    getattr(get_logger("kms_sdk.levels"), level)("message {with} braces")

    assert captured[-1]["level"].name == level.upper()
    assert captured[-1]["message"] == "message {with} braces"


def test_exception_includes_traceback(captured):
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        get_logger("kms_sdk.exc").exception("failed")

    assert captured[-1]["exception"] is not None

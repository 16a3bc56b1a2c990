from kms_sdk.interfaces.host import (
    ErrorReporter,
    LoggingErrorReporter,
    LoggingStatusSink,
    NodeStatus,
    StatusSink,
)


def test_logging_status_sink():
    sink = LoggingStatusSink("aws-kms")
    assert isinstance(sink, StatusSink)

    sink.set_status(NodeStatus.PROCESSING, "encrypt...")
    assert (sink.state, sink.text) == (NodeStatus.PROCESSING, "encrypt...")

    sink.clear_status()
    assert (sink.state, sink.text) == (None, "")


def test_logging_error_reporter():
    reporter = LoggingErrorReporter("aws-kms")
    assert isinstance(reporter, ErrorReporter)
    reporter.report_error("boom", {"_msgid": "m1"})
    reporter.report_error("boom")

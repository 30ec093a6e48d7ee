"""Tests for notification dispatch and checkout correlation logging."""

import logging

from booking_engine.lifecycle.notifications import (
    BookingEvent,
    EventKind,
    LoggingNotificationDispatcher,
    RecordingNotificationDispatcher,
    notify_safely,
)
from booking_engine.logging_context import (
    LOG_FORMAT,
    CheckoutIdFilter,
    CheckoutIdFormatter,
    get_checkout_id,
    get_checkout_logger,
    new_checkout_id,
    set_checkout_id,
)


def _event(kind: EventKind = EventKind.BOOKING_CONFIRMED) -> BookingEvent:
    return BookingEvent(
        kind=kind,
        booking_id="b1",
        provider_name="Kiki's Nails",
        service_name="Gel Manicure",
        booking_date="2026-10-21",
        booking_time="10:00 AM",
    )


class FailingDispatcher:
    def dispatch(self, event):
        raise TimeoutError("no answer")


class TestNotifySafely:
    def test_recording_dispatcher(self):
        dispatcher = RecordingNotificationDispatcher()
        assert notify_safely(dispatcher, _event())
        assert dispatcher.kinds() == [EventKind.BOOKING_CONFIRMED]

    def test_failure_is_logged_not_raised(self, caplog):
        with caplog.at_level(logging.ERROR):
            assert notify_safely(FailingDispatcher(), _event(EventKind.BOOKING_CANCELLED)) is False
        assert "booking_cancelled" in caplog.text

    def test_logging_dispatcher(self, caplog):
        with caplog.at_level(logging.INFO):
            LoggingNotificationDispatcher().dispatch(_event())
        assert "Gel Manicure" in caplog.text


class TestCheckoutLogging:
    def test_new_ids_are_unique(self):
        first, second = new_checkout_id(), new_checkout_id()
        assert first.startswith("CHK-")
        assert first != second

    def test_set_and_get(self):
        set_checkout_id("CHK-test")
        assert get_checkout_id() == "CHK-test"

    def test_filter_attached_once(self):
        logger = get_checkout_logger("booking_engine.tests.correlation")
        get_checkout_logger("booking_engine.tests.correlation")
        assert sum(isinstance(f, CheckoutIdFilter) for f in logger.filters) == 1

    def test_filter_injects_id(self):
        set_checkout_id("CHK-abc")
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
        CheckoutIdFilter().filter(record)
        assert record.checkout_id == "CHK-abc"

    def test_formatter_renders_id(self):
        set_checkout_id("CHK-abc")
        record = logging.LogRecord("booking_engine.checkout", logging.INFO, __file__, 1,
                                   "Confirmed 1 booking(s)", None, None)
        CheckoutIdFilter().filter(record)
        assert "[CHK-abc] INFO: Confirmed 1 booking(s)" in CheckoutIdFormatter(LOG_FORMAT).format(record)

    def test_formatter_handles_records_without_id(self):
        record = logging.LogRecord("other", logging.WARNING, __file__, 1, "plain", None, None)
        assert "[-] WARNING: plain" in CheckoutIdFormatter(LOG_FORMAT).format(record)

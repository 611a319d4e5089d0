# tests/core/test_bus_events.py

import logging

from powerbudget.core.event_bus import EventBus


def test_event_bus_publish_subscribe():
    eb = EventBus()
    events = []

    eb.subscribe("test_event", events.append)
    count = eb.publish("test_event", {"data": 123}, source="tests")

    assert count == 1
    assert events == [{"type": "test_event", "data": {"data": 123}, "source": "tests"}]


def test_unsubscribe_stops_delivery():
    eb = EventBus()
    events = []
    eb.subscribe("test_event", events.append)

    assert eb.unsubscribe("test_event", events.append) is True
    assert eb.unsubscribe("test_event", events.append) is False
    assert eb.publish("test_event", 1) == 0
    assert events == []


def test_failing_handler_is_logged_and_others_still_run(caplog):
    eb = EventBus()
    events = []

    def broken(event):
        raise RuntimeError("boom")

    eb.subscribe("test_event", broken)
    eb.subscribe("test_event", events.append)

    with caplog.at_level(logging.ERROR, logger="powerbudget.core.event_bus"):
        count = eb.publish("test_event", "payload")

    assert count == 1
    assert len(events) == 1
    assert "boom" in caplog.text


def test_clear_removes_all_subscribers():
    eb = EventBus()
    eb.subscribe("a", lambda event: None)
    eb.subscribe("b", lambda event: None)
    eb.clear()
    assert eb.publish("a") == 0
    assert eb.publish("b") == 0

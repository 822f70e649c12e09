import pytest

from higo.event import EventBus, EventData, EventDataChannel, EventHandler

GET_DEMO_LIST = "GetList"


class DemoService:
    def __init__(self):
        self.demo = "demo"

    def get_list(self):
        return [{"Id": 101, "Name": "aaa"}, {"Id": 102, "Name": "bbb"}]


def test_demo_service_round_trip():
    bus = EventBus()
    channel = bus.sub(GET_DEMO_LIST, DemoService().get_list)
    bus.pub(GET_DEMO_LIST, channel)
    assert channel.data(2.0) == [{"Id": 101, "Name": "aaa"}, {"Id": 102, "Name": "bbb"}]


def test_pub_passes_arguments():
    bus = EventBus()
    channel = bus.sub("add", lambda a, b: a + b)
    bus.pub("add", channel, 2, 3)
    assert channel.data(2.0) == 5


def test_data_times_out():
    channel = EventDataChannel()
    assert channel.data(0.05) == {"message": "timeout"}


def test_put_then_data():
    channel = EventDataChannel()
    channel.put(EventData("hello"))
    assert channel.data(1.0) == "hello"


def test_unsub_stops_delivery():
    bus = EventBus()
    channel = bus.sub("topic", lambda: "value")
    bus.unsub("topic", channel)
    bus.pub("topic", channel)
    assert channel.data(0.1) == {"message": "timeout"}


def test_pub_to_unknown_channel_delivers_nothing():
    bus = EventBus()
    bus.sub("topic", lambda: "value")
    stranger = EventDataChannel()
    bus.pub("topic", stranger)
    assert stranger.data(0.1) == {"message": "timeout"}


def test_pub_to_unknown_topic_delivers_nothing():
    bus = EventBus()
    channel = bus.sub("topic", lambda: "value")
    bus.pub("other", channel)
    assert channel.data(0.1) == {"message": "timeout"}


def test_handler_rejects_non_callable():
    with pytest.raises(TypeError, match="handler kind error"):
        EventHandler(42)


def test_handler_call_returns_result():
    handler = EventHandler(lambda x: x * 2)
    assert handler.call(21) == 42


def test_handler_call_without_result():
    handler = EventHandler(lambda: None)
    assert handler.call() is None


def test_latest_sub_replaces_topic_handler():
    bus = EventBus()
    first = bus.sub("topic", lambda: "first")
    bus.sub("topic", lambda: "second")
    bus.pub("topic", first)
    assert first.data(2.0) == "second"
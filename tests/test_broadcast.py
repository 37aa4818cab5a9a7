import asyncio

import pytest

from app.core.errors import ValidationError
from app.services.broadcast import TOPIC_ALERTS, TOPIC_READINGS, BroadcastChannel, ConnectionRegistry


class FakeConnection:
    def __init__(self, fail: bool = False) -> None:
        self.messages = []
        self.closed = False
        self.fail = fail

    async def send_json(self, data) -> None:
        if self.fail:
            raise RuntimeError("socket gone")
        self.messages.append(data)

    async def close(self, code: int = 1000) -> None:
        self.closed = True


@pytest.fixture
def loop():
    loop = asyncio.new_event_loop()
    yield loop
    loop.close()


@pytest.fixture
def registry():
    return ConnectionRegistry()


@pytest.fixture
def channel(registry, loop):
    channel = BroadcastChannel(registry)
    channel.bind_loop(loop)
    return channel


def _drain(loop):
    loop.run_until_complete(asyncio.sleep(0.05))


def test_reading_goes_to_reading_subscribers_only(channel, registry, loop):
    readings_viewer, alerts_viewer = FakeConnection(), FakeConnection()
    registry.subscribe(readings_viewer, TOPIC_READINGS)
    registry.subscribe(alerts_viewer, TOPIC_ALERTS)

    channel.publish_reading({"id": 1, "value": 7.1})
    _drain(loop)

    assert readings_viewer.messages == [{"event": "new-reading", "data": {"id": 1, "value": 7.1}}]
    assert alerts_viewer.messages == []


def test_alert_goes_to_alert_subscribers_only(channel, registry, loop):
    readings_viewer, alerts_viewer = FakeConnection(), FakeConnection()
    registry.subscribe(readings_viewer, TOPIC_READINGS)
    registry.subscribe(alerts_viewer, TOPIC_ALERTS)

    channel.publish_alert({"id": 3})
    _drain(loop)

    assert [m["event"] for m in alerts_viewer.messages] == ["new-alert"]
    assert readings_viewer.messages == []


def test_station_update_reaches_every_viewer(channel, registry, loop):
    idle, subscribed = FakeConnection(), FakeConnection()
    registry.connect(idle)
    registry.subscribe(subscribed, TOPIC_ALERTS)

    channel.publish_station_update({"id": 9, "name": "Clean River"})
    _drain(loop)

    assert idle.messages[0]["event"] == "station-update"
    assert subscribed.messages[0]["data"] == {"id": 9, "name": "Clean River"}


def test_late_joiner_gets_no_replay(channel, registry, loop):
    channel.publish_reading({"id": 1})
    _drain(loop)

    late = FakeConnection()
    registry.subscribe(late, TOPIC_READINGS)
    _drain(loop)

    assert late.messages == []


def test_failed_delivery_drops_viewer_and_spares_others(channel, registry, loop):
    broken, healthy = FakeConnection(fail=True), FakeConnection()
    registry.subscribe(broken, TOPIC_READINGS)
    registry.subscribe(healthy, TOPIC_READINGS)

    channel.publish_reading({"id": 1})
    _drain(loop)

    assert len(healthy.messages) == 1
    assert broken not in registry.connections()
    assert registry.subscribers(TOPIC_READINGS) == [healthy]


def test_publish_without_loop_is_dropped(registry):
    viewer = FakeConnection()
    registry.subscribe(viewer, TOPIC_READINGS)

    BroadcastChannel(registry).publish_reading({"id": 1})

    assert viewer.messages == []


def test_pydantic_payloads_are_camel_cased(channel, registry, loop, db, ph_sensor):
    from app.schemas import SensorOut

    viewer = FakeConnection()
    registry.subscribe(viewer, TOPIC_READINGS)

    channel.publish_reading(SensorOut.model_validate(ph_sensor))
    _drain(loop)

    data = viewer.messages[0]["data"]
    assert data["alertThreshold"] == 7.0
    assert data["stationId"] == ph_sensor.station_id


def test_unknown_topic_is_rejected(registry):
    with pytest.raises(ValidationError):
        registry.subscribe(FakeConnection(), "weather")


def test_disconnect_removes_subscriptions(registry):
    viewer = FakeConnection()
    registry.subscribe(viewer, TOPIC_READINGS)
    registry.subscribe(viewer, TOPIC_ALERTS)

    registry.disconnect(viewer)

    assert registry.subscribers(TOPIC_READINGS) == []
    assert registry.subscribers(TOPIC_ALERTS) == []
    assert len(registry) == 0


def test_close_all(registry, loop):
    viewers = [FakeConnection(), FakeConnection()]
    for viewer in viewers:
        registry.connect(viewer)

    loop.run_until_complete(registry.close_all())

    assert all(viewer.closed for viewer in viewers)
    assert len(registry) == 0

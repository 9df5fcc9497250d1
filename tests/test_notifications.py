"""
Unit tests for the plant notification bus.
"""

from reactor_tycoon.systems import notifications
from reactor_tycoon.systems.notifications import PlantEventBus


class TestPlantEventBus:
    """Test subscription, delivery and history."""

    def test_publish_delivers_to_kind_subscribers(self):
        bus = PlantEventBus()
        received = []
        bus.subscribe(notifications.SCRAM_TRIGGERED, received.append)
        bus.publish(notifications.OVERDRIVE_ACTIVATED)
        bus.publish(notifications.SCRAM_TRIGGERED, {'reason': 'manual'})
        assert len(received) == 1
        assert received[0].kind == notifications.SCRAM_TRIGGERED
        assert received[0].data == {'reason': 'manual'}

    def test_wildcard_receives_everything(self):
        bus = PlantEventBus()
        received = []
        bus.subscribe(notifications.ALL_KINDS, received.append)
        bus.publish(notifications.HIGH_TEMPERATURE)
        bus.publish(notifications.REACTOR_DAMAGED)
        assert [n.kind for n in received] == [notifications.HIGH_TEMPERATURE,
                                              notifications.REACTOR_DAMAGED]

    def test_unsubscribe(self):
        bus = PlantEventBus()
        received = []
        bus.subscribe(notifications.EVENT_STARTED, received.append)
        bus.unsubscribe(notifications.EVENT_STARTED, received.append)
        bus.publish(notifications.EVENT_STARTED)
        assert received == []

    def test_failing_subscriber_does_not_block_others(self):
        bus = PlantEventBus()
        received = []

        def broken(notification):
            raise RuntimeError("audio device gone")

        bus.subscribe(notifications.SCRAM_TRIGGERED, broken)
        bus.subscribe(notifications.SCRAM_TRIGGERED, received.append)
        bus.publish(notifications.SCRAM_TRIGGERED)
        assert len(received) == 1
        assert bus.delivery_failures == 1

    def test_timestamp_uses_current_time(self):
        bus = PlantEventBus()
        bus.current_time = 1234.0
        notification = bus.publish(notifications.EVENT_EXPIRED)
        assert notification.timestamp == 1234.0

    def test_history_is_bounded(self):
        bus = PlantEventBus(max_history_size=3)
        for _ in range(5):
            bus.publish(notifications.MAINTENANCE_COMPLETED)
        assert len(bus.history) == 3
        assert bus.notifications_published == 5

    def test_recent_filters_by_kind(self):
        bus = PlantEventBus()
        bus.publish(notifications.EVENT_STARTED)
        bus.publish(notifications.EVENT_EXPIRED)
        bus.publish(notifications.EVENT_STARTED)
        assert len(bus.recent(notifications.EVENT_STARTED)) == 2
        assert len(bus.recent(limit=1)) == 1
        bus.clear_history()
        assert bus.recent() == []

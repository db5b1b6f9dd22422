"""Recording event publisher for pub/sub consumers."""

import logging
from pubsub import pub
from ..models.events import RecordingEvent

logger = logging.getLogger(__name__)


class RecordingPublisher:
    """Publishes recording state and volume events using pubsub.pub."""

    def __init__(self, topic: str = "recording_events"):
        """Initialize recording publisher.

        Args:
            topic: Pub/sub topic name for recording events
        """
        self.topic = topic
        logger.info(f"RecordingPublisher initialized with topic: {topic}")

    def publish_recording_event(self, recording_event: RecordingEvent) -> None:
        """Publish a recording event to the pub/sub topic.

        Args:
            recording_event: RecordingEvent to publish
        """
        pub.sendMessage(self.topic, event=recording_event)

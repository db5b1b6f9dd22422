"""Speech event publisher for pub/sub consumers."""

import logging
from pubsub import pub
from ..models.events import SpeechEvent

logger = logging.getLogger(__name__)


class SpeechPublisher:
    """Publishes utterance lifecycle events using pubsub.pub."""

    def __init__(self, topic: str = "speech_events"):
        """Initialize speech publisher.

        Args:
            topic: Pub/sub topic name for speech events
        """
        self.topic = topic
        logger.info(f"SpeechPublisher initialized with topic: {topic}")

    def publish_speech_event(self, speech_event: SpeechEvent) -> None:
        """Publish a speech event to the pub/sub topic.

        Args:
            speech_event: SpeechEvent to publish
        """
        pub.sendMessage(self.topic, event=speech_event)
        logger.debug(f"Published speech event: request {speech_event.request_id} "
                     f"({speech_event.state.value})")

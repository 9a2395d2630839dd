"""Topic-scoped real-time fan-out of entity mutations."""

from relieflink.realtime.broadcaster import TopicBroadcaster
from relieflink.realtime.mutation_notifier import MutationNotifier
from relieflink.realtime.topics import DISASTER_FEED_TOPIC, EntityType, disaster_topic, topics_for

__all__ = [
    "DISASTER_FEED_TOPIC",
    "EntityType",
    "MutationNotifier",
    "TopicBroadcaster",
    "disaster_topic",
    "topics_for",
]

"""Topic naming and entity-to-topic routing.

Every tracked disaster has its own topic, ``disaster:<id>``.  Resources,
reports and feed refreshes belonging to a disaster publish to their
parent's topic.  Disaster mutations additionally go to the
``disasters`` feed topic watched by list views.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any

DISASTER_FEED_TOPIC = "disasters"
_DISASTER_PREFIX = "disaster:"


class EntityType(str, Enum):
    DISASTER = "disaster"
    RESOURCE = "resource"
    REPORT = "report"
    SOCIAL_MEDIA = "social_media"
    OFFICIAL_UPDATES = "official_updates"


EVENT_NAMES: dict[EntityType, str] = {
    EntityType.DISASTER: "disaster_updated",
    EntityType.RESOURCE: "resources_updated",
    EntityType.REPORT: "reports_updated",
    EntityType.SOCIAL_MEDIA: "social_media_updated",
    EntityType.OFFICIAL_UPDATES: "official_updates_updated",
}


def disaster_topic(disaster_id: Any) -> str:
    """Return the topic for one disaster."""
    value = str(disaster_id).strip()
    if not value:
        msg = "disaster_id must be non-empty"
        raise ValueError(msg)
    return f"{_DISASTER_PREFIX}{value}"


def is_valid_topic(topic: str) -> bool:
    if topic == DISASTER_FEED_TOPIC:
        return True
    return topic.startswith(_DISASTER_PREFIX) and len(topic) > len(_DISASTER_PREFIX)


def topics_for(entity_type: EntityType, record: Mapping[str, Any]) -> list[str]:
    """Return the topics a mutation of *record* must be published to.

    Raises
    ------
    ValueError
        If the record lacks the id needed to route it.
    """
    if entity_type is EntityType.DISASTER:
        return [disaster_topic(_require(record, "id")), DISASTER_FEED_TOPIC]
    return [disaster_topic(_require(record, "disaster_id"))]


def _require(record: Mapping[str, Any], field: str) -> Any:
    value = record.get(field)
    if value is None or str(value).strip() == "":
        msg = f"record is missing '{field}'"
        raise ValueError(msg)
    return value

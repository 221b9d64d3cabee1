from datetime import datetime, timezone
from os import environ
from cloudwatch_auto.loglib import logger

# Retrieve environment variables with defaults
marker_tag: str = environ.get('marker_tag', 'SetfiveCloudAutoWatch')


def has_marker_tag(tags: list | None) -> bool:
    """
    Checks whether a resource is already covered by baseline alarms.

    Only presence with a non-empty value counts. The value itself is never compared.

    Args:
        tags (list): Provider tag list of ``{"Key": ..., "Value": ...}`` dicts.

    Returns:
        bool: True if the marker tag is present with a truthy value.
    """
    return any(tag.get('Key') == marker_tag and tag.get('Value') for tag in tags or [])


def build_marker_tags(now: datetime | None = None) -> list[dict]:
    """
    Builds the tag list written to a resource once its alarms exist.

    Args:
        now (datetime): Coverage time. Defaults to the current UTC time.

    Returns:
        list: A single-element provider tag list holding the marker tag.
    """
    timestamp = (now or datetime.now(timezone.utc)).isoformat()
    logger.debug(f"Built marker tag {marker_tag}={timestamp}")
    return [{'Key': marker_tag, 'Value': timestamp}]

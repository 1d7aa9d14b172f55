# router.py - picks the reply text for an inbound message
import logging
import re
from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from bot_config import REPLY_HELP
from botframework import INLINE_QUERY_CHANNEL, InboundMessage
from formatting import format_readings

LOG = logging.getLogger(__name__)

CURRENT_RE = re.compile(r"^/current")
SENSORS_RE = re.compile(r"^/sensors")

SENSORS_REPLY = chr(128528)


def display_zone(name):
    if not name or name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


def effective_text(message: InboundMessage) -> Optional[str]:
    if message.text:
        return message.text
    if message.channel_id == INLINE_QUERY_CHANNEL and message.inline_query:
        return message.inline_query.replace("-", "/")
    return None


def current_readings(sensors, settings):
    readings = [sensors.get_device_current(device_id) for device_id in settings.device_ids]
    readings += [sensors.get_location_latest(location) for location in settings.locations]
    return readings


def route(message: InboundMessage, sensors, settings, now: datetime = None) -> Optional[str]:
    text = effective_text(message) or ""

    if CURRENT_RE.match(text):
        readings = current_readings(sensors, settings)
        return format_readings(readings, now=now, tz=display_zone(settings.display_timezone))
    if SENSORS_RE.match(text):
        return SENSORS_REPLY

    LOG.info("No command matched %r", text[:100])
    if settings.default_reply == REPLY_HELP:
        return settings.help_text
    return None

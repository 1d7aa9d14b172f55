# formatting.py - turns sensor readings into reply markdown
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP

from sensors_api import (
    Reading,
    SENSOR_ABSOLUTE_PRESSURE,
    SENSOR_SEA_LEVEL_PRESSURE,
    SENSOR_TEMPERATURE,
)

READING_SEPARATOR = "\n\n---\n\n"


def round_half_up(value, places: int = 2) -> Decimal:
    """Round on the decimal representation, ties away from zero (21.005 -> 21.01)."""
    exponent = Decimal(1).scaleb(-places)
    return Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_UP)


def format_number(value, places: int = 2) -> str:
    rounded = round_half_up(value, places)
    if rounded == 0:
        return "0"
    return format(rounded.normalize(), "f")


def _clock(ts: datetime) -> str:
    hour = ts.hour % 12 or 12
    return "%d:%02d %s" % (hour, ts.minute, "AM" if ts.hour < 12 else "PM")


def calendar_time(ts: datetime, now: datetime = None, tz=timezone.utc) -> str:
    """Relative day wording, e.g. "Today at 2:30 PM" or "Last Monday at 9:05 AM"."""
    now = now or datetime.now(timezone.utc)
    local = ts.astimezone(tz)
    days = (local.date() - now.astimezone(tz).date()).days
    clock = _clock(local)

    if days == 0:
        return "Today at %s" % clock
    if days == -1:
        return "Yesterday at %s" % clock
    if days == 1:
        return "Tomorrow at %s" % clock
    if -6 <= days < -1:
        return "Last %s at %s" % (local.strftime("%A"), clock)
    if 1 < days < 7:
        return "%s at %s" % (local.strftime("%A"), clock)
    return local.strftime("%m/%d/%Y")


def format_reading(reading: Reading, now: datetime = None, tz=timezone.utc) -> str:
    temperature = format_number(reading.value(SENSOR_TEMPERATURE))
    absolute = format_number(reading.value(SENSOR_ABSOLUTE_PRESSURE))
    sea_level = format_number(reading.value(SENSOR_SEA_LEVEL_PRESSURE))
    return (
        "**%s %s**\n\n"
        "Temp: %s°C\n\n"
        "Abs. pressure: %s hPa\n\n"
        "Sea level pressure: %s hPa"
    ) % (reading.name, calendar_time(reading.timestamp, now, tz), temperature, absolute, sea_level)


def format_readings(readings, now: datetime = None, tz=timezone.utc) -> str:
    return READING_SEPARATOR.join(format_reading(r, now, tz) for r in readings)

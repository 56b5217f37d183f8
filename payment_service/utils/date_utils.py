"""Date manipulation utilities"""

from datetime import datetime, timezone, tzinfo
from typing import Dict, List, Optional
from zoneinfo import ZoneInfo

from payment_service.domain.exceptions import DateFormatError, InvalidInputError

# Conventional formats tried in order when no explicit format is given
LOCALE_FORMATS: Dict[str, List[str]] = {
    "en_US": ["%m/%d/%Y %H:%M:%S", "%m/%d/%Y %H:%M", "%m/%d/%Y"],
    "en_GB": ["%d/%m/%Y %H:%M:%S", "%d/%m/%Y %H:%M", "%d/%m/%Y"],
    "tr_TR": ["%d.%m.%Y %H:%M:%S", "%d.%m.%Y %H:%M", "%d.%m.%Y"],
}
DEFAULT_LOCALE = "tr_TR"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def is_utc(value: datetime) -> bool:
    """True when the value is tagged with a zero-offset UTC zone"""
    if value.tzinfo is None:
        return False
    return value.utcoffset() == timezone.utc.utcoffset(None) and value.tzname() in ("UTC", "UTC+00:00")


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Re-tag a non-UTC value as UTC without shifting the wall clock"""
    if value is None or is_utc(value):
        return value
    return value.replace(tzinfo=timezone.utc)


class TimeZoneConverter:
    """
    Converts between stored UTC timestamps and the display time zone.

    Only used at the request/response boundary; stored values stay UTC.
    """

    def __init__(self, zone_name: str = "UTC"):
        self.zone: tzinfo = ZoneInfo(zone_name)

    def utc_to_local(self, value: datetime) -> datetime:
        """
        Raises:
            InvalidInputError: If value is not tagged UTC
        """
        if not is_utc(value):
            raise InvalidInputError("The datetime provided must be UTC.")
        return value.astimezone(self.zone)

    def local_to_utc(self, value: datetime) -> datetime:
        """
        Naive values are taken as display-local time.

        Raises:
            InvalidInputError: If value is already tagged UTC
        """
        if value.tzinfo is not None and is_utc(value):
            raise InvalidInputError("The datetime provided must be local or unspecified.")
        if value.tzinfo is None:
            value = value.replace(tzinfo=self.zone)
        return value.astimezone(timezone.utc)

    def now_local(self) -> datetime:
        return utc_now().astimezone(self.zone)

    def parse(self, text: str, fmt: Optional[str] = None, locale: Optional[str] = None) -> datetime:
        """
        Parse date-time text into a display-local datetime.

        With fmt the text must match exactly (strptime syntax). Without it,
        ISO-8601 is tried first, then the locale's conventional formats.
        Values without an offset are assumed to be local.

        Raises:
            DateFormatError: If the text cannot be parsed
        """
        text = (text or "").strip()

        if fmt is not None:
            try:
                parsed = datetime.strptime(text, fmt)
            except ValueError as e:
                raise DateFormatError("The provided date and time string is not in the specified format.") from e
            return self._to_local(parsed)

        try:
            return self._to_local(datetime.fromisoformat(text))
        except ValueError:
            pass

        for candidate in LOCALE_FORMATS.get(locale or DEFAULT_LOCALE, LOCALE_FORMATS[DEFAULT_LOCALE]):
            try:
                return self._to_local(datetime.strptime(text, candidate))
            except ValueError:
                continue

        raise DateFormatError("The provided date and time string is not in a valid format.")

    def _to_local(self, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=self.zone)
        return value.astimezone(self.zone)

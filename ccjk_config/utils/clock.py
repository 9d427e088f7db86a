# CCJK Config Clock Utilities
# UTC timestamps in the ISO-8601 form stored in documents

from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_timestamp(moment: datetime | None = None) -> str:
    """
    Format a moment as ``YYYY-MM-DDTHH:MM:SS.mmmZ``.

    Naive datetimes are assumed to be UTC.
    """
    moment = moment or utc_now()
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")

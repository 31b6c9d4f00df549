import datetime


def get_utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.UTC)


def get_utc_iso_now() -> str:
    return get_utc_now().isoformat()


def seconds_between(earlier: datetime.datetime, later: datetime.datetime) -> float:
    """Elapsed seconds from ``earlier`` to ``later``; naive datetimes are treated as UTC."""
    if earlier.tzinfo is None:
        earlier = earlier.replace(tzinfo=datetime.UTC)
    if later.tzinfo is None:
        later = later.replace(tzinfo=datetime.UTC)
    return (later - earlier).total_seconds()

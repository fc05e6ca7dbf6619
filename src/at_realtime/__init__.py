"""Auckland Transport GTFS-Realtime client."""

from at_realtime.identifiers import strip_version, truncate_at
from at_realtime.services.realtime import (
    FeedDecodeError,
    FeedFetchError,
    MergedFeed,
    RealtimeClient,
)

__version__ = "0.1.0"

__all__ = [
    "FeedDecodeError",
    "FeedFetchError",
    "MergedFeed",
    "RealtimeClient",
    "strip_version",
    "truncate_at",
]

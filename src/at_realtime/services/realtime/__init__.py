"""GTFS-Realtime fetch, decode and merge pipeline for Auckland Transport data."""

from at_realtime.services.realtime.client import RealtimeClient
from at_realtime.services.realtime.decoder import FeedDecodeError, GtfsRtDecoder
from at_realtime.services.realtime.fetcher import FeedFetchError, GtfsRtFetcher
from at_realtime.services.realtime.merger import GtfsRtMerger, MergedFeed

__all__ = [
    "FeedDecodeError",
    "FeedFetchError",
    "GtfsRtDecoder",
    "GtfsRtFetcher",
    "GtfsRtMerger",
    "MergedFeed",
    "RealtimeClient",
]

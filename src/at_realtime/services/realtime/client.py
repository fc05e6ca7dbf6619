"""Client for the Auckland Transport GTFS-Realtime API."""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Sequence

from at_realtime.config import Settings, get_settings
from at_realtime.logging import get_logger, poll_context
from at_realtime.models.envelope import FeedResponse
from at_realtime.services.realtime.decoder import GtfsRtDecoder
from at_realtime.services.realtime.fetcher import FeedFetchError, GtfsRtFetcher
from at_realtime.services.realtime.merger import GtfsRtMerger, MergedFeed

logger = get_logger(__name__)

# Feed type constants
FEED_TRIP_UPDATES = "trip_updates"
FEED_VEHICLE_POSITIONS = "vehicle_positions"

AUTH_HEADER = "Ocp-Apim-Subscription-Key"


def _new_poll_id() -> str:
    return str(uuid.uuid4())[:8]


class RealtimeClient:
    """Fetches, decodes and merges the AT trip updates and vehicle positions feeds.

    Usage:
        client = RealtimeClient(api_key="...")
        merged = await client.fetch_combined()
        for entity in merged.entities:
            print(entity.trip_id(), entity.vehicle.position)

    Both feeds accept ``trip_ids`` / ``vehicle_ids`` filters. When neither is
    given every vehicle is returned.
    """

    def __init__(
        self,
        api_key: str | None = None,
        settings: Settings | None = None,
        fetcher: GtfsRtFetcher | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._api_key = api_key if api_key is not None else self._settings.at_api_key
        self._fetcher = fetcher or GtfsRtFetcher(timeout_sec=self._settings.fetch_timeout_sec)
        self._decoder = GtfsRtDecoder()
        self._merger = GtfsRtMerger()

        if not self._api_key:
            logger.warning("No AT API key configured, requests will be rejected upstream")

    async def fetch_trip_updates(
        self,
        trip_ids: Sequence[str] | None = None,
        vehicle_ids: Sequence[str] | None = None,
    ) -> FeedResponse:
        """Fetch and decode the trip updates feed."""
        poll_id = _new_poll_id()
        with poll_context(poll_id):
            return await self._fetch_feed(
                FEED_TRIP_UPDATES,
                self._settings.trip_updates_url,
                poll_id,
                trip_ids,
                vehicle_ids,
            )

    async def fetch_vehicle_positions(
        self,
        trip_ids: Sequence[str] | None = None,
        vehicle_ids: Sequence[str] | None = None,
    ) -> FeedResponse:
        """Fetch and decode the vehicle positions feed."""
        poll_id = _new_poll_id()
        with poll_context(poll_id):
            return await self._fetch_feed(
                FEED_VEHICLE_POSITIONS,
                self._settings.vehicle_positions_url,
                poll_id,
                trip_ids,
                vehicle_ids,
            )

    async def fetch_combined(
        self,
        trip_ids: Sequence[str] | None = None,
        vehicle_ids: Sequence[str] | None = None,
    ) -> MergedFeed:
        """Fetch both feeds concurrently and join them by trip id.

        AT publishes trip updates and vehicle positions separately. The
        returned header is the trip updates feed's header. If one request
        fails the other is cancelled before the error is raised.

        Raises:
            FeedFetchError: If either request fails or AT reports an error.
            FeedDecodeError: If either payload is malformed.
        """
        poll_id = _new_poll_id()
        with poll_context(poll_id):
            logger.info("Starting combined fetch")

            try:
                async with asyncio.TaskGroup() as group:
                    trip_updates_task = group.create_task(
                        self._fetch_feed(
                            FEED_TRIP_UPDATES,
                            self._settings.trip_updates_url,
                            poll_id,
                            trip_ids,
                            vehicle_ids,
                        )
                    )
                    vehicle_positions_task = group.create_task(
                        self._fetch_feed(
                            FEED_VEHICLE_POSITIONS,
                            self._settings.vehicle_positions_url,
                            poll_id,
                            trip_ids,
                            vehicle_ids,
                        )
                    )
            except ExceptionGroup as exc_group:
                # Re-raise the first failure unwrapped
                raise exc_group.exceptions[0]

            trip_updates = trip_updates_task.result()
            vehicle_positions = vehicle_positions_task.result()

            merged = self._merger.merge_feeds(trip_updates, vehicle_positions)
            logger.info(
                "Combined fetch complete",
                trip_update_count=len(trip_updates.entities),
                vehicle_position_count=len(vehicle_positions.entities),
                merged_count=len(merged),
            )
            return merged

    async def _fetch_feed(
        self,
        feed_type: str,
        url: str,
        poll_id: str,
        trip_ids: Sequence[str] | None,
        vehicle_ids: Sequence[str] | None,
    ) -> FeedResponse:
        """Fetch and decode a single feed, rejecting AT error envelopes."""
        params: list[tuple[str, str]] = []
        if trip_ids is not None:
            params.append(("tripid", ",".join(trip_ids)))
        if vehicle_ids is not None:
            params.append(("vehicleid", ",".join(vehicle_ids)))

        data, _ = await self._fetcher.fetch(
            self.build_query(url, params),
            feed_type,
            poll_id,
            headers={AUTH_HEADER: self._api_key},
        )
        envelope = self._decoder.decode(data, feed_type, poll_id)

        if not envelope.ok:
            msg = f"AT API returned an error for {feed_type}: {envelope.error}"
            logger.error(msg, feed_type=feed_type, status=envelope.status)
            raise FeedFetchError(msg)

        return envelope

    @staticmethod
    def build_query(url: str, params: Sequence[tuple[str, str]]) -> str:
        """Append a query string to ``url``.

        Built by hand because httpx escapes the commas separating ids, which
        the AT API does not accept.
        """
        if not params:
            return url
        query = "&".join(f"{key}={value}" for key, value in params)
        return f"{url}?{query}"

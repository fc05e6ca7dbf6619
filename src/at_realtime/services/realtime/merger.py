"""Merge engine joining trip updates onto vehicle positions by trip id."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from at_realtime.logging import get_logger
from at_realtime.models.envelope import FeedHeader, FeedResponse
from at_realtime.models.gtfs import Entity

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class MergedFeed:
    """Combined view: the trip updates header plus one entity per joinable vehicle."""

    header: FeedHeader
    entities: list[Entity] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.entities)


class GtfsRtMerger:
    """Joins a trip updates feed onto a vehicle positions feed.

    The merge is driven by vehicle positions: every output entity is a copy
    of a vehicle position entity whose trip id matches a trip update. Vehicle
    positions without a resolvable trip and trip updates without a vehicle
    are left out.
    """

    @staticmethod
    def join_key(entity: Entity) -> str:
        """Key a trip update entity is indexed under.

        The nested trip id when present, otherwise the entity id. AT sets the
        two equal on trip update entities.
        """
        if entity.trip_update is not None and entity.trip_update.trip.trip_id is not None:
            return entity.trip_update.trip.trip_id
        return entity.id

    @staticmethod
    def index_trip_updates(entities: Iterable[Entity]) -> dict[str, Entity]:
        """Index trip update entities by join key; later duplicates win."""
        index: dict[str, Entity] = {}
        for entity in entities:
            index[GtfsRtMerger.join_key(entity)] = entity
        return index

    @staticmethod
    def resolve_trip_id(entity: Entity) -> str | None:
        """Return the raw trip id a vehicle position entity is linked to."""
        if entity.vehicle is None or entity.vehicle.trip is None:
            return None
        return entity.vehicle.trip.trip_id

    @staticmethod
    def merge_entities(
        trip_updates: Iterable[Entity],
        vehicle_positions: Iterable[Entity],
    ) -> list[Entity]:
        """Merge entity sequences, returning new entities.

        Each match is a copy of the vehicle position entity whose
        ``trip_update`` is replaced by the matched entity's, even when that
        is ``None``. Inputs are not modified.
        """
        index = GtfsRtMerger.index_trip_updates(trip_updates)
        merged: list[Entity] = []
        unlinked = 0
        unmatched = 0

        if not index:
            return merged

        for entity in vehicle_positions:
            trip_id = GtfsRtMerger.resolve_trip_id(entity)
            if trip_id is None:
                unlinked += 1
                continue

            match = index.get(trip_id)
            if match is None:
                unmatched += 1
                continue

            merged.append(entity.model_copy(update={"trip_update": match.trip_update}))

        logger.debug(
            "Merged vehicle positions with trip updates",
            indexed_trip_updates=len(index),
            merged_count=len(merged),
            dropped_unlinked=unlinked,
            dropped_unmatched=unmatched,
        )
        return merged

    @staticmethod
    def merge_feeds(trip_updates: FeedResponse, vehicle_positions: FeedResponse) -> MergedFeed:
        """Merge two decoded envelopes under the trip updates header.

        Raises:
            ValueError: If the trip updates envelope carries no body.
        """
        header = trip_updates.header
        if header is None:
            msg = "Trip updates envelope has no response body to take the header from"
            raise ValueError(msg)

        entities = GtfsRtMerger.merge_entities(
            trip_updates.entities,
            vehicle_positions.entities,
        )
        return MergedFeed(header=header, entities=entities)

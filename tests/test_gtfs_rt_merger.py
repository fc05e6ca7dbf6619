"""Tests for the trip update / vehicle position merge engine."""

from __future__ import annotations

from typing import Any

import pytest

from at_realtime.models import Entity, FeedResponse
from at_realtime.services.realtime.merger import GtfsRtMerger, MergedFeed

from fixtures.realtime_fixture import (
    build_envelope,
    build_error_envelope,
    build_trip_update_entity,
    build_vehicle_entity,
)


def _entities(*raw: dict[str, Any]) -> list[Entity]:
    return [Entity.model_validate(r) for r in raw]


def _feed(*raw: dict[str, Any], feed_timestamp: float = 1710450020.0) -> FeedResponse:
    return FeedResponse.model_validate(build_envelope(list(raw), feed_timestamp=feed_timestamp))


class TestMergeEntities:
    """Unit tests for GtfsRtMerger.merge_entities."""

    def test_join_by_trip_id(self) -> None:
        trip_updates = _entities(
            {"id": "T1", "trip_update": {"trip": {"trip_id": "T1"}, "delay": 30}}
        )
        vehicles = _entities(
            {
                "id": "V1",
                "vehicle": {
                    "trip": {"trip_id": "T1"},
                    "position": {"latitude": -36.85, "longitude": 174.76, "bearing": 45},
                },
            }
        )

        merged = GtfsRtMerger.merge_entities(trip_updates, vehicles)

        assert len(merged) == 1
        entity = merged[0]
        assert entity.id == "V1"
        assert entity.trip_update is not None
        assert entity.trip_update.delay == 30
        assert entity.vehicle == vehicles[0].vehicle
        assert entity.vehicle is not None
        assert entity.vehicle.position is not None
        assert entity.vehicle.position.bearing == 45.0

    def test_inputs_not_mutated(self) -> None:
        trip_updates = _entities(build_trip_update_entity())
        vehicles = _entities(build_vehicle_entity())

        merged = GtfsRtMerger.merge_entities(trip_updates, vehicles)

        assert merged[0] is not vehicles[0]
        assert vehicles[0].trip_update is None
        assert trip_updates[0].vehicle is None

    def test_vehicle_without_trip_descriptor_dropped(self) -> None:
        trip_updates = _entities(build_trip_update_entity())
        vehicles = _entities(build_vehicle_entity(include_trip=False))
        assert GtfsRtMerger.merge_entities(trip_updates, vehicles) == []

    def test_vehicle_without_trip_id_dropped(self) -> None:
        trip_updates = _entities(build_trip_update_entity())
        vehicles = _entities(build_vehicle_entity(trip_id=None))
        assert GtfsRtMerger.merge_entities(trip_updates, vehicles) == []

    def test_entity_without_vehicle_position_dropped(self) -> None:
        trip_updates = _entities(build_trip_update_entity())
        assert GtfsRtMerger.merge_entities(trip_updates, _entities({"id": "X"})) == []

    def test_unmatched_trip_id_dropped(self) -> None:
        trip_updates = _entities(build_trip_update_entity(trip_id="A-1"))
        vehicles = _entities(build_vehicle_entity(trip_id="B-1"))
        assert GtfsRtMerger.merge_entities(trip_updates, vehicles) == []

    def test_trip_update_only_entities_not_emitted(self) -> None:
        trip_updates = _entities(
            build_trip_update_entity(trip_id="A-1"),
            build_trip_update_entity(trip_id="B-1"),
        )
        vehicles = _entities(build_vehicle_entity(entity_id="V", trip_id="A-1"))

        merged = GtfsRtMerger.merge_entities(trip_updates, vehicles)

        assert [e.id for e in merged] == ["V"]
        assert all(e.vehicle is not None for e in merged)

    def test_empty_trip_updates_yields_empty(self) -> None:
        vehicles = _entities(build_vehicle_entity(), build_vehicle_entity(entity_id="other"))
        assert GtfsRtMerger.merge_entities([], vehicles) == []

    def test_duplicate_trip_update_ids_last_wins(self) -> None:
        trip_updates = _entities(
            build_trip_update_entity(trip_id="T-1", delay=10),
            build_trip_update_entity(trip_id="T-1", delay=99),
        )
        vehicles = _entities(build_vehicle_entity(trip_id="T-1"))

        merged = GtfsRtMerger.merge_entities(trip_updates, vehicles)

        assert len(merged) == 1
        assert merged[0].trip_update is not None
        assert merged[0].trip_update.delay == 99

    def test_existing_trip_update_overwritten(self) -> None:
        raw_vehicle = build_vehicle_entity(trip_id="T-1")
        raw_vehicle["trip_update"] = {"trip": {"trip_id": "stale"}, "delay": 1}
        trip_updates = _entities(build_trip_update_entity(trip_id="T-1", delay=60))

        merged = GtfsRtMerger.merge_entities(trip_updates, _entities(raw_vehicle))

        assert merged[0].trip_update is not None
        assert merged[0].trip_update.trip.trip_id == "T-1"
        assert merged[0].trip_update.delay == 60

    def test_match_without_trip_update_clears_field(self) -> None:
        # An entity keyed by id alone still matches; its absent trip update
        # replaces whatever the vehicle entity carried.
        raw_vehicle = build_vehicle_entity(trip_id="T-1")
        raw_vehicle["trip_update"] = {"trip": {"trip_id": "T-1"}}
        trip_updates = _entities({"id": "T-1"})

        merged = GtfsRtMerger.merge_entities(trip_updates, _entities(raw_vehicle))

        assert len(merged) == 1
        assert merged[0].trip_update is None

    def test_join_uses_nested_trip_id(self) -> None:
        trip_updates = _entities(build_trip_update_entity(trip_id="T-1", entity_id="tu_42"))
        vehicles = _entities(build_vehicle_entity(trip_id="T-1"))

        merged = GtfsRtMerger.merge_entities(trip_updates, vehicles)

        assert len(merged) == 1

    def test_multiple_vehicles_same_trip(self) -> None:
        trip_updates = _entities(build_trip_update_entity(trip_id="T-1"))
        vehicles = _entities(
            build_vehicle_entity(entity_id="V1", trip_id="T-1"),
            build_vehicle_entity(entity_id="V2", trip_id="T-1"),
        )

        merged = GtfsRtMerger.merge_entities(trip_updates, vehicles)

        assert sorted(e.id for e in merged) == ["V1", "V2"]

    def test_merged_entity_exposes_normalized_ids(self) -> None:
        trip_updates = _entities(
            build_trip_update_entity(trip_id="1234-20240101", route_id="NX1-203")
        )
        vehicles = _entities(build_vehicle_entity(trip_id="1234-20240101"))

        merged = GtfsRtMerger.merge_entities(trip_updates, vehicles)

        assert merged[0].trip_id() == "1234"
        assert merged[0].route_id() == "NX1"
        assert merged[0].stop_id() == "7036"


class TestIndexTripUpdates:
    """Unit tests for the trip update index."""

    def test_index_keys(self) -> None:
        index = GtfsRtMerger.index_trip_updates(
            _entities(
                build_trip_update_entity(trip_id="A-1"),
                build_trip_update_entity(trip_id="B-1", entity_id="other"),
                {"id": "bare"},
            )
        )
        assert set(index) == {"A-1", "B-1", "bare"}

    def test_falls_back_to_entity_id(self) -> None:
        entity = Entity.model_validate({"id": "E1", "trip_update": {"trip": {"route_id": "R"}}})
        assert GtfsRtMerger.join_key(entity) == "E1"

    def test_resolve_trip_id(self) -> None:
        assert GtfsRtMerger.resolve_trip_id(Entity.model_validate(build_vehicle_entity())) == (
            "1234-20240101"
        )
        assert GtfsRtMerger.resolve_trip_id(Entity.model_validate({"id": "x"})) is None


class TestMergeFeeds:
    """Unit tests for merging decoded envelopes."""

    def test_header_from_trip_updates_feed(self) -> None:
        trip_updates = _feed(build_trip_update_entity(), feed_timestamp=111.0)
        vehicles = _feed(build_vehicle_entity(), feed_timestamp=222.0)

        merged = GtfsRtMerger.merge_feeds(trip_updates, vehicles)

        assert isinstance(merged, MergedFeed)
        assert merged.header.timestamp == 111.0
        assert len(merged) == 1

    def test_error_envelope_for_trip_updates_raises(self) -> None:
        trip_updates = FeedResponse.model_validate(build_error_envelope())
        with pytest.raises(ValueError, match="no response body"):
            GtfsRtMerger.merge_feeds(trip_updates, _feed(build_vehicle_entity()))

    def test_error_envelope_for_vehicles_yields_empty(self) -> None:
        vehicles = FeedResponse.model_validate(build_error_envelope())
        merged = GtfsRtMerger.merge_feeds(_feed(build_trip_update_entity()), vehicles)
        assert merged.entities == []

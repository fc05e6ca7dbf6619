"""Pydantic models for the AT GTFS-Realtime feeds."""

from at_realtime.models.envelope import FeedBody, FeedHeader, FeedResponse, Incrementality
from at_realtime.models.gtfs import (
    CongestionLevel,
    Entity,
    OccupancyStatus,
    Position,
    StopScheduleRelationship,
    StopTimeEvent,
    StopTimeUpdate,
    TripDescriptor,
    TripScheduleRelationship,
    TripUpdate,
    VehicleDescriptor,
    VehiclePosition,
    VehicleStopStatus,
    parse_bearing,
)

__all__ = [
    "CongestionLevel",
    "Entity",
    "FeedBody",
    "FeedHeader",
    "FeedResponse",
    "Incrementality",
    "OccupancyStatus",
    "Position",
    "StopScheduleRelationship",
    "StopTimeEvent",
    "StopTimeUpdate",
    "TripDescriptor",
    "TripScheduleRelationship",
    "TripUpdate",
    "VehicleDescriptor",
    "VehiclePosition",
    "VehicleStopStatus",
    "parse_bearing",
]

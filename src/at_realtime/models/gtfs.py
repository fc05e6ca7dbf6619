"""Pydantic models for GTFS-Realtime entities returned by the AT API.

AT serves GTFS-RT as JSON rather than protobuf. Field names follow the
GTFS-RT reference; enums arrive as their integer wire codes.
"""

from __future__ import annotations

import re
from enum import IntEnum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from at_realtime.identifiers import DEFAULT_VERSION_SEPARATOR, strip_version

# Bearing integers are narrowed to a signed 16-bit value
BEARING_INT_MAX = 2**15 - 1

# Plain decimal or exponent notation; no whitespace, no digit separators
_BEARING_STRING_RE = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf|infinity|nan)",
    re.IGNORECASE,
)

# Wire integer widths
Int32 = Annotated[int, Field(ge=-(2**31), le=2**31 - 1)]
UInt32 = Annotated[int, Field(ge=0, le=2**32 - 1)]
Int64 = Annotated[int, Field(ge=-(2**63), le=2**63 - 1)]
UInt64 = Annotated[int, Field(ge=0, le=2**64 - 1)]


class TripScheduleRelationship(IntEnum):
    """Relationship between a trip and its static schedule."""

    SCHEDULED = 0
    ADDED = 1
    UNSCHEDULED = 2
    CANCELED = 3


class StopScheduleRelationship(IntEnum):
    """Relationship between a stop time update and the static schedule."""

    SCHEDULED = 0
    SKIPPED = 1
    NO_DATA = 2


class VehicleStopStatus(IntEnum):
    """Where the vehicle is relative to its current stop."""

    INCOMING_AT = 0  # about to arrive at the stop
    STOPPED_AT = 1  # standing at the stop
    IN_TRANSIT_TO = 2  # departed the previous stop, in transit


class CongestionLevel(IntEnum):
    UNKNOWN_CONGESTION_LEVEL = 0
    RUNNING_SMOOTHLY = 1
    STOP_AND_GO = 2
    CONGESTION = 3
    SEVERE_CONGESTION = 4


class OccupancyStatus(IntEnum):
    EMPTY = 0
    MANY_SEATS_AVAILABLE = 1
    FEW_SEATS_AVAILABLE = 2
    STANDING_ROOM_ONLY = 3
    CRUSHED_STANDING_ROOM_ONLY = 4
    FULL = 5
    NOT_ACCEPTING_PASSENGERS = 6


class FeedModel(BaseModel):
    """Base for decoded feed values: immutable, unknown keys ignored."""

    model_config = ConfigDict(frozen=True, extra="ignore")


def parse_bearing(value: Any) -> float | None:
    """Decode a bearing that AT sends as a float, integer, string or nothing.

    Raises:
        ValueError: If the value is an integer outside the signed 16-bit
            range, a non-numeric string, or any other JSON shape.
    """
    if value is None:
        return None
    # bool is an int subclass and must not be read as 0/1
    if isinstance(value, bool):
        msg = "bearing must be a float, integer or string, got boolean"
        raise ValueError(msg)
    if isinstance(value, float):
        return value
    if isinstance(value, int):
        if not 0 <= value <= BEARING_INT_MAX:
            msg = f"bearing integer {value} is out of range 0..{BEARING_INT_MAX}"
            raise ValueError(msg)
        return float(value)
    if isinstance(value, str):
        if _BEARING_STRING_RE.fullmatch(value) is None:
            msg = f"bearing string {value!r} is not a number"
            raise ValueError(msg)
        return float(value)

    msg = f"bearing must be a float, integer or string, got {type(value).__name__}"
    raise ValueError(msg)


class Position(FeedModel):
    """Geographic position of a vehicle."""

    latitude: float
    longitude: float
    bearing: float | None = None
    odometer: float | None = None
    speed: float | None = None  # meters/second

    @field_validator("bearing", mode="before")
    @classmethod
    def _decode_bearing(cls, value: Any) -> float | None:
        return parse_bearing(value)


class TripDescriptor(FeedModel):
    """Identifies the trip an update or vehicle refers to."""

    trip_id: str | None = None
    route_id: str | None = None
    direction_id: UInt32 | None = None
    start_time: str | None = None  # HH:MM:SS
    start_date: str | None = None  # YYYYMMDD
    schedule_relationship: TripScheduleRelationship | None = None


class VehicleDescriptor(FeedModel):
    id: str | None = None
    label: str | None = None
    license_plate: str | None = None


class StopTimeEvent(FeedModel):
    """Predicted arrival or departure at a stop."""

    delay: Int32 | None = None  # seconds late (positive) or early (negative)
    time: Int64 | None = None  # unix timestamp
    uncertainty: Int32 | None = None


class StopTimeUpdate(FeedModel):
    """Realtime update for a single stop of a trip.

    AT sends at most one stop time update per trip update entity, so this is
    a single object rather than the list the GTFS-RT reference describes.
    """

    stop_sequence: UInt32 | None = None
    stop_id: str | None = None
    arrival: StopTimeEvent | None = None
    departure: StopTimeEvent | None = None
    schedule_relationship: StopScheduleRelationship = StopScheduleRelationship.SCHEDULED


class TripUpdate(FeedModel):
    """Realtime schedule deviation for one trip."""

    trip: TripDescriptor
    vehicle: VehicleDescriptor | None = None
    stop_time_update: StopTimeUpdate | None = None
    timestamp: UInt64 | None = None
    delay: Int32 | None = None


class VehiclePosition(FeedModel):
    """Realtime position, status and trip linkage of a vehicle."""

    trip: TripDescriptor | None = None
    vehicle: VehicleDescriptor | None = None
    position: Position | None = None
    current_stop_sequence: UInt32 | None = None
    stop_id: str | None = None
    current_status: VehicleStopStatus = VehicleStopStatus.IN_TRANSIT_TO
    timestamp: UInt64 | None = None
    congestion_level: CongestionLevel | None = None
    occupancy_status: OccupancyStatus | None = None


class Entity(FeedModel):
    """A single feed record: a trip update, a vehicle position, or both once merged.

    Alerts are not published by AT and are not modelled.
    """

    id: str
    trip_update: TripUpdate | None = None
    vehicle: VehiclePosition | None = None
    is_deleted: bool = False

    @property
    def has_trip_update(self) -> bool:
        return self.trip_update is not None

    @property
    def has_vehicle(self) -> bool:
        return self.vehicle is not None

    def trip_id(self, separator: str = DEFAULT_VERSION_SEPARATOR) -> str | None:
        """Return the trip update's trip id with the GTFS version truncated."""
        if self.trip_update is None:
            return None
        return strip_version(self.trip_update.trip.trip_id, separator)

    def route_id(self, separator: str = DEFAULT_VERSION_SEPARATOR) -> str | None:
        """Return the trip update's route id with the GTFS version truncated."""
        if self.trip_update is None:
            return None
        return strip_version(self.trip_update.trip.route_id, separator)

    def stop_id(self, separator: str = DEFAULT_VERSION_SEPARATOR) -> str | None:
        """Return the current stop id with the GTFS version truncated."""
        if self.trip_update is None or self.trip_update.stop_time_update is None:
            return None
        return strip_version(self.trip_update.stop_time_update.stop_id, separator)

    def vehicle_id(self) -> str | None:
        """Return the vehicle descriptor id, preferring the vehicle position's."""
        if self.vehicle is not None and self.vehicle.vehicle is not None:
            if self.vehicle.vehicle.id is not None:
                return self.vehicle.vehicle.id
        if self.trip_update is not None and self.trip_update.vehicle is not None:
            return self.trip_update.vehicle.id
        return None

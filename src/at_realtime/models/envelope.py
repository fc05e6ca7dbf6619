"""Response envelope wrapping every AT realtime API payload."""

from __future__ import annotations

from enum import IntEnum
from typing import Any

from pydantic import model_validator

from at_realtime.models.gtfs import Entity, FeedModel


class Incrementality(IntEnum):
    FULL_DATASET = 0
    DIFFERENTIAL = 1


class FeedHeader(FeedModel):
    """Feed metadata sent with every response."""

    gtfs_realtime_version: str
    incrementality: Incrementality = Incrementality.FULL_DATASET
    timestamp: float | None = None


class FeedBody(FeedModel):
    header: FeedHeader
    entity: list[Entity]


class FeedResponse(FeedModel):
    """Outer ``{"status", "response", "error"}`` envelope.

    ``error`` is null on success. When AT reports an error the body may be
    missing, otherwise it is required.
    """

    status: str
    response: FeedBody | None = None
    error: Any = None

    @model_validator(mode="after")
    def _require_body_on_success(self) -> FeedResponse:
        if self.error is None and self.response is None:
            msg = "response is required when error is null"
            raise ValueError(msg)
        return self

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def header(self) -> FeedHeader | None:
        return self.response.header if self.response is not None else None

    @property
    def entities(self) -> list[Entity]:
        """Entities in the order received; empty for error envelopes."""
        return self.response.entity if self.response is not None else []

"""GTFS-RT JSON decode layer."""

from __future__ import annotations

from pydantic import ValidationError

from at_realtime.logging import get_logger
from at_realtime.models.envelope import FeedResponse

logger = get_logger(__name__)


class FeedDecodeError(Exception):
    """Raised when a feed payload does not match the envelope schema.

    Attributes:
        feed_type: Feed label the payload was fetched for.
        errors: Dotted paths of the failing fields with their messages,
            e.g. ``"response.entity.0.vehicle.position.bearing: ..."``.
    """

    def __init__(self, message: str, feed_type: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.feed_type = feed_type
        self.errors = errors or []


def _format_errors(exc: ValidationError) -> list[str]:
    formatted: list[str] = []
    for error in exc.errors():
        path = ".".join(str(part) for part in error["loc"]) or "<root>"
        formatted.append(f"{path}: {error['msg']}")
    return formatted


class GtfsRtDecoder:
    """Decodes raw JSON bytes into typed ``FeedResponse`` envelopes."""

    @staticmethod
    def decode(data: bytes | str, feed_type: str, poll_id: str) -> FeedResponse:
        """Decode a JSON payload into a FeedResponse.

        Decoding is all or nothing: one invalid field rejects the envelope.
        Values are validated in strict mode, so a JSON type mismatch (a
        quoted number, a float where an integer is expected) is an error
        rather than a conversion. Only ``bearing`` is decoded tolerantly.

        Args:
            data: Raw JSON bytes.
            feed_type: Label for logging.
            poll_id: Correlation ID.

        Returns:
            Parsed FeedResponse.

        Raises:
            FeedDecodeError: If the payload is not valid JSON or violates the schema.
        """
        try:
            envelope = FeedResponse.model_validate_json(data, strict=True)
        except ValidationError as exc:
            errors = _format_errors(exc)
            msg = f"Failed to decode {feed_type} feed: {exc.error_count()} invalid field(s)"
            logger.error(msg, feed_type=feed_type, poll_id=poll_id, errors=errors[:10])
            raise FeedDecodeError(msg, feed_type=feed_type, errors=errors) from exc

        logger.info(
            "GTFS-RT feed decoded",
            feed_type=feed_type,
            poll_id=poll_id,
            status=envelope.status,
            entity_count=GtfsRtDecoder.get_entity_count(envelope),
            feed_timestamp=GtfsRtDecoder.get_feed_timestamp(envelope),
            gtfs_rt_version=envelope.header.gtfs_realtime_version if envelope.header else None,
        )

        return envelope

    @staticmethod
    def get_feed_timestamp(envelope: FeedResponse) -> float:
        """Extract the header timestamp from an envelope.

        Returns:
            Unix timestamp (seconds), or 0 if not set.
        """
        header = envelope.header
        if header is None or header.timestamp is None:
            return 0
        return header.timestamp

    @staticmethod
    def get_entity_count(envelope: FeedResponse) -> int:
        """Get the number of entities in the envelope."""
        return len(envelope.entities)

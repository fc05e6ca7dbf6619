"""GTFS-RT feed fetcher."""

from __future__ import annotations

import hashlib
import inspect

import httpx

from at_realtime.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT_SEC = 30


class FeedFetchError(Exception):
    """Raised when a GTFS-RT feed cannot be fetched or AT reports an error."""


class GtfsRtFetcher:
    """Fetches GTFS-RT JSON feeds from the AT API.

    A single attempt is made per call; callers own any retry policy.
    """

    def __init__(self, timeout_sec: int = DEFAULT_TIMEOUT_SEC) -> None:
        self.timeout_sec = timeout_sec

    async def fetch(
        self,
        url: str,
        feed_type: str,
        poll_id: str,
        headers: dict[str, str] | None = None,
    ) -> tuple[bytes, str]:
        """Download a GTFS-RT feed.

        Args:
            url: Full URL, including any query string.
            feed_type: Label for logging (e.g. "trip_updates").
            poll_id: Correlation ID for this fetch cycle.
            headers: Extra request headers (authentication).

        Returns:
            Tuple of (json_bytes, sha256_hex_digest).

        Raises:
            FeedFetchError: On HTTP status errors, network errors or an empty body.
        """
        logger.info("Fetching GTFS-RT feed", feed_type=feed_type, poll_id=poll_id)

        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout_sec),
                follow_redirects=True,
            ) as client:
                response = await client.get(url, headers=headers)
                raise_result = response.raise_for_status()
                if inspect.isawaitable(raise_result):
                    await raise_result
                data = response.content
        except (httpx.HTTPStatusError, httpx.RequestError) as exc:
            msg = f"Failed to fetch {feed_type}: {exc}"
            logger.error(msg, feed_type=feed_type, poll_id=poll_id, error=str(exc))
            raise FeedFetchError(msg) from exc

        if not data:
            msg = f"Failed to fetch {feed_type}: empty response body"
            logger.error(msg, feed_type=feed_type, poll_id=poll_id)
            raise FeedFetchError(msg)

        feed_hash = hashlib.sha256(data).hexdigest()
        logger.info(
            "GTFS-RT feed downloaded",
            feed_type=feed_type,
            poll_id=poll_id,
            size_bytes=len(data),
            feed_hash=feed_hash[:12],
        )
        return data, feed_hash

"""Status provider interface."""

from typing import Protocol

from livecheck.types import StatusRecord


class StatusProviderError(Exception):
    """Raised when live statuses could not be fetched."""


class StatusProvider(Protocol):
    """Source of live-status records for a batch of channels."""

    async def fetch_statuses(self, channel_ids: list[str]) -> list[StatusRecord]:
        """
        Fetch status records for the given channels in a single request.

        Args:
            channel_ids: Channel identifiers, in request order (may be empty)

        Returns:
            One record per live channel; an empty list means none are live

        Raises:
            StatusProviderError: If the source is unreachable or returns no data
        """
        ...

"""HTTP status provider for the batched stream list API."""

from typing import Any

import httpx
import structlog

from livecheck.provider.base import StatusProviderError
from livecheck.types import StatusRecord

logger = structlog.get_logger()

DEFAULT_API_URL = "http://api.justin.tv/api/stream/list.json"


class HttpStatusProvider:
    """Fetches live statuses for many channels with one GET request."""

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 10.0,
        client_id: str | None = None,
    ):
        """
        Initialize HTTP status provider.

        Args:
            api_url: Stream list endpoint taking a comma-separated "channel" parameter
            timeout: HTTP request timeout in seconds
            client_id: Optional API client ID sent as Client-ID header
        """
        self.api_url = api_url
        self.timeout = timeout
        self.client_id = client_id

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.client_id:
            headers["Client-ID"] = self.client_id
        return headers

    async def fetch_statuses(self, channel_ids: list[str]) -> list[StatusRecord]:
        """
        Fetch status records for all channels in one request.

        Args:
            channel_ids: Channel identifiers to query

        Returns:
            Status records for the channels that are live

        Raises:
            StatusProviderError: On timeout, request error, bad status or bad payload
        """
        if not channel_ids:
            return []

        params = {"channel": ",".join(channel_ids)}

        logger.debug("status request", url=self.api_url, channels=len(channel_ids))

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(self.api_url, params=params, headers=self._headers())
        except httpx.TimeoutException as e:
            raise StatusProviderError("status request timed out") from e
        except httpx.RequestError as e:
            raise StatusProviderError(f"status request error: {e}") from e

        if response.status_code != 200:
            raise StatusProviderError(f"status request failed with HTTP {response.status_code}")

        if not response.content:
            raise StatusProviderError("status response was empty")

        try:
            data: Any = response.json()
        except ValueError as e:
            raise StatusProviderError(f"status response is not valid JSON: {e}") from e

        if not isinstance(data, list):
            raise StatusProviderError(
                f"unexpected status payload type: {type(data).__name__}"
            )

        records = [record for record in data if isinstance(record, dict)]
        if len(records) != len(data):
            logger.warning("dropped malformed status records", dropped=len(data) - len(records))

        return records

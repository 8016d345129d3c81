"""Stream registry with a shared, batch-fetched live status snapshot."""

import asyncio
from collections.abc import Mapping
from typing import Any

import structlog

from livecheck.config.models import Config
from livecheck.identity import DEFAULT_BASE_URL, HOST_MARKER
from livecheck.provider.base import StatusProvider, StatusProviderError
from livecheck.provider.http import HttpStatusProvider
from livecheck.stream import Stream
from livecheck.types import StatusRecord, record_login

logger = structlog.get_logger()


class StreamRegistry:
    """Tracks streams and answers live lookups from one shared snapshot.

    Every registration marks the snapshot stale. The next live lookup on any
    stream then refetches statuses for all registered channels in a single
    provider call. Staleness is driven only by registrations, never by time.

    Attributes:
        provider: Source of status records.
        base_url: Platform base URL for stream identities.
        host_marker: Host substring required in stream URLs.
        fetch_timeout: Seconds to wait for one provider call.
        case_sensitive_login: Whether record logins must match channel ids exactly.
    """

    def __init__(
        self,
        provider: StatusProvider,
        base_url: str = DEFAULT_BASE_URL,
        host_marker: str = HOST_MARKER,
        fetch_timeout: float = 15.0,
        case_sensitive_login: bool = True,
    ):
        """
        Initialize an empty registry.

        Args:
            provider: Source of status records
            base_url: Platform base URL for stream identities
            host_marker: Host substring required in stream URLs
            fetch_timeout: Seconds to wait for one provider call
            case_sensitive_login: Match record logins against channel ids exactly
        """
        self.provider = provider
        self.base_url = base_url
        self.host_marker = host_marker
        self.fetch_timeout = fetch_timeout
        self.case_sensitive_login = case_sensitive_login
        self._streams: list[Stream] = []
        self._snapshot: list[StatusRecord] | None = None
        self._stale = True
        self._lock = asyncio.Lock()

    @classmethod
    def from_config(
        cls, config: Config, provider: StatusProvider | None = None
    ) -> "StreamRegistry":
        """Create a registry from application configuration.

        Args:
            config: Application configuration.
            provider: Status provider to use; an HttpStatusProvider built from
                config.provider if omitted.

        Returns:
            Configured StreamRegistry.
        """
        if provider is None:
            provider = HttpStatusProvider(
                api_url=config.provider.api_url,
                timeout=config.provider.timeout,
                client_id=config.provider.client_id,
            )
        return cls(
            provider,
            base_url=config.base_url,
            host_marker=config.host_marker,
            fetch_timeout=config.fetch_timeout,
            case_sensitive_login=config.case_sensitive_login,
        )

    @property
    def streams(self) -> tuple[Stream, ...]:
        """Registered streams in registration order."""
        return tuple(self._streams)

    @property
    def snapshot(self) -> list[StatusRecord]:
        """Last fetched status records (empty if never fetched)."""
        return list(self._snapshot or [])

    @property
    def stale(self) -> bool:
        """True if the snapshot does not reflect every registered stream."""
        return self._stale

    @property
    def needs_refresh(self) -> bool:
        """True if the snapshot must be refetched before it can be trusted."""
        return self._stale or self._snapshot is None

    def create(self, data: Mapping[str, Any] | None = None) -> Stream:
        """Create a stream registered with this registry.

        Args:
            data: Optional seed with channel, url and arbitrary metadata.

        Returns:
            The new Stream.
        """
        return Stream(self, data)

    def register(self, stream: Stream) -> None:
        """Add a stream and mark the snapshot stale.

        Args:
            stream: Stream to track.
        """
        self._streams.append(stream)
        self.invalidate()
        logger.debug("stream registered", channel=stream.channel, total=len(self._streams))

    def invalidate(self) -> None:
        """Mark the snapshot stale so the next lookup refetches it."""
        self._stale = True

    def channel_ids(self) -> list[str]:
        """
        Collect channel ids of all registered streams for a batch request.

        Streams without a channel id are skipped and duplicates are sent once.

        Returns:
            Channel ids in registration order
        """
        return list(dict.fromkeys(s.channel for s in self._streams if s.channel))

    async def refresh(self) -> bool:
        """
        Refetch the status snapshot if it is stale or missing.

        Concurrent callers wait for an in-flight refresh and then reuse its
        result. Streams registered while the fetch is in flight keep the
        registry stale.

        Returns:
            True if the snapshot is current, False if the fetch failed
        """
        async with self._lock:
            if not self.needs_refresh:
                return True

            channel_ids = self.channel_ids()
            registered = len(self._streams)

            try:
                records = await asyncio.wait_for(
                    self.provider.fetch_statuses(channel_ids),
                    timeout=self.fetch_timeout,
                )
            except asyncio.TimeoutError:
                logger.warning(
                    "status fetch timed out",
                    channels=len(channel_ids),
                    timeout=self.fetch_timeout,
                )
                return False
            except StatusProviderError as e:
                logger.warning("status fetch failed", channels=len(channel_ids), error=str(e))
                return False

            self._snapshot = list(records)
            self._stale = len(self._streams) != registered

            if self._stale:
                logger.debug(
                    "streams registered during refresh, snapshot still stale",
                    fetched=registered,
                    registered=len(self._streams),
                )

            logger.debug(
                "live snapshot refreshed",
                channels=len(channel_ids),
                live=len(self._snapshot),
            )
            return True

    def logins_match(self, login: str | None, channel_id: str | None) -> bool:
        """
        Compare a record login with a channel id.

        Args:
            login: Login from a status record
            channel_id: Channel id of a stream

        Returns:
            True if they identify the same channel
        """
        if login is None or channel_id is None:
            return False
        if self.case_sensitive_login:
            return login == channel_id
        return login.casefold() == channel_id.casefold()

    def find_record(self, channel_id: str | None) -> StatusRecord | None:
        """
        Find the snapshot record for a channel.

        Args:
            channel_id: Channel id to look up

        Returns:
            First matching record, or None if the channel is not in the snapshot
        """
        for record in self._snapshot or []:
            if self.logins_match(record_login(record), channel_id):
                return record
        return None

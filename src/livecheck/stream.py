"""Tracked stream entity with live state reconciliation."""

from collections.abc import Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

import structlog

from livecheck.identity import StreamIdentity
from livecheck.types import LiveState, StatusRecord, record_login

if TYPE_CHECKING:
    from livecheck.registry import StreamRegistry

logger = structlog.get_logger()

# metadata key -> path into a status record
STREAM_FIELDS: dict[str, tuple[str, ...]] = {
    "stream_title": ("title",),
    "stream_viewers": ("channel_count",),
    "stream_res_height": ("video_height",),
    "stream_res_width": ("video_width",),
    "stream_bitrate": ("video_bitrate",),
    "stream_game": ("channel", "meta_game"),
    "stream_thumb_huge": ("channel", "screen_cap_url_huge"),
    "stream_thumb_large": ("channel", "screen_cap_url_large"),
    "stream_thumb_medium": ("channel", "screen_cap_url_medium"),
    "stream_thumb_small": ("channel", "screen_cap_url_small"),
    "stream_avatar_huge": ("channel", "image_url_huge"),
    "stream_avatar_large": ("channel", "image_url_large"),
    "stream_avatar_medium": ("channel", "image_url_medium"),
    "stream_avatar_small": ("channel", "image_url_small"),
    "stream_avatar_tiny": ("channel", "image_url_tiny"),
}


class ChannelMismatchError(ValueError):
    """Raised when a status record is applied to a different channel's stream."""


def _lookup(record: Mapping[str, Any], path: tuple[str, ...]) -> Any:
    value: Any = record
    for key in path:
        if not isinstance(value, Mapping):
            return None
        value = value.get(key)
    return value


class Stream:
    """A tracked channel with metadata and a lazily resolved live state.

    Streams register themselves with their registry on construction. The
    channel and URL are backed by a StreamIdentity, everything else by a
    plain metadata dict.

    Attributes:
        registry: Registry this stream belongs to.
        identity: Channel identity, or None until a channel or URL is set.
        live_state: Resolved live state.
    """

    def __init__(self, registry: "StreamRegistry", data: Mapping[str, Any] | None = None):
        """
        Create a stream and register it.

        A "channel" seed field sets the identity directly; otherwise a "url"
        field is parsed for the channel. Other fields become metadata.

        Args:
            registry: Registry to track this stream in
            data: Optional seed fields

        Raises:
            InvalidIdentifierError: If the seed url is not a platform URL
        """
        self.registry = registry
        self.identity: StreamIdentity | None = None
        self.live_state = LiveState.UNKNOWN
        self._data: dict[str, Any] = {}

        seed = dict(data or {})
        channel = seed.pop("channel", None)
        url = seed.pop("url", None)
        self._data.update(seed)

        if channel is not None:
            self.identity = StreamIdentity.from_channel(channel, base_url=registry.base_url)
        elif url is not None:
            self.identity = self._parse_url(url)

        registry.register(self)

    def __repr__(self) -> str:
        return f"Stream(channel={self.channel!r}, live_state={self.live_state.value})"

    def _parse_url(self, url: object) -> StreamIdentity:
        return StreamIdentity.from_url(
            url,
            base_url=self.registry.base_url,
            host_marker=self.registry.host_marker,
        )

    def _set_identity(self, identity: StreamIdentity) -> None:
        """Replace the identity; the previous live state no longer applies."""
        self.identity = identity
        self.live_state = LiveState.UNKNOWN
        self.registry.invalidate()

    @property
    def channel(self) -> str | None:
        """Channel id, or None if no identity is set."""
        return self.identity.channel_id if self.identity else None

    @channel.setter
    def channel(self, value: object) -> None:
        self._set_identity(StreamIdentity.from_channel(value, base_url=self.registry.base_url))

    @property
    def url(self) -> str | None:
        """Canonical channel URL, or None if no identity is set."""
        return self.identity.canonical_url if self.identity else None

    @url.setter
    def url(self, value: object) -> None:
        self._set_identity(self._parse_url(value))

    @property
    def metadata(self) -> Mapping[str, Any]:
        """Read-only view of the metadata bag."""
        return MappingProxyType(self._data)

    @property
    def live(self) -> bool | None:
        """Resolved live flag, or None if not checked yet."""
        if self.live_state is LiveState.UNKNOWN:
            return None
        return self.live_state is LiveState.LIVE

    def get(self, key: str, default: Any = None) -> Any:
        """
        Read a field.

        Args:
            key: "channel", "url" or any metadata key
            default: Value returned for unknown metadata keys

        Returns:
            Field value or default
        """
        if key == "channel":
            return self.channel
        if key == "url":
            return self.url
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """
        Write a field.

        Args:
            key: "channel", "url" or any metadata key
            value: New value; a url is parsed for its channel

        Raises:
            InvalidIdentifierError: If key is "url" and value is not a platform URL
        """
        if key == "channel":
            self.channel = value
        elif key == "url":
            self.url = value
        else:
            self._data[key] = value

    async def is_live(self) -> bool:
        """
        Check whether the stream is live.

        Refreshes the registry snapshot first if it is stale. Otherwise a
        stream that was already resolved returns its cached state without
        rescanning. Fetch failures are not raised; the stream then resolves
        against whatever snapshot the registry still holds.

        Returns:
            True if the channel is in the live snapshot
        """
        if self.registry.needs_refresh:
            await self.registry.refresh()
        elif self.live_state is not LiveState.UNKNOWN:
            return self.live_state is LiveState.LIVE

        record = self.registry.find_record(self.channel)
        if record is not None:
            self.add_stream_data(record)
            return True

        self.live_state = LiveState.NOT_LIVE
        logger.debug("stream not live", channel=self.channel)
        return False

    def add_stream_data(self, record: StatusRecord) -> bool:
        """
        Mark the stream live and copy presentation fields from a status record.

        Args:
            record: Status record for this stream's channel

        Returns:
            True

        Raises:
            ChannelMismatchError: If the record belongs to another channel
        """
        login = record_login(record)
        if not self.registry.logins_match(login, self.channel):
            raise ChannelMismatchError(
                f"Channel mismatch: record {login!r} applied to stream {self.channel!r}"
            )

        self.live_state = LiveState.LIVE
        for key, path in STREAM_FIELDS.items():
            self._data[key] = _lookup(record, path)

        logger.debug(
            "stream live",
            channel=self.channel,
            title=self._data["stream_title"],
            viewers=self._data["stream_viewers"],
        )
        return True

"""Channel identity parsing and URL normalization."""

from dataclasses import dataclass

DEFAULT_BASE_URL = "http://www.twitch.tv"
HOST_MARKER = "twitch.tv"


class InvalidIdentifierError(ValueError):
    """Raised when a URL does not point at the streaming platform."""


@dataclass(frozen=True)
class StreamIdentity:
    """Canonical channel identifier and the URL derived from it.

    The URL is never stored on its own, so it cannot drift from the channel.

    Attributes:
        channel_id: Canonical channel identifier (empty if unresolved).
        base_url: Platform base URL used to build the canonical URL.
    """

    channel_id: str
    base_url: str = DEFAULT_BASE_URL

    @property
    def canonical_url(self) -> str:
        """Canonical channel URL (base URL + "/" + channel id)."""
        return f"{self.base_url}/{self.channel_id}"

    @classmethod
    def from_channel(cls, name: object, base_url: str = DEFAULT_BASE_URL) -> "StreamIdentity":
        """Build an identity from a raw channel name, without any parsing.

        Args:
            name: Channel name, coerced to str as given (no case folding).
            base_url: Platform base URL.

        Returns:
            StreamIdentity for the channel.
        """
        return cls(channel_id=str(name), base_url=base_url)

    @classmethod
    def from_url(
        cls,
        url: object,
        base_url: str = DEFAULT_BASE_URL,
        host_marker: str = HOST_MARKER,
    ) -> "StreamIdentity":
        """Build an identity by extracting the channel name from a URL.

        The segment following the first one that contains the host marker is
        taken as the channel and lowercased. Anything after it (language codes,
        trailing paths) is discarded. A URL that ends at the host yields an
        empty channel id.

        Args:
            url: Channel URL, e.g. "http://www.twitch.tv/SomeChannel/en".
            base_url: Platform base URL.
            host_marker: Substring identifying the platform host.

        Returns:
            StreamIdentity for the channel.

        Raises:
            InvalidIdentifierError: If the URL does not contain the host marker.
        """
        url = str(url)

        if host_marker not in url:
            raise InvalidIdentifierError(f"Only {host_marker} URLs are permitted: {url}")

        channel_id = ""
        at_channel = False
        for part in url.split("/"):
            if at_channel:
                channel_id = part.lower()
                break
            if host_marker in part:
                at_channel = True

        return cls(channel_id=channel_id, base_url=base_url)

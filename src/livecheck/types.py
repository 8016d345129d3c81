"""Core data types for livecheck."""

from enum import Enum
from typing import TypedDict


class LiveState(Enum):
    """Resolved live state of a tracked stream."""

    UNKNOWN = "unknown"
    LIVE = "live"
    NOT_LIVE = "not_live"


class StatusChannel(TypedDict, total=False):
    """Channel section of a status record.

    Attributes:
        login: Lowercase channel login.
        meta_game: Game or category being streamed.
        screen_cap_url_*: Stream thumbnails, largest to smallest.
        image_url_*: Channel avatars, largest to smallest.
    """

    login: str
    meta_game: str
    screen_cap_url_huge: str
    screen_cap_url_large: str
    screen_cap_url_medium: str
    screen_cap_url_small: str
    image_url_huge: str
    image_url_large: str
    image_url_medium: str
    image_url_small: str
    image_url_tiny: str


class StatusRecord(TypedDict, total=False):
    """Raw status record returned by a provider for one live channel.

    Attributes:
        title: Stream title.
        channel_count: Current viewer count.
        video_height: Video resolution height.
        video_width: Video resolution width.
        video_bitrate: Video bitrate.
        channel: Channel details, including the login.
    """

    title: str
    channel_count: int
    video_height: int
    video_width: int
    video_bitrate: float
    channel: StatusChannel


def record_login(record: StatusRecord) -> str | None:
    """Get the channel login of a status record.

    Args:
        record: Status record from a provider.

    Returns:
        Login string, or None if the record has no usable login.
    """
    channel = record.get("channel")
    if not isinstance(channel, dict):
        return None
    login = channel.get("login")
    return str(login) if login is not None else None

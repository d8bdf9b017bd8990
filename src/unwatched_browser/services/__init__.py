"""Internal service layer between the app and the queue server."""

from unwatched_browser.services.queue_api_service import (
    fetch_channel_ids,
    fetch_unwatched,
    insert_channel,
    set_video_watched,
)

__all__ = [
    "fetch_channel_ids",
    "fetch_unwatched",
    "insert_channel",
    "set_video_watched",
]

"""UI-facing copy builders for action confirmations and notifications."""

from __future__ import annotations

from unwatched_browser.errors import FetchFailed, QueueError, RemoteMutationFailed

_MUTATION_ACTIONS = {
    "mark_watched": "mark {target} as watched",
    "watch": "remove {target} from your queue",
    "add_channel": "add channel {target}",
}


def _ensure_sentence(text: str) -> str:
    """Return text with terminal sentence punctuation."""
    cleaned = text.strip()
    if not cleaned:
        return ""
    if cleaned.endswith((".", "!", "?")):
        return cleaned
    return f"{cleaned}."


def build_actionable_error(
    action: str,
    *,
    next_step: str,
    why: str | None = None,
) -> str:
    """Build a 2-3 line actionable error message."""
    lines = [f"Could not {action.strip()}."]
    if why:
        lines.append(f"Why: {_ensure_sentence(why)}")
    lines.append(build_next_step_hint(next_step))
    return "\n".join(lines)


def build_next_step_hint(next_step: str) -> str:
    """Build a canonical next-step guidance line."""
    return f"Next step: {_ensure_sentence(next_step)}"


def build_actionable_success(
    message: str,
    *,
    detail: str | None = None,
    next_step: str | None = None,
) -> str:
    """Build a concise success message with optional detail and next step."""
    lines = [_ensure_sentence(message)]
    if detail:
        lines.append(_ensure_sentence(detail))
    if next_step:
        lines.append(build_next_step_hint(next_step))
    return "\n".join(lines)


def explain_failure(error: QueueError) -> tuple[str, str]:
    """Pick the (why, next step) lines for a server failure from its HTTP status."""
    status = error.status_code
    if status == 429:
        return "the queue server is rate limiting requests", "wait a moment and retry"
    if status is not None and status >= 500:
        return f"the queue server had an internal error (HTTP {status})", "retry shortly"
    if status in (401, 403):
        return (
            f"the server rejected the request (HTTP {status})",
            "check server_key in your config or UNWATCHED_SERVER_KEY",
        )
    if status is not None:
        return f"the server rejected the request (HTTP {status})", "check the value and retry"
    return "the queue server could not be reached", "check that the server is running, then press r"


def build_fetch_failure_message(error: FetchFailed) -> str:
    """Build the notification shown when a refresh fails."""
    why, next_step = explain_failure(error)
    return build_actionable_error(
        "load unwatched videos", why=f"{why}; showing the last loaded list", next_step=next_step
    )


def build_mutation_failure_message(error: RemoteMutationFailed) -> str:
    """Build the notification shown when a mark/watch/add request fails."""
    template = _MUTATION_ACTIONS.get(error.operation, error.operation + " {target}")
    why, next_step = explain_failure(error)
    if error.operation == "watch":
        why = f"the video was opened, but it is still in your queue; {why}"
    return build_actionable_error(template.format(target=error.target), why=why, next_step=next_step)


def build_failure_message(error: QueueError) -> str:
    """Dispatch to the fetch or mutation message builder."""
    if isinstance(error, RemoteMutationFailed):
        return build_mutation_failure_message(error)
    if isinstance(error, FetchFailed):
        return build_fetch_failure_message(error)
    why, next_step = explain_failure(error)
    return build_actionable_error("complete the request", why=why, next_step=next_step)


def build_list_empty_message(*, total: int, query: str, loading: bool = False) -> str:
    """Build the placeholder shown when the table has no rows."""
    if loading and total == 0:
        return "Loading unwatched videos..."
    if total == 0:
        return "No unwatched videos. Press r to refresh or a to add a channel."
    return f"No videos match '{query.strip()}'. Press Esc to clear the search."


def build_marked_watched_notification(video_id: str) -> str:
    return build_actionable_success(f"Marked {video_id} as watched")


def build_watched_notification(video_id: str) -> str:
    return build_actionable_success(f"Opened {video_id}", detail="Marked watched")


def build_channel_added_notification(channel_id: str) -> str:
    return build_actionable_success(
        f"Added channel {channel_id}", detail="New videos appear after the next crawl"
    )


__all__ = [
    "build_actionable_error",
    "build_actionable_success",
    "build_channel_added_notification",
    "build_failure_message",
    "build_fetch_failure_message",
    "build_list_empty_message",
    "build_marked_watched_notification",
    "build_mutation_failure_message",
    "build_next_step_hint",
    "build_watched_notification",
    "explain_failure",
]

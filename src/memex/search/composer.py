"""TextComposer: canonical embedding text for one event.

The text is the event summary followed by the content of every domain
record linked to the event, in a fixed order, and a temporal clause.
Part order never depends on the order in which the store answers, so
the same underlying data always yields the same text.
"""

from __future__ import annotations

import json
import logging
import math
from datetime import date
from typing import TYPE_CHECKING

from memex.config import MAX_INPUT_CHARS
from memex.search.types import PhotoTags

if TYPE_CHECKING:
    from memex.models import Event
    from memex.store.protocol import EventStore

logger = logging.getLogger(__name__)

_WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def parse_photo_tags(raw: str | None) -> PhotoTags:
    """Decode the JSON ``tags`` column of a photo analysis.

    Anything other than a JSON list yields :meth:`PhotoTags.unparsable`.
    Non-string and blank items are dropped.
    """
    if not raw:
        return PhotoTags()
    try:
        value = json.loads(raw)
    except ValueError:
        return PhotoTags.unparsable()
    if not isinstance(value, list):
        return PhotoTags.unparsable()
    return PhotoTags(tags=tuple(str(t) for t in value if isinstance(t, str) and t.strip()))


def temporal_clause(timestamp: str) -> str:
    """Return ``"on <weekday> <YYYY-MM-DD>"`` for an ISO *timestamp*.

    Falls back to ``"on <date prefix>"`` when the date cannot be parsed.
    """
    date_str = timestamp[:10]
    try:
        weekday = _WEEKDAYS[date.fromisoformat(date_str).weekday()]
    except ValueError:
        return f"on {date_str}"
    return f"on {weekday} {date_str}"


def _fmt_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


class TextComposer:
    """Builds embedding text from an :class:`EventStore`."""

    def __init__(self, store: EventStore, *, max_chars: int = MAX_INPUT_CHARS) -> None:
        self._store = store
        self._max_chars = max_chars

    async def compose(self, event_id: str) -> str:
        """Return the embedding text for *event_id*.

        Returns ``""`` when the event does not exist or has no content.
        """
        event = await self._store.get_event(event_id)
        if event is None:
            return ""
        parts = await self.compose_parts(event)
        text = ". ".join(p for p in parts if p)
        if not text.strip():
            return ""
        return text[: self._max_chars]

    async def compose_parts(self, event: Event) -> list[str]:
        """Return the ordered text parts for *event*, before joining."""
        store = self._store
        event_id = event.id
        parts: list[str] = [event.summary]

        txn = await store.get_transaction_by_event(event_id)
        if txn is not None:
            parts.append(f"{txn.merchant} {txn.amount:.2f} {txn.currency}")
            if txn.category:
                parts.append(f"category: {txn.category}")

        note = await store.get_note_by_event(event_id)
        if note is not None:
            parts.append(note.content)

        memo = await store.get_voice_memo_by_event(event_id)
        if memo is not None and memo.transcript:
            parts.append(memo.transcript)

        cal = await store.get_calendar_event_by_event(event_id)
        if cal is not None:
            parts.append(cal.title)
            if cal.description:
                parts.append(cal.description)
            if cal.location:
                parts.append(f"location: {cal.location}")

        loc = await store.get_location_by_event(event_id)
        if loc is not None and loc.address:
            parts.append(f"at {loc.address}")

        mood = await store.get_mood_by_event(event_id)
        if mood is not None:
            parts.append(f"mood: {mood.score}/5")
            if mood.note:
                parts.append(mood.note)

        health = await store.get_health_entry_by_event(event_id)
        if health is not None:
            parts.append(f"{health.metric_type}: {_fmt_number(health.value)} {health.unit}")

        parts.extend(await self._photo_parts(event_id))

        video = await store.get_video_by_event(event_id)
        if video is not None and video.summary:
            seconds = _round_half_up(video.duration_seconds)
            parts.append(f"Video ({seconds}s): {video.summary}")

        if event.timestamp:
            parts.append(temporal_clause(event.timestamp))

        return parts

    async def _photo_parts(self, event_id: str) -> list[str]:
        photo = await self._store.get_photo_by_event(event_id)
        if photo is None:
            return []

        analysis = await self._store.get_photo_analysis_by_photo(photo.id)
        if analysis is None:
            # No AI analysis yet: fall back to the manual caption
            return [f"Photo: {photo.caption}"] if photo.caption else []

        parts = [f"Photo: {analysis.description}"]
        tags = parse_photo_tags(analysis.tags)
        if not tags.parsed:
            logger.debug("Unparsable tags on photo analysis %s", analysis.id)
        elif tags.tags:
            parts.append(f"Visual tags: {', '.join(tags.tags)}")
        if analysis.detected_text:
            parts.append(f"Text in image: {analysis.detected_text}")
        return parts

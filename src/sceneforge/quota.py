"""Daily request counters for the remote generation services."""

import logging
from datetime import date, datetime, timezone
from typing import Callable, Dict, Optional

from pydantic import BaseModel, Field

from .storage import KeyValueStore

logger = logging.getLogger(__name__)

KEY_PREFIX = "quota_"
CATEGORIES = ("text", "image", "audio", "video")


def categorize_model(model_name: str) -> str:
    """Map a model name to the quota category it counts against."""
    name = model_name.lower()
    if "image" in name or "imagen" in name:
        return "image"
    if "tts" in name or "speech" in name:
        return "audio"
    if "veo" in name:
        return "video"
    return "text"


class QuotaStats(BaseModel):
    """Usage for one calendar day."""

    day: date
    count: int = 0
    active_model: str = "Idle"
    last_updated: Optional[datetime] = None
    model_counts: Dict[str, int] = Field(default_factory=lambda: {c: 0 for c in CATEGORIES})


class QuotaTracker:
    """Counts outbound requests per day, persisted in a key-value store."""

    def __init__(
        self,
        store: KeyValueStore,
        limit: int = 1500,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._store = store
        self._limit = limit
        self._today = today

    @property
    def limit(self) -> int:
        return self._limit

    def _key(self, day: date) -> str:
        return f"{KEY_PREFIX}{day.isoformat()}"

    async def stats(self) -> QuotaStats:
        """Return today's counters; a fresh record if none or unreadable."""
        day = self._today()
        try:
            data = await self._store.get(self._key(day))
            if isinstance(data, dict):
                return QuotaStats.model_validate({**data, "day": day})
        except Exception as e:
            logger.warning(f"Failed to read quota stats, resetting: {e}")
        return QuotaStats(day=day)

    async def increment(self, model_name: str) -> QuotaStats:
        """Record one request made with ``model_name``."""
        current = await self.stats()
        category = categorize_model(model_name)
        current.count += 1
        current.active_model = model_name
        current.last_updated = datetime.now(timezone.utc)
        current.model_counts[category] = current.model_counts.get(category, 0) + 1
        try:
            await self._store.set(self._key(current.day), current.model_dump(mode="json"))
        except Exception as e:
            logger.error(f"Failed to record quota usage: {e}")
        if current.count >= self._limit:
            logger.warning(f"Estimated daily limit reached ({current.count}/{self._limit})")
        return current

    async def remaining(self) -> int:
        current = await self.stats()
        return max(0, self._limit - current.count)

import logging
import threading
from collections import OrderedDict
from collections.abc import Hashable
from datetime import date

from bestoffer.domain.models import Card

logger = logging.getLogger(__name__)


def ranking_key(
    category: str, cards: list[Card], version: int, reference_amount: float, as_of: date | None = None
) -> tuple:
    # Whole cards, id included: the response echoes the caller's card back as applicable_card.
    # Card order decides which card wins ties, so it is part of the key.
    return (category, tuple(card.model_dump_json() for card in cards), version, reference_amount, as_of)


class RankingCache:
    """Bounded LRU of ranking results, keyed by the exact request inputs."""

    def __init__(self, max_entries: int = 256):
        self.max_entries = max_entries
        self._entries: OrderedDict[Hashable, object] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: Hashable):
        with self._lock:
            if key not in self._entries:
                return None
            self._entries.move_to_end(key)
            return self._entries[key]

    def put(self, key: Hashable, value) -> None:
        if self.max_entries <= 0:
            return
        with self._lock:
            self._entries[key] = value
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def clear(self, version: int | None = None) -> None:
        with self._lock:
            dropped = len(self._entries)
            self._entries.clear()
        logger.debug("ranking cache cleared (%d entries, repository version %s)", dropped, version)

    def __len__(self) -> int:
        return len(self._entries)

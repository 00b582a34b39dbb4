import json
import threading
from pathlib import Path

from pydantic import TypeAdapter

from bestoffer.domain.models import Card, CardCreate

_cards_adapter = TypeAdapter(list[Card])


class CardRegistryError(RuntimeError):
    pass


class CardNotFoundError(KeyError):
    pass


class CardRegistry:
    """Saved payment cards, optionally persisted to a JSON file."""

    def __init__(self, card_file: str | Path | None = None, cards: list[Card] | None = None):
        self.card_file = Path(card_file) if card_file else None
        self._cards = list(cards) if cards is not None else None
        self._lock = threading.Lock()

    def _load(self) -> list[Card]:
        if self.card_file is None or not self.card_file.exists():
            return []
        try:
            with self.card_file.open("r", encoding="utf-8") as fh:
                return _cards_adapter.validate_python(json.load(fh))
        except (OSError, ValueError) as exc:
            raise CardRegistryError(f"Card registry unreadable: {self.card_file}: {exc}") from exc

    def _ensure_loaded(self) -> list[Card]:
        if self._cards is None:
            self._cards = self._load()
        return self._cards

    def _persist(self) -> None:
        if self.card_file is None:
            return
        self.card_file.parent.mkdir(parents=True, exist_ok=True)
        with self.card_file.open("w", encoding="utf-8") as fh:
            json.dump(_cards_adapter.dump_python(self._cards, mode="json"), fh, indent=2, ensure_ascii=False)

    def list_cards(self) -> list[Card]:
        with self._lock:
            return list(self._ensure_loaded())

    def get_card(self, card_id: int) -> Card:
        for card in self.list_cards():
            if card.id == card_id:
                return card
        raise CardNotFoundError(card_id)

    def add_card(self, payload: CardCreate) -> Card:
        with self._lock:
            cards = self._ensure_loaded()
            card = Card(
                id=max((item.id or 0 for item in cards), default=0) + 1,
                name=payload.name.strip(),
                type=payload.type,
                bank=payload.bank.strip(),
            )
            cards.append(card)
            self._persist()
        return card

    def delete_card(self, card_id: int) -> None:
        with self._lock:
            cards = self._ensure_loaded()
            remaining = [card for card in cards if card.id != card_id]
            if len(remaining) == len(cards):
                raise CardNotFoundError(card_id)
            self._cards = remaining
            self._persist()

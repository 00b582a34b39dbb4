import json
import logging
import threading
from collections.abc import Callable, Iterable
from datetime import date, datetime, timezone
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from bestoffer.domain.models import (
    CardOffer,
    CardType,
    OfferFeedRecord,
    Platform,
    PlatformOffer,
)

logger = logging.getLogger(__name__)


class OfferRepositoryError(RuntimeError):
    pass


def category_value(category) -> str:
    if isinstance(category, Enum):
        category = category.value
    return str(category).strip().lower()


class OfferCatalog(BaseModel):
    """Immutable view of every platform, platform offer and card offer."""

    model_config = ConfigDict(frozen=True)

    platforms: list[Platform] = Field(default_factory=list)
    platform_offers: list[PlatformOffer] = Field(default_factory=list)
    card_offers: list[CardOffer] = Field(default_factory=list)

    def list_platforms(self, category=None) -> list[Platform]:
        if category is None:
            return list(self.platforms)
        wanted = category_value(category)
        return [platform for platform in self.platforms if platform.category.value == wanted]

    def list_platform_offers(self, platform_id: int | None = None) -> list[PlatformOffer]:
        if platform_id is None:
            return list(self.platform_offers)
        return [offer for offer in self.platform_offers if offer.platform_id == platform_id]

    def list_offers_by_category(self, category) -> list[PlatformOffer]:
        wanted = category_value(category)
        return [offer for offer in self.platform_offers if offer.service_type.value == wanted]

    def list_card_offers(self, platform_id: int | None = None, card_bank: str | None = None) -> list[CardOffer]:
        offers = list(self.card_offers)
        if platform_id is not None:
            offers = [offer for offer in offers if offer.platform_id == platform_id]
        if card_bank:
            bank = card_bank.strip().casefold()
            offers = [offer for offer in offers if offer.card_bank.strip().casefold() == bank]
        return offers


class OfferStore:
    def __init__(self, offer_file: str | Path | None = None, catalog: OfferCatalog | None = None):
        self.offer_file = Path(offer_file) if offer_file else None
        self._catalog = catalog
        self._version = 0
        self._lock = threading.RLock()
        self._listeners: list[Callable[[int], None]] = []

    @property
    def version(self) -> int:
        return self._version

    def _load(self) -> OfferCatalog:
        if self.offer_file is None:
            return OfferCatalog()
        if not self.offer_file.exists():
            raise OfferRepositoryError(f"Offer catalog not found: {self.offer_file}")

        try:
            with self.offer_file.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
            return OfferCatalog.model_validate(data)
        except (OSError, ValueError) as exc:
            raise OfferRepositoryError(f"Offer catalog unreadable: {self.offer_file}: {exc}") from exc

    def snapshot(self) -> OfferCatalog:
        with self._lock:
            if self._catalog is None:
                self._catalog = self._load()
            return self._catalog

    def list_platforms(self, category=None) -> list[Platform]:
        return self.snapshot().list_platforms(category)

    def list_platform_offers(self, platform_id: int | None = None) -> list[PlatformOffer]:
        return self.snapshot().list_platform_offers(platform_id)

    def list_offers_by_category(self, category) -> list[PlatformOffer]:
        return self.snapshot().list_offers_by_category(category)

    def list_card_offers(self, platform_id: int | None = None, card_bank: str | None = None) -> list[CardOffer]:
        return self.snapshot().list_card_offers(platform_id, card_bank)

    def subscribe(self, listener: Callable[[int], None]) -> None:
        """Call ``listener(version)`` after every mutation."""
        with self._lock:
            self._listeners.append(listener)

    def _commit(self, catalog: OfferCatalog) -> int:
        with self._lock:
            self._catalog = catalog
            self._version += 1
            version = self._version
            listeners = list(self._listeners)
        for listener in listeners:
            listener(version)
        return version

    def add_card_offer(
        self,
        platform_id: int,
        card_bank: str,
        discount_percentage: float,
        card_name: str | None = None,
        card_type: CardType | None = None,
        minimum_order_amount: float = 0,
        description: str = "",
        expiry_date: date | None = None,
    ) -> CardOffer:
        with self._lock:
            catalog = self.snapshot()
            if not any(platform.id == platform_id for platform in catalog.platforms):
                raise OfferRepositoryError(f"Unknown platform id: {platform_id}")

            card_offer = CardOffer(
                id=max((item.id for item in catalog.card_offers), default=0) + 1,
                platform_id=platform_id,
                card_bank=card_bank,
                card_name=card_name,
                card_type=card_type,
                discount_percentage=discount_percentage,
                minimum_order_amount=minimum_order_amount,
                description=description,
                expiry_date=expiry_date,
            )
            self._commit(catalog.model_copy(update={"card_offers": [*catalog.card_offers, card_offer]}))
        return card_offer

    def ingest(
        self,
        records: Iterable[OfferFeedRecord | dict],
        sheet_only_mode: bool = False,
        now: datetime | None = None,
    ) -> int:
        """Upsert feed records as platform offers and return how many were imported.

        Offers are matched on platform and promo code. In sheet-only mode every
        existing platform offer and card offer is dropped first, so the feed
        becomes the only source. Rows that fail validation are logged and skipped.
        """
        now = now or datetime.now(timezone.utc)

        with self._lock:
            catalog = self.snapshot()
            platforms = list(catalog.platforms)
            next_offer_id = max((offer.id for offer in catalog.platform_offers), default=0) + 1

            if sheet_only_mode:
                logger.info(
                    "sheet only mode: dropping %d platform offers and %d card offers",
                    len(catalog.platform_offers),
                    len(catalog.card_offers),
                )
                offers: list[PlatformOffer] = []
                card_offers: list[CardOffer] = []
            else:
                offers = list(catalog.platform_offers)
                card_offers = list(catalog.card_offers)

            seen = imported = 0
            for row in records:
                seen += 1
                try:
                    record = row if isinstance(row, OfferFeedRecord) else OfferFeedRecord.model_validate(row)
                except ValidationError as exc:
                    logger.warning("skipping feed row %d: %d validation error(s)", seen, exc.error_count())
                    continue

                platform = self._platform_for(platforms, record)
                offer = PlatformOffer(
                    id=next_offer_id,
                    platform_id=platform.id,
                    service_type=record.service_type,
                    platform_name=platform.name,
                    platform_url=record.platform_url or platform.url,
                    promo_code=record.promo_code,
                    min_transaction_amount=record.min_transaction_amount,
                    min_discount_amount=record.min_discount_amount,
                    max_discount_amount=record.max_discount_amount,
                    discount_percentage=record.discount_percentage,
                    offer_category=record.offer_category,
                    eligible_card_type=record.card_type,
                    eligible_bank_name=record.bank_name,
                    eligible_card_name=record.card_name,
                    is_stackable=record.is_stackable,
                    description=record.description,
                    last_updated=now,
                    expiry_date=record.expiry_date,
                )

                position = self._existing_offer(offers, offer)
                if position is None:
                    offers.append(offer)
                    next_offer_id += 1
                else:
                    offers[position] = offer.model_copy(update={"id": offers[position].id})
                imported += 1

            self._commit(OfferCatalog(platforms=platforms, platform_offers=offers, card_offers=card_offers))

        logger.info("imported %d of %d feed records", imported, seen)
        return imported

    @staticmethod
    def _platform_for(platforms: list[Platform], record: OfferFeedRecord) -> Platform:
        name = record.platform_name.strip()
        for platform in platforms:
            if platform.category == record.service_type and platform.name.casefold() == name.casefold():
                return platform

        platform = Platform(
            id=max((item.id for item in platforms), default=0) + 1,
            name=name,
            category=record.service_type,
            url=record.platform_url,
        )
        platforms.append(platform)
        return platform

    @staticmethod
    def _existing_offer(offers: list[PlatformOffer], offer: PlatformOffer) -> int | None:
        if not offer.promo_code:
            return None
        for position, existing in enumerate(offers):
            if existing.platform_id == offer.platform_id and existing.promo_code == offer.promo_code:
                return position
        return None

    def save(self) -> None:
        if self.offer_file is None:
            return
        payload = self.snapshot().model_dump(mode="json")
        self.offer_file.parent.mkdir(parents=True, exist_ok=True)
        with self.offer_file.open("w", encoding="utf-8") as fh:
            json.dump(payload, fh, indent=2, ensure_ascii=False)

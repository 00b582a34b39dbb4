from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ServiceType(str, Enum):
    bus = "bus"
    flight = "flight"
    movie = "movie"
    bill = "bill"
    hotel = "hotel"
    food = "food"
    shopping = "shopping"
    cab = "cab"


class CardType(str, Enum):
    credit = "credit"
    debit = "debit"
    prepaid = "prepaid"
    forex = "forex"


class OfferCategory(str, Enum):
    bank_offer = "bank_offer"
    card_offer = "card_offer"
    new_user = "new_user"
    seasonal = "seasonal"
    festival = "festival"
    other = "other"


class Card(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int | None = None
    name: str = ""
    type: CardType
    bank: str

    def identity(self) -> tuple[str, str, str]:
        # Exact values; the matcher compares card names without normalising them.
        return (self.bank, self.name, self.type.value)


class CardCreate(BaseModel):
    name: str = ""
    type: CardType
    bank: str = Field(min_length=1)


class Platform(BaseModel):
    id: int
    name: str
    category: ServiceType
    url: str = ""
    logo_url: str | None = None


class PlatformOffer(BaseModel):
    id: int
    platform_id: int
    service_type: ServiceType
    platform_name: str
    platform_url: str = ""
    promo_code: str = ""
    min_transaction_amount: float = 0
    min_discount_amount: float | None = None
    max_discount_amount: float | None = None
    discount_percentage: float = Field(ge=0, le=100)
    offer_category: OfferCategory = OfferCategory.other
    eligible_card_type: CardType | None = None
    eligible_bank_name: str | None = None
    eligible_card_name: str | None = None
    is_stackable: bool = False
    description: str = ""
    last_updated: datetime | None = None
    expiry_date: date | None = None


class CardOffer(BaseModel):
    id: int
    platform_id: int
    card_bank: str
    card_name: str | None = None
    card_type: CardType | None = None
    discount_percentage: float = Field(ge=0, le=100)
    minimum_order_amount: float = 0
    description: str = ""
    expiry_date: date | None = None


class CombinedOffer(BaseModel):
    platform: Platform
    base_offer: PlatformOffer
    matched_card_offer: CardOffer | None = None
    total_discount_percentage: float
    applicable_card: Card | None = None
    estimated_savings: float = 0

    @property
    def key(self) -> tuple[int, int]:
        return (self.platform.id, self.base_offer.id)


class CardBreakdown(BaseModel):
    card: Card | None = None
    offers: list[CombinedOffer] = Field(default_factory=list)
    best_offer: CombinedOffer | None = None


class OfferSearchRequest(BaseModel):
    card_name: str | None = None
    card_type: CardType | None = None
    bank_name: str | None = None
    service_type: ServiceType

    def to_card(self) -> Card | None:
        """The searched card, or None when bank and type are not both known."""
        if not self.bank_name or self.card_type is None:
            return None
        return Card(name=self.card_name or "", type=self.card_type, bank=self.bank_name)


_SENTINELS = {"", "na", "n/a", "none", "null", "-"}


def _absent(value):
    if isinstance(value, str) and value.strip().lower() in _SENTINELS:
        return None
    return value


class OfferFeedRecord(BaseModel):
    """Normalized row handed over by the import and scrape collaborators."""

    service_type: ServiceType
    platform_name: str = Field(min_length=1)
    platform_url: str = ""
    promo_code: str = ""
    min_transaction_amount: float = 0
    min_discount_amount: float | None = None
    max_discount_amount: float | None = None
    discount_percentage: float = Field(ge=0, le=100)
    offer_category: OfferCategory = OfferCategory.other
    card_type: CardType | None = None
    bank_name: str | None = None
    card_name: str | None = None
    is_stackable: bool = False
    description: str = ""
    expiry_date: date | None = None

    @field_validator(
        "min_discount_amount", "max_discount_amount", "bank_name", "card_name", "expiry_date", mode="before"
    )
    @classmethod
    def sentinel_to_none(cls, value):
        value = _absent(value)
        if isinstance(value, str):
            value = value.strip()
        return value

    @field_validator("min_transaction_amount", mode="before")
    @classmethod
    def missing_minimum_is_zero(cls, value):
        return 0 if _absent(value) is None else value

    @field_validator("service_type", "card_type", mode="before")
    @classmethod
    def lower_enum(cls, value):
        value = _absent(value)
        if isinstance(value, str):
            value = value.strip().lower()
            if value.endswith(" card"):
                value = value[: -len(" card")]
        return value

    @field_validator("offer_category", mode="before")
    @classmethod
    def known_category_or_other(cls, value):
        value = _absent(value)
        if isinstance(value, str):
            value = value.strip().lower().replace(" ", "_")
        if value not in OfferCategory._value2member_map_:
            return OfferCategory.other.value
        return value

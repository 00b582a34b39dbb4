from pathlib import Path

import pytest

from bestoffer.agents.orchestrator import OfferRankingOrchestrator
from bestoffer.domain.models import Card, CardOffer, CardType, Platform, PlatformOffer, ServiceType
from bestoffer.repository.offer_store import OfferCatalog, OfferStore

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SAMPLE_OFFERS_PATH = PROJECT_ROOT / "data" / "offers" / "sample_offers.json"
SAMPLE_CARDS_PATH = PROJECT_ROOT / "data" / "cards" / "sample_cards.json"


def make_platform(platform_id: int, name: str, category: ServiceType = ServiceType.bus) -> Platform:
    return Platform(id=platform_id, name=name, category=category)


def make_offer(offer_id: int, platform: Platform, discount_percentage: float, **extra) -> PlatformOffer:
    return PlatformOffer(
        id=offer_id,
        platform_id=platform.id,
        service_type=platform.category,
        platform_name=platform.name,
        promo_code=extra.pop("promo_code", f"CODE{offer_id}"),
        discount_percentage=discount_percentage,
        **extra,
    )


def make_card_offer(offer_id: int, platform: Platform, bank: str, discount_percentage: float, **extra) -> CardOffer:
    return CardOffer(
        id=offer_id,
        platform_id=platform.id,
        card_bank=bank,
        discount_percentage=discount_percentage,
        **extra,
    )


@pytest.fixture
def hdfc_card() -> Card:
    return Card(id=1, name="HDFC Millennia Credit Card", type=CardType.credit, bank="HDFC")


@pytest.fixture
def sbi_card() -> Card:
    return Card(id=2, name="SBI SimplyCLICK", type=CardType.credit, bank="SBI")


@pytest.fixture
def bus_catalog() -> OfferCatalog:
    redbus = make_platform(1, "RedBus")
    abhibus = make_platform(2, "AbhiBus")
    paytm = make_platform(3, "Paytm Bus")
    return OfferCatalog(
        platforms=[redbus, abhibus, paytm, make_platform(4, "Indigo", ServiceType.flight)],
        platform_offers=[
            make_offer(1, redbus, 10, min_transaction_amount=500, max_discount_amount=400),
            make_offer(2, abhibus, 12, min_transaction_amount=800),
            make_offer(3, paytm, 8),
        ],
        card_offers=[
            make_card_offer(1, redbus, "HDFC", 5),
            make_card_offer(2, redbus, "HDFC", 3, card_type=CardType.debit),
        ],
    )


@pytest.fixture
def store(bus_catalog: OfferCatalog) -> OfferStore:
    return OfferStore(catalog=bus_catalog)


@pytest.fixture
def orchestrator(store: OfferStore) -> OfferRankingOrchestrator:
    return OfferRankingOrchestrator(store, reference_amount=5000, fetch_timeout_s=2, skip_expired=False)

from functools import lru_cache

from bestoffer.agents.advisor import OfferAdvisor
from bestoffer.agents.orchestrator import OfferRankingOrchestrator
from bestoffer.config import settings
from bestoffer.repository.card_store import CardRegistry
from bestoffer.repository.offer_store import OfferStore


@lru_cache
def get_card_registry() -> CardRegistry:
    return CardRegistry(settings.card_registry_file)


@lru_cache
def get_orchestrator() -> OfferRankingOrchestrator:
    return OfferRankingOrchestrator(OfferStore(settings.offer_catalog_file), get_card_registry())


@lru_cache
def get_advisor() -> OfferAdvisor:
    return OfferAdvisor()

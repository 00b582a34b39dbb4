import logging
from concurrent.futures import ThreadPoolExecutor, wait
from datetime import date
from typing import Literal

from bestoffer.config import settings
from bestoffer.domain.models import Card, CardBreakdown, CombinedOffer, OfferCategory, OfferSearchRequest
from bestoffer.engine.assembler import assemble_combined_offers, is_live
from bestoffer.engine.cache import RankingCache, ranking_key
from bestoffer.engine.matcher import offer_matches_search
from bestoffer.engine.selectors import (
    SearchSortKey,
    apply_permutation,
    comparison_amount,
    filter_offers_by_type,
    rank_combined,
    score_offers,
    select_best,
    sort_offers,
)
from bestoffer.repository.card_store import CardRegistry
from bestoffer.repository.offer_store import OfferCatalog, OfferStore, category_value
from bestoffer.schemas.responses import RankingResponse, SearchResponse

logger = logging.getLogger(__name__)


def _describe(card: Card | None) -> str:
    if card is None:
        return "no card"
    return f"{card.bank} {card.name or card.type.value}".strip()


def apply_reranking(response: RankingResponse, permutation) -> RankingResponse:
    """Reorder by an advisory permutation; anything that does not fit is ignored."""
    if permutation is None:
        return response

    reordered = apply_permutation(response.offers, permutation)
    if reordered is None:
        logger.warning(
            "ignoring advisory ranking of length %s for %d offers",
            len(permutation) if isinstance(permutation, (list, tuple)) else "?",
            len(response.offers),
        )
        return response

    return response.model_copy(update={"offers": reordered, "best_offer": reordered[0], "reranked": True})


class OfferRankingOrchestrator:
    def __init__(
        self,
        offer_store: OfferStore,
        card_registry: CardRegistry | None = None,
        reference_amount: float | None = None,
        fetch_timeout_s: float | None = None,
        max_workers: int | None = None,
        skip_expired: bool | None = None,
        cache: RankingCache | None = None,
        enforce_eligibility: bool | None = None,
    ):
        self.offer_store = offer_store
        self.card_registry = card_registry
        self.reference_amount = (
            settings.reference_transaction_amount if reference_amount is None else reference_amount
        )
        self.fetch_timeout_s = settings.card_fetch_timeout_s if fetch_timeout_s is None else fetch_timeout_s
        self.max_workers = max_workers or settings.card_fetch_workers
        self.skip_expired = settings.skip_expired_offers if skip_expired is None else skip_expired
        self.enforce_eligibility = (
            settings.enforce_offer_eligibility if enforce_eligibility is None else enforce_eligibility
        )
        self.cache = cache if cache is not None else RankingCache(settings.ranking_cache_size)
        self.offer_store.subscribe(self.cache.clear)

    def _as_of(self) -> date | None:
        return date.today() if self.skip_expired else None

    def _combined_offers(self, catalog: OfferCatalog, category, cards: list[Card]) -> list[CombinedOffer]:
        as_of = self._as_of()
        combined: list[CombinedOffer] = []
        for platform in catalog.list_platforms(category):
            combined.extend(
                assemble_combined_offers(
                    platform,
                    catalog.list_platform_offers(platform.id),
                    catalog.list_card_offers(platform.id),
                    cards,
                    reference_amount=self.reference_amount,
                    as_of=as_of,
                    enforce_eligibility=self.enforce_eligibility,
                )
            )
        return rank_combined(combined)

    def rank(self, category, user_cards: list[Card] | None = None, reranking=None) -> RankingResponse:
        cards = list(user_cards or [])
        key = ranking_key(
            category_value(category), cards, self.offer_store.version, self.reference_amount, self._as_of()
        )

        ranked = self.cache.get(key)
        if ranked is None:
            offers = self._combined_offers(self.offer_store.snapshot(), category, cards)
            ranked = RankingResponse(offers=offers, best_offer=offers[0] if offers else None)
            self.cache.put(key, ranked)

        return apply_reranking(ranked, reranking)

    def rank_saved_cards(self, category, reranking=None) -> RankingResponse:
        cards = self.card_registry.list_cards() if self.card_registry else []
        return self.rank(category, cards, reranking)

    def _rank_for_card(self, catalog: OfferCatalog, category, card: Card | None) -> list[CombinedOffer]:
        return self._combined_offers(catalog, category, [card] if card else [])

    def _gather(
        self, catalog: OfferCatalog, category, cards: list[Card | None], timeout_s: float | None
    ) -> list[list[CombinedOffer] | None]:
        """Rank every card concurrently; failed or late cards come back as None.

        Every card is ranked against the same catalog snapshot, so an ingestion
        that lands mid-request cannot mix two catalog versions in one merge.
        """
        executor = ThreadPoolExecutor(
            max_workers=max(1, min(self.max_workers, len(cards))), thread_name_prefix="card-lookup"
        )
        try:
            futures = [executor.submit(self._rank_for_card, catalog, category, card) for card in cards]
            done, _ = wait(futures, timeout=timeout_s)
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        results: list[list[CombinedOffer] | None] = []
        for card, future in zip(cards, futures):
            if future not in done:
                logger.warning("offer lookup for %s did not finish within %ss", _describe(card), timeout_s)
                results.append(None)
                continue
            try:
                results.append(future.result())
            except Exception as exc:  # noqa: BLE001
                logger.warning("offer lookup for %s failed: %s", _describe(card), exc)
                results.append(None)
        return results

    def rank_across_cards(
        self,
        primary: OfferSearchRequest,
        saved_cards: list[Card] | None = None,
        reranking=None,
        timeout_s: float | None = None,
    ) -> RankingResponse:
        """Rank the searched card and every other saved card, then merge.

        A platform offer reachable through several cards is kept once, with the
        card that gives the highest total. Cards whose lookup fails or runs past
        the timeout contribute nothing.
        The catalog is read once up front; a repository fault there propagates,
        while per-card ranking errors and timeouts are isolated.
        """
        current = primary.to_card()
        cards: list[Card | None] = [current]
        seen = {current.identity()} if current else set()
        for card in saved_cards or []:
            if card.identity() in seen:
                continue
            seen.add(card.identity())
            cards.append(card)

        catalog = self.offer_store.snapshot()
        timeout = self.fetch_timeout_s if timeout_s is None else timeout_s
        results = self._gather(catalog, primary.service_type, cards, timeout)

        breakdown: list[CardBreakdown] = []
        merged: dict[tuple[int, int], CombinedOffer] = {}
        for card, offers in zip(cards, results):
            if not offers:
                continue
            breakdown.append(CardBreakdown(card=card, offers=offers, best_offer=offers[0]))
            for offer in offers:
                kept = merged.get(offer.key)
                if kept is None or offer.total_discount_percentage > kept.total_discount_percentage:
                    merged[offer.key] = offer

        ranked = rank_combined(list(merged.values()))
        response = RankingResponse(
            offers=ranked,
            best_offer=ranked[0] if ranked else None,
            per_card_breakdown=breakdown,
        )
        return apply_reranking(response, reranking)

    def search(
        self,
        request: OfferSearchRequest,
        transaction_amount: float | None = None,
        offer_category: OfferCategory | Literal["all"] = "all",
        sort_by: SearchSortKey = "discount",
        prefer_lower_min_spend: bool = False,
    ) -> SearchResponse:
        """Base offers of the requested service that the searched card can use.

        ``sort_by="relevance"`` orders by how well each offer suits the searched
        card; the other keys go through ``sort_offers``. The best offer is always
        the one worth the most money at the comparison amount.
        """
        as_of = self._as_of()
        offers = [
            offer
            for offer in self.offer_store.snapshot().list_offers_by_category(request.service_type)
            if is_live(offer.expiry_date, as_of) and offer_matches_search(offer, request)
        ]
        offers = filter_offers_by_type(offers, offer_category)

        amount = comparison_amount(
            offers, transaction_amount or self.reference_amount, floor=self.reference_amount
        )
        if sort_by == "relevance":
            ordered = [offer for offer, _ in score_offers(offers, request, prefer_lower_min_spend)]
        else:
            ordered = sort_offers(offers, sort_by, amount)

        return SearchResponse(
            offers=ordered,
            best_offer=select_best(offers, amount, floor=self.reference_amount),
        )

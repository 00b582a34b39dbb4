import logging
from typing import Literal

from bestoffer.domain.models import CombinedOffer, OfferCategory, OfferSearchRequest, PlatformOffer
from bestoffer.engine.evaluator import DEFAULT_TRANSACTION_AMOUNT, compute_effective_discount

logger = logging.getLogger(__name__)

REFERENCE_FLOOR = 5000.0

SortKey = Literal["discount", "percentage", "min_transaction"]
SearchSortKey = Literal["discount", "percentage", "min_transaction", "relevance"]


def comparison_amount(
    offers: list[PlatformOffer],
    transaction_amount: float = DEFAULT_TRANSACTION_AMOUNT,
    floor: float = REFERENCE_FLOOR,
) -> float:
    """Amount large enough to clear every candidate's minimum-transaction gate."""
    minimums = [offer.min_transaction_amount for offer in offers]
    return max(transaction_amount, max(minimums, default=0.0), floor)


def select_best(
    offers: list[PlatformOffer],
    transaction_amount: float = DEFAULT_TRANSACTION_AMOUNT,
    floor: float = REFERENCE_FLOOR,
) -> PlatformOffer | None:
    if not offers:
        return None

    amount = comparison_amount(offers, transaction_amount, floor)
    best: PlatformOffer | None = None
    best_discount = 0.0
    for offer in offers:
        discount = compute_effective_discount(offer, amount)
        if discount > best_discount:
            best, best_discount = offer, discount

    if best is None:
        logger.debug("no offer with an effective discount among %d candidates", len(offers))
    else:
        logger.debug(
            "best offer %s (%s) worth %.2f at amount %.2f",
            best.platform_name,
            best.promo_code,
            best_discount,
            amount,
        )
    return best


def rank_combined(offers: list[CombinedOffer]) -> list[CombinedOffer]:
    # sorted() is stable, equal totals keep their assembly order.
    return sorted(offers, key=lambda item: item.total_discount_percentage, reverse=True)


def sort_offers(
    offers: list[PlatformOffer],
    sort_by: SortKey = "discount",
    transaction_amount: float = DEFAULT_TRANSACTION_AMOUNT,
) -> list[PlatformOffer]:
    if sort_by == "discount":
        return sorted(
            offers,
            key=lambda offer: compute_effective_discount(offer, transaction_amount),
            reverse=True,
        )
    if sort_by == "percentage":
        return sorted(offers, key=lambda offer: offer.discount_percentage, reverse=True)
    if sort_by == "min_transaction":
        return sorted(offers, key=lambda offer: offer.min_transaction_amount)
    return list(offers)


def filter_offers_by_type(
    offers: list[PlatformOffer], offer_category: OfferCategory | Literal["all"] = "all"
) -> list[PlatformOffer]:
    if offer_category == "all":
        return list(offers)
    return [offer for offer in offers if offer.offer_category == offer_category]


def score_offers(
    offers: list[PlatformOffer],
    preferences: OfferSearchRequest,
    prefer_lower_min_spend: bool = False,
) -> list[tuple[PlatformOffer, float]]:
    """Order offers by how well they suit the searched card, best first."""
    scored: list[tuple[PlatformOffer, float]] = []
    for offer in offers:
        score = offer.max_discount_amount or 0.0
        score += offer.discount_percentage * 10

        if preferences.card_type and offer.eligible_card_type == preferences.card_type:
            score += 100
        if (
            preferences.bank_name
            and offer.eligible_bank_name
            and offer.eligible_bank_name.casefold() == preferences.bank_name.casefold()
        ):
            score += 100
        if (
            preferences.card_name
            and offer.eligible_card_name
            and preferences.card_name.casefold() in offer.eligible_card_name.casefold()
        ):
            score += 200

        if prefer_lower_min_spend:
            score += (10000 - offer.min_transaction_amount) / 100

        scored.append((offer, score))

    scored.sort(key=lambda item: item[1], reverse=True)
    return scored


def is_valid_permutation(permutation, size: int) -> bool:
    if not isinstance(permutation, (list, tuple)) or len(permutation) != size:
        return False
    if any(isinstance(index, bool) or not isinstance(index, int) for index in permutation):
        return False
    return sorted(permutation) == list(range(size))


def apply_permutation(offers: list[CombinedOffer], permutation) -> list[CombinedOffer] | None:
    """Reorder ``offers`` by index, or None when the permutation does not fit them."""
    if not offers or not is_valid_permutation(permutation, len(offers)):
        return None
    return [offers[index] for index in permutation]

from datetime import date

from bestoffer.domain.models import Card, CardOffer, CombinedOffer, Platform, PlatformOffer
from bestoffer.engine.evaluator import DEFAULT_TRANSACTION_AMOUNT, estimate_savings
from bestoffer.engine.matcher import base_offer_accepts, find_best_across_cards, is_restricted


def is_live(expiry_date: date | None, as_of: date | None) -> bool:
    return as_of is None or expiry_date is None or expiry_date >= as_of


def assemble_combined_offers(
    platform: Platform,
    base_offers: list[PlatformOffer],
    card_offers: list[CardOffer],
    user_cards: list[Card],
    reference_amount: float = DEFAULT_TRANSACTION_AMOUNT,
    as_of: date | None = None,
    enforce_eligibility: bool = False,
) -> list[CombinedOffer]:
    """Merge each of the platform's base offers with the user's best card bonus.

    When the platform prices any card specifically, users holding cards that
    match none of those offers get nothing from this platform. Users with no
    cards at all still see the plain platform offers.

    With ``enforce_eligibility`` a base offer limited to certain banks, card
    types or card names is also dropped unless one of the user's cards
    qualifies for it.
    """
    card_offers = [item for item in card_offers if is_live(item.expiry_date, as_of)]
    applicable_card, matched = find_best_across_cards(card_offers, user_cards)

    if card_offers and matched is None and user_cards:
        return []

    combined: list[CombinedOffer] = []
    for offer in base_offers:
        if offer.platform_id != platform.id or not is_live(offer.expiry_date, as_of):
            continue
        if enforce_eligibility and user_cards and is_restricted(offer):
            if not any(base_offer_accepts(offer, card) for card in user_cards):
                continue

        total = offer.discount_percentage + (matched.discount_percentage if matched else 0)
        combined.append(
            CombinedOffer(
                platform=platform,
                base_offer=offer,
                matched_card_offer=matched,
                total_discount_percentage=total,
                applicable_card=applicable_card,
                estimated_savings=estimate_savings(offer, total, reference_amount),
            )
        )
    return combined

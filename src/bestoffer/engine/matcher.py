from bestoffer.domain.models import Card, CardOffer, OfferSearchRequest, PlatformOffer


def _same_bank(left: str, right: str) -> bool:
    return left.strip().casefold() == right.strip().casefold()


def card_offer_matches(card_offer: CardOffer, card: Card) -> bool:
    """Bank must match; card name and type narrow the offer only when set."""
    if not _same_bank(card_offer.card_bank, card.bank):
        return False
    if card_offer.card_name is not None and card_offer.card_name != card.name:
        return False
    if card_offer.card_type is not None and card_offer.card_type != card.type:
        return False
    return True


def find_best_card_offer(card_offers: list[CardOffer], card: Card) -> CardOffer | None:
    best: CardOffer | None = None
    for card_offer in card_offers:
        if not card_offer_matches(card_offer, card):
            continue
        if best is None or card_offer.discount_percentage > best.discount_percentage:
            best = card_offer
    return best


def find_best_across_cards(
    card_offers: list[CardOffer], cards: list[Card]
) -> tuple[Card | None, CardOffer | None]:
    best_card: Card | None = None
    best_offer: CardOffer | None = None
    for card in cards:
        candidate = find_best_card_offer(card_offers, card)
        if candidate is None:
            continue
        if best_offer is None or candidate.discount_percentage > best_offer.discount_percentage:
            best_card, best_offer = card, candidate
    return best_card, best_offer


def base_offer_accepts(offer: PlatformOffer, card: Card) -> bool:
    if offer.eligible_bank_name and not _same_bank(offer.eligible_bank_name, card.bank):
        return False
    if offer.eligible_card_type is not None and offer.eligible_card_type != card.type:
        return False
    if offer.eligible_card_name and offer.eligible_card_name != card.name:
        return False
    return True


def is_restricted(offer: PlatformOffer) -> bool:
    return bool(offer.eligible_bank_name or offer.eligible_card_type or offer.eligible_card_name)


def offer_matches_search(offer: PlatformOffer, request: OfferSearchRequest) -> bool:
    """A restricted base offer needs the searched card to satisfy each restriction."""
    if offer.eligible_bank_name and not (
        request.bank_name and _same_bank(offer.eligible_bank_name, request.bank_name)
    ):
        return False
    if offer.eligible_card_type is not None and offer.eligible_card_type != request.card_type:
        return False
    if offer.eligible_card_name and offer.eligible_card_name != request.card_name:
        return False
    return True

from datetime import date

from conftest import make_card_offer, make_offer, make_platform

from bestoffer.domain.models import CardType
from bestoffer.engine.assembler import assemble_combined_offers

PLATFORM = make_platform(1, "RedBus")


def test_platform_with_card_pricing_excludes_non_matching_user(sbi_card) -> None:
    base = [make_offer(1, PLATFORM, 10)]
    card_offers = [make_card_offer(1, PLATFORM, "HDFC", 5)]

    assert assemble_combined_offers(PLATFORM, base, card_offers, [sbi_card]) == []


def test_user_without_cards_sees_platform_offer() -> None:
    base = [make_offer(1, PLATFORM, 10)]
    card_offers = [make_card_offer(1, PLATFORM, "HDFC", 5)]

    combined = assemble_combined_offers(PLATFORM, base, card_offers, [])

    assert len(combined) == 1
    assert combined[0].matched_card_offer is None
    assert combined[0].total_discount_percentage == 10


def test_total_is_base_plus_card_bonus(hdfc_card, sbi_card) -> None:
    base = [make_offer(1, PLATFORM, 10, max_discount_amount=400), make_offer(2, PLATFORM, 4)]
    card_offers = [
        make_card_offer(1, PLATFORM, "HDFC", 5),
        make_card_offer(2, PLATFORM, "HDFC", 8, card_type=CardType.debit),
    ]

    combined = assemble_combined_offers(PLATFORM, base, card_offers, [sbi_card, hdfc_card], reference_amount=1200)

    assert [item.base_offer.id for item in combined] == [1, 2]
    for item in combined:
        bonus = item.matched_card_offer.discount_percentage
        assert item.total_discount_percentage == item.base_offer.discount_percentage + bonus
        assert item.applicable_card == hdfc_card
    assert combined[0].estimated_savings == 180
    assert combined[1].estimated_savings == 108


def test_platform_without_card_offers_keeps_every_base_offer(sbi_card) -> None:
    base = [make_offer(1, PLATFORM, 10), make_offer(2, PLATFORM, 6)]

    combined = assemble_combined_offers(PLATFORM, base, [], [sbi_card])

    assert [item.total_discount_percentage for item in combined] == [10, 6]
    assert all(item.applicable_card is None for item in combined)


def test_offers_of_other_platforms_are_ignored(hdfc_card) -> None:
    other = make_platform(2, "AbhiBus")

    assert assemble_combined_offers(PLATFORM, [make_offer(1, other, 10)], [], [hdfc_card]) == []


def test_restricted_base_offer_is_kept_by_default(sbi_card) -> None:
    base = [make_offer(1, PLATFORM, 10, eligible_bank_name="HDFC"), make_offer(2, PLATFORM, 5)]

    assert [item.base_offer.id for item in assemble_combined_offers(PLATFORM, base, [], [sbi_card])] == [1, 2]


def test_restricted_base_offer_needs_an_accepting_card_when_enforced(hdfc_card, sbi_card) -> None:
    base = [make_offer(1, PLATFORM, 10, eligible_bank_name="HDFC"), make_offer(2, PLATFORM, 5)]

    def ids(cards):
        combined = assemble_combined_offers(PLATFORM, base, [], cards, enforce_eligibility=True)
        return [item.base_offer.id for item in combined]

    assert ids([sbi_card]) == [2]
    assert ids([hdfc_card]) == [1, 2]
    assert ids([]) == [1, 2]


def test_expired_offers_are_skipped(hdfc_card, sbi_card) -> None:
    today = date(2026, 6, 1)
    base = [make_offer(1, PLATFORM, 10, expiry_date=date(2026, 5, 31)), make_offer(2, PLATFORM, 5)]
    card_offers = [make_card_offer(1, PLATFORM, "HDFC", 5, expiry_date=date(2026, 1, 1))]

    combined = assemble_combined_offers(PLATFORM, base, card_offers, [sbi_card], as_of=today)

    assert [item.base_offer.id for item in combined] == [2]
    assert combined[0].total_discount_percentage == 5
    assert len(assemble_combined_offers(PLATFORM, base, card_offers, [sbi_card])) == 0

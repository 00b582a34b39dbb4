from conftest import make_offer, make_platform

from bestoffer.domain.models import CardType, OfferCategory, OfferSearchRequest, ServiceType
from bestoffer.engine.evaluator import compute_effective_discount
from bestoffer.engine.selectors import (
    apply_permutation,
    comparison_amount,
    filter_offers_by_type,
    is_valid_permutation,
    score_offers,
    select_best,
    sort_offers,
)

PLATFORM = make_platform(1, "RedBus")


def test_select_best_picks_highest_money_value() -> None:
    capped = make_offer(1, PLATFORM, 15, min_transaction_amount=2000, max_discount_amount=650)
    richer = make_offer(2, PLATFORM, 15, min_transaction_amount=2000, max_discount_amount=750)

    assert select_best([capped, richer], 5000) is richer


def test_select_best_is_optimal() -> None:
    offers = [
        make_offer(1, PLATFORM, 5),
        make_offer(2, PLATFORM, 20, max_discount_amount=300),
        make_offer(3, PLATFORM, 12, min_transaction_amount=9000),
        make_offer(4, PLATFORM, 1, min_discount_amount=700),
    ]

    best = select_best(offers, 5000)
    amount = comparison_amount(offers, 5000)

    assert amount == 9000
    assert all(
        compute_effective_discount(best, amount) >= compute_effective_discount(offer, amount) for offer in offers
    )


def test_select_best_tie_keeps_first_seen() -> None:
    first = make_offer(1, PLATFORM, 10)
    second = make_offer(2, PLATFORM, 10)

    assert select_best([first, second]) is first
    assert select_best([second, first]) is second


def test_select_best_without_candidates() -> None:
    assert select_best([]) is None
    assert select_best([make_offer(1, PLATFORM, 0)]) is None


def test_comparison_amount_never_below_floor() -> None:
    offers = [make_offer(1, PLATFORM, 10, min_transaction_amount=300)]

    assert comparison_amount(offers, 1000) == 5000
    assert comparison_amount(offers, 8000) == 8000
    assert comparison_amount([], 100, floor=1200) == 1200


def test_sort_offers_by_each_key() -> None:
    cheap = make_offer(1, PLATFORM, 30, min_transaction_amount=100, max_discount_amount=100)
    steady = make_offer(2, PLATFORM, 10, min_transaction_amount=2000)
    flat = make_offer(3, PLATFORM, 10, min_transaction_amount=500)

    assert [o.id for o in sort_offers([cheap, steady, flat], "discount", 5000)] == [2, 3, 1]
    assert [o.id for o in sort_offers([cheap, steady, flat], "percentage")] == [1, 2, 3]
    assert [o.id for o in sort_offers([cheap, steady, flat], "min_transaction")] == [1, 3, 2]


def test_filter_offers_by_type() -> None:
    bank = make_offer(1, PLATFORM, 10, offer_category=OfferCategory.bank_offer)
    new_user = make_offer(2, PLATFORM, 5, offer_category=OfferCategory.new_user)

    assert filter_offers_by_type([bank, new_user], OfferCategory.new_user) == [new_user]
    assert filter_offers_by_type([bank, new_user], "all") == [bank, new_user]


def test_score_offers_rewards_matching_card() -> None:
    generic = make_offer(1, PLATFORM, 12)
    hdfc = make_offer(
        2,
        PLATFORM,
        10,
        eligible_bank_name="HDFC",
        eligible_card_type=CardType.credit,
        eligible_card_name="HDFC Millennia Credit Card",
    )
    preferences = OfferSearchRequest(
        service_type=ServiceType.bus, bank_name="hdfc", card_type=CardType.credit, card_name="millennia"
    )

    scored = score_offers([generic, hdfc], preferences)

    assert scored[0] == (hdfc, 500.0)
    assert scored[1] == (generic, 120.0)


def test_permutation_validation() -> None:
    assert is_valid_permutation([1, 0, 2], 3)
    assert not is_valid_permutation([0, 1], 3)
    assert not is_valid_permutation([0, 0, 1], 3)
    assert not is_valid_permutation([0, 1, 3], 3)
    assert not is_valid_permutation(["0", 1], 2)
    assert not is_valid_permutation([True, False], 2)
    assert not is_valid_permutation("01", 2)


def test_apply_permutation_rejects_mismatch() -> None:
    assert apply_permutation(["a", "b"], [1, 0]) == ["b", "a"]
    assert apply_permutation(["a", "b"], [0]) is None
    assert apply_permutation([], []) is None

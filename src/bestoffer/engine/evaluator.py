import math
from collections.abc import Mapping
from typing import Any

from bestoffer.domain.models import PlatformOffer

DEFAULT_TRANSACTION_AMOUNT = 5000.0


def _as_number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _field(offer: Any, name: str) -> Any:
    if isinstance(offer, Mapping):
        return offer.get(name)
    return getattr(offer, name, None)


def compute_effective_discount(offer: Any, transaction_amount: float = DEFAULT_TRANSACTION_AMOUNT) -> float:
    """Money value of ``offer`` for a purchase of ``transaction_amount``.

    The percentage discount is raised to ``min_discount_amount`` and capped at
    ``max_discount_amount``. A purchase below ``min_transaction_amount`` is not
    eligible and is worth exactly 0 whatever the clamps say.

    ``offer`` may be a ``PlatformOffer`` or any mapping with the same keys.
    Non-numeric fields count as absent, so this never raises.
    """
    amount = _as_number(transaction_amount) or 0.0
    percentage = max(_as_number(_field(offer, "discount_percentage")) or 0.0, 0.0)

    discount = percentage / 100 * amount

    floor = _as_number(_field(offer, "min_discount_amount"))
    if floor and discount < floor:
        discount = floor

    ceiling = _as_number(_field(offer, "max_discount_amount"))
    if ceiling and discount > ceiling:
        discount = ceiling

    if amount < (_as_number(_field(offer, "min_transaction_amount")) or 0.0):
        return 0.0

    return discount


def estimate_savings(base_offer: PlatformOffer, total_percentage: float, transaction_amount: float) -> float:
    # The card bonus is added to the percentage, the base offer's clamps still bound the money value.
    terms = base_offer.model_dump(
        include={"min_transaction_amount", "min_discount_amount", "max_discount_amount"}
    )
    terms["discount_percentage"] = total_percentage
    return round(compute_effective_discount(terms, transaction_amount), 2)

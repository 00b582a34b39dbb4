import json
import logging

from bestoffer.config import settings
from bestoffer.domain.models import Card, CombinedOffer
from bestoffer.engine.selectors import is_valid_permutation

logger = logging.getLogger(__name__)


class AdvisoryError(RuntimeError):
    pass


SYSTEM_PROMPT = (
    "You rank booking discounts for a shopper. "
    "Return JSON only with one key, personalizedRanking: an array holding every offer id "
    "exactly once, best offer first, given the shopper's cards."
)


def _offer_payload(offers: list[CombinedOffer]) -> list[dict]:
    payload = []
    for index, offer in enumerate(offers):
        payload.append(
            {
                "id": index,
                "platform": offer.platform.name,
                "platformDiscount": f"{offer.base_offer.discount_percentage}%",
                "cardDiscount": (
                    f"{offer.matched_card_offer.discount_percentage}%" if offer.matched_card_offer else "None"
                ),
                "totalDiscount": f"{offer.total_discount_percentage}%",
                "minimumOrderAmount": offer.base_offer.min_transaction_amount,
                "maxDiscountAmount": offer.base_offer.max_discount_amount,
                "estimatedSavings": offer.estimated_savings,
                "applicableCard": (
                    f"{offer.applicable_card.name} ({offer.applicable_card.bank})" if offer.applicable_card else "None"
                ),
            }
        )
    return payload


class OfferAdvisor:
    """Asks a chat model for a personalised order of an already ranked offer list."""

    def __init__(self, api_key: str | None = None, model: str | None = None, client=None):
        self.api_key = (settings.openai_api_key if api_key is None else api_key).strip()
        self.model = (model or settings.openai_model).strip()
        self.client = client

    def _client(self):
        if self.client is not None:
            return self.client

        try:
            from openai import OpenAI
        except ImportError as exc:
            raise AdvisoryError(
                "openai package is required for the offer advisor. Install with: pip install -e '.[llm]'"
            ) from exc

        if not self.api_key:
            raise AdvisoryError("OPENAI_API_KEY is missing for the offer advisor.")

        self.client = OpenAI(api_key=self.api_key)
        return self.client

    def _request_ranking(self, offers: list[CombinedOffer], cards: list[Card]) -> list:
        user_cards = [{"name": card.name, "bank": card.bank, "type": card.type.value} for card in cards]
        prompt = json.dumps({"userCards": user_cards, "offers": _offer_payload(offers)}, ensure_ascii=False)

        response = self._client().chat.completions.create(
            model=self.model,
            temperature=0,
            response_format={"type": "json_object"},
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
        )

        content = response.choices[0].message.content
        if not content:
            raise AdvisoryError("Advisor returned empty content.")

        try:
            data = json.loads(content)
        except ValueError as exc:
            raise AdvisoryError(f"Advisor returned invalid JSON: {exc}") from exc

        ranking = data.get("personalizedRanking") if isinstance(data, dict) else None
        if not isinstance(ranking, list):
            raise AdvisoryError("Advisor reply has no personalizedRanking list.")
        return ranking

    def suggest_ranking(self, offers: list[CombinedOffer], cards: list[Card]) -> list[int] | None:
        """Permutation of offer indices, or None whenever no usable advice is available."""
        if not offers:
            return None

        try:
            ranking = self._request_ranking(offers, cards)
        except AdvisoryError as exc:
            logger.warning("advisory ranking unavailable: %s", exc)
            return None
        except Exception as exc:  # noqa: BLE001
            logger.warning("advisory ranking request failed: %s", exc)
            return None

        if not is_valid_permutation(ranking, len(offers)):
            logger.warning("advisor returned an invalid permutation for %d offers: %s", len(offers), ranking)
            return None
        return ranking

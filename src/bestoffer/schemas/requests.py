from typing import Any, Literal

from pydantic import BaseModel, Field

from bestoffer.domain.models import Card, CombinedOffer, OfferCategory, OfferSearchRequest
from bestoffer.engine.selectors import SearchSortKey


class RankRequest(BaseModel):
    category: str = Field(min_length=1)
    cards: list[Card] = Field(default_factory=list)
    # Advisory permutation; checked by the orchestrator, not here.
    reranking: list[Any] | None = None


class AcrossCardsRequest(BaseModel):
    primary: OfferSearchRequest
    saved_cards: list[Card] = Field(default_factory=list)
    reranking: list[Any] | None = None


class SearchRequest(OfferSearchRequest):
    transaction_amount: float | None = Field(default=None, gt=0)
    offer_category: OfferCategory | Literal["all"] = "all"
    sort_by: SearchSortKey = "discount"
    prefer_lower_min_spend: bool = False


class AdvisoryRequest(BaseModel):
    offers: list[CombinedOffer]
    cards: list[Card] = Field(default_factory=list)

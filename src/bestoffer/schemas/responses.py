from pydantic import BaseModel, Field

from bestoffer.domain.models import CardBreakdown, CombinedOffer, PlatformOffer


class RankingResponse(BaseModel):
    offers: list[CombinedOffer] = Field(default_factory=list)
    best_offer: CombinedOffer | None = None
    per_card_breakdown: list[CardBreakdown] | None = None
    reranked: bool = False


class SearchResponse(BaseModel):
    offers: list[PlatformOffer] = Field(default_factory=list)
    best_offer: PlatformOffer | None = None


class AdvisoryResponse(BaseModel):
    ranking: list[int] | None = None

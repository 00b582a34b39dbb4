from fastapi import APIRouter, Depends

from bestoffer.agents.advisor import OfferAdvisor
from bestoffer.agents.orchestrator import OfferRankingOrchestrator
from bestoffer.api.deps import get_advisor, get_orchestrator
from bestoffer.domain.models import Platform
from bestoffer.schemas.requests import AcrossCardsRequest, AdvisoryRequest, RankRequest, SearchRequest
from bestoffer.schemas.responses import AdvisoryResponse, RankingResponse, SearchResponse

router = APIRouter(tags=["offers"])


@router.get("/platforms", response_model=list[Platform])
def list_platforms(
    category: str | None = None, orchestrator: OfferRankingOrchestrator = Depends(get_orchestrator)
) -> list[Platform]:
    return orchestrator.offer_store.list_platforms(category)


@router.post("/offers", response_model=RankingResponse)
def rank_offers(
    request: RankRequest, orchestrator: OfferRankingOrchestrator = Depends(get_orchestrator)
) -> RankingResponse:
    return orchestrator.rank(request.category, request.cards, request.reranking)


@router.post("/offers/across-cards", response_model=RankingResponse)
def rank_across_cards(
    request: AcrossCardsRequest, orchestrator: OfferRankingOrchestrator = Depends(get_orchestrator)
) -> RankingResponse:
    return orchestrator.rank_across_cards(request.primary, request.saved_cards, request.reranking)


@router.post("/offers/search", response_model=SearchResponse)
def search_offers(
    request: SearchRequest, orchestrator: OfferRankingOrchestrator = Depends(get_orchestrator)
) -> SearchResponse:
    return orchestrator.search(
        request,
        request.transaction_amount,
        offer_category=request.offer_category,
        sort_by=request.sort_by,
        prefer_lower_min_spend=request.prefer_lower_min_spend,
    )


@router.post("/offers/advisory-ranking", response_model=AdvisoryResponse)
def advisory_ranking(request: AdvisoryRequest, advisor: OfferAdvisor = Depends(get_advisor)) -> AdvisoryResponse:
    return AdvisoryResponse(ranking=advisor.suggest_ranking(request.offers, request.cards))

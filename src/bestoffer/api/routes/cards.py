from fastapi import APIRouter, Depends, HTTPException, status

from bestoffer.api.deps import get_card_registry
from bestoffer.domain.models import Card, CardCreate
from bestoffer.repository.card_store import CardNotFoundError, CardRegistry

router = APIRouter(tags=["cards"])


@router.get("/cards", response_model=list[Card])
def list_cards(registry: CardRegistry = Depends(get_card_registry)) -> list[Card]:
    return registry.list_cards()


@router.post("/cards", response_model=Card, status_code=status.HTTP_201_CREATED)
def add_card(payload: CardCreate, registry: CardRegistry = Depends(get_card_registry)) -> Card:
    return registry.add_card(payload)


@router.get("/cards/{card_id}", response_model=Card)
def get_card(card_id: int, registry: CardRegistry = Depends(get_card_registry)) -> Card:
    try:
        return registry.get_card(card_id)
    except CardNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Card not found") from exc


@router.delete("/cards/{card_id}")
def delete_card(card_id: int, registry: CardRegistry = Depends(get_card_registry)) -> dict[str, str]:
    try:
        registry.delete_card(card_id)
    except CardNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Card not found") from exc
    return {"message": "Card deleted successfully"}

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from bestoffer.api.routes.cards import router as cards_router
from bestoffer.api.routes.health import router as health_router
from bestoffer.api.routes.offers import router as offers_router
from bestoffer.config import configure_logging, settings
from bestoffer.repository.card_store import CardRegistryError
from bestoffer.repository.offer_store import OfferRepositoryError

app = FastAPI(title="BestOffer API", version="0.1.0")
app.include_router(health_router)
app.include_router(cards_router)
app.include_router(offers_router)


@app.exception_handler(OfferRepositoryError)
@app.exception_handler(CardRegistryError)
async def repository_unavailable(request: Request, exc: RuntimeError) -> JSONResponse:
    return JSONResponse(status_code=503, content={"detail": str(exc)})


def run() -> None:
    configure_logging()
    uvicorn.run("bestoffer.api.app:app", host=settings.app_host, port=settings.app_port, reload=False)

import argparse
import json

from bestoffer.agents.orchestrator import OfferRankingOrchestrator
from bestoffer.api.app import run as run_api
from bestoffer.config import configure_logging, settings
from bestoffer.ingest import main as run_ingest
from bestoffer.repository.card_store import CardRegistry
from bestoffer.repository.offer_store import OfferStore


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="BestOffer unified entrypoint")
    parser.add_argument(
        "mode",
        nargs="?",
        choices=["api", "ingest", "rank"],
        default="api",
        help="Run mode: api (default), ingest, rank",
    )
    parser.add_argument("--category", default="bus", help="Service category for rank mode")
    return parser


def run_rank(category: str) -> None:
    configure_logging()
    orchestrator = OfferRankingOrchestrator(
        OfferStore(settings.offer_catalog_file), CardRegistry(settings.card_registry_file)
    )
    result = orchestrator.rank_saved_cards(category)
    print(json.dumps(result.model_dump(mode="json"), indent=2, ensure_ascii=False))


def main() -> None:
    args = build_parser().parse_args()

    if args.mode == "api":
        run_api()
        return

    if args.mode == "rank":
        run_rank(args.category)
        return

    run_ingest()


if __name__ == "__main__":
    main()

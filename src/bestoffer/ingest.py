import json
import logging
from pathlib import Path

from bestoffer.config import configure_logging, settings
from bestoffer.repository.offer_store import OfferStore

logger = logging.getLogger(__name__)


def ingest_feed(store: OfferStore, feed_file: str | Path, sheet_only_mode: bool = False) -> int:
    """Load a JSON list of feed records into ``store`` and persist it."""
    with Path(feed_file).open("r", encoding="utf-8") as fh:
        records = json.load(fh)
    if not isinstance(records, list):
        raise ValueError(f"Offer feed must be a JSON list: {feed_file}")

    imported = store.ingest(records, sheet_only_mode=sheet_only_mode)
    store.save()
    return imported


def main() -> None:
    configure_logging()
    feed_file = Path(settings.offer_feed_file)
    if not feed_file.exists():
        print(f"No offer feed found at {feed_file}")
        return

    store = OfferStore(settings.offer_catalog_file)
    imported = ingest_feed(store, feed_file, sheet_only_mode=settings.sheet_only_mode)
    mode = " (sheet only mode)" if settings.sheet_only_mode else ""
    print(f"Imported {imported} offer(s) into {settings.offer_catalog_file}{mode}")


if __name__ == "__main__":
    main()

import logging

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    offer_catalog_file: str = "data/offers/sample_offers.json"
    card_registry_file: str = "data/cards/sample_cards.json"
    offer_feed_file: str = "data/offers/feed.json"

    reference_transaction_amount: float = 5000.0
    card_fetch_timeout_s: float = 5.0
    card_fetch_workers: int = 4
    skip_expired_offers: bool = True
    enforce_offer_eligibility: bool = False
    ranking_cache_size: int = 256
    sheet_only_mode: bool = False

    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

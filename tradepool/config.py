from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "TradePool"
    debug: bool = False

    database_url: str = "postgresql+asyncpg://localhost:5432/tradepool"

    # Card catalog source (JSON array of {set, id, name, rarity, image})
    catalog_path: str = "data/cards.json"
    catalog_url: str = ""

    # Rarity compatibility rule: "exact" (same tier) or "bucket" (same tier group)
    rarity_rule: str = "exact"

    # Rarity tiers that can never be offered or requested
    non_tradeable_rarities: frozenset[str] = frozenset({"Promo", "☆☆", "☆☆☆", "👑"})

    # Shown when a counterparty has no directory entry
    unknown_display_name: str = "unknown"


settings = Settings()


# =============================================================================
# CATALOG PAGINATION
# =============================================================================

# Page size for incremental loading of catalog search results
DEFAULT_PAGE_SIZE = 9

# Upper bound on a single page
MAX_PAGE_SIZE = 90

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

DATA_DIR = Path(__file__).parent / "data"


class Settings(BaseSettings):
    """
    Application settings loaded from environment.

    card_database_path defaults to the sample database shipped in
    openinghand/data, which covers common hand-traps and staples. Point
    CARD_DATABASE_PATH at a full {id: metadata} JSON export to resolve
    arbitrary deck lists.
    """

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "OpeningHand"
    debug: bool = False

    card_database_path: Path = DATA_DIR / "cardDatabase.json"

    # Number of fingerprints kept by the result cache
    cache_size: int = 256

    # Worker threads per simulation. Results are deterministic for a given
    # (seed, simulation_workers) pair, not across different worker counts.
    simulation_workers: int = 1

    max_deck_list_bytes: int = 100 * 1024


settings = Settings()


# =============================================================================
# DECK DEFAULTS
# =============================================================================

DEFAULT_DECK_SIZE = 40
DEFAULT_HAND_SIZE = 5

# Kernel memory and work grow with trials x hand size, never with deck size
MAX_HAND_SIZE = 20

# Default constraint for a freshly created combo card
DEFAULT_COPIES_IN_DECK = 3
DEFAULT_MIN_IN_HAND = 1
DEFAULT_MAX_IN_HAND = 3

MAX_CARDS_PER_COMBO = 10


# =============================================================================
# SIMULATION LIMITS
# =============================================================================

DEFAULT_SIM_COUNT = 100_000

# Hard cap on trials per query
MAX_SIM_COUNT = 1_000_000

# Trials per vectorized batch; batch boundaries are the only yield points
BATCH_SIZE = 4096

MAX_DECK_LIST_BYTES = 100 * 1024

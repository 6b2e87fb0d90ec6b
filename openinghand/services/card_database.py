"""
Card metadata store.

Loads the bundled card database (card id -> name, type, level, attribute)
once and serves lookups by id and by case-insensitive name.
"""

import json
import logging
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path
from typing import Any

from openinghand.config import settings
from openinghand.models.card import Attribute, CardKind, CardMeta, is_extra_deck_type
from openinghand.models.deck import normalize_card_name

logger = logging.getLogger(__name__)


def _optional_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _parse_attribute(value: Any) -> Attribute | None:
    if not value:
        return None
    try:
        return Attribute(str(value).upper())
    except ValueError:
        return None


def card_meta_from_payload(card_id: int, payload: Mapping[str, Any]) -> CardMeta:
    """
    Build CardMeta from one entry of the metadata payload.

    Extra Deck status is derived from the type string. An explicit
    ``isExtraDeck`` flag is only used when the entry has no type.
    """
    type_line = str(payload.get("type") or "")
    kind = CardKind.from_type_line(type_line)
    if type_line:
        is_extra = is_extra_deck_type(kind, type_line)
    else:
        is_extra = bool(payload.get("isExtraDeck", False))

    return CardMeta(
        id=card_id,
        name=str(payload.get("name", "")),
        kind=kind,
        type_line=type_line,
        level=_optional_int(payload.get("level")),
        attribute=_parse_attribute(payload.get("attribute")),
        is_extra_deck=is_extra,
        description=str(payload.get("desc") or ""),
        atk=_optional_int(payload.get("atk")),
        defense=_optional_int(payload.get("def")),
    )


class CardMetadataStore:
    """
    Read-only, in-memory card metadata.

    Immutable after construction, so one instance can be shared across
    threads without locking.
    """

    def __init__(self, cards: Mapping[int, CardMeta]) -> None:
        self._by_id: dict[int, CardMeta] = dict(cards)
        self._by_name: dict[str, CardMeta] = {}
        # First id wins for reprints that share a name
        for card in self._by_id.values():
            self._by_name.setdefault(normalize_card_name(card.name), card)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Mapping[str, Any]]) -> "CardMetadataStore":
        """
        Build a store from a ``{id: {name, type, ...}}`` mapping.

        Entries with a non-numeric id or no name are skipped.
        """
        cards: dict[int, CardMeta] = {}
        for raw_id, entry in payload.items():
            card_id = _optional_int(raw_id)
            if card_id is None or not entry.get("name"):
                logger.warning("Skipping card database entry %r", raw_id)
                continue
            cards[card_id] = card_meta_from_payload(card_id, entry)
        return cls(cards)

    def lookup_by_id(self, card_id: int) -> CardMeta | None:
        """Metadata for a card id, or None if unknown."""
        card = self._by_id.get(card_id)
        if card is None:
            logger.debug("Unknown card id %s", card_id)
        return card

    def lookup_by_name(self, name: str) -> CardMeta | None:
        """Metadata for a card name (case-insensitive), or None if unknown."""
        return self._by_name.get(normalize_card_name(name))

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, card_id: object) -> bool:
        return card_id in self._by_id


def load_card_database(path: Path | None = None) -> CardMetadataStore:
    """
    Load card metadata from file.

    Args:
        path: Path to JSON file. Defaults to the configured card database path.

    Returns:
        CardMetadataStore indexed by id and name.

    Raises:
        FileNotFoundError: If database file doesn't exist
        ValueError: If the file is not a JSON object
    """
    if path is None:
        path = settings.card_database_path

    if not path.exists():
        raise FileNotFoundError(f"Card database not found at {path}.")

    try:
        with open(path, encoding="utf-8") as f:
            payload = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Card database at {path} is corrupted: {e}") from e

    if not isinstance(payload, dict):
        raise ValueError(f"Card database at {path} is corrupted: expected an object")

    store = CardMetadataStore.from_payload(payload)
    logger.info("Loaded %d cards from %s", len(store), path)
    return store


@lru_cache(maxsize=1)
def get_card_database() -> CardMetadataStore:
    """
    Get the cached default card database.

    Raises:
        FileNotFoundError: If database file doesn't exist
    """
    return load_card_database()

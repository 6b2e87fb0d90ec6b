"""
YDK deck-list parser.

A YDK file is plain UTF-8 text with one card id per line, split into
sections by the markers ``#main``, ``#extra`` and ``!side``. Any other line
starting with ``#`` is a comment. Cards before the first marker belong to
the main deck.

Card ids are resolved through the metadata store. Unknown ids are collected
in ``unmatched_ids`` and do not fail the parse. Extra Deck monsters are moved
to the extra deck whatever section they were listed under.
"""

from __future__ import annotations

import logging
from collections import Counter
from enum import Enum

from openinghand.config import MAX_DECK_LIST_BYTES
from openinghand.models.deck import ParsedDeck
from openinghand.models.failure import (
    FileTooLargeError,
    MalformedDeckListError,
    UnsupportedExtensionError,
)
from openinghand.services.card_database import CardMetadataStore

logger = logging.getLogger(__name__)

YDK_EXTENSION = ".ydk"


class Section(str, Enum):
    MAIN = "main"
    EXTRA = "extra"
    SIDE = "side"


class YdkParser:
    """
    Parser for YDK deck lists.

    Usage:
        parser = YdkParser(store)
        parsed = parser.parse(raw_bytes, filename="deck.ydk")
    """

    MARKERS: dict[str, Section] = {
        "#main": Section.MAIN,
        "#extra": Section.EXTRA,
        "!side": Section.SIDE,
    }

    def __init__(self, store: CardMetadataStore, max_bytes: int = MAX_DECK_LIST_BYTES) -> None:
        self.store = store
        self.max_bytes = max_bytes

    def parse(self, content: bytes | str, filename: str | None = None) -> ParsedDeck:
        """
        Parse a deck list.

        Args:
            content: Raw file bytes, or text pasted from the clipboard
            filename: Original file name; checked for the .ydk extension if given

        Returns:
            ParsedDeck with main, extra and side card names

        Raises:
            UnsupportedExtensionError: If filename does not end in .ydk
            FileTooLargeError: If content exceeds the size limit
            MalformedDeckListError: If content is not UTF-8 or a line is not a card id
        """
        if filename is not None and not filename.lower().endswith(YDK_EXTENSION):
            raise UnsupportedExtensionError(filename)

        raw = content.encode("utf-8") if isinstance(content, str) else content
        if len(raw) > self.max_bytes:
            raise FileTooLargeError(len(raw), self.max_bytes)

        try:
            text = raw.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise MalformedDeckListError("Deck list is not valid UTF-8 text") from e

        return self._parse_lines(text.splitlines())

    def _parse_lines(self, lines: list[str]) -> ParsedDeck:
        result = ParsedDeck()
        zones: dict[Section, list[str]] = {
            Section.MAIN: result.main,
            Section.EXTRA: result.extra,
            Section.SIDE: result.side,
        }
        current = Section.MAIN

        for line_num, line in enumerate(lines, 1):
            stripped = line.strip()
            if not stripped:
                continue

            marker = self.MARKERS.get(stripped.lower())
            if marker is not None:
                current = marker
                continue

            if stripped.startswith("#"):
                continue

            card_id = self._parse_card_id(stripped, line_num)
            card = self.store.lookup_by_id(card_id)
            if card is None:
                result.unmatched_ids.append(card_id)
                continue

            zone = current
            if card.is_extra_deck and current == Section.MAIN:
                zone = Section.EXTRA
            elif not card.is_extra_deck and current == Section.EXTRA:
                zone = Section.MAIN

            if zone != current:
                result.rerouted.append(card.name)
                logger.info(
                    "CARD_REROUTED",
                    extra={"card": card.name, "from": current.value, "to": zone.value},
                )

            zones[zone].append(card.name)

        result.counts = dict(Counter(result.main))

        if result.unmatched_ids:
            logger.warning(
                "UNMATCHED_CARD_IDS",
                extra={"count": len(result.unmatched_ids), "ids": result.unmatched_ids[:20]},
            )

        return result

    @staticmethod
    def _parse_card_id(line: str, line_num: int) -> int:
        if not line.isascii() or not line.isdigit():
            raise MalformedDeckListError(f"Expected a card id, found {line[:40]!r}", line_num)
        card_id = int(line)
        if card_id <= 0:
            raise MalformedDeckListError("Card ids must be positive", line_num)
        return card_id


# =============================================================================
# PUBLIC API
# =============================================================================


def parse_ydk(
    content: bytes | str,
    store: CardMetadataStore,
    filename: str | None = None,
    max_bytes: int = MAX_DECK_LIST_BYTES,
) -> ParsedDeck:
    """
    Parse a YDK deck list.

    This is a convenience function that creates a parser and parses.
    """
    return YdkParser(store, max_bytes=max_bytes).parse(content, filename=filename)

from dataclasses import dataclass, field


def normalize_card_name(name: str) -> str:
    """Key used to compare card names case-insensitively."""
    return name.strip().casefold()


@dataclass(frozen=True)
class DeckSpec:
    """
    Deck shape for a query.

    An abstract deck only declares its size; a concrete deck also lists the
    main, extra and side deck card names (with repetition for copies).

    Attributes:
        deck_size: Number of cards in the main deck
        hand_size: Number of cards in the opening hand
        main: Main deck card names, one entry per copy
        extra: Extra deck card names
        side: Side deck card names
    """

    deck_size: int
    hand_size: int
    main: tuple[str, ...] | None = None
    extra: tuple[str, ...] = ()
    side: tuple[str, ...] = ()

    @property
    def is_concrete(self) -> bool:
        return self.main is not None

    @classmethod
    def concrete(
        cls,
        main: list[str] | tuple[str, ...],
        hand_size: int,
        extra: list[str] | tuple[str, ...] = (),
        side: list[str] | tuple[str, ...] = (),
    ) -> "DeckSpec":
        """Build a concrete deck whose size is the main deck length."""
        return cls(
            deck_size=len(main),
            hand_size=hand_size,
            main=tuple(main),
            extra=tuple(extra),
            side=tuple(side),
        )


@dataclass
class ParsedDeck:
    """
    Result of parsing a deck list.

    Attributes:
        main: Main deck card names, in file order
        extra: Extra deck card names, in file order
        side: Side deck card names, in file order
        unmatched_ids: Card ids that are not in the metadata store
        counts: Copies per card name in the main deck
        rerouted: Names moved between main and extra deck by their metadata
    """

    main: list[str] = field(default_factory=list)
    extra: list[str] = field(default_factory=list)
    side: list[str] = field(default_factory=list)
    unmatched_ids: list[int] = field(default_factory=list)
    counts: dict[str, int] = field(default_factory=dict)
    rerouted: list[str] = field(default_factory=list)

    @property
    def has_unmatched(self) -> bool:
        """True if the deck list referenced unknown card ids."""
        return bool(self.unmatched_ids)

    def to_deck_spec(self, hand_size: int) -> DeckSpec:
        """Concrete DeckSpec for this deck list."""
        return DeckSpec.concrete(self.main, hand_size, extra=self.extra, side=self.side)

"""Tests for hand-trap classification."""

import re

from openinghand.services.card_database import CardMetadataStore
from openinghand.services.hand_traps import HandTrapClassifier


class TestKnownNames:
    def test_known_name_without_metadata(self) -> None:
        classifier = HandTrapClassifier()

        assert classifier.is_hand_trap("Ash Blossom & Joyous Spring")
        assert classifier.is_hand_trap("infinite impermanence")

    def test_unknown_name_without_metadata(self) -> None:
        """Without a store only the known names count."""
        classifier = HandTrapClassifier()

        assert not classifier.is_hand_trap("Ghost Belle & Haunted Mansion")

    def test_injected_name_list(self) -> None:
        classifier = HandTrapClassifier(known_names=frozenset({"Maxx \"C\""}))

        assert classifier.is_hand_trap("MAXX \"C\"")
        assert not classifier.is_hand_trap("Ash Blossom & Joyous Spring")


class TestTextHeuristics:
    def test_quick_effect_discard_monster(self, card_store: CardMetadataStore) -> None:
        classifier = HandTrapClassifier(known_names=frozenset(), store=card_store)

        assert classifier.is_hand_trap("Ghost Belle & Haunted Mansion")

    def test_zero_attack_zero_defense_from_hand(self, card_store: CardMetadataStore) -> None:
        """A 0/0 monster with an effect from the hand counts."""
        classifier = HandTrapClassifier(known_names=frozenset(), store=card_store)

        assert classifier.is_hand_trap("Effect Veiler")

    def test_own_main_phase_excluded(self, card_store: CardMetadataStore) -> None:
        classifier = HandTrapClassifier(known_names=frozenset(), store=card_store)

        assert not classifier.is_hand_trap("Diabellstar the Black Witch")

    def test_spell_never_hand_trap(self, card_store: CardMetadataStore) -> None:
        classifier = HandTrapClassifier(known_names=frozenset(), store=card_store)

        assert not classifier.is_hand_trap("Pot of Prosperity")

    def test_trap_needs_activate_from_hand(self, card_store: CardMetadataStore) -> None:
        classifier = HandTrapClassifier(known_names=frozenset(), store=card_store)

        assert not classifier.is_hand_trap("Infinite Impermanence")

    def test_custom_patterns(self, card_store: CardMetadataStore) -> None:
        classifier = HandTrapClassifier(
            known_names=frozenset(),
            store=card_store,
            monster_patterns=(re.compile(r"add 1 card", re.IGNORECASE),),
        )

        assert classifier.is_hand_trap("Snake-Eye Ash")

    def test_name_missing_from_store(self, card_store: CardMetadataStore) -> None:
        classifier = HandTrapClassifier(known_names=frozenset(), store=card_store)

        assert not classifier.is_hand_trap("Not A Real Card")


class TestHandTrapNames:
    def test_distinct_in_first_seen_order(self) -> None:
        classifier = HandTrapClassifier()

        names = classifier.hand_trap_names(
            [
                "Snake-Eye Ash",
                "Effect Veiler",
                "Ash Blossom & Joyous Spring",
                "effect veiler",
                "Ash Blossom & Joyous Spring",
            ]
        )

        assert names == ["Effect Veiler", "Ash Blossom & Joyous Spring"]

    def test_empty(self) -> None:
        assert HandTrapClassifier().hand_trap_names([]) == []

import pytest

from openinghand.services.card_database import CardMetadataStore


@pytest.fixture
def card_payload() -> dict[str, dict]:
    """Card metadata in the bundled database format."""
    return {
        "14558127": {
            "name": "Ash Blossom & Joyous Spring",
            "type": "Tuner Monster",
            "level": 3,
            "attribute": "FIRE",
            "atk": 0,
            "def": 1800,
            "desc": (
                "When a card or effect is activated that includes any of these effects "
                "(Quick Effect): You can discard this card; negate that effect."
            ),
        },
        "73642296": {
            "name": "Ghost Belle & Haunted Mansion",
            "type": "Tuner Monster",
            "level": 3,
            "attribute": "EARTH",
            "atk": 0,
            "def": 1800,
            "desc": (
                "When a card or effect is activated that includes any of these effects "
                "(Quick Effect): You can discard this card; negate the activation."
            ),
        },
        "9674034": {
            "name": "Snake-Eye Ash",
            "type": "Effect Monster",
            "level": 1,
            "attribute": "FIRE",
            "atk": 800,
            "def": 1000,
            "desc": "If this card is Normal or Special Summoned: You can add 1 card to your hand.",
        },
        "48452496": {
            "name": "Diabellstar the Black Witch",
            "type": "Effect Monster",
            "level": 4,
            "attribute": "DARK",
            "atk": 1500,
            "def": 1500,
            "desc": (
                "During your Main Phase: You can send 1 card from your hand or field "
                "to the GY; Special Summon this card from your hand."
            ),
        },
        "84211599": {
            "name": "Pot of Prosperity",
            "type": "Spell Card",
            "desc": "Banish 3 or 6 cards from your Extra Deck, face-down.",
        },
        "10045474": {
            "name": "Infinite Impermanence",
            "type": "Trap Card",
            "desc": "Target 1 face-up monster your opponent controls; negate its effects.",
        },
        "86066372": {
            "name": "Accesscode Talker",
            "type": "Link Monster",
            "attribute": "DARK",
            "atk": 2300,
            "desc": "2+ Effect Monsters",
        },
        "84815190": {
            "name": "Baronne de Fleur",
            "type": "Synchro Tuner Monster",
            "level": 10,
            "attribute": "WIND",
            "atk": 3000,
            "def": 2400,
            "desc": "1 Tuner + 1+ non-Tuner monsters",
        },
        "90448279": {
            "name": "Divine Arsenal AA-ZEUS - Sky Thunder",
            "type": "XYZ Monster",
            "level": 12,
            "attribute": "LIGHT",
            "atk": 3000,
            "def": 3000,
            "desc": "2 Level 12 monsters",
        },
        "97268402": {
            "name": "Effect Veiler",
            "type": "Tuner Monster",
            "level": 1,
            "attribute": "LIGHT",
            "atk": 0,
            "def": 0,
            "desc": (
                "During your opponent's Main Phase (Quick Effect): You can send this card "
                "from your hand to the GY, then target 1 Effect Monster your opponent "
                "controls; negate its effects until the end of this turn."
            ),
        },
    }


@pytest.fixture
def card_store(card_payload: dict[str, dict]) -> CardMetadataStore:
    """Metadata store built from card_payload."""
    return CardMetadataStore.from_payload(card_payload)


@pytest.fixture
def sample_ydk() -> str:
    """YDK deck list with an extra deck monster listed under #main."""
    return """#created by OpeningHand
#main
9674034
9674034
9674034
14558127
14558127
84211599
10045474
86066372
#extra
84815190
90448279
!side
97268402
"""

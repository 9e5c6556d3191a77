import pytest
from pydantic import ValidationError
from mt2_draft.models import CHAMPIONS, Card, DeckCard, find_champion

CHAMPION_IDS = [
    "fel",
    "talos",
    "lord_fenix",
    "lady_gilda",
    "ekka",
    "bolete",
    "madame_lionsmane",
    "orechi",
    "rector_flicker",
    "herszal",
    "heph",
]


def test_card_keywords_normalized():
    card = Card(id="x", name="X", keywords=["Dragon Hoard", " TANK", "boss-killer", ""])

    assert card.keywords == frozenset(["dragon_hoard", "tank", "boss_killer"])
    assert card.has_keyword("dragon hoard")


@pytest.mark.parametrize("base_value", [-1, 101])
def test_card_base_value_range(base_value):
    with pytest.raises(ValidationError):
        Card(id="x", name="X", base_value=base_value)


def test_card_is_frozen():
    card = Card(id="x", name="X")

    with pytest.raises(ValidationError):
        card.base_value = 99


@pytest.mark.parametrize(
    "card_type, is_unit, is_spell",
    [("Unit", True, False), ("spell", False, True), ("Equipment", False, False)],
)
def test_card_type(card_type, is_unit, is_spell):
    card = Card(id="x", name="X", card_type=card_type)

    assert card.is_unit is is_unit
    assert card.is_spell is is_spell


def test_deck_card_from_card():
    card = Card(id="x", name="X", base_value=70, keywords=["tank"])
    deck_card = DeckCard.from_card(card, draft_order=3, ring_number=2)

    assert deck_card.draft_order == 3
    assert deck_card.ring_number == 2
    assert deck_card.keywords == card.keywords
    assert deck_card.name == card.name


def test_deck_card_draft_order_is_one_based():
    with pytest.raises(ValidationError):
        DeckCard.from_card(Card(id="x", name="X"), draft_order=0, ring_number=1)


def test_champion_roster():
    assert [c.id for c in CHAMPIONS] == CHAMPION_IDS
    assert all(c.paths == ["Unchained", "Savior"] for c in CHAMPIONS)


def test_find_champion():
    assert find_champion("ekka").name == "Ekka"
    assert find_champion("nobody") is None

"""
tests/conftest.py
Global pytest configuration and fixtures.
"""

import pytest
from mt2_draft.advisor.engine import DraftAdvisor
from mt2_draft.dataset import CardCatalog
from mt2_draft.models import Card


def _card(card_id, base_value, card_type="Spell", keywords=(), rarity="Rare", **fields):
    return Card(
        id=card_id,
        name=fields.pop("name", card_id.replace("_", " ").title()),
        clan=fields.pop("clan", "Test"),
        card_type=card_type,
        rarity=rarity,
        base_value=base_value,
        keywords=list(keywords),
        **fields,
    )


# Candidate cards carry no tags unless a test needs one, so no context
# modifier fires by accident
TEST_CARDS = [
    _card("plain_spell_92", 92),
    _card("plain_spell_50", 50),
    _card("plain_spell_60", 60),
    _card("plain_unit_50", 50, card_type="Unit"),
    _card("shift_spell", 50, keywords=["shift"]),
    _card("advance_spell", 40, keywords=["advance"]),
    _card("capped_spell", 60, keywords=["consume", "funguy", "reform", "burnout"]),
    _card("capped_spell_100", 100, keywords=["consume", "funguy", "reform", "burnout"]),
    _card("zero_common", 0, rarity="Common"),
    _card("frontline_unit", 60, card_type="Unit", keywords=["frontline"]),
    _card("tank_unit", 70, card_type="Unit", keywords=["Tank"]),
    _card("tempo_spell", 60, keywords=["tempo"]),
    _card("valor_spell", 60, keywords=["valor"]),
    _card("scaling_tag_spell", 50, keywords=["scaling"]),
    _card("armor_unit", 50, card_type="Unit", keywords=["armor"]),
    _card("frontline_sweep_unit", 50, card_type="Unit", keywords=["frontline", "sweep"]),
    _card("sweep_spell", 71, keywords=["sweep"]),
    _card("pyregel_unit", 65, card_type="Unit", keywords=["pyregel"]),
    _card("moon_witch", 80, card_type="Unit", name="Moon Witch"),
]


@pytest.fixture(name="test_cards")
def fixture_test_cards():
    return {card.id: card for card in TEST_CARDS}


@pytest.fixture(name="test_catalog")
def fixture_test_catalog():
    return CardCatalog(TEST_CARDS)


@pytest.fixture(name="advisor")
def fixture_advisor(test_catalog):
    return DraftAdvisor(test_catalog, max_workers=1)


@pytest.fixture(name="make_card")
def fixture_make_card():
    return _card

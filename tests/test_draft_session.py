import pytest
from unittest.mock import patch
from mt2_draft.errors import NotFound, UnknownChampion
from mt2_draft.ocr import CardDetection
from mt2_draft.session import (
    DraftSession,
    SESSION_STATE_EMPTY,
    SESSION_STATE_IN_PROGRESS,
)

COVENANT_TESTS = [
    (-3, 0),
    (0, 0),
    (10, 10),
    (25, 25),
    (30, 25),
]

# Mixed add/remove sequences; draft order must stay 1..N after every step
DECK_EDIT_SEQUENCES = [
    [("add", "tank_unit"), ("add", "sweep_spell"), ("remove", "tank_unit")],
    [("add", "tank_unit"), ("add", "sweep_spell"), ("remove", "sweep_spell")],
    [
        ("add", "zero_common"),
        ("add", "tank_unit"),
        ("add", "zero_common"),
        ("add", "zero_common"),
        ("remove", "zero_common"),
        ("remove", "zero_common"),
        ("add", "sweep_spell"),
    ],
    [
        ("add", "tank_unit"),
        ("add", "sweep_spell"),
        ("remove", "sweep_spell"),
        ("remove", "tank_unit"),
        ("remove", "tank_unit"),
        ("add", "shift_spell"),
        ("add", "shift_spell"),
    ],
    [
        ("add", "shift_spell"),
        ("add", "tempo_spell"),
        ("add", "tank_unit"),
        ("add", "tempo_spell"),
        ("remove", "shift_spell"),
        ("remove", "tempo_spell"),
        ("add", "shift_spell"),
        ("remove", "tempo_spell"),
        ("remove", "fake_card"),
    ],
]


@pytest.fixture(name="session")
def fixture_session(advisor):
    return DraftSession(advisor)


def deck_ids(session):
    return [c.id for c in session.cards]


def draft_orders(session):
    return [c.draft_order for c in session.cards]


def test_new_session(session):
    assert session.champion_id == "fel"
    assert session.champion_path == "Unchained"
    assert session.current_ring == 1
    assert session.covenant_level == 10
    assert session.cards == ()
    assert session.state == SESSION_STATE_EMPTY
    assert session.revision == 0


def test_add_card_records_draft_metadata(session):
    session.add_card_by_id("tank_unit")
    session.set_current_ring(3)
    deck_card = session.add_card_by_id("sweep_spell")

    assert deck_card.draft_order == 2
    assert deck_card.ring_number == 3
    assert [c.ring_number for c in session.cards] == [1, 3]
    assert session.state == SESSION_STATE_IN_PROGRESS
    assert session.card_count() == 2


def test_add_card_allows_duplicates(session):
    for _ in range(3):
        session.add_card_by_id("zero_common")

    assert deck_ids(session) == ["zero_common"] * 3
    assert draft_orders(session) == [1, 2, 3]


def test_add_unknown_card(session):
    with pytest.raises(NotFound):
        session.add_card_by_id("fake_card")

    assert session.cards == ()
    assert session.revision == 0


def test_remove_card_renumbers(session):
    for card_id in ["tank_unit", "sweep_spell", "shift_spell", "tempo_spell"]:
        session.add_card_by_id(card_id)

    assert session.remove_card("sweep_spell") is True
    assert deck_ids(session) == ["tank_unit", "shift_spell", "tempo_spell"]
    assert draft_orders(session) == [1, 2, 3]


def test_remove_card_first_match(session):
    session.add_card_by_id("zero_common")
    session.set_current_ring(2)
    session.add_card_by_id("tank_unit")
    session.set_current_ring(5)
    session.add_card_by_id("zero_common")

    assert session.remove_card("zero_common") is True
    assert deck_ids(session) == ["tank_unit", "zero_common"]
    assert [c.ring_number for c in session.cards] == [2, 5]
    assert draft_orders(session) == [1, 2]


def test_remove_missing_card_is_noop(session):
    session.add_card_by_id("tank_unit")
    revision = session.revision

    assert session.remove_card("sweep_spell") is False
    assert deck_ids(session) == ["tank_unit"]
    assert session.revision == revision


def test_clear_deck(session):
    session.set_champion("talos")
    session.set_covenant_level(12)
    session.set_current_ring(6)
    session.add_card_by_id("tank_unit")

    session.clear_deck()

    assert session.cards == ()
    assert session.current_ring == 1
    assert session.champion_id == "talos"
    assert session.covenant_level == 12
    assert session.state == SESSION_STATE_EMPTY


@pytest.mark.parametrize("level, expected", COVENANT_TESTS)
def test_covenant_is_clamped(session, level, expected):
    session.set_covenant_level(level)
    assert session.covenant_level == expected


@pytest.mark.parametrize("ring", [0, 1, 9, 12, -1])
def test_ring_is_stored_verbatim(session, ring):
    session.set_current_ring(ring)
    assert session.current_ring == ring


def test_set_champion_resets_path(session):
    session.set_champion_path("Savior")
    session.set_champion("herszal")

    assert session.champion_id == "herszal"
    assert session.champion_path == "Unchained"


def test_set_unknown_champion(session):
    session.set_champion_path("Savior")

    with pytest.raises(UnknownChampion) as error:
        session.set_champion("not_a_champion")

    assert isinstance(error.value, NotFound)
    assert session.champion_id == "fel"
    assert session.champion_path == "Savior"


def test_set_champion_path_not_validated(session):
    session.set_champion_path("Wurmkin Path")
    assert session.champion_path == "Wurmkin Path"


def test_session_from_settings(advisor):
    session = DraftSession(
        advisor, champion_id="ekka", champion_path="Savior", covenant_level=40
    )

    assert session.champion_id == "ekka"
    assert session.champion_path == "Savior"
    assert session.covenant_level == 25


def test_snapshot_is_independent(session):
    session.add_card_by_id("tank_unit")
    snapshot = session.snapshot()
    session.add_card_by_id("sweep_spell")

    assert [c.id for c in snapshot.cards] == ["tank_unit"]
    assert snapshot.revision == 1
    assert session.revision == 2


def test_units_and_spells(session):
    for card_id in ["tank_unit", "sweep_spell", "frontline_unit"]:
        session.add_card_by_id(card_id)

    assert [c.id for c in session.units()] == ["tank_unit", "frontline_unit"]
    assert [c.id for c in session.spells()] == ["sweep_spell"]


def test_analysis_tracks_deck(session):
    assert session.analysis().has_frontline is False

    session.add_card_by_id("tank_unit")

    assert session.analysis().has_frontline is True


def test_score_card_uses_session_state(session):
    session.set_current_ring(4)
    without_tank = session.score_card("frontline_unit")
    session.add_card_by_id("tank_unit")
    with_tank = session.score_card("frontline_unit")

    assert without_tank.score == 75
    assert with_tank.score == 60


def test_score_candidates(session):
    session.set_current_ring(4)
    scores = session.score_candidates(["plain_spell_50", "fake_card", "frontline_unit"])

    assert list(scores) == ["plain_spell_50", "frontline_unit"]
    assert scores["frontline_unit"].score == 75


def test_score_candidates_discards_stale_results(session):
    session.set_current_ring(4)
    real_score_many = session.advisor.score_many
    calls = []

    def score_many_with_pick(card_ids, context):
        calls.append(context)
        result = real_score_many(card_ids, context)
        if len(calls) == 1:
            # A pick lands while the first batch is in flight
            session.add_card_by_id("tank_unit")
        return result

    with patch.object(session.advisor, "score_many", side_effect=score_many_with_pick):
        scores = session.score_candidates(["frontline_unit"])

    assert len(calls) == 2
    assert calls[0].other_deck_cards == ()
    assert [c.id for c in calls[1].other_deck_cards] == ["tank_unit"]
    assert scores["frontline_unit"].score == 60


def test_score_candidates_final_attempt_is_locked(session):
    real_score_many = session.advisor.score_many
    calls = []

    def always_stale(card_ids, context):
        calls.append(context)
        result = real_score_many(card_ids, context)
        if len(calls) <= 3:
            session.add_card_by_id("tank_unit")
        return result

    with patch.object(session.advisor, "score_many", side_effect=always_stale):
        scores = session.score_candidates(["plain_spell_50"])

    assert len(calls) == 4
    assert len(calls[-1].other_deck_cards) == 3
    assert "plain_spell_50" in scores


def test_score_detection(session):
    detection = CardDetection(
        detected_cards=["moon witch", "Unknown Card", "Plain Spell 50"], confidence=0.9
    )
    scores = session.score_detection(detection)

    assert list(scores) == ["moon_witch", "plain_spell_50"]


def test_score_detection_low_confidence(session):
    detection = CardDetection(detected_cards=["Moon Witch"], confidence=0.3)

    assert len(session.score_detection(detection)) == 0


@pytest.mark.parametrize("sequence", DECK_EDIT_SEQUENCES)
def test_draft_order_contiguous_after_edits(session, sequence):
    expected_ids = []
    for action, card_id in sequence:
        if action == "add":
            session.add_card_by_id(card_id)
            expected_ids.append(card_id)
        elif card_id in expected_ids:
            assert session.remove_card(card_id) is True
            expected_ids.remove(card_id)
        else:
            assert session.remove_card(card_id) is False

        assert deck_ids(session) == expected_ids
        assert draft_orders(session) == list(range(1, len(expected_ids) + 1))

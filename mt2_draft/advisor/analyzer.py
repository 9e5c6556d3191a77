"""
mt2_draft/advisor/analyzer.py
Structural analysis of a deck: missing roles, active synergies and aggregate stats.
"""

import statistics
from collections import Counter
from typing import FrozenSet, Iterable, Optional
from mt2_draft.advisor.schema import DeckAnalysis, SynergyCheck
from mt2_draft.models import Card
from mt2_draft.rules import SynergyTable
from mt2_draft.utils import round_half_up
from mt2_draft.constants import (
    FRONTLINE_KEYWORDS,
    BACKLINE_CLEAR_KEYWORDS,
    SCALING_KEYWORDS,
)


def keyword_union(cards: Iterable[Card]) -> FrozenSet[str]:
    """All keywords across the collection. Card keywords are already lower-cased."""
    union = set()
    for card in cards:
        union.update(card.keywords)
    return frozenset(union)


class DeckAnalyzer:
    """
    Derives a DeckAnalysis from a card collection.
    Holds no state besides the synergy table, so the result is always
    re-derivable from the cards alone.
    """

    def __init__(self, synergies: Optional[SynergyTable] = None):
        self.synergies = synergies if synergies is not None else SynergyTable.default()

    def analyze(self, cards: Iterable[Card]) -> DeckAnalysis:
        cards = list(cards)
        keywords = keyword_union(cards)

        # Registration order is preserved for the UI
        active_synergies = tuple(
            SynergyCheck(
                name=synergy.name,
                description=synergy.description,
                active=synergy.is_active(keywords),
            )
            for synergy in self.synergies.all()
        )

        average_value = (
            round_half_up(statistics.mean(c.base_value for c in cards)) if cards else 0
        )

        return DeckAnalysis(
            has_frontline=not keywords.isdisjoint(FRONTLINE_KEYWORDS),
            has_backline_clear=not keywords.isdisjoint(BACKLINE_CLEAR_KEYWORDS),
            has_scaling=not keywords.isdisjoint(SCALING_KEYWORDS),
            active_synergies=active_synergies,
            total_cards=len(cards),
            unit_count=sum(1 for c in cards if c.is_unit),
            spell_count=sum(1 for c in cards if c.is_spell),
            average_value=average_value,
            keywords=keywords,
            card_counts=dict(Counter(c.id for c in cards)),
        )

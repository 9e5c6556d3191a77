"""
mt2_draft/advisor/schema.py
Data models for draft scores, scoring contexts and deck analysis.
"""

from typing import Dict, FrozenSet, List, Optional, Tuple
from pydantic import BaseModel, ConfigDict
from mt2_draft.models import Card
from mt2_draft.constants import DEFAULT_CHAMPION_ID, DEFAULT_CHAMPION_PATH


class ScoreContext(BaseModel):
    """Everything the score calculator needs besides the candidate card."""

    model_config = ConfigDict(frozen=True)

    other_deck_cards: Tuple[Card, ...] = ()
    champion_id: str = DEFAULT_CHAMPION_ID
    champion_path: str = DEFAULT_CHAMPION_PATH
    ring_number: int = 1
    covenant_level: int = 0


class DraftScore(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: int
    tier: str
    reasons: Tuple[str, ...] = ()
    # Breakdown
    base_value: int = 0
    synergy_multiplier: float = 1.0
    context_bonus: int = 0
    champion_bonus: int = 0
    ring_adjustment: int = 0


class SynergyCheck(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    active: bool = False


class DeckAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    has_frontline: bool = False
    has_backline_clear: bool = False
    has_scaling: bool = False
    active_synergies: Tuple[SynergyCheck, ...] = ()
    total_cards: int = 0
    unit_count: int = 0
    spell_count: int = 0
    average_value: int = 0
    keywords: FrozenSet[str] = frozenset()
    card_counts: Dict[str, int] = {}

    def synergy(self, name: str) -> Optional[SynergyCheck]:
        return next((s for s in self.active_synergies if s.name == name), None)

    @property
    def active_synergy_names(self) -> List[str]:
        return [s.name for s in self.active_synergies if s.active]

"""
mt2_draft/models.py
Card, deck entry and champion records shared by the catalog, the scoring engine and the session.
"""

from typing import FrozenSet, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from mt2_draft.utils import normalize_keyword
from mt2_draft.constants import (
    CARD_TYPE_UNIT,
    CARD_TYPE_SPELL,
    CHAMPION_ROSTER,
    DEFAULT_CHAMPION_PATHS,
)


class Card(BaseModel):
    """A single card record. Owned by the catalog and never mutated."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    clan: str = ""
    card_type: str = ""
    rarity: str = ""
    cost: Optional[int] = None
    base_value: int = Field(default=0, ge=0, le=100)
    tempo_score: int = 0
    value_score: int = 0
    keywords: FrozenSet[str] = frozenset()
    description: str = ""
    expansion: str = "base"

    @field_validator("keywords", mode="before")
    @classmethod
    def _normalize_keywords(cls, value):
        if value is None:
            return frozenset()
        if isinstance(value, str):
            value = [value]
        return frozenset(normalize_keyword(k) for k in value if str(k).strip())

    def has_keyword(self, keyword: str) -> bool:
        return normalize_keyword(keyword) in self.keywords

    @property
    def is_unit(self) -> bool:
        return self.card_type.strip().lower() == CARD_TYPE_UNIT

    @property
    def is_spell(self) -> bool:
        return self.card_type.strip().lower() == CARD_TYPE_SPELL


class DeckCard(Card):
    """A card in the drafted deck with its draft metadata."""

    draft_order: int = Field(ge=1)
    ring_number: int

    @classmethod
    def from_card(cls, card: Card, draft_order: int, ring_number: int) -> "DeckCard":
        return cls(
            **card.model_dump(include=set(Card.model_fields)),
            draft_order=draft_order,
            ring_number=ring_number,
        )


class Champion(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    clan: str
    paths: List[str] = list(DEFAULT_CHAMPION_PATHS)


CHAMPIONS: List[Champion] = [
    Champion(id=champion_id, name=name, clan=clan)
    for champion_id, name, clan in CHAMPION_ROSTER
]


def find_champion(champion_id: str) -> Optional[Champion]:
    """Returns the roster entry for the id, or None"""
    return next((c for c in CHAMPIONS if c.id == champion_id), None)

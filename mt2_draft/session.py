"""
mt2_draft/session.py
The in-progress draft: champion, path, ring, covenant and the drafted deck.
Owns the card sequence and enforces its invariants; scoring and analysis are
delegated to the DraftAdvisor against immutable snapshots.
"""

import threading
from types import MappingProxyType
from typing import List, Mapping, Optional, Tuple
from pydantic import BaseModel, ConfigDict
from mt2_draft.advisor.engine import DraftAdvisor
from mt2_draft.advisor.schema import DeckAnalysis, DraftScore, ScoreContext
from mt2_draft.errors import NotFound, UnknownChampion
from mt2_draft.models import Card, DeckCard, find_champion
from mt2_draft.ocr import CardDetection
from mt2_draft.utils import clamp
from mt2_draft.logger import create_logger
from mt2_draft import constants

SESSION_STATE_EMPTY = "Empty"
SESSION_STATE_IN_PROGRESS = "InProgress"

logger = create_logger()


class SessionSnapshot(BaseModel):
    """Frozen copy of the session taken before scoring"""

    model_config = ConfigDict(frozen=True)

    champion_id: str
    champion_path: str
    current_ring: int
    covenant_level: int
    cards: Tuple[DeckCard, ...] = ()
    revision: int = 0

    def to_context(self) -> ScoreContext:
        return ScoreContext(
            other_deck_cards=self.cards,
            champion_id=self.champion_id,
            champion_path=self.champion_path,
            ring_number=self.current_ring,
            covenant_level=self.covenant_level,
        )


class DraftSession:
    def __init__(
        self,
        advisor: DraftAdvisor,
        champion_id: str = constants.DEFAULT_CHAMPION_ID,
        champion_path: Optional[str] = None,
        covenant_level: int = constants.DEFAULT_COVENANT,
        ocr_min_confidence: float = constants.OCR_MIN_CONFIDENCE,
    ):
        self.advisor = advisor
        self.ocr_min_confidence = ocr_min_confidence
        self._lock = threading.RLock()
        self._cards: List[DeckCard] = []
        self._revision = 0
        self._current_ring = constants.DEFAULT_RING
        self._covenant_level = constants.DEFAULT_COVENANT
        self._champion_id = constants.DEFAULT_CHAMPION_ID
        self._champion_path = constants.DEFAULT_CHAMPION_PATH

        self.set_champion(champion_id)
        if champion_path is not None:
            self.set_champion_path(champion_path)
        self.set_covenant_level(covenant_level)

    # --- State ---

    @property
    def champion_id(self) -> str:
        return self._champion_id

    @property
    def champion_path(self) -> str:
        return self._champion_path

    @property
    def current_ring(self) -> int:
        return self._current_ring

    @property
    def covenant_level(self) -> int:
        return self._covenant_level

    @property
    def cards(self) -> Tuple[DeckCard, ...]:
        with self._lock:
            return tuple(self._cards)

    @property
    def revision(self) -> int:
        """Incremented on every change to the card sequence"""
        return self._revision

    @property
    def state(self) -> str:
        return SESSION_STATE_IN_PROGRESS if self._cards else SESSION_STATE_EMPTY

    # --- Champion ---

    def set_champion(self, champion_id: str) -> None:
        """
        Select a champion from the roster.
        The path is reset to the champion's first declared path.
        """
        champion = find_champion(champion_id)
        if champion is None:
            raise UnknownChampion(champion_id)

        with self._lock:
            self._champion_id = champion.id
            self._champion_path = champion.paths[0]

    def set_champion_path(self, path: str) -> None:
        # Stored verbatim; not checked against the champion's declared paths
        with self._lock:
            self._champion_path = path

    # --- Progress ---

    def set_current_ring(self, ring: int) -> None:
        # Stored verbatim; scoring only treats rings 1-9 as meaningful
        if not constants.RING_MIN <= ring <= constants.RING_MAX:
            logger.debug(f"Ring {ring} is outside {constants.RING_MIN}-{constants.RING_MAX}")
        with self._lock:
            self._current_ring = ring

    def set_covenant_level(self, level: int) -> None:
        with self._lock:
            self._covenant_level = clamp(
                level, constants.COVENANT_MIN, constants.COVENANT_MAX
            )

    # --- Cards ---

    def add_card(self, card: Card) -> DeckCard:
        """Appends a card; duplicates are allowed"""
        with self._lock:
            deck_card = DeckCard.from_card(
                card,
                draft_order=len(self._cards) + 1,
                ring_number=self._current_ring,
            )
            self._cards.append(deck_card)
            self._revision += 1
        return deck_card

    def add_card_by_id(self, card_id: str) -> DeckCard:
        return self.add_card(self.advisor.catalog.get_by_id(card_id))

    def remove_card(self, card_id: str) -> bool:
        """
        Removes the first entry with the id and renumbers the rest from 1.
        Returns False (and changes nothing) when the id isn't in the deck.
        """
        with self._lock:
            index = next(
                (i for i, c in enumerate(self._cards) if c.id == card_id), None
            )
            if index is None:
                return False

            del self._cards[index]
            self._cards = [
                c if c.draft_order == order else c.model_copy(update={"draft_order": order})
                for order, c in enumerate(self._cards, start=1)
            ]
            self._revision += 1
            return True

    def clear_deck(self) -> None:
        """Empties the deck and resets the ring; champion and covenant are kept"""
        with self._lock:
            self._cards = []
            self._current_ring = constants.DEFAULT_RING
            self._revision += 1

    # --- Queries ---

    def snapshot(self) -> SessionSnapshot:
        with self._lock:
            return SessionSnapshot(
                champion_id=self._champion_id,
                champion_path=self._champion_path,
                current_ring=self._current_ring,
                covenant_level=self._covenant_level,
                cards=tuple(self._cards),
                revision=self._revision,
            )

    def analysis(self) -> DeckAnalysis:
        return self.advisor.analyze_deck(self.cards)

    def units(self) -> List[DeckCard]:
        return [c for c in self.cards if c.is_unit]

    def spells(self) -> List[DeckCard]:
        return [c for c in self.cards if c.is_spell]

    def card_count(self) -> int:
        return len(self._cards)

    def score_card(self, card_id: str) -> DraftScore:
        """Scores one candidate against the current deck. Raises NotFound."""
        card = self.advisor.catalog.get_by_id(card_id)
        return self.advisor.calculator.compute(card, self.snapshot().to_context())

    def score_candidates(self, card_ids: List[str]) -> Mapping[str, DraftScore]:
        """
        Batch-scores candidates against a snapshot of the deck.
        If the deck changes while the batch is running the results are
        discarded and the batch is recomputed; the last attempt holds the
        session lock so it cannot go stale.
        """
        for attempt in range(constants.STALE_BATCH_RETRIES):
            snapshot = self.snapshot()
            scores = self.advisor.score_many(card_ids, snapshot.to_context())
            if snapshot.revision == self._revision:
                return scores
            logger.info(
                f"Deck changed during scoring (attempt {attempt + 1}); discarding results"
            )

        logger.warning(
            f"Deck kept changing after {constants.STALE_BATCH_RETRIES} attempts; "
            "scoring under the session lock"
        )
        with self._lock:
            return self.advisor.score_many(card_ids, self.snapshot().to_context())

    def score_detection(self, detection: CardDetection) -> Mapping[str, DraftScore]:
        """
        Scores the cards read from the draft screen.
        Detections below the confidence threshold are ignored.
        """
        if detection.confidence < self.ocr_min_confidence:
            logger.info(
                f"Ignoring detection with confidence {detection.confidence:.2f} "
                f"(minimum {self.ocr_min_confidence:.2f})"
            )
            return MappingProxyType({})

        card_ids = []
        for name in detection.detected_cards:
            try:
                card_ids.append(self.advisor.catalog.get_by_name(name).id)
            except NotFound:
                logger.warning(f"Detected card '{name}' is not in the catalog")

        return self.score_candidates(card_ids)

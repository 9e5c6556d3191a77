"""
mt2_draft/advisor/engine.py
Decision Engine.
Implements the draft score pipeline (Base, Synergy, Context, Champion, Ring)
and the batch scoring entry points used by the session and the CLI.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Tuple
from mt2_draft.advisor.analyzer import DeckAnalyzer, keyword_union
from mt2_draft.advisor.schema import DeckAnalysis, DraftScore, ScoreContext
from mt2_draft.dataset import CardCatalog
from mt2_draft.errors import DraftError, InvalidContext, NotFound
from mt2_draft.models import Card
from mt2_draft.rules import ChampionOverrideTable, ContextModifierTable, SynergyTable
from mt2_draft.utils import clamp, round_half_up
from mt2_draft import constants

logger = logging.getLogger(__name__)


def tier_for_score(score: int) -> str:
    """S >= 90, A >= 80, B >= 70, otherwise C"""
    for threshold, tier in constants.TIER_THRESHOLDS:
        if score >= threshold:
            return tier
    return constants.TIER_C


def ring_bucket(ring_number: int) -> Optional[str]:
    """Rings outside 1-9 belong to no bucket"""
    for bucket, rings in constants.RING_BUCKETS.items():
        if ring_number in rings:
            return bucket
    return None


class ScoreCalculator:
    """
    Pure scoring function over a card and a frozen ScoreContext.
    Identical inputs always produce an identical DraftScore.
    """

    def __init__(
        self,
        catalog: CardCatalog,
        synergies: SynergyTable,
        context_modifiers: ContextModifierTable,
        champion_overrides: ChampionOverrideTable,
        analyzer: Optional[DeckAnalyzer] = None,
    ):
        self.catalog = catalog
        self.synergies = synergies
        self.context_modifiers = context_modifiers
        self.champion_overrides = champion_overrides
        self.analyzer = analyzer or DeckAnalyzer(synergies)

    def compute(self, card: Card, context: ScoreContext) -> DraftScore:
        if not self.catalog.contains(card.id):
            raise NotFound(card.id)
        if not constants.COVENANT_MIN <= context.covenant_level <= constants.COVENANT_MAX:
            raise InvalidContext(
                f"Covenant {context.covenant_level} outside "
                f"{constants.COVENANT_MIN}-{constants.COVENANT_MAX}"
            )

        reasons: List[str] = []

        # --- STEP 1: Base ---
        base_value = card.base_value

        # --- STEP 2: Synergy Multiplier ---
        multiplier, synergy_reasons = self.calculate_synergy_multiplier(
            card, context.other_deck_cards
        )
        reasons.extend(synergy_reasons)
        # Rounded to 6 places first so float noise can't tip a .5 boundary
        synergy_score = round_half_up(round(base_value * multiplier, 6))

        # --- STEP 3: Context Adjustment ---
        context_bonus, context_reasons = self.calculate_context_bonus(card, context)
        reasons.extend(context_reasons)

        # --- STEP 4: Champion Override ---
        running_total = synergy_score + context_bonus
        champion_bonus, champion_reason = self.calculate_champion_bonus(
            card, context, running_total
        )
        if champion_reason:
            reasons.append(champion_reason)

        # --- STEP 5: Ring Adjustment ---
        ring_adjustment, ring_reason = self.calculate_ring_adjustment(
            card, context.ring_number
        )
        if ring_reason:
            reasons.append(ring_reason)

        # === FINAL SCORE ===
        score = clamp(
            running_total + champion_bonus + ring_adjustment,
            constants.MIN_SCORE,
            constants.MAX_SCORE,
        )

        return DraftScore(
            score=score,
            tier=tier_for_score(score),
            reasons=tuple(reasons),
            base_value=base_value,
            synergy_multiplier=multiplier,
            context_bonus=context_bonus,
            champion_bonus=champion_bonus,
            ring_adjustment=ring_adjustment,
        )

    def calculate_synergy_multiplier(
        self, card: Card, other_deck_cards: Iterable[Card]
    ) -> Tuple[float, List[str]]:
        """
        Adds the bonus of every synergy satisfied by the keyword union of the
        candidate and the deck, then caps the total at SYNERGY_CAP.
        """
        keywords = keyword_union([card, *other_deck_cards])
        reasons = []
        bonus_total = 0.0

        for synergy in self.synergies.all():
            if synergy.is_active(keywords) and synergy.bonus > 0:
                bonus_total += synergy.bonus
                reasons.append(f"{synergy.name} synergy: +{synergy.bonus * 100:.0f}%")

        multiplier = round(1.0 + bonus_total, 6)
        if multiplier > constants.SYNERGY_CAP:
            multiplier = constants.SYNERGY_CAP
            reasons.append(
                f"Synergy bonus capped at +{(constants.SYNERGY_CAP - 1.0) * 100:.0f}%"
            )

        return multiplier, reasons

    def calculate_context_bonus(
        self, card: Card, context: ScoreContext
    ) -> Tuple[int, List[str]]:
        """
        Sums every context modifier whose predicate holds for (deck analysis, card).
        Reasons are listed by priority, table order within a priority.
        """
        analysis = self.analyzer.analyze(context.other_deck_cards)
        total = 0
        reasons = []

        modifiers = sorted(
            self.context_modifiers.all(),
            key=lambda m: constants.PRIORITY_RANK[m.priority],
        )
        for modifier in modifiers:
            if modifier.modifier and modifier.applies(analysis, card, context):
                total += modifier.modifier
                label = modifier.description or modifier.name
                reasons.append(f"{label}: {modifier.modifier:+d}")

        return total, reasons

    def calculate_champion_bonus(
        self, card: Card, context: ScoreContext, running_total: int
    ) -> Tuple[int, str]:
        """
        'add' overrides contribute their value directly.
        'replace' overrides set the running total to their value.
        """
        override = self.champion_overrides.lookup(
            context.champion_id, context.champion_path, card.id
        )
        if override is None:
            return 0, ""

        if override.mode == constants.OVERRIDE_MODE_REPLACE:
            delta = override.value - running_total
        else:
            delta = override.value

        if delta == 0:
            return 0, ""

        label = f"Champion favorite ({context.champion_id})"
        if override.reason:
            label = f"{label} - {override.reason}"
        return delta, f"{label}: {delta:+d}"

    def calculate_ring_adjustment(self, card: Card, ring_number: int) -> Tuple[int, str]:
        bucket = ring_bucket(ring_number)
        if bucket is None:
            return 0, ""

        card_type = card.card_type.strip().lower()
        delta = constants.RING_ADJUSTMENTS.get((bucket, card_type), 0)
        if delta == 0:
            return 0, ""

        label = constants.RING_ADJUSTMENT_LABELS[bucket]
        return delta, f"{label} {card_type}: {delta:+d}"


class DraftAdvisor:
    """
    Entry point for scoring requests expressed as card ids.
    Resolves ids through the catalog and dispatches to the ScoreCalculator.
    """

    def __init__(
        self,
        catalog: CardCatalog,
        synergies: Optional[SynergyTable] = None,
        context_modifiers: Optional[ContextModifierTable] = None,
        champion_overrides: Optional[ChampionOverrideTable] = None,
        max_workers: int = constants.DEFAULT_BATCH_WORKERS,
    ):
        self.catalog = catalog
        self.synergies = synergies if synergies is not None else SynergyTable.default()
        self.context_modifiers = (
            context_modifiers
            if context_modifiers is not None
            else ContextModifierTable.default()
        )
        self.champion_overrides = (
            champion_overrides
            if champion_overrides is not None
            else ChampionOverrideTable.default()
        )
        self.max_workers = max(1, max_workers)
        self.analyzer = DeckAnalyzer(self.synergies)
        self.calculator = ScoreCalculator(
            catalog,
            self.synergies,
            self.context_modifiers,
            self.champion_overrides,
            self.analyzer,
        )

    def resolve_deck(self, deck_card_ids: Iterable[str]) -> Tuple[Card, ...]:
        """Looks up deck ids, skipping (and logging) the ones the catalog doesn't know"""
        deck_card_ids = list(deck_card_ids)
        cards = self.catalog.get_by_ids(deck_card_ids)
        if len(cards) != len(deck_card_ids):
            missing = [i for i in deck_card_ids if not self.catalog.contains(i)]
            logger.warning(f"Ignoring unknown deck card ids: {missing}")
        return tuple(cards)

    def score(
        self,
        card_id: str,
        deck_card_ids: Iterable[str],
        champion_id: str,
        path: str,
        ring: int,
        covenant: int,
    ) -> DraftScore:
        card = self.catalog.get_by_id(card_id)
        context = ScoreContext(
            other_deck_cards=self.resolve_deck(deck_card_ids),
            champion_id=champion_id,
            champion_path=path,
            ring_number=ring,
            covenant_level=covenant,
        )
        return self.calculator.compute(card, context)

    def score_many(
        self, card_ids: Iterable[str], context: ScoreContext
    ) -> Mapping[str, DraftScore]:
        """
        Scores every candidate against the same frozen context.
        Unresolvable ids are omitted; the returned mapping is read-only and
        iterates in request order.
        """
        requested = list(dict.fromkeys(card_ids))

        if self.max_workers > 1 and len(requested) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                results = list(
                    executor.map(lambda i: self._score_entry(i, context), requested)
                )
        else:
            results = [self._score_entry(i, context) for i in requested]

        scores = {
            card_id: result
            for card_id, result in zip(requested, results)
            if result is not None
        }
        return MappingProxyType(scores)

    def _score_entry(self, card_id: str, context: ScoreContext) -> Optional[DraftScore]:
        try:
            card = self.catalog.get_by_id(card_id)
            return self.calculator.compute(card, context)
        except DraftError as error:
            logger.warning(f"Skipping {card_id} in batch: {error}")
            return None

    def analyze_deck(self, cards: Iterable[Card]) -> DeckAnalysis:
        return self.analyzer.analyze(cards)

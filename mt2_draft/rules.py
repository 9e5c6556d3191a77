"""
mt2_draft/rules.py
Read-only rule tables used by the scoring engine: keyword synergies,
deck-state context modifiers and champion/path overrides.

Every rule is a data row (name, predicate, effect). Predicates for context
modifiers are looked up by name in CONDITIONS, so new rows can be added to the
JSON rule file without code changes as long as they use a registered condition.
"""

import json
from typing import Callable, Dict, FrozenSet, Iterable, List, Literal, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from mt2_draft.advisor.schema import DeckAnalysis, ScoreContext
from mt2_draft.errors import RuleDefinitionError
from mt2_draft.models import Card
from mt2_draft.utils import Result, check_file_integrity, normalize_keyword
from mt2_draft.logger import create_logger
from mt2_draft import constants

RULES_SECTION_SYNERGIES = "synergies"
RULES_SECTION_CONTEXT_MODIFIERS = "context_modifiers"
RULES_SECTION_CHAMPION_OVERRIDES = "champion_overrides"

logger = create_logger()

ConditionFunc = Callable[[DeckAnalysis, Card, ScoreContext], bool]

CONDITIONS: Dict[str, ConditionFunc] = {}


def condition(name: str):
    """Registers a deck-state predicate under the given name"""

    def register(func: ConditionFunc) -> ConditionFunc:
        CONDITIONS[name] = func
        return func

    return register


def _ring_in(context: ScoreContext, lower: int, upper: int) -> bool:
    return lower <= context.ring_number <= upper


@condition("missing_frontline")
def _missing_frontline(analysis, card, context):
    return not analysis.has_frontline


@condition("missing_backline_clear")
def _missing_backline_clear(analysis, card, context):
    return not analysis.has_backline_clear


@condition("late_ring_missing_scaling")
def _late_ring_missing_scaling(analysis, card, context):
    return (
        _ring_in(context, constants.RING_SCALING_MIN, constants.RING_MAX)
        and not analysis.has_scaling
    )


@condition("has_reform_synergy")
def _has_reform_synergy(analysis, card, context):
    return constants.KEYWORD_REFORM in analysis.keywords


@condition("has_consume_synergy")
def _has_consume_synergy(analysis, card, context):
    return constants.KEYWORD_CONSUME in analysis.keywords


@condition("has_forge_synergy")
def _has_forge_synergy(analysis, card, context):
    return constants.KEYWORD_FORGE in analysis.keywords


@condition("has_smelt_synergy")
def _has_smelt_synergy(analysis, card, context):
    return constants.KEYWORD_SMELT in analysis.keywords


@condition("no_pyregel")
def _no_pyregel(analysis, card, context):
    return constants.KEYWORD_PYREGEL not in analysis.keywords


@condition("deck_size_over_20")
def _deck_size_over_20(analysis, card, context):
    return analysis.total_cards > constants.LARGE_DECK_SIZE


@condition("covenant_high")
def _covenant_high(analysis, card, context):
    return context.covenant_level >= constants.COVENANT_HIGH_THRESHOLD


@condition("ring_early")
def _ring_early(analysis, card, context):
    return _ring_in(context, constants.RING_MIN, constants.RING_EARLY_MAX)


@condition("ring_late")
def _ring_late(analysis, card, context):
    return _ring_in(context, constants.RING_LATE_MIN, constants.RING_MAX)


@condition("duplicate_common")
def _duplicate_common(analysis, card, context):
    # Fires for the 3rd+ copy
    return (
        card.rarity.strip().lower() == constants.CARD_RARITY_COMMON
        and analysis.card_counts.get(card.id, 0) >= 2
    )


def _require_known_keywords(tags: Iterable[str], rule_name: str) -> None:
    unknown = set(tags) - constants.KNOWN_KEYWORDS
    if unknown:
        raise RuleDefinitionError(
            f"Rule '{rule_name}' references unregistered keywords: {sorted(unknown)}"
        )


# --- Rule definitions ---


class SynergyDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    required_keywords: FrozenSet[str]
    bonus: float = Field(ge=0.0)

    @field_validator("required_keywords", mode="before")
    @classmethod
    def _normalize(cls, value):
        return frozenset(normalize_keyword(k) for k in value)

    def is_active(self, keywords: FrozenSet[str]) -> bool:
        """True when every required keyword is present in the keyword union"""
        return bool(self.required_keywords) and self.required_keywords <= keywords


class ContextModifierDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    condition: str
    card_tag: str = ""
    card_role: str = ""
    modifier: int
    priority: str = constants.PRIORITY_MEDIUM
    description: str = ""

    @field_validator("card_tag", "card_role", mode="before")
    @classmethod
    def _normalize(cls, value):
        return normalize_keyword(value)

    def applies(self, analysis: DeckAnalysis, card: Card, context: ScoreContext) -> bool:
        """
        The candidate must carry card_tag and supply card_role (when set),
        and the deck state must satisfy the condition.
        """
        if self.card_tag and not card.has_keyword(self.card_tag):
            return False
        if self.card_role and card.keywords.isdisjoint(
            constants.ROLE_KEYWORDS[self.card_role]
        ):
            return False
        return CONDITIONS[self.condition](analysis, card, context)


class ChampionOverride(BaseModel):
    model_config = ConfigDict(frozen=True)

    champion_id: str
    path: str = constants.CHAMPION_PATH_ANY
    card_id: str
    mode: Literal["add", "replace"] = constants.OVERRIDE_MODE_ADD
    value: int
    reason: str = ""

    @field_validator("path", mode="before")
    @classmethod
    def _strip_path(cls, value):
        return str(value).strip()


# --- Tables ---


class _RuleTable:
    """Shared JSON persistence for the rule tables"""

    section = ""
    definition = BaseModel

    def __init__(self, rows: Iterable = ()):
        self._rows = tuple(rows)
        self._validate()

    def _validate(self) -> None:
        pass

    def all(self) -> List:
        return list(self._rows)

    def __len__(self) -> int:
        return len(self._rows)

    @classmethod
    def from_file(cls, file_path: str):
        """
        Load a table from the matching section of a rules file.
        Returns None when the file is missing or malformed.
        """
        result, json_data = check_file_integrity(file_path, cls.section)
        if result != Result.VALID:
            logger.error(f"Failed to load {cls.section} from {file_path}: {result.name}")
            return None

        try:
            rows = [cls.definition(**entry) for entry in json_data[cls.section]]
        except (ValidationError, TypeError) as error:
            logger.error(f"Invalid {cls.section} entry in {file_path}: {error}")
            return None

        return cls(rows)

    def to_file(self, file_path: str) -> bool:
        """Writes the table into its section of the rules file, keeping the other sections"""
        try:
            try:
                with open(file_path, "r", encoding="utf-8") as f:
                    data = json.load(f)
            except (OSError, json.JSONDecodeError):
                data = {}
            data[self.section] = [row.model_dump(mode="json") for row in self._rows]
            with open(file_path, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=4)
            return True
        except OSError as error:
            logger.error("Failed to save %s to %s: %s", self.section, file_path, error)
            return False


class SynergyTable(_RuleTable):
    section = RULES_SECTION_SYNERGIES
    definition = SynergyDefinition

    def _validate(self) -> None:
        names = set()
        for synergy in self._rows:
            if synergy.name in names:
                raise RuleDefinitionError(f"Duplicate synergy name '{synergy.name}'")
            names.add(synergy.name)
            _require_known_keywords(synergy.required_keywords, synergy.name)

    @classmethod
    def default(cls) -> "SynergyTable":
        return cls(DEFAULT_SYNERGIES)


class ContextModifierTable(_RuleTable):
    section = RULES_SECTION_CONTEXT_MODIFIERS
    definition = ContextModifierDefinition

    def _validate(self) -> None:
        for modifier in self._rows:
            if modifier.condition not in CONDITIONS:
                raise RuleDefinitionError(
                    f"Modifier '{modifier.name}' uses unknown condition '{modifier.condition}'"
                )
            if modifier.card_tag:
                _require_known_keywords([modifier.card_tag], modifier.name)
            if modifier.card_role and modifier.card_role not in constants.ROLE_KEYWORDS:
                raise RuleDefinitionError(
                    f"Modifier '{modifier.name}' uses unknown role '{modifier.card_role}'"
                )
            if modifier.priority not in constants.PRIORITY_RANK:
                raise RuleDefinitionError(
                    f"Modifier '{modifier.name}' uses unknown priority '{modifier.priority}'"
                )

    @classmethod
    def default(cls) -> "ContextModifierTable":
        return cls(DEFAULT_CONTEXT_MODIFIERS)


class ChampionOverrideTable(_RuleTable):
    section = RULES_SECTION_CHAMPION_OVERRIDES
    definition = ChampionOverride

    def _validate(self) -> None:
        self._index: Dict[Tuple[str, str, str], ChampionOverride] = {}
        for row in self._rows:
            key = (row.champion_id, row.path.lower(), row.card_id)
            if key in self._index:
                logger.warning(f"Duplicate champion override {key}; keeping the first entry")
                continue
            self._index[key] = row

    def lookup(
        self, champion_id: str, path: str, card_id: str
    ) -> Optional[ChampionOverride]:
        """
        Exact champion/path match first, then the champion's path-agnostic ("Any") entry.
        """
        exact = self._index.get((champion_id, str(path).strip().lower(), card_id))
        if exact:
            return exact
        return self._index.get(
            (champion_id, constants.CHAMPION_PATH_ANY.lower(), card_id)
        )

    @classmethod
    def default(cls) -> "ChampionOverrideTable":
        return cls(DEFAULT_CHAMPION_OVERRIDES)


# --- Built-in rule data ---

DEFAULT_SYNERGIES = [
    SynergyDefinition(
        name="Shift Loop",
        description="Shift + Advance cards",
        required_keywords=["shift", "advance"],
        bonus=0.20,
    ),
    SynergyDefinition(
        name="Consume Chain",
        description="Consume + Funguy synergy",
        required_keywords=["consume", "funguy"],
        bonus=0.40,
    ),
    SynergyDefinition(
        name="Reform Engine",
        description="Reform + Burnout synergy",
        required_keywords=["reform", "burnout"],
        bonus=0.35,
    ),
    SynergyDefinition(
        name="Dragon Hoard",
        description="Dragon Hoard scaling",
        required_keywords=["dragon_hoard"],
        bonus=0.25,
    ),
    SynergyDefinition(
        name="Forge Burn",
        description="Forge + Smelt synergy",
        required_keywords=["forge", "smelt"],
        bonus=0.30,
    ),
]

DEFAULT_CONTEXT_MODIFIERS = [
    ContextModifierDefinition(
        name="No frontline",
        condition="missing_frontline",
        card_role=constants.CARD_ROLE_FRONTLINE,
        modifier=15,
        priority=constants.PRIORITY_HIGH,
        description="No tank units in deck",
    ),
    ContextModifierDefinition(
        name="No backline clear",
        condition="missing_backline_clear",
        card_role=constants.CARD_ROLE_BACKLINE_CLEAR,
        modifier=20,
        priority=constants.PRIORITY_CRITICAL,
        description="No Sweep, Explosive or Advance",
    ),
    ContextModifierDefinition(
        name="Late ring scaling",
        condition="late_ring_missing_scaling",
        card_role=constants.CARD_ROLE_SCALING,
        modifier=10,
        priority=constants.PRIORITY_HIGH,
        description="Ring 5+ without a scaling plan",
    ),
    ContextModifierDefinition(
        name="Reform burnout",
        condition="has_reform_synergy",
        card_tag="burnout",
        modifier=25,
        priority=constants.PRIORITY_HIGH,
        description="Has Reform cards, Burnout valued higher",
    ),
    ContextModifierDefinition(
        name="Deck too large",
        condition="deck_size_over_20",
        card_tag="draw",
        modifier=-10,
        priority=constants.PRIORITY_MEDIUM,
        description="Deck too large, draw less valuable",
    ),
    ContextModifierDefinition(
        name="High covenant scaling",
        condition="covenant_high",
        card_role=constants.CARD_ROLE_SCALING,
        modifier=10,
        priority=constants.PRIORITY_MEDIUM,
        description="Covenant 15+, scaling matters more",
    ),
    ContextModifierDefinition(
        name="Consume payoff",
        condition="has_consume_synergy",
        card_tag="consume",
        modifier=30,
        priority=constants.PRIORITY_HIGH,
        description="Morel Mistress or similar present",
    ),
    ContextModifierDefinition(
        name="No pyregel",
        condition="no_pyregel",
        card_tag="pyregel",
        modifier=-10,
        priority=constants.PRIORITY_LOW,
        description="No pyregel applicators",
    ),
    ContextModifierDefinition(
        name="Early tempo",
        condition="ring_early",
        card_tag="tempo",
        modifier=15,
        priority=constants.PRIORITY_HIGH,
        description="Ring 1-3, tempo cards better",
    ),
    ContextModifierDefinition(
        name="Late value",
        condition="ring_late",
        card_tag="value",
        modifier=15,
        priority=constants.PRIORITY_HIGH,
        description="Ring 6+, value cards better",
    ),
    ContextModifierDefinition(
        name="Duplicate common",
        condition="duplicate_common",
        card_tag="",
        modifier=-5,
        priority=constants.PRIORITY_LOW,
        description="3rd+ copy of a common",
    ),
    ContextModifierDefinition(
        name="Forge points",
        condition="has_forge_synergy",
        card_tag="forge",
        modifier=20,
        priority=constants.PRIORITY_HIGH,
        description="Forge points available",
    ),
    ContextModifierDefinition(
        name="Smelt present",
        condition="has_smelt_synergy",
        card_tag="smelt",
        modifier=25,
        priority=constants.PRIORITY_HIGH,
        description="Smelt mechanic present",
    ),
]

DEFAULT_CHAMPION_OVERRIDES = [
    ChampionOverride(
        champion_id="fel",
        path="Unchained",
        card_id="banished_just_cause",
        mode="replace",
        value=95,
        reason="Shift = permanent Valor",
    ),
    ChampionOverride(
        champion_id="fel",
        path="Unchained",
        card_id="banished_steadfast_crusader",
        mode="add",
        value=5,
        reason="Advance enabler",
    ),
    ChampionOverride(
        champion_id="fel",
        path="Savior",
        card_id="hellhorned_titan_sentry",
        mode="replace",
        value=85,
        reason="Scales with Valor",
    ),
    ChampionOverride(
        champion_id="talos",
        path="Any",
        card_id="banished_karmic_censer",
        mode="add",
        value=6,
        reason="Flight shifts every turn",
    ),
    ChampionOverride(
        champion_id="lord_fenix",
        path="Any",
        card_id="pyreborne_fanning_the_flame",
        mode="add",
        value=5,
        reason="Pyregel lowers HP for more kills",
    ),
    ChampionOverride(
        champion_id="lady_gilda",
        path="Any",
        card_id="pyreborne_gildmonger",
        mode="replace",
        value=92,
        reason="Dragon Hoard scaling",
    ),
    ChampionOverride(
        champion_id="ekka",
        path="Any",
        card_id="luna_coven_witchweave",
        mode="replace",
        value=92,
        reason="0-cost Conduit",
    ),
    ChampionOverride(
        champion_id="ekka",
        path="Any",
        card_id="luna_coven_moonlit_glaive",
        mode="replace",
        value=98,
        reason="S-tier equipment",
    ),
    ChampionOverride(
        champion_id="bolete",
        path="Any",
        card_id="underlegion_funguy_in_a_suit",
        mode="replace",
        value=88,
        reason="Funguy spawn",
    ),
    ChampionOverride(
        champion_id="madame_lionsmane",
        path="Any",
        card_id="underlegion_morel_mistress",
        mode="replace",
        value=95,
        reason="Consume synergy",
    ),
    ChampionOverride(
        champion_id="orechi",
        path="Any",
        card_id="lazarus_league_potion_kit",
        mode="replace",
        value=90,
        reason="Core equipment",
    ),
    ChampionOverride(
        champion_id="rector_flicker",
        path="Any",
        card_id="melting_remnant_waxen_spike",
        mode="replace",
        value=88,
        reason="Burnout synergy",
    ),
    ChampionOverride(
        champion_id="herszal",
        path="Unchained",
        card_id="railforged_forge_steward",
        mode="replace",
        value=92,
        reason="Forge generation",
    ),
    ChampionOverride(
        champion_id="herszal",
        path="Savior",
        card_id="railforged_smith",
        mode="add",
        value=8,
        reason="Forge point engine",
    ),
    ChampionOverride(
        champion_id="heph",
        path="Any",
        card_id="luna_coven_moonlit_glaive",
        mode="add",
        value=6,
        reason="Extra equipment slots",
    ),
]

import os

APPLICATION_VERSION = 1.0
APPLICATION_NAME = "MT2 Draft Assistant"

DATA_FOLDER = os.path.join(os.path.dirname(os.path.abspath(__file__)), "data")
CARDS_FILE = os.path.join(DATA_FOLDER, "cards.json")
LOG_FOLDER = os.path.join(os.getcwd(), "Logs")
LOG_FILE_NAME = "mt2_draft_assistant.log"
CONFIG_FILE_NAME = "config.json"

# Scoring
MIN_SCORE = 0
MAX_SCORE = 120
SYNERGY_CAP = 1.5

TIER_S = "S"
TIER_A = "A"
TIER_B = "B"
TIER_C = "C"

S_TIER_THRESHOLD = 90
A_TIER_THRESHOLD = 80
B_TIER_THRESHOLD = 70

TIER_THRESHOLDS = [
    (S_TIER_THRESHOLD, TIER_S),
    (A_TIER_THRESHOLD, TIER_A),
    (B_TIER_THRESHOLD, TIER_B),
]

# Draft progress
RING_MIN = 1
RING_MAX = 9
DEFAULT_RING = 1

COVENANT_MIN = 0
COVENANT_MAX = 25
DEFAULT_COVENANT = 10
COVENANT_HIGH_THRESHOLD = 15

RING_BUCKET_EARLY = "early"
RING_BUCKET_MID = "mid"
RING_BUCKET_LATE = "late"

RING_BUCKETS = {
    RING_BUCKET_EARLY: range(1, 4),
    RING_BUCKET_MID: range(4, 7),
    RING_BUCKET_LATE: range(7, 10),
}

RING_EARLY_MAX = 3
RING_LATE_MIN = 6
RING_SCALING_MIN = 5
LARGE_DECK_SIZE = 20

# Card types
CARD_TYPE_UNIT = "unit"
CARD_TYPE_SPELL = "spell"
CARD_TYPE_CHAMPION = "champion"
CARD_TYPE_EQUIPMENT = "equipment"
CARD_TYPE_ARTIFACT = "artifact"

CARD_RARITY_COMMON = "common"

# (ring bucket, card type) -> score delta
RING_ADJUSTMENTS = {
    (RING_BUCKET_EARLY, CARD_TYPE_UNIT): 5,
    (RING_BUCKET_LATE, CARD_TYPE_SPELL): 5,
}

RING_ADJUSTMENT_LABELS = {
    RING_BUCKET_EARLY: "Early ring",
    RING_BUCKET_MID: "Mid ring",
    RING_BUCKET_LATE: "Late ring",
}

# Structural roles
KEYWORD_FRONTLINE = "frontline"
KEYWORD_TANK = "tank"
KEYWORD_ARMOR = "armor"
KEYWORD_SWEEP = "sweep"
KEYWORD_EXPLOSIVE = "explosive"
KEYWORD_ADVANCE = "advance"
KEYWORD_AOE = "aoe"
KEYWORD_VALOR = "valor"
KEYWORD_DECAY = "decay"
KEYWORD_CONDUIT = "conduit"
KEYWORD_PYREGEL = "pyregel"
KEYWORD_DRAGON_HOARD = "dragon_hoard"
KEYWORD_FORGE = "forge"
KEYWORD_SMELT = "smelt"
KEYWORD_SHIFT = "shift"
KEYWORD_CONSUME = "consume"
KEYWORD_FUNGUY = "funguy"
KEYWORD_REFORM = "reform"
KEYWORD_BURNOUT = "burnout"

FRONTLINE_KEYWORDS = frozenset([KEYWORD_FRONTLINE, KEYWORD_TANK, KEYWORD_ARMOR])
BACKLINE_CLEAR_KEYWORDS = frozenset(
    [KEYWORD_SWEEP, KEYWORD_EXPLOSIVE, KEYWORD_ADVANCE, KEYWORD_AOE]
)
SCALING_KEYWORDS = frozenset(
    [
        KEYWORD_VALOR,
        KEYWORD_DECAY,
        KEYWORD_CONDUIT,
        KEYWORD_PYREGEL,
        KEYWORD_DRAGON_HOARD,
        KEYWORD_FORGE,
    ]
)

# Structural roles a context modifier may require of the candidate
CARD_ROLE_FRONTLINE = "frontline"
CARD_ROLE_BACKLINE_CLEAR = "backline_clear"
CARD_ROLE_SCALING = "scaling"

ROLE_KEYWORDS = {
    CARD_ROLE_FRONTLINE: FRONTLINE_KEYWORDS,
    CARD_ROLE_BACKLINE_CLEAR: BACKLINE_CLEAR_KEYWORDS,
    CARD_ROLE_SCALING: SCALING_KEYWORDS,
}

# Every tag the rule tables may reference. Card data may carry others.
KNOWN_KEYWORDS = frozenset(
    [
        "advance",
        "aggressive",
        "aoe",
        "armor",
        "artifact",
        "artificer",
        "attack_buff",
        "avarice",
        "backline_clear",
        "big",
        "blacksmith",
        "boss_killer",
        "brewmaster",
        "buff",
        "burnout",
        "burst",
        "combo",
        "conduit",
        "conduit_trigger",
        "consume",
        "core",
        "damage",
        "decay",
        "deployment",
        "dragon",
        "dragon_hoard",
        "draw",
        "equipment",
        "explosive",
        "flexible",
        "flight",
        "forge",
        "free",
        "frontline",
        "funguy",
        "gold",
        "incant",
        "lifesteal",
        "magic_power",
        "mix",
        "multistrike",
        "potion",
        "pyregel",
        "rage",
        "rally",
        "reanimate",
        "reform",
        "removal",
        "resource",
        "resurrection",
        "revenge",
        "s_tier",
        "sacrifice",
        "sacrifice_value",
        "scaling",
        "scaling_damage",
        "shift",
        "smelt",
        "snowball",
        "spawn",
        "spell_buff",
        "spell_synergy",
        "spore",
        "spore_scaling",
        "steelguard",
        "sweep",
        "tank",
        "tempo",
        "unstable",
        "valor",
        "value",
        "whelp",
    ]
)

# Champions
CHAMPION_PATH_UNCHAINED = "Unchained"
CHAMPION_PATH_SAVIOR = "Savior"
CHAMPION_PATH_ANY = "Any"
DEFAULT_CHAMPION_PATHS = [CHAMPION_PATH_UNCHAINED, CHAMPION_PATH_SAVIOR]

DEFAULT_CHAMPION_ID = "fel"
DEFAULT_CHAMPION_PATH = CHAMPION_PATH_UNCHAINED

# id, name, clan
CHAMPION_ROSTER = [
    ("fel", "Fel", "Hellhorned"),
    ("talos", "Talos", "Railforged"),
    ("lord_fenix", "Lord Fenix", "Pyreborne"),
    ("lady_gilda", "Lady Gilda", "Lazarus League"),
    ("ekka", "Ekka", "Wurmkin"),
    ("bolete", "Bolete", "Melting Remnant"),
    ("madame_lionsmane", "Madame Lionsmane", "Luna Coven"),
    ("orechi", "Orechi", "Underlegion"),
    ("rector_flicker", "Rector Flicker", "Melting Remnant"),
    ("herszal", "Herszal", "Wurmkin"),
    ("heph", "Heph", "Hellhorned"),
]

# Champion override modes
OVERRIDE_MODE_ADD = "add"
OVERRIDE_MODE_REPLACE = "replace"

# Context modifier priorities
PRIORITY_LOW = "Low"
PRIORITY_MEDIUM = "Medium"
PRIORITY_HIGH = "High"
PRIORITY_CRITICAL = "Critical"

# Context reasons are listed most urgent first
PRIORITY_RANK = {
    PRIORITY_CRITICAL: 0,
    PRIORITY_HIGH: 1,
    PRIORITY_MEDIUM: 2,
    PRIORITY_LOW: 3,
}

# Batch scoring
DEFAULT_BATCH_WORKERS = 4
STALE_BATCH_RETRIES = 3

# OCR
OCR_REQUEST_TIMEOUT_SEC = 5.0
OCR_MIN_CONFIDENCE = 0.6

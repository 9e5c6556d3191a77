"""
mt2_draft/app.py
Builds the advisor and the draft session from a Configuration.
Settings are read here and passed down explicitly; nothing below this
layer reads the configuration file.
"""

from mt2_draft.advisor.engine import DraftAdvisor
from mt2_draft.configuration import Configuration
from mt2_draft.dataset import CardCatalog
from mt2_draft.errors import ConfigurationError
from mt2_draft.ocr import OCR
from mt2_draft.rules import ChampionOverrideTable, ContextModifierTable, SynergyTable
from mt2_draft.session import DraftSession
from mt2_draft.logger import create_logger

logger = create_logger()


def load_rule_tables(rules_file: str):
    """
    Returns (synergies, context modifiers, champion overrides).
    Sections missing from the rules file fall back to the built-in tables.
    """
    tables = []
    for table_class in (SynergyTable, ContextModifierTable, ChampionOverrideTable):
        table = table_class.from_file(rules_file) if rules_file else None
        if table is None:
            if rules_file:
                logger.info(f"Using built-in {table_class.section}")
            table = table_class.default()
        tables.append(table)
    return tuple(tables)


def create_advisor(configuration: Configuration) -> DraftAdvisor:
    settings = configuration.settings
    catalog = CardCatalog.from_file(settings.cards_file)
    synergies, context_modifiers, champion_overrides = load_rule_tables(
        settings.rules_file
    )
    logger.info(
        f"Loaded {len(catalog)} cards, {len(synergies)} synergies, "
        f"{len(context_modifiers)} context modifiers, "
        f"{len(champion_overrides)} champion overrides"
    )
    return DraftAdvisor(
        catalog,
        synergies,
        context_modifiers,
        champion_overrides,
        max_workers=configuration.batch_workers,
    )


def create_session(configuration: Configuration) -> DraftSession:
    settings = configuration.settings
    return DraftSession(
        create_advisor(configuration),
        champion_id=settings.champion_id,
        champion_path=settings.champion_path,
        covenant_level=settings.covenant_level,
        ocr_min_confidence=settings.ocr_min_confidence,
    )


def create_ocr(configuration: Configuration) -> OCR:
    """Raises ConfigurationError while OCR is disabled or has no endpoint"""
    if not configuration.features.ocr_enabled:
        raise ConfigurationError("OCR is disabled (features.ocr_enabled)")
    return OCR(
        url=configuration.settings.ocr_url, api_key=configuration.settings.ocr_api_key
    )

from typing import Dict, Iterable, List
from pydantic import ValidationError
from mt2_draft.utils import Result, check_file_integrity, normalize_keyword
from mt2_draft.models import Card
from mt2_draft.errors import NotFound
from mt2_draft.constants import CARDS_FILE, KNOWN_KEYWORDS
from mt2_draft.logger import create_logger

DATA_SECTION_CARDS = "cards"

logger = create_logger()


class CardCatalog:
    """
    Read-only card lookup keyed by card id.
    The catalog is shared between sessions and is never modified after loading.
    """

    def __init__(self, cards: Iterable[Card] = ()):
        self._cards: Dict[str, Card] = {}
        self._load(cards)

    @classmethod
    def from_file(cls, file_location: str = CARDS_FILE) -> "CardCatalog":
        catalog = cls()
        result = catalog.open_file(file_location)
        if result != Result.VALID:
            logger.error(f"Unable to load card data from {file_location}: {result.name}")
        return catalog

    def open_file(self, file_location: str) -> Result:
        """
        Open a card data file and replace the catalog contents with its cards
        """
        if not file_location:
            return Result.ERROR_MISSING_FILE

        result, json_data = check_file_integrity(file_location, DATA_SECTION_CARDS)

        if result != Result.VALID:
            return result

        cards = []
        for entry in json_data[DATA_SECTION_CARDS]:
            try:
                cards.append(Card(**entry))
            except (ValidationError, TypeError) as error:
                logger.error(f"Skipping invalid card entry {entry.get('id', '?')}: {error}")

        self._cards = {}
        self._load(cards)
        return result

    def _load(self, cards: Iterable[Card]) -> None:
        for card in cards:
            if card.id in self._cards:
                logger.warning(f"Duplicate card id {card.id}; keeping the first entry")
                continue
            unknown = card.keywords - KNOWN_KEYWORDS
            if unknown:
                logger.warning(f"Card {card.id} has unregistered keywords: {sorted(unknown)}")
            self._cards[card.id] = card

    def __len__(self) -> int:
        return len(self._cards)

    def contains(self, card_id: str) -> bool:
        return card_id in self._cards

    def get_by_id(self, card_id: str) -> Card:
        """
        Returns the card for the id.
        Raises NotFound for ids that aren't in the catalog.
        """
        try:
            return self._cards[card_id]
        except KeyError:
            raise NotFound(card_id) from None

    def get_by_ids(self, id_list: List[str]) -> List[Card]:
        """
        Returns the cards for every recognized id, in request order.
        Unknown ids are skipped.
        """
        return [self._cards[card_id] for card_id in id_list if card_id in self._cards]

    def get_by_name(self, name: str) -> Card:
        """Case-insensitive exact name match; raises NotFound"""
        target = name.strip().lower()
        for card in self._cards.values():
            if card.name.lower() == target:
                return card
        raise NotFound(name)

    def get_all(self) -> List[Card]:
        return list(self._cards.values())

    def get_by_clan(self, clan: str) -> List[Card]:
        target = clan.strip().lower()
        return [c for c in self._cards.values() if c.clan.lower() == target]

    def search(self, query: str) -> List[Card]:
        """
        Case-insensitive substring match against name, keywords and description.
        An empty query returns every card.
        """
        needle = query.strip().lower()
        if not needle:
            return self.get_all()

        keyword_needle = normalize_keyword(needle)
        results = []
        for card in self._cards.values():
            if (
                needle in card.name.lower()
                or needle in card.description.lower()
                or any(needle in k or keyword_needle in k for k in card.keywords)
            ):
                results.append(card)
        return results

"""
mt2_draft/cli.py
Command line front end: score candidates, analyze a deck, search the catalog
and score a screenshot through the OCR endpoint.
"""

import argparse
import base64
import sys
from mt2_draft.advisor.schema import DeckAnalysis, DraftScore, ScoreContext
from mt2_draft.app import create_advisor, create_ocr, create_session
from mt2_draft.configuration import read_configuration
from mt2_draft.errors import DraftError


def format_score(name: str, score: DraftScore) -> str:
    lines = [f"{score.score:>3}  {score.tier}  {name}"]
    lines.extend(f"       - {reason}" for reason in score.reasons)
    return "\n".join(lines)


def format_analysis(analysis: DeckAnalysis) -> str:
    def flag(value):
        return "yes" if value else "NO"

    lines = [
        f"Cards: {analysis.total_cards} ({analysis.unit_count} units, {analysis.spell_count} spells)",
        f"Average value: {analysis.average_value}",
        f"Frontline: {flag(analysis.has_frontline)}",
        f"Backline clear: {flag(analysis.has_backline_clear)}",
        f"Scaling: {flag(analysis.has_scaling)}",
        "Synergies:",
    ]
    for synergy in analysis.active_synergies:
        marker = "x" if synergy.active else " "
        lines.append(f"  [{marker}] {synergy.name} - {synergy.description}")
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Monster Train 2 draft assistant.")
    parser.add_argument("--config", help="Path to the configuration file")
    subparsers = parser.add_subparsers(dest="command", required=True)

    score = subparsers.add_parser("score", help="Score one or more candidate cards")
    score.add_argument("card_ids", nargs="+")
    score.add_argument("--deck", nargs="*", default=[], help="Card ids already drafted")
    score.add_argument("--champion", help="Champion id (default from configuration)")
    score.add_argument("--path", help="Champion path")
    score.add_argument("--ring", type=int, default=1)
    score.add_argument("--covenant", type=int, help="Covenant level 0-25")

    analyze = subparsers.add_parser("analyze", help="Analyze a deck")
    analyze.add_argument("card_ids", nargs="*")

    search = subparsers.add_parser("search", help="Search the card catalog")
    search.add_argument("query")

    detect = subparsers.add_parser("detect", help="Score the cards in a screenshot")
    detect.add_argument("screenshot", help="PNG screenshot of the draft screen")
    detect.add_argument("--deck", nargs="*", default=[])

    return parser


def run(argv=None, out=sys.stdout) -> int:
    args = build_parser().parse_args(argv)
    configuration, _ = read_configuration(args.config)

    try:
        if args.command == "score":
            return _run_score(args, configuration, out)
        if args.command == "analyze":
            advisor = create_advisor(configuration)
            cards = advisor.resolve_deck(args.card_ids)
            print(format_analysis(advisor.analyze_deck(cards)), file=out)
            return 0
        if args.command == "search":
            advisor = create_advisor(configuration)
            for card in advisor.catalog.search(args.query):
                print(f"{card.id:<40} {card.name} ({card.clan}, {card.card_type})", file=out)
            return 0
        if args.command == "detect":
            return _run_detect(args, configuration, out)
    except DraftError as error:
        print(f"Error: {error}", file=sys.stderr)
        return 1
    return 2


def _run_score(args, configuration, out) -> int:
    settings = configuration.settings
    advisor = create_advisor(configuration)
    champion_id = args.champion or settings.champion_id
    path = args.path or settings.champion_path
    covenant = settings.covenant_level if args.covenant is None else args.covenant

    if len(args.card_ids) == 1:
        card_id = args.card_ids[0]
        score = advisor.score(card_id, args.deck, champion_id, path, args.ring, covenant)
        print(format_score(advisor.catalog.get_by_id(card_id).name, score), file=out)
        return 0

    context = ScoreContext(
        other_deck_cards=advisor.resolve_deck(args.deck),
        champion_id=champion_id,
        champion_path=path,
        ring_number=args.ring,
        covenant_level=covenant,
    )
    scores = advisor.score_many(args.card_ids, context)
    for card_id in args.card_ids:
        if card_id in scores:
            print(format_score(advisor.catalog.get_by_id(card_id).name, scores[card_id]), file=out)
        else:
            print(f"  -  -  {card_id} (unknown card)", file=out)
    return 0


def _run_detect(args, configuration, out) -> int:
    ocr = create_ocr(configuration)
    session = create_session(configuration)
    for card_id in args.deck:
        session.add_card_by_id(card_id)

    try:
        with open(args.screenshot, "rb") as image:
            screenshot = base64.b64encode(image.read()).decode("utf-8")
    except OSError as error:
        print(f"Error: unable to read screenshot {args.screenshot}: {error}", file=sys.stderr)
        return 1

    names = [card.name for card in session.advisor.catalog.get_all()]
    detection = ocr.get_pack(names, screenshot)
    scores = session.score_detection(detection)
    if not scores:
        print("No cards detected", file=out)
        return 1

    for card_id, score in scores.items():
        print(format_score(session.advisor.catalog.get_by_id(card_id).name, score), file=out)
    return 0

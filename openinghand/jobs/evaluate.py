"""
Evaluate combos against a YDK deck list from the command line.

Usage:
    openinghand-evaluate --deck deck.ydk --combos combos.json --seed 42

The combos file holds a JSON list of combos in the API's request shape, or
an object with a "combos" key. The report is printed to stdout as JSON.

Exit codes:
    0  success
    2  invalid query (including an unreadable combos file)
    3  malformed or unsupported deck list
    4  deck list too large
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from openinghand.api.schemas import ComboRequest, ReportResponse
from openinghand.config import DEFAULT_HAND_SIZE, DEFAULT_SIM_COUNT, settings
from openinghand.models.failure import FailureKind, KnownError, create_known_failure
from openinghand.models.query import Query
from openinghand.services.card_database import CardMetadataStore, load_card_database
from openinghand.services.hand_traps import HandTrapClassifier
from openinghand.services.probability import ProbabilityEngine
from openinghand.services.ydk_parser import parse_ydk

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INVALID_QUERY = 2
EXIT_MALFORMED_DECK = 3
EXIT_FILE_TOO_LARGE = 4

EXIT_CODES = {
    FailureKind.INVALID_QUERY: EXIT_INVALID_QUERY,
    FailureKind.MALFORMED_DECK_LIST: EXIT_MALFORMED_DECK,
    FailureKind.UNSUPPORTED_EXTENSION: EXIT_MALFORMED_DECK,
    FailureKind.FILE_TOO_LARGE: EXIT_FILE_TOO_LARGE,
}

_combo_list = TypeAdapter(list[ComboRequest])


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="openinghand-evaluate",
        description="Estimate opening-hand combo probabilities for a YDK deck list.",
    )
    parser.add_argument("--deck", type=Path, required=True, help="YDK deck list")
    parser.add_argument("--combos", type=Path, required=True, help="Combos JSON file")
    parser.add_argument("--card-db", type=Path, default=None, help="Card metadata JSON")
    parser.add_argument("--hand-size", type=int, default=DEFAULT_HAND_SIZE)
    parser.add_argument("--sims", type=int, default=DEFAULT_SIM_COUNT)
    parser.add_argument("--seed", type=int, default=None)
    return parser


def load_combos(path: Path) -> list[ComboRequest]:
    """Read combos from a JSON file."""
    payload = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(payload, dict):
        payload = payload.get("combos", [])
    return _combo_list.validate_python(payload)


def load_store(path: Path | None) -> CardMetadataStore:
    """Card metadata from ``path`` or the configured database."""
    try:
        return load_card_database(path)
    except FileNotFoundError:
        logger.warning("Card database not found: %s", path or settings.card_database_path)
        return CardMetadataStore({})


def run_evaluate(args: argparse.Namespace) -> ReportResponse:
    """
    Parse the deck list and combos, then evaluate them.

    Raises:
        KnownError: If the deck list or query is rejected
        OSError, ValueError: If an input file cannot be read
    """
    store = load_store(args.card_db)
    parsed = parse_ydk(
        args.deck.read_bytes(),
        store,
        filename=args.deck.name,
        max_bytes=settings.max_deck_list_bytes,
    )
    combos = load_combos(args.combos)

    query = Query(
        deck=parsed.to_deck_spec(args.hand_size),
        combos=tuple(combo.to_model(i) for i, combo in enumerate(combos)),
        sim_count=args.sims,
        seed=args.seed,
    )
    engine = ProbabilityEngine(hand_traps=HandTrapClassifier(store=store))
    return ReportResponse.from_report(engine.evaluate(query))


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    args = build_parser().parse_args(argv)

    try:
        report = run_evaluate(args)
    except KnownError as e:
        logger.error("%s: %s", e.kind.value, e.message)
        print(create_known_failure(e).model_dump_json(indent=2))
        return EXIT_CODES.get(e.kind, EXIT_INVALID_QUERY)
    except (ValidationError, json.JSONDecodeError) as e:
        logger.error("Invalid combos file %s: %s", args.combos, e)
        return EXIT_INVALID_QUERY
    except OSError as e:
        logger.error("Cannot read input file: %s", e)
        return 1

    print(report.model_dump_json(indent=2))
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())

import argparse
import json
import logging
import sys
from typing import Optional, Sequence

from scaffold_planner import (
    PlanOptions,
    Unconnectable,
    ValidationError,
    format_plan,
    format_scaffolding,
    parse_schematic,
    plan_scaffolding,
    validate,
)

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s:%(name)s:%(message)s",
    )


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Plan scaffolding that connects a schematic")
    parser.add_argument("path", help="Path to the JSON schematic")
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--max-scaffolding",
        type=int,
        help="Upper bound on scaffolding cells in one connector path",
    )
    parser.add_argument(
        "--debug-checks",
        action="store_true",
        help="Rescan roots and components after every merge",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the plan summary as JSON",
    )
    parser.add_argument(
        "--layers",
        action="store_true",
        help="Print every horizontal layer of the plan",
    )
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    with open(args.path) as fin:
        text = fin.read()

    logger.info("Loading schematic from %s", args.path)
    try:
        schematic = parse_schematic(text)
        validate(schematic)
    except (ValueError, ValidationError) as exc:
        logger.error("Invalid schematic: %s", exc)
        raise SystemExit(1)
    logger.info("Validation succeeded")

    options = PlanOptions(
        max_scaffolding=args.max_scaffolding,
        debug_checks=True if args.debug_checks else None,
    )
    try:
        output = plan_scaffolding(schematic, options)
    except Unconnectable as exc:
        logger.error("Schematic cannot be connected: %s", exc)
        raise SystemExit(2)

    summary = output.summary()
    if args.json:
        print(json.dumps(summary, indent=2))
    else:
        print(f"Root component: {summary['root']}")
        print(f"Merges: {summary['merges']}")
        print(f"Real blocks: {summary['real']}")
        print(f"Scaffolding blocks: {len(summary['scaffolding'])}")
        listing = format_scaffolding(output)
        if listing:
            print(listing)

    if args.layers:
        print(format_plan(output, schematic.bounds))


if __name__ == "__main__":
    main(sys.argv[1:])

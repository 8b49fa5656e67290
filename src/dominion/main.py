"""Command line entrypoint: run the HTTP API or a headless simulation."""

from __future__ import annotations

import argparse
import json
import logging
from collections.abc import Sequence

from dominion.config import get_settings
from dominion.domain.enums import Ruleset
from dominion.domain.rules_config import DEFAULT_RULES, load_rules
from dominion.domain.simulation import SimulationConfig, run_simulation

logger = logging.getLogger(__name__)


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    if args.reload:
        uvicorn.run(
            "dominion.api.app:app",
            host=args.host,
            port=args.port,
            reload=True,
            factory=False,
        )
    else:
        from dominion.api.app import app

        uvicorn.run(app, host=args.host, port=args.port, reload=False, factory=False)
    return 0


def _simulate(args: argparse.Namespace) -> int:
    settings = get_settings()
    rules_path = args.rules or settings.rules_path
    rules = load_rules(rules_path) if rules_path else DEFAULT_RULES
    config = SimulationConfig(
        empire_count=args.empires,
        turn_limit=args.turns,
        protection_turns=args.protection,
        include_player=args.include_player,
        seed=args.seed,
        ruleset=Ruleset(args.ruleset),
    )
    logger.info(
        "running simulation: %s empires, %s turns, seed %s",
        config.empire_count,
        config.turn_limit,
        config.seed,
    )
    result = run_simulation(config, rules=rules)

    summary = {
        "turns_played": result.turns_played,
        "winner": result.winner.name if result.winner else None,
        "victory_type": result.victory.type.value if result.victory else None,
        "alive_empires": len(result.final_state.alive_empires()),
        "coverage": result.coverage,
    }
    print(json.dumps(summary, indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(prog="dominion", description="Nexus Dominion engine")
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        help="Logging level (DEBUG, INFO, WARNING, ...)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API server")
    serve.add_argument("--host", default="127.0.0.1", help="Host interface to bind")
    serve.add_argument("--port", type=int, default=8000, help="TCP port to listen on")
    serve.add_argument(
        "--reload",
        action="store_true",
        help="Enable autoreload (dev mode)",
    )
    serve.set_defaults(handler=_serve)

    simulate = sub.add_parser("simulate", help="Run an unattended bot-only game")
    simulate.add_argument("--empires", type=int, default=10, help="Number of empires")
    simulate.add_argument("--turns", type=int, default=settings.turn_limit, help="Turn limit")
    simulate.add_argument(
        "--protection",
        type=int,
        default=settings.protection_turns,
        help="Turns during which attacks are disabled",
    )
    simulate.add_argument("--seed", default="1", help="Seed for the whole run")
    simulate.add_argument(
        "--ruleset",
        choices=[r.value for r in Ruleset],
        default=settings.default_ruleset.value,
        help="Combat ruleset",
    )
    simulate.add_argument(
        "--include-player",
        action="store_true",
        help="Reserve an idle player seat",
    )
    simulate.add_argument("--rules", default=None, help="Path to a JSON rules document")
    simulate.set_defaults(handler=_simulate)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return args.handler(args)


if __name__ == "__main__":
    raise SystemExit(main())

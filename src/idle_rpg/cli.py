from __future__ import annotations

import argparse
import json
import logging
from importlib import resources
from pathlib import Path
from typing import Optional

from . import __version__
from .combat.engine import CombatEngine
from .combat.models import Resolution
from .core.errors import RosterValidationError
from .core.rng import RNG
from .data.loader import load_roster
from .settings import CombatSettings

logger = logging.getLogger(__name__)


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
    )


def _roster_path(arg: Optional[str]) -> Path:
    if arg:
        return Path(arg)
    return Path(str(resources.files("idle_rpg.data.rosters").joinpath("default.yaml")))


def _cmd_simulate(args: argparse.Namespace) -> int:
    settings = CombatSettings.load(Path(args.settings) if args.settings else None)
    roster = load_roster(_roster_path(args.roster))
    rng = RNG(args.seed)
    adventure_name = args.adventure or sorted(roster.adventures)[0]
    adventure = roster.build_adventure(adventure_name, rng=rng)
    store = roster.build_store()
    engine = CombatEngine(
        store,
        adventure,
        roster.player,
        rng=rng,
        bonuses=roster.bonuses,
        settings=settings,
    )

    dmg = engine.damage_range()
    print(f"{roster.player.label} damage range: {dmg.min}-{dmg.max}")
    results = engine.run(range(args.ticks))
    for event in engine.log.events():
        print(event.message)

    kills = sum(1 for r in results if r.resolution is Resolution.ENEMY_DEFEATED)
    stopped = engine.stop_reason()
    if stopped is not None:
        print(f"Stopped after {len(results)} of {args.ticks} ticks: {stopped}")
    summary = {
        "adventure": adventure.name,
        "progress": adventure.progress,
        "length": adventure.length,
        "completed": adventure.completed,
        "ticks_run": len(results),
        "stopped": stopped,
        "kills": kills,
        "health": store.get_stat(settings.health_stat, roster.player).current,
        "action": roster.player.action,
        "job_exp": store.get_job(roster.player).exp,
        "attribute_exp": {name: a.exp for name, a in roster.player.attributes.items()},
    }
    print(json.dumps(summary, indent=2))
    return 0


def _cmd_validate(args: argparse.Namespace) -> int:
    try:
        roster = load_roster(args.roster)
    except RosterValidationError as e:
        print(f"INVALID: {args.roster}\n{e.to_human()}")
        return 1
    print(f"OK: {args.roster} (player={roster.player.label}, adventures={sorted(roster.adventures)})")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="idle-rpg", description="Idle RPG headless combat tools")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("-v", "--verbose", action="count", default=0, help="Increase log verbosity (-v, -vv)")
    sub = p.add_subparsers(dest="cmd", required=True)

    s = sub.add_parser("simulate", help="Run a fight for a number of ticks and print the log")
    s.add_argument("roster", nargs="?", default=None, help="Roster YAML (defaults to the bundled roster)")
    s.add_argument("--ticks", type=int, default=100, help="Number of ticks to run")
    s.add_argument("--seed", type=int, default=None, help="Seed for deterministic runs")
    s.add_argument("--adventure", default=None, help="Adventure name from the roster")
    s.add_argument("--settings", default=None, help="Combat settings YAML overriding the defaults")
    s.set_defaults(func=_cmd_simulate)

    v = sub.add_parser("validate", help="Validate a roster YAML file")
    v.add_argument("roster", help="Path to a roster YAML file")
    v.set_defaults(func=_cmd_validate)

    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)
    return args.func(args)

from __future__ import annotations

import argparse
import random
import sys
from collections.abc import Sequence

from rich.markup import escape

from .core.axis import generate_axis_set
from .core.payouts import calculate_payouts
from .core.secure_roll import EntropyUnavailableError, indices_to_animal_ids, secure_roll, settle_bets
from .core.sports import detect_sport_type, get_sport_schedule
from .ui.presenters import RichPresenter


def _schedule(args: argparse.Namespace):
    if args.sport:
        return get_sport_schedule(args.sport)
    return get_sport_schedule(detect_sport_type(args.league))


def _parse_bet(raw: str) -> tuple[str, int]:
    animal, sep, stake = raw.partition("=")
    if not sep:
        raise argparse.ArgumentTypeError(f"expected ANIMAL=STAKE, got '{raw}'")
    try:
        return animal.strip().lower(), int(stake)
    except ValueError:
        raise argparse.ArgumentTypeError(f"stake must be an integer in '{raw}'") from None


def _cmd_axis(args: argparse.Namespace, presenter: RichPresenter) -> int:
    # A seed makes the grid reproducible for demos; live games never pass one.
    rng = random.Random(args.seed) if args.seed is not None else None
    if args.sport or args.league:
        schedule = _schedule(args)
        presenter.show_axis_set(generate_axis_set(schedule, rng=rng), schedule.labels)
    else:
        presenter.show_axis_set(generate_axis_set(rng=rng))
    return 0


def _cmd_payouts(args: argparse.Namespace, presenter: RichPresenter) -> int:
    schedule = _schedule(args)
    try:
        payouts = calculate_payouts(args.pot, schedule.category)
    except ValueError as exc:
        presenter.console.print(f"[red]{escape(str(exc))}[/]")
        return 2
    presenter.show_payouts(args.pot, schedule, payouts)
    return 0


def _cmd_roll(args: argparse.Namespace, presenter: RichPresenter) -> int:
    try:
        animals = indices_to_animal_ids(secure_roll())
    except EntropyUnavailableError as exc:
        presenter.console.print(f"[red]{escape(str(exc))}[/]")
        return 1
    settlement = None
    if args.bet:
        try:
            settlement = settle_bets(dict(args.bet), animals)
        except ValueError as exc:
            presenter.console.print(f"[red]{escape(str(exc))}[/]")
            return 2
    presenter.show_roll(animals, settlement)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="squarespool", description="Squares pool fairness tools")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")
    sub = parser.add_subparsers(dest="command", required=True)

    axis = sub.add_parser("axis", help="Generate row/column digits for every checkpoint")
    axis.add_argument("--sport", default=None, help="football, basketball, soccer or default")
    axis.add_argument("--league", default=None, help="League code to detect the sport from, e.g. NFL")
    axis.add_argument("--seed", type=int, default=None, help="Reproducible RNG seed (demo only)")
    axis.set_defaults(handler=_cmd_axis)

    payouts = sub.add_parser("payouts", help="Split a pot across checkpoints")
    payouts.add_argument("pot", type=float)
    payouts.add_argument("--sport", default=None)
    payouts.add_argument("--league", default=None)
    payouts.set_defaults(handler=_cmd_payouts)

    roll = sub.add_parser("roll", help="Roll the Bau Cua dice")
    roll.add_argument(
        "--bet",
        type=_parse_bet,
        action="append",
        default=[],
        metavar="ANIMAL=STAKE",
        help="Settle a stake against the roll (repeatable)",
    )
    roll.set_defaults(handler=_cmd_roll)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(list(argv) if argv is not None else sys.argv[1:])
    presenter = RichPresenter(no_color=args.no_color)
    return args.handler(args, presenter)


if __name__ == "__main__":
    raise SystemExit(main())

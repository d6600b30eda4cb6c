"""Command-line interface for the Pitwall strategy engine.

Commands:
- cars: list the cars in a lap times CSV
- recommend: pit window recommendation as JSON
- replay: step through recorded laps, one recommendation per lap
- report: HTML strategy report

Author: Pitwall contributors
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from pitwall import config as cfg
from pitwall import data_loader, report
from pitwall.session import RaceState, StrategySession, build_session, parse_window_size

logger = logging.getLogger(__name__)


def _build_config(args: argparse.Namespace) -> cfg.StrategyConfig:
    kwargs = {}
    if getattr(args, "pit_loss", None) is not None:
        kwargs["pit_loss_seconds"] = args.pit_loss
    if getattr(args, "row_limit", None) is not None:
        kwargs["row_limit"] = args.row_limit
    return cfg.StrategyConfig(**kwargs)


def _load_session(args: argparse.Namespace, config: cfg.StrategyConfig) -> StrategySession:
    """Load the CSV, build the session and apply the state from the arguments."""
    frame = data_loader.load_laps_csv(args.laps, config)
    records = data_loader.coerce_lap_records(frame, config.default_car_id)

    car_id = args.car or config.default_car_id
    session = build_session(records, car_id, dataset_id=Path(args.laps).stem, config=config)

    state = RaceState(
        lap=args.lap if args.lap is not None else session.state.lap,
        tire_age=args.tire_age if args.tire_age is not None else session.state.tire_age,
        compound=args.compound or session.state.compound,
    )
    return session.with_state(state)


def run_list_cars(args: argparse.Namespace) -> int:
    """Print the cars found in a lap times CSV."""
    try:
        config = _build_config(args)
        frame = data_loader.load_laps_csv(args.laps, config)
        print(json.dumps(data_loader.list_cars(frame), indent=2))
        return 0

    except ValueError as e:
        logger.error(f"Listing cars failed: {e}", exc_info=args.verbose)
        return 1


def run_recommendation(args: argparse.Namespace) -> int:
    """Print the pit window recommendation for the selected car."""
    try:
        config = _build_config(args)
        window_size = parse_window_size(args.window_size, config)
        session = _load_session(args, config)

        payload = session.recommend(window_size, config)
        print(json.dumps(payload, indent=2))

        if payload["best_pit_lap"] is None:
            logger.info("No pit window: car is on or past the final lap")
        else:
            logger.info(f"Recommended pit lap: {payload['best_pit_lap']}")
        return 0

    except ValueError as e:
        logger.error(f"Recommendation failed: {e}", exc_info=args.verbose)
        return 1


def run_replay(args: argparse.Namespace) -> int:
    """Step through recorded laps, printing one recommendation per lap."""
    try:
        config = _build_config(args)
        window_size = parse_window_size(args.window_size, config)
        if args.steps < 0:
            raise ValueError(f"steps cannot be negative, got {args.steps}")
        session = _load_session(args, config)

        for step in range(args.steps + 1):
            print(json.dumps(session.recommend(window_size, config)))
            following = session.tick()
            if following is session:
                logger.info(f"Replay reached the last recorded lap after {step} steps")
                break
            session = following
        return 0

    except ValueError as e:
        logger.error(f"Replay failed: {e}", exc_info=args.verbose)
        return 1


def run_report(args: argparse.Namespace) -> int:
    """Write the HTML strategy report for the selected car."""
    try:
        config = _build_config(args)
        window_size = parse_window_size(args.window_size, config)
        session = _load_session(args, config)

        window = session.find_window(window_size)
        output_path = Path(args.output) if args.output else (
            config.output_dir / f"report_{session.car_id}.html"
        )
        report.generate_report(session, window, config, output_path)

        logger.info(f"Report complete! Output: {output_path}")
        return 0

    except ValueError as e:
        logger.error(f"Report failed: {e}", exc_info=args.verbose)
        return 1


def _add_selection_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--laps", type=str, required=True, help="Lap times CSV")
    parser.add_argument("--car", type=str, help="Car id (default: CAR_01)")
    parser.add_argument("--lap", type=int, help="Current lap (default: first recorded lap)")
    parser.add_argument("--tire-age", type=int, help="Laps on the current tires")
    parser.add_argument("--compound", choices=cfg.COMPOUNDS, help="Current compound")
    parser.add_argument("--window-size", type=str, help="Laps ahead to consider (default: 5)")
    parser.add_argument("--pit-loss", type=float, help="Seconds lost per stop (default: 22.0)")
    parser.add_argument("--row-limit", type=int, help="Read at most this many CSV rows")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Pitwall - pit stop window recommendations from lap data",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Cars in a dataset
  pitwall cars --laps data/VIR_R1/lap_times.csv

  # Best pit lap in the next 5 laps
  pitwall recommend --laps data/VIR_R1/lap_times.csv --car CAR_01 --lap 10 --tire-age 3

  # Replay the next 10 recorded laps
  pitwall replay --laps data/VIR_R1/lap_times.csv --lap 10 --steps 10

  # HTML report
  pitwall report --laps data/VIR_R1/lap_times.csv --lap 10 --output outputs/report.html
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    cars_parser = subparsers.add_parser("cars", help="List cars in a lap times CSV")
    cars_parser.add_argument("--laps", type=str, required=True, help="Lap times CSV")
    cars_parser.add_argument("--row-limit", type=int, help="Read at most this many CSV rows")
    cars_parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

    rec_parser = subparsers.add_parser("recommend", help="Recommend a pit lap")
    _add_selection_args(rec_parser)

    replay_parser = subparsers.add_parser("replay", help="Replay laps with a recommendation per lap")
    _add_selection_args(replay_parser)
    replay_parser.add_argument("--steps", type=int, default=10, help="Laps to step through")

    report_parser = subparsers.add_parser("report", help="Write an HTML strategy report")
    _add_selection_args(report_parser)
    report_parser.add_argument("--output", type=str, help="Report path")

    return parser


def main(argv=None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if getattr(args, "verbose", False):
        logging.getLogger("pitwall").setLevel(logging.DEBUG)

    if args.command == "cars":
        return run_list_cars(args)
    elif args.command == "recommend":
        return run_recommendation(args)
    elif args.command == "replay":
        return run_replay(args)
    elif args.command == "report":
        return run_report(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""
Katabatic Dawn Patrol CLI

Command-line interface for scoring a pre-fetched valley/mountain forecast.

Usage:
    python katabatic_cli.py predict --input forecast.json
    python katabatic_cli.py predict --input forecast.json --waves --json
    python katabatic_cli.py waves --input forecast.json
    python katabatic_cli.py criteria
"""

# Load environment variables FIRST (before any other imports)
from dotenv import load_dotenv
load_dotenv()

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from config import LOG_DATEFMT, LOG_FORMAT, LOG_LEVEL, get_site
from core.models import Criteria, WeatherSeries

# Configure logging
logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT, datefmt=LOG_DATEFMT)
logger = logging.getLogger("katabatic_cli")

EXIT_USAGE = 2


def _load_json(path: str) -> dict:
    try:
        with open(Path(path), "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"{path} is not valid JSON: {e}") from None


def _load_series(args) -> WeatherSeries:
    return WeatherSeries.from_dict(_load_json(args.input), timezone=args.timezone)


def _load_criteria(args) -> Criteria:
    criteria = Criteria.from_dict(_load_json(args.criteria)) if args.criteria else Criteria()
    if getattr(args, "waves", False):
        criteria = criteria.with_overrides(include_wave_factors=True)
    return criteria


def parse_reference(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 reference time (a trailing Z is accepted)."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise ValueError(f"Invalid reference time: {value!r}") from None


def cmd_predict(args) -> int:
    """Score the forecast and print the prediction."""
    from synthesizer import analyze_prediction, format_prediction_log, summarize_prediction

    series = _load_series(args)
    criteria = _load_criteria(args)
    logger.info(
        f"Scoring {len(series.valley)} valley / {len(series.mountain)} mountain samples "
        f"({series.timezone})"
    )

    prediction = analyze_prediction(series, criteria, reference_utc=parse_reference(args.reference))
    summary = summarize_prediction(prediction)
    logger.info(format_prediction_log(get_site("valley"), prediction))

    if args.json:
        print(json.dumps(
            {"prediction": prediction.to_dict(), "summary": summary.to_dict()},
            indent=2,
            ensure_ascii=False,
        ))
        return 0

    print("\n" + "=" * 60)
    print("KATABATIC PREDICTION")
    print("=" * 60)
    print(f"  Probability:    {prediction.probability}%")
    print(f"  Confidence:     {prediction.confidence}")
    print(f"  Recommendation: {prediction.recommendation.upper()}")
    if prediction.best_time_window:
        window = prediction.best_time_window
        print(f"  Window:         {window.start:%Y-%m-%d %H:%M} - {window.end:%H:%M}")
    print(f"\n  {prediction.explanation}")
    print(f"  Primary concern: {summary.primary_concern}")
    print(f"  Best aspect:     {summary.best_aspect}\n")
    print(prediction.detailed_analysis)
    return 0


def cmd_waves(args) -> int:
    """Print the mountain wave analysis and stability profile."""
    from synthesizer import analyze_mountain_waves, analyze_stability_profile

    series = _load_series(args)
    waves = analyze_mountain_waves(series)
    profile = analyze_stability_profile(series)

    if args.json:
        print(json.dumps({"waves": waves.to_dict(), "stability": profile.to_dict()}, indent=2))
        return 0

    print(f"\nFroude number:   {waves.froude_number:.2f}")
    print(f"Amplitude:       {waves.wave_amplitude}")
    print(f"Organization:    {waves.wave_organization}")
    print(f"Coupling:        {waves.surface_coupling}")
    print(f"Potential:       {waves.wave_propagation_potential:.0f}/100")
    print(f"Enhancement:     {waves.enhancement_potential}")
    print(f"  {waves.analysis}")
    print(f"\nSurface N:       {profile.surface_stability:.4f} s^-1")
    print(f"Wave-level N:    {profile.wave_level_stability:.4f} s^-1")
    print(f"Gradient:        {profile.stability_gradient}")
    print(f"Coupling eff.:   {profile.coupling_efficiency:.0f}%")
    print(f"Optimal profile: {'yes' if profile.profile_optimal else 'no'}")
    print(f"  {profile.analysis}")
    return 0


def cmd_criteria(args) -> int:
    """Print the default criteria as JSON."""
    print(json.dumps(Criteria().to_dict(), indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Katabatic Dawn Patrol CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Score tomorrow's dawn patrol
  python katabatic_cli.py predict --input forecast.json

  # Include the mountain wave and stability factors, print JSON
  python katabatic_cli.py predict --input forecast.json --waves --json

  # Custom thresholds
  python katabatic_cli.py predict --input forecast.json --criteria criteria.json

  # Mountain wave analysis only
  python katabatic_cli.py waves --input forecast.json
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    predict_parser = subparsers.add_parser("predict", help="Score a forecast")
    predict_parser.add_argument("--input", required=True, help="Path to forecast series JSON")
    predict_parser.add_argument("--criteria", help="Path to criteria JSON (partial overrides)")
    predict_parser.add_argument("--timezone", help="IANA timezone for window hours")
    predict_parser.add_argument("--reference", help="Reference time (ISO-8601) for the best window")
    predict_parser.add_argument("--waves", action="store_true", help="Include wave/stability factors")
    predict_parser.add_argument("--json", action="store_true", help="Print JSON")
    predict_parser.set_defaults(func=cmd_predict)

    waves_parser = subparsers.add_parser("waves", help="Mountain wave analysis")
    waves_parser.add_argument("--input", required=True, help="Path to forecast series JSON")
    waves_parser.add_argument("--timezone", help="IANA timezone for window hours")
    waves_parser.add_argument("--json", action="store_true", help="Print JSON")
    waves_parser.set_defaults(func=cmd_waves)

    criteria_parser = subparsers.add_parser("criteria", help="Print default criteria")
    criteria_parser.set_defaults(func=cmd_criteria)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    try:
        return args.func(args)
    except (OSError, ValueError) as e:
        logger.error(f"Command failed: {e}")
        return EXIT_USAGE
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        return 1


if __name__ == "__main__":
    sys.exit(main())

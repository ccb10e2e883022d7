"""Command-line interface for running draft lotteries from a standings CSV."""

from __future__ import annotations

import argparse
import csv
import json
import logging
import random
from io import StringIO
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from draftlottery.config import ALLOCATION_PRESETS, get_rules
from draftlottery.config_loader import LotteryProfile
from draftlottery.export import export_matrix_to_csv, export_result_to_csv, export_result_to_json
from draftlottery.ingest import load_league_from_csv
from draftlottery.lottery import (
    ConfigurationError,
    ProbabilityMatrix,
    allocate_balls,
    draw,
    odds_table,
    simulate,
)
from draftlottery.models import FallProtectionConfig, Team, TeamLotteryConfig


MODES = ("draw", "odds", "simulate", "allocate")


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a weighted draft lottery from league standings")
    parser.add_argument("teams", type=Path, help="Path to standings CSV")
    parser.add_argument("--mode", choices=MODES, default="draw", help="What to compute")
    parser.add_argument(
        "--team-column",
        action="append",
        default=[],
        help="Mapping for standings CSV columns (e.g., name=Team Name)",
    )
    parser.add_argument(
        "--preset",
        choices=sorted(ALLOCATION_PRESETS),
        default="standard",
        help="Ball allocation preset for teams without a balls value",
    )
    parser.add_argument(
        "--fall-protection",
        type=int,
        default=None,
        metavar="SPOTS",
        help="Enable fall protection with this many spots (1-10)",
    )
    parser.add_argument("--trials", type=int, default=None, help="Monte Carlo trials for --mode simulate")
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible draws")
    parser.add_argument("--format", choices=("csv", "json"), default="csv", help="Output format")
    parser.add_argument("--output", type=Path, default=None, help="Output path (stdout if omitted)")
    parser.add_argument("--league-name", default=None, help="League name for JSON exports")
    parser.add_argument("--load-profile", type=Path, help="Load lottery settings JSON", default=None)
    parser.add_argument("--save-profile", type=Path, help="Save lottery settings JSON", default=None)
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def _parse_mapping(entries: list[str]) -> dict[str, str]:
    mapping: dict[str, str] = {}
    for entry in entries:
        if "=" not in entry:
            raise ValueError(f"Invalid mapping entry '{entry}', expected key=value")
        key, value = entry.split("=", 1)
        mapping[key.strip()] = value.strip()
    return mapping


def _matrix_to_json(matrix: ProbabilityMatrix) -> str:
    return json.dumps(matrix.to_dict(), indent=2)


def _allocation_output(teams: Sequence[Team], balls: Dict[str, int], fmt: str) -> str:
    total = sum(balls.values())
    percents = {tid: round(value / total * 100.0, 1) if total else 0.0 for tid, value in balls.items()}
    if fmt == "json":
        return json.dumps({"balls": balls, "percentages": percents}, indent=2)
    names = {team.team_id: team.display_name for team in teams}
    buffer = StringIO()
    writer = csv.writer(buffer)
    writer.writerow(["Team Name", "Balls", "Odds (%)"])
    for team_id, value in balls.items():
        writer.writerow([names[team_id], value, percents[team_id]])
    return buffer.getvalue()


def _render(
    args: argparse.Namespace,
    teams: List[Team],
    configs: Dict[str, TeamLotteryConfig],
    fall_protection: FallProtectionConfig,
) -> str:
    rng = random.Random(args.seed) if args.seed is not None else random.Random()
    if args.mode == "allocate":
        included = [tid for tid, cfg in configs.items() if cfg.included]
        balls = allocate_balls(
            [team for team in teams if team.team_id in set(included)],
            get_rules(args.preset),
            include=included,
        )
        return _allocation_output(teams, balls, args.format)
    if args.mode == "draw":
        result = draw(teams, configs, fall_protection, rng=rng)
        if args.format == "json":
            return export_result_to_json(result, teams, configs, league_name=args.league_name)
        return export_result_to_csv(result, teams)
    if args.mode == "odds":
        matrix = odds_table(teams, configs, fall_protection)
    else:
        matrix = simulate(teams, configs, fall_protection, trials=args.trials, rng=rng)
        if matrix.discarded_trials:
            print(f"Discarded {matrix.discarded_trials}/{matrix.requested_trials} invalid trials")
    if args.format == "json":
        return _matrix_to_json(matrix)
    return export_matrix_to_csv(matrix, teams)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    team_mapping = _parse_mapping(args.team_column)
    teams, configs, report = load_league_from_csv(
        args.teams,
        mapping=team_mapping or None,
        rules=get_rules(args.preset),
    )
    print(f"Loaded {report.teams_loaded}/{report.total_rows} teams", flush=True)
    if report.defaulted_balls:
        print(f"Default balls assigned to: {', '.join(report.defaulted_balls)}")
    if report.skipped_rows:
        preview = "; ".join(report.skipped_rows[:5])
        more = len(report.skipped_rows) - 5
        suffix = f", +{more} more" if more > 0 else ""
        print(f"Skipped rows: {preview}{suffix}")

    fall_protection = FallProtectionConfig()
    league_name = args.league_name
    if args.load_profile:
        profile = LotteryProfile.load(args.load_profile)
        known = {team.team_id for team in teams}
        configs = configs | {tid: cfg for tid, cfg in profile.configs.items() if tid in known}
        fall_protection = profile.fall_protection
        league_name = league_name or profile.league_name
        args.league_name = league_name
    if args.fall_protection is not None:
        try:
            fall_protection = FallProtectionConfig(enabled=True, max_spots=args.fall_protection)
        except ValueError as exc:
            raise SystemExit(f"Invalid --fall-protection value: {exc}") from exc

    if args.save_profile:
        LotteryProfile(configs, fall_protection, league_name).save(args.save_profile)
        print(f"Saved lottery profile to {args.save_profile}")

    try:
        output = _render(args, teams, configs, fall_protection)
    except ConfigurationError as exc:
        raise SystemExit(f"Invalid lottery configuration ({exc.code}): {exc.message}") from exc

    if args.output:
        args.output.write_text(output, encoding="utf-8")
        print(f"Wrote {args.mode} output to {args.output}")
    else:
        print(output)


if __name__ == "__main__":
    main()

"""Lightweight REST client for the draftlottery API."""

from __future__ import annotations

import argparse
import json
from pathlib import Path

import httpx


def load_payload(path: Path) -> dict:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise SystemExit(f"Invalid payload JSON: {exc}") from exc


def main() -> None:
    parser = argparse.ArgumentParser(description="Interact with the draftlottery REST API")
    parser.add_argument("base_url", help="Base URL of the API, e.g. http://localhost:8000")
    parser.add_argument("payload", type=Path, nargs="?", help="JSON file with teams, configs and fall_protection")
    parser.add_argument("--mode", choices=("draw", "odds", "simulate"), default="draw")
    parser.add_argument("--trials", type=int, default=None, help="Trials for --mode simulate")
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible results")
    parser.add_argument("--league-teams", metavar="LEAGUE_ID", help="Fetch Sleeper league teams and exit")
    parser.add_argument("--get-share", metavar="SHARE_ID", help="Fetch a shared result and exit")
    parser.add_argument("--export-share", metavar="SHARE_ID", help="Download result CSV for a share")
    parser.add_argument("--export-path", type=Path, help="Destination path for exported CSV")
    parser.add_argument("--share", action="store_true", help="Create a share link for the draw result")
    args = parser.parse_args()

    if args.league_teams or args.get_share or args.export_share:
        with httpx.Client(base_url=args.base_url) as client:
            if args.league_teams:
                resp = client.get(f"/leagues/{args.league_teams}/teams")
                resp.raise_for_status()
                print(json.dumps(resp.json(), indent=2))
            if args.get_share:
                resp = client.get(f"/shares/{args.get_share}")
                if resp.status_code == 404:
                    raise SystemExit(f"share {args.get_share} not found")
                resp.raise_for_status()
                print(json.dumps(resp.json(), indent=2))
            if args.export_share:
                resp = client.get(f"/shares/{args.export_share}/export.csv")
                if resp.status_code == 404:
                    raise SystemExit(f"share {args.export_share} not found")
                resp.raise_for_status()
                if args.export_path:
                    args.export_path.write_text(resp.text)
                    print(f"CSV export saved to {args.export_path}")
                else:
                    print(resp.text)
        return

    if args.payload is None:
        raise SystemExit("payload file is required unless using --league-teams/--get-share/--export-share")

    payload = load_payload(args.payload)
    if args.seed is not None:
        payload["seed"] = args.seed
    if args.mode == "simulate" and args.trials is not None:
        payload["trials"] = args.trials

    with httpx.Client(base_url=args.base_url, timeout=120.0) as client:
        resp = client.post(f"/{args.mode}", json=payload)
        if resp.status_code == 400:
            raise SystemExit(f"Rejected configuration: {json.dumps(resp.json(), indent=2)}")
        resp.raise_for_status()
        body = resp.json()
        print(json.dumps(body, indent=2))

        if args.mode == "draw" and args.share:
            share = {
                "teams": payload["teams"],
                "configs": payload.get("configs", []),
                "results": [
                    {key: pick[key] for key in ("pick", "team_id", "odds_percent", "was_locked")}
                    for pick in body["picks"]
                ],
            }
            resp = client.post("/shares", json=share)
            resp.raise_for_status()
            print(f"Share id: {resp.json()['share_id']}")


if __name__ == "__main__":
    main()

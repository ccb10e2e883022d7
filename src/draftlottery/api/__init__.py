"""REST API for the draft lottery engine."""

from __future__ import annotations

import logging
import random
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Sequence

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, Response

from draftlottery.api.schemas import (
    AllocateRequest,
    AllocationResponse,
    DrawRequest,
    DrawResponse,
    HistoryCreateRequest,
    HistoryEntryResponse,
    LotteryPickResponse,
    LotteryRequest,
    MatrixResponse,
    PickOddsRequest,
    PickOddsResponse,
    ShareResponse,
    SimulateRequest,
    SnapshotPayload,
)
from draftlottery.config import get_rules
from draftlottery.export import ExportError, export_result_to_csv, pick_label
from draftlottery.ingest import SleeperClient, SleeperError
from draftlottery.ingest.sleeper import validate_league_id
from draftlottery.lottery import (
    ConfigurationError,
    LotteryPick,
    LotteryResult,
    ProbabilityMatrix,
    allocate_balls,
    draw,
    estimate_pick_odds,
    odds_table,
    simulate,
)
from draftlottery.models import Team
from draftlottery.persistence import HistoryRecord, LotteryStore, ShareRecord


logger = logging.getLogger(__name__)


def _rng(seed: int | None) -> random.Random:
    return random.Random(seed) if seed is not None else random.Random()


def _matrix_response(matrix: ProbabilityMatrix) -> MatrixResponse:
    return MatrixResponse.model_validate(matrix.to_dict())


def _result_to_picks(result: LotteryResult, teams: Sequence[Team]) -> list[LotteryPickResponse]:
    lookup = {team.team_id: team for team in teams}
    return [
        LotteryPickResponse(
            pick=entry.pick,
            label=pick_label(entry.pick),
            team_id=entry.team_id,
            team_name=lookup[entry.team_id].display_name,
            odds_percent=entry.odds_percent,
            was_locked=entry.was_locked,
            record=lookup[entry.team_id].record_label,
        )
        for entry in result.picks
    ]


def _snapshot_fields(payload: SnapshotPayload) -> dict[str, Any]:
    return {
        "league_id": payload.league_id,
        "league_name": payload.league_name,
        "season": payload.season,
        "results": [entry.model_dump() for entry in payload.results],
        "teams": [team.model_dump() for team in payload.teams],
        "configs": {config.team_id: config.model_dump() for config in payload.configs},
    }


def history_to_response(record: HistoryRecord) -> HistoryEntryResponse:
    return HistoryEntryResponse(
        history_id=record.history_id,
        username=record.username,
        created_at=record.created_at,
        league_id=record.league_id,
        league_name=record.league_name,
        season=record.season,
        results=record.results,
        teams=record.teams,
        configs=list(record.configs.values()),
        share_id=record.share_id,
    )


def share_to_response(record: ShareRecord) -> ShareResponse:
    return ShareResponse(
        share_id=record.share_id,
        created_at=record.created_at,
        expires_at=record.expires_at,
        league_id=record.league_id,
        league_name=record.league_name,
        season=record.season,
        results=record.results,
        teams=record.teams,
        configs=list(record.configs.values()),
    )


def create_app(
    db_path: Path | str | None = None,
    *,
    sleeper_client: SleeperClient | None = None,
) -> FastAPI:
    store = LotteryStore(db_path)
    sleeper = sleeper_client or SleeperClient()

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        yield
        await sleeper.close()

    app = FastAPI(title="draftlottery", lifespan=lifespan)
    app.state.store = store
    app.state.sleeper = sleeper

    @app.exception_handler(ConfigurationError)
    async def configuration_error(_request: Request, exc: ConfigurationError) -> JSONResponse:
        logger.info("Rejected lottery configuration – %s: %s", exc.code, exc.message)
        return JSONResponse(status_code=400, content=exc.to_dict())

    @app.exception_handler(SleeperError)
    async def sleeper_error(_request: Request, exc: SleeperError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/allocate", response_model=AllocationResponse)
    async def allocate(payload: AllocateRequest):
        try:
            rules = get_rules(payload.preset)
        except KeyError as exc:
            raise HTTPException(status_code=400, detail=f"Unknown allocation preset {payload.preset}") from exc
        balls = allocate_balls(payload.teams, rules, include=payload.include)
        total = sum(balls.values())
        percentages = {
            team_id: round(value / total * 100.0, 1) if total else 0.0
            for team_id, value in balls.items()
        }
        return AllocationResponse(preset=rules.name, balls=balls, percentages=percentages)

    @app.post("/odds", response_model=MatrixResponse)
    async def odds(payload: LotteryRequest):
        matrix = odds_table(payload.teams, payload.configs, payload.fall_protection)
        return _matrix_response(matrix)

    @app.post("/odds/pick", response_model=PickOddsResponse)
    async def pick_odds(payload: PickOddsRequest):
        if payload.team_id not in {team.team_id for team in payload.teams}:
            raise HTTPException(status_code=404, detail="Team not found")
        if payload.pick > len(payload.teams):
            raise HTTPException(status_code=400, detail=f"Pick must be between 1 and {len(payload.teams)}")
        value = estimate_pick_odds(
            payload.teams,
            payload.configs,
            payload.fall_protection,
            payload.team_id,
            payload.pick,
        )
        return PickOddsResponse(team_id=payload.team_id, pick=payload.pick, odds_percent=value)

    @app.post("/draw", response_model=DrawResponse)
    async def run_draw(payload: DrawRequest):
        result = draw(payload.teams, payload.configs, payload.fall_protection, rng=_rng(payload.seed))
        count = store.increment_counter()
        return DrawResponse(picks=_result_to_picks(result, payload.teams), draw_count=count)

    # Plain def: FastAPI runs it in the threadpool, off the event loop.
    @app.post("/simulate", response_model=MatrixResponse)
    def run_simulation(payload: SimulateRequest):
        matrix = simulate(
            payload.teams,
            payload.configs,
            payload.fall_protection,
            trials=payload.trials,
            rng=_rng(payload.seed),
        )
        return _matrix_response(matrix)

    @app.get("/counter")
    async def counter() -> dict[str, int]:
        return {"count": store.get_counter()}

    @app.get("/history", response_model=list[HistoryEntryResponse])
    async def list_history(username: str, limit: int = 50):
        return [history_to_response(record) for record in store.list_history(username, limit=limit)]

    @app.post("/history", response_model=HistoryEntryResponse, status_code=201)
    async def save_history(payload: HistoryCreateRequest):
        record = store.save_history(
            username=payload.username,
            share_id=payload.share_id,
            **_snapshot_fields(payload),
        )
        return history_to_response(record)

    @app.delete("/history/{history_id}")
    async def delete_history(history_id: str, username: str):
        if not store.delete_history(history_id, username):
            raise HTTPException(status_code=404, detail="History entry not found")
        return {"deleted": history_id}

    def _fetch_share_or_404(share_id: str) -> ShareRecord:
        record = store.get_share(share_id)
        if record is None:
            raise HTTPException(status_code=404, detail="Share not found or expired")
        return record

    @app.post("/shares", response_model=ShareResponse, status_code=201)
    async def create_share(payload: SnapshotPayload):
        record = store.save_share(**_snapshot_fields(payload))
        return share_to_response(record)

    @app.get("/shares/{share_id}", response_model=ShareResponse)
    async def get_share(share_id: str):
        return share_to_response(_fetch_share_or_404(share_id))

    @app.get("/shares/{share_id}/export.csv")
    async def export_share(share_id: str):
        record = _fetch_share_or_404(share_id)
        result = LotteryResult(picks=tuple(LotteryPick(**entry) for entry in record.results))
        teams = [Team.model_validate(team) for team in record.teams]
        try:
            csv_text = export_result_to_csv(result, teams)
        except ExportError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return Response(
            content=csv_text,
            media_type="text/csv",
            headers={"Content-Disposition": f"attachment; filename=lottery_{share_id}.csv"},
        )

    @app.get("/users/{username}")
    async def sleeper_user(username: str):
        try:
            return await sleeper.get_user(username)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

    @app.get("/users/{user_id}/leagues")
    async def sleeper_leagues(user_id: str, season: str, sport: str = "nfl"):
        return await sleeper.get_user_leagues(user_id, season, sport)

    @app.get("/leagues/{league_id}")
    async def sleeper_league(league_id: str):
        try:
            return await sleeper.get_league(league_id)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

    @app.get("/leagues/{league_id}/teams")
    async def sleeper_league_teams(league_id: str, preset: str = "standard"):
        try:
            league_id = validate_league_id(league_id)
            rules = get_rules(preset)
        except (ValueError, KeyError) as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        teams = await sleeper.get_league_teams(league_id)
        return {
            "league_id": league_id,
            "teams": [team.model_dump() for team in teams],
            "default_balls": allocate_balls(teams, rules),
        }

    return app


__all__ = ["create_app"]

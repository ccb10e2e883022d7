"""Async client for the public Sleeper fantasy API."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx

from draftlottery.models import Team


logger = logging.getLogger(__name__)

SLEEPER_API_URL = "https://api.sleeper.app/v1"
AVATAR_URL = "https://sleepercdn.com/avatars"

_BRACKET_KEYS = ("t1", "t2", "roster_id", "roster_id_1", "roster_id_2")


class SleeperError(RuntimeError):
    """Raised when the Sleeper API is unreachable or returns an error."""

    def __init__(self, message: str, *, status_code: int = 502):
        super().__init__(message)
        self.status_code = status_code


def avatar_url(avatar: Optional[str]) -> Optional[str]:
    if not avatar:
        return None
    if avatar.startswith(("http://", "https://")):
        return avatar
    return f"{AVATAR_URL}/{avatar}"


def validate_league_id(league_id: str) -> str:
    value = (league_id or "").strip()
    if not value.isdigit():
        raise ValueError("Invalid league id. Must be numeric.")
    return value


def playoff_roster_ids(bracket: List[Dict[str, Any]]) -> set[int]:
    ids: set[int] = set()
    for entry in bracket or []:
        for key in _BRACKET_KEYS:
            value = entry.get(key)
            # bool is an int subclass; bracket placeholders are dicts.
            if isinstance(value, int) and not isinstance(value, bool):
                ids.add(value)
    return ids


class SleeperClient:
    """Thin wrapper over the read-only Sleeper endpoints the lottery needs."""

    def __init__(
        self,
        base_url: str = SLEEPER_API_URL,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout)
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def _get(self, path: str, *, not_found: str) -> Any:
        client = await self._get_client()
        try:
            response = await client.get(f"{self.base_url}{path}")
        except httpx.HTTPError as exc:
            logger.warning("Sleeper request %s failed: %s", path, exc)
            raise SleeperError(f"Sleeper request failed: {exc}") from exc
        if response.status_code == 404:
            raise SleeperError(not_found, status_code=404)
        if response.is_error:
            raise SleeperError(
                f"Sleeper returned {response.status_code} for {path}",
                status_code=502,
            )
        return response.json()

    async def get_user(self, username: str) -> Dict[str, Any]:
        username = (username or "").strip()
        if not username:
            raise ValueError("Username is required.")
        data = await self._get(f"/user/{username}", not_found="User not found on Sleeper.")
        if not data or not data.get("user_id"):
            raise SleeperError("User not found on Sleeper.", status_code=404)
        return {
            "user_id": data["user_id"],
            "username": data.get("username"),
            "display_name": data.get("display_name"),
            "avatar": avatar_url(data.get("avatar")),
        }

    async def get_user_leagues(self, user_id: str, season: str, sport: str = "nfl") -> List[Dict[str, Any]]:
        if not user_id or not season:
            raise ValueError("user_id and season are required")
        leagues = await self._get(
            f"/user/{user_id}/leagues/{sport}/{season}",
            not_found="Failed to load leagues from Sleeper.",
        )
        return [
            {
                "league_id": league.get("league_id"),
                "name": league.get("name"),
                "season": league.get("season"),
                "sport": league.get("sport"),
                "total_rosters": league.get("total_rosters"),
                "avatar": league.get("avatar"),
            }
            for league in leagues or []
        ]

    async def get_league(self, league_id: str) -> Dict[str, Any]:
        league_id = validate_league_id(league_id)
        return await self._get(f"/league/{league_id}", not_found="League not found on Sleeper.")

    async def get_league_teams(self, league_id: str) -> List[Team]:
        """Teams with records and playoff flags for a league.

        A missing winners bracket (playoffs not generated yet) leaves every
        team with ``made_playoffs=False``.
        """

        league_id = validate_league_id(league_id)
        missing = "Failed to load league teams from Sleeper."
        users, rosters, bracket = await asyncio.gather(
            self._get(f"/league/{league_id}/users", not_found=missing),
            self._get(f"/league/{league_id}/rosters", not_found=missing),
            self._get(f"/league/{league_id}/winners_bracket", not_found="no bracket"),
            return_exceptions=True,
        )
        for result in (users, rosters):
            if isinstance(result, BaseException):
                raise SleeperError(missing) from result
        if isinstance(bracket, SleeperError):
            logger.info("No winners bracket for league %s; treating all teams as non-playoff", league_id)
            bracket = []
        elif isinstance(bracket, BaseException):
            raise bracket

        playoff_ids = playoff_roster_ids(bracket)
        user_by_id = {user.get("user_id"): user for user in users or []}
        teams: List[Team] = []
        for roster in rosters or []:
            owner_id = roster.get("owner_id")
            user = user_by_id.get(owner_id) if owner_id else None
            settings = roster.get("settings") or {}
            name = "Orphaned Team"
            if user:
                name = user.get("display_name") or user.get("username") or name
            teams.append(
                Team(
                    team_id=str(roster["roster_id"]),
                    name=name,
                    wins=settings.get("wins") or 0,
                    losses=settings.get("losses") or 0,
                    ties=settings.get("ties") or 0,
                    made_playoffs=roster["roster_id"] in playoff_ids,
                    owner_id=owner_id,
                    metadata={"avatar": avatar_url(user.get("avatar")) if user else None},
                )
            )
        logger.info("Loaded %s teams for Sleeper league %s", len(teams), league_id)
        return teams

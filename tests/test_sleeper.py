import httpx
import pytest

from draftlottery.ingest import SleeperClient, SleeperError
from draftlottery.ingest.sleeper import playoff_roster_ids


USERS = [
    {"user_id": "u1", "username": "alice", "display_name": "Alice", "avatar": "abc123"},
    {"user_id": "u2", "username": "bob", "display_name": None, "avatar": None},
]

ROSTERS = [
    {"roster_id": 1, "owner_id": "u1", "settings": {"wins": 3, "losses": 10, "ties": 1}},
    {"roster_id": 2, "owner_id": "u2", "settings": {"wins": 10, "losses": 3}},
    {"roster_id": 3, "owner_id": None, "settings": {}},
]

BRACKET = [
    {"r": 1, "m": 1, "t1": 2, "t2": 4},
    {"r": 2, "m": 2, "t1": None, "t2": None, "t1_from": {"w": 1}},
]


def _client(routes: dict[str, httpx.Response]) -> SleeperClient:
    def handler(request: httpx.Request) -> httpx.Response:
        response = routes.get(request.url.path)
        if response is None:
            return httpx.Response(404, json=None)
        return response

    transport = httpx.MockTransport(handler)
    return SleeperClient(client=httpx.AsyncClient(transport=transport))


def _league_routes(bracket_response: httpx.Response) -> dict[str, httpx.Response]:
    return {
        "/v1/league/123/users": httpx.Response(200, json=USERS),
        "/v1/league/123/rosters": httpx.Response(200, json=ROSTERS),
        "/v1/league/123/winners_bracket": bracket_response,
    }


def test_playoff_roster_ids_ignores_placeholders():
    assert playoff_roster_ids(BRACKET) == {2, 4}
    assert playoff_roster_ids([]) == set()


@pytest.mark.anyio
async def test_league_teams_combine_users_rosters_and_bracket():
    client = _client(_league_routes(httpx.Response(200, json=BRACKET)))

    teams = await client.get_league_teams("123")
    await client.close()

    by_id = {team.team_id: team for team in teams}
    assert set(by_id) == {"1", "2", "3"}
    assert by_id["1"].name == "Alice"
    assert by_id["1"].record_label == "3-10-1"
    assert by_id["1"].metadata["avatar"] == "https://sleepercdn.com/avatars/abc123"
    assert by_id["2"].name == "bob"
    assert by_id["2"].made_playoffs is True
    assert by_id["1"].made_playoffs is False
    assert by_id["3"].name == "Orphaned Team"
    assert by_id["3"].owner_id is None


@pytest.mark.anyio
async def test_missing_bracket_means_no_playoff_data():
    client = _client(_league_routes(httpx.Response(404, json=None)))

    teams = await client.get_league_teams("123")

    assert not any(team.made_playoffs for team in teams)


@pytest.mark.anyio
async def test_failed_rosters_raise():
    routes = _league_routes(httpx.Response(200, json=BRACKET))
    routes["/v1/league/123/rosters"] = httpx.Response(500, text="boom")
    client = _client(routes)

    with pytest.raises(SleeperError):
        await client.get_league_teams("123")


@pytest.mark.anyio
async def test_league_id_must_be_numeric():
    client = _client({})

    with pytest.raises(ValueError):
        await client.get_league_teams("abc")
    with pytest.raises(ValueError):
        await client.get_league("12a")


@pytest.mark.anyio
async def test_get_user_and_leagues():
    client = _client(
        {
            "/v1/user/alice": httpx.Response(200, json=USERS[0]),
            "/v1/user/u1/leagues/nfl/2024": httpx.Response(
                200,
                json=[{"league_id": "123", "name": "Dynasty", "season": "2024", "sport": "nfl", "total_rosters": 12}],
            ),
        }
    )

    user = await client.get_user("alice")
    leagues = await client.get_user_leagues("u1", "2024")

    assert user["user_id"] == "u1"
    assert user["avatar"] == "https://sleepercdn.com/avatars/abc123"
    assert leagues == [
        {
            "league_id": "123",
            "name": "Dynasty",
            "season": "2024",
            "sport": "nfl",
            "total_rosters": 12,
            "avatar": None,
        }
    ]


@pytest.mark.anyio
async def test_unknown_user():
    client = _client({"/v1/user/ghost": httpx.Response(200, content=b"null")})

    with pytest.raises(SleeperError) as excinfo:
        await client.get_user("ghost")

    assert excinfo.value.status_code == 404

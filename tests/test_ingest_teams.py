from pathlib import Path

import pytest

from draftlottery.ingest import TeamRow, load_team_csv, parse_manual_slot, rows_to_league
from draftlottery.ingest.teams import DEFAULT_TEAM_MAPPING


def _row(**kwargs) -> TeamRow:
    return TeamRow.from_mapping(kwargs, DEFAULT_TEAM_MAPPING)


def test_parse_manual_slot():
    assert parse_manual_slot("1.04") == 4
    assert parse_manual_slot("2.11") == 11
    assert parse_manual_slot("7") == 7
    assert parse_manual_slot(" ") is None
    assert parse_manual_slot(None) is None
    with pytest.raises(ValueError):
        parse_manual_slot("first")


def test_load_team_csv_and_default_balls(tmp_path: Path):
    csv_path = tmp_path / "teams.csv"
    csv_path.write_text(
        "team_id,name,wins,losses,ties,made_playoffs,balls,locked,manual_pick\n"
        "1,Alpha,2,11,0,no,,,\n"
        "2,Bravo,5,8,0,no,,,\n"
        "3,Charlie,9,4,0,yes,,,\n"
        "4,Delta,4,9,0,no,,yes,1.02\n"
        ",,3,3,0,,,,\n",
        encoding="utf-8",
    )

    rows = load_team_csv(csv_path)
    teams, configs, report = rows_to_league(rows)

    assert [team.team_id for team in teams] == ["1", "2", "3", "4"]
    assert report.total_rows == 5
    assert report.teams_loaded == 4
    assert len(report.skipped_rows) == 1
    assert set(report.defaulted_balls) == {"1", "2", "4"}

    assert configs["3"].included is False
    assert configs["3"].balls == 0
    assert configs["4"].locked is True
    assert configs["4"].manual_pick == 2
    assert configs["1"].balls > configs["4"].balls > configs["2"].balls
    assert configs["1"].balls + configs["2"].balls + configs["4"].balls == 1000


def test_explicit_values_are_kept():
    rows = [
        _row(team_id="a", name="A", wins="3", losses="10", balls="120", target_percent="12.5%"),
        _row(team_id="b", name="B", wins="10", losses="3", made_playoffs="true", included="yes", balls="40"),
    ]

    teams, configs, report = rows_to_league(rows)

    assert configs["a"].balls == 120
    assert configs["a"].target_percent == 12.5
    assert configs["b"].included is True
    assert configs["b"].balls == 40
    assert teams[1].made_playoffs is True
    assert report.defaulted_balls == []


def test_bad_rows_are_reported():
    rows = [
        _row(team_id="a", wins="lots", losses="2"),
        _row(team_id="b", wins="1", losses="2", manual_pick="soon"),
        _row(team_id="c", wins="1", losses="2"),
        _row(team_id="c", wins="4", losses="2"),
    ]

    teams, configs, report = rows_to_league(rows)

    assert [team.team_id for team in teams] == ["c"]
    assert len(report.skipped_rows) == 3
    assert configs["c"].balls == 1000


def test_locked_row_without_pick_is_excluded():
    rows = [
        _row(team_id="a", wins="1", losses="5", locked="yes"),
        _row(team_id="b", wins="2", losses="4"),
    ]

    _, configs, report = rows_to_league(rows)

    assert configs["a"].included is False
    assert any("a" in entry for entry in report.skipped_rows)

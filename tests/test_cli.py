import csv
import json
from io import StringIO
from pathlib import Path

import pytest

from draftlottery.cli import main


STANDINGS = (
    "team_id,name,wins,losses,made_playoffs,balls,locked,manual_pick\n"
    "1,Alpha,2,11,no,,,\n"
    "2,Bravo,5,8,no,,,\n"
    "3,Charlie,9,4,yes,,,\n"
    "4,Delta,4,9,no,,,\n"
)


def _write(tmp_path: Path, text: str = STANDINGS) -> Path:
    path = tmp_path / "teams.csv"
    path.write_text(text, encoding="utf-8")
    return path


def test_draw_writes_result_csv(tmp_path: Path, capsys):
    output = tmp_path / "result.csv"

    main([str(_write(tmp_path)), "--mode", "draw", "--seed", "5", "--output", str(output)])

    rows = list(csv.reader(StringIO(output.read_text(encoding="utf-8"))))
    assert rows[0] == ["Pick", "Team Name", "Odds (%)", "Was Locked", "Record"]
    assert [row[0] for row in rows[1:]] == ["1.01", "1.02", "1.03", "1.04"]
    # The playoff team is not in the lottery and takes the last pick.
    assert rows[4][1] == "Charlie"
    assert "Loaded 4/4 teams" in capsys.readouterr().out


def test_simulate_json_output(tmp_path: Path):
    output = tmp_path / "matrix.json"

    main(
        [
            str(_write(tmp_path)),
            "--mode",
            "simulate",
            "--trials",
            "200",
            "--seed",
            "1",
            "--fall-protection",
            "1",
            "--format",
            "json",
            "--output",
            str(output),
        ]
    )

    payload = json.loads(output.read_text(encoding="utf-8"))
    assert payload["requested_trials"] == 200
    assert payload["probabilities"]["3"]["4"] == 100.0


def test_allocate_mode(tmp_path: Path, capsys):
    main([str(_write(tmp_path)), "--mode", "allocate", "--format", "json"])

    out = capsys.readouterr().out
    payload = json.loads(out[out.index("{"):])
    assert set(payload["balls"]) == {"1", "2", "4"}
    assert sum(payload["balls"].values()) == 1000


def test_profile_save_and_load(tmp_path: Path):
    profile = tmp_path / "profile.json"
    standings = _write(tmp_path)

    main([str(standings), "--mode", "odds", "--fall-protection", "2", "--save-profile", str(profile)])
    saved = json.loads(profile.read_text(encoding="utf-8"))
    assert saved["fall_protection"] == {"enabled": True, "max_spots": 2}

    saved["configs"]["4"].update({"locked": True, "manual_pick": 1})
    profile.write_text(json.dumps(saved), encoding="utf-8")
    output = tmp_path / "odds.csv"

    main([str(standings), "--mode", "odds", "--load-profile", str(profile), "--output", str(output)])

    rows = list(csv.reader(StringIO(output.read_text(encoding="utf-8"))))
    delta = next(row for row in rows if row[0] == "Delta")
    assert delta[2] == "100.0"


def test_invalid_configuration_exits(tmp_path: Path):
    text = STANDINGS.replace("1,Alpha,2,11,no,,,", "1,Alpha,2,11,no,,yes,1").replace(
        "2,Bravo,5,8,no,,,", "2,Bravo,5,8,no,,yes,1"
    )

    with pytest.raises(SystemExit) as excinfo:
        main([str(_write(tmp_path, text)), "--mode", "draw"])

    assert "duplicate_locked_pick" in str(excinfo.value)

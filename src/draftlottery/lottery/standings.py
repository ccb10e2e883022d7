"""Record ordering shared by the allocator, draw engine and simulator."""

from __future__ import annotations

from typing import Iterable, List, Mapping, Sequence, Tuple

from draftlottery.models import Team


def win_pct(wins: int, losses: int, ties: int) -> float:
    """Winning percentage counting ties as half a win."""

    games = wins + losses + ties
    if games == 0:
        return 0.0
    return (wins + 0.5 * ties) / games


def stable_id_key(team_id: str) -> Tuple[int, int, str]:
    """Numeric ids sort numerically and ahead of free-form ids."""

    if team_id.isdigit():
        return (0, int(team_id), "")
    return (1, 0, team_id)


def _best_first_key(team: Team) -> tuple:
    return (
        -win_pct(team.wins, team.losses, team.ties),
        -team.wins,
        team.losses,
        team.ties,
        stable_id_key(team.team_id),
    )


def sort_best_first(teams: Iterable[Team]) -> List[Team]:
    return sorted(teams, key=_best_first_key)


def sort_worst_first(teams: Iterable[Team]) -> List[Team]:
    return list(reversed(sort_best_first(teams)))


def record_ranks(teams: Sequence[Team], balls: Mapping[str, int]) -> dict[str, int]:
    """Return ``team_id -> rank`` where rank 1 is the worst record.

    Teams with identical records are separated by ball count (more balls
    ranks worse), then by the stable id.
    """

    def key(team: Team) -> tuple:
        best = _best_first_key(team)
        # Sorted in reverse, so larger tuples rank worse.
        return (best[:4], balls.get(team.team_id, 0), best[4])

    ordered = sorted(teams, key=key, reverse=True)
    return {team.team_id: idx + 1 for idx, team in enumerate(ordered)}

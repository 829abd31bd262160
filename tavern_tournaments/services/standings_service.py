from typing import Dict, List, Sequence

from tavern_tournaments.models.bracket_model import MatchStatus
from tavern_tournaments.models.tournament_model import Tiebreaker, TournamentConfig, TournamentFormat
from tavern_tournaments.schemas.standings_schemas import StandingEntry

# Standings are always rebuilt from the full match history rather than kept
# up to date incrementally, so a corrected or regenerated bracket can never
# leave stale tallies behind.
#
# Tiebreakers:
# buchholz:     sum of the points of every opponent faced (byes count for nothing)
# points_diff:  sum of own score minus opponent score over scored matches
# head_to_head: points earned in matches against players level on points


def compute_standings(config: TournamentConfig, players: Sequence, matches: Sequence) -> List[StandingEntry]:
    """
    Builds the ordered standings table.

    `players` and `matches` may be pydantic models or ORM rows; only attribute
    access is used. Matches involving players no longer on the roster are
    ignored.
    """
    tournament_format = TournamentFormat(config.format)
    tiebreaker = Tiebreaker(config.tiebreaker)

    ids = [p.id for p in players]
    played = {pid: 0 for pid in ids}
    wins = {pid: 0 for pid in ids}
    losses = {pid: 0 for pid in ids}
    draws = {pid: 0 for pid in ids}
    points = {pid: 0 for pid in ids}
    opponents: Dict[str, List[str]] = {pid: [] for pid in ids}
    eliminated = set()

    decided = []
    for m in matches:
        status = MatchStatus(m.status)
        if status == MatchStatus.BYE:
            if m.winner_id in points:
                played[m.winner_id] += 1
                wins[m.winner_id] += 1
                points[m.winner_id] += config.points_win
            continue
        if status != MatchStatus.COMPLETED:
            continue
        p1, p2 = m.player1_id, m.player2_id
        if p1 not in points or p2 not in points:
            continue
        decided.append(m)
        played[p1] += 1
        played[p2] += 1
        opponents[p1].append(p2)
        opponents[p2].append(p1)
        if m.winner_id is None:
            draws[p1] += 1
            draws[p2] += 1
            points[p1] += config.points_draw
            points[p2] += config.points_draw
            continue
        loser = p2 if m.winner_id == p1 else p1
        wins[m.winner_id] += 1
        losses[loser] += 1
        points[m.winner_id] += config.points_win
        points[loser] += config.points_loss
        if tournament_format.is_elimination:
            eliminated.add(loser)

    tiebreak = {pid: 0.0 for pid in ids}
    if tiebreaker == Tiebreaker.BUCHHOLZ:
        for pid in ids:
            tiebreak[pid] = float(sum(points[o] for o in opponents[pid]))
    elif tiebreaker == Tiebreaker.POINTS_DIFF:
        for m in decided:
            if m.player1_score is None or m.player2_score is None:
                continue
            diff = m.player1_score - m.player2_score
            tiebreak[m.player1_id] += diff
            tiebreak[m.player2_id] -= diff
    else:
        for m in decided:
            p1, p2 = m.player1_id, m.player2_id
            if points[p1] != points[p2]:
                continue
            if m.winner_id is None:
                tiebreak[p1] += config.points_draw
                tiebreak[p2] += config.points_draw
            else:
                loser = p2 if m.winner_id == p1 else p1
                tiebreak[m.winner_id] += config.points_win
                tiebreak[loser] += config.points_loss

    names = {p.id: p.player_name for p in players}
    ordered = sorted(ids, key=lambda pid: (-points[pid], -tiebreak[pid], -wins[pid], names[pid].lower()))

    return [
        StandingEntry(
            rank=index + 1,
            player_id=pid,
            player_name=names[pid],
            matches_played=played[pid],
            wins=wins[pid],
            losses=losses[pid],
            draws=draws[pid],
            points=points[pid],
            tiebreaker_score=tiebreak[pid],
            is_eliminated=pid in eliminated,
        )
        for index, pid in enumerate(ordered)
    ]


def apply_standings(players: Sequence, standings: Sequence[StandingEntry]):
    """Copies computed tallies onto player objects (models or ORM rows) in place."""
    by_id = {entry.player_id: entry for entry in standings}
    for player in players:
        entry = by_id.get(player.id)
        if entry is None:
            continue
        player.wins = entry.wins
        player.losses = entry.losses
        player.draws = entry.draws
        player.points = entry.points
        player.tiebreaker_score = entry.tiebreaker_score
        player.is_eliminated = entry.is_eliminated

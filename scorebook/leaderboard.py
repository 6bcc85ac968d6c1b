"""Leaderboard aggregation with optional Buchholz weighting."""

import logging

from scorebook import Match, PlayerStat, ScoringConfig
from scorebook.scoring import result_points

log = logging.getLogger(__name__)


def _accumulate(stats: dict, match: Match, config: ScoringConfig) -> None:
    """Add one match to the raw (pre-Buchholz) statistics."""
    for p in [*match.team1, *match.team2]:
        if p.id not in stats:
            stats[p.id] = PlayerStat(player=p)

    for p1 in match.team1:
        for p2 in match.team2:
            stats[p1.id].opponents.add(stats[p2.id].player)
            stats[p2.id].opponents.add(stats[p1.id].player)

    scored = match.winner in (0, 1, 2)
    if not scored:
        log.warning(
            "Spiel %s: ungueltiger Gewinner %r, keine Punkte vergeben",
            match.id, match.winner,
        )

    for team_no, team in ((1, match.team1), (2, match.team2)):
        for p in team:
            stat = stats[p.id]
            stat.played += 1
            if not scored:
                continue
            stat.points += result_points(match.winner, team_no, config)
            if match.winner == team_no:
                stat.won += 1


def aggregate(
    matches: list[Match],
    config: ScoringConfig = ScoringConfig(),
    buchholz_enabled: bool = False,
) -> list[PlayerStat]:
    """Compute the leaderboard for a list of matches.

    Runs in two passes:
    1. Raw statistics: played, won and result points per player
    2. Opponent strength: each player's ``opponent_points_sum`` is the sum
       of the raw points of all distinct opponents. With Buchholz enabled,
       ``buchholz_weight * opponent_points_sum`` is added to the player's
       points. The sums are taken from a snapshot of the raw points, so no
       bonus feeds into another player's bonus.

    Args:
        matches: Matches to score, already filtered by the caller.
        config: Points per result and Buchholz weight.
        buchholz_enabled: Whether to add the opponent-strength bonus.

    Returns:
        Player statistics sorted by points (descending), ties by player id.
    """
    stats: dict = {}
    for match in matches:
        _accumulate(stats, match, config)

    raw_points = {pid: stat.points for pid, stat in stats.items()}
    for stat in stats.values():
        stat.opponent_points_sum = sum(raw_points[op.id] for op in stat.opponents)
        if buchholz_enabled:
            stat.points += config.buchholz_weight * stat.opponent_points_sum

    log.info(
        "Rangliste berechnet: %d Spieler aus %d Spielen (Buchholz %s)",
        len(stats), len(matches), 'an' if buchholz_enabled else 'aus',
    )
    return sorted(stats.values(), key=lambda s: (-s.points, str(s.player.id)))

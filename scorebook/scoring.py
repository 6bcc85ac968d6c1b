"""Winner derivation and points helpers shared by parser, reader and leaderboard."""

from scorebook import PlayerStat, ScoringConfig

# Individual set scores above this are treated as misheard and capped
SCORE_CAP = 30

DEFAULT_BUCHHOLZ_WEIGHT = ScoringConfig().buchholz_weight


def cap_score(value: int) -> int:
    """Clamp a single set score to ``SCORE_CAP``."""
    return min(value, SCORE_CAP)


def set_winner(team1_score: int, team2_score: int) -> int:
    """Return 1 or 2 for the team that took the set, 0 for a level set."""
    if team1_score > team2_score:
        return 1
    if team2_score > team1_score:
        return 2
    return 0


def sets_winner(team1_scores: list[int], team2_scores: list[int]) -> int:
    """Determine the match winner by counting sets won.

    This is the only winner rule used in the package. Level sets count
    for neither side; an equal number of sets won (or no sets at all)
    gives 0.

    Args:
        team1_scores: Points of team 1, one entry per set.
        team2_scores: Points of team 2, one entry per set.

    Returns:
        0 for a tie/undetermined result, 1 if team 1 won, 2 if team 2 won.
    """
    team1_sets = 0
    team2_sets = 0
    for t1, t2 in zip(team1_scores, team2_scores):
        result = set_winner(t1, t2)
        if result == 1:
            team1_sets += 1
        elif result == 2:
            team2_sets += 1
    return set_winner(team1_sets, team2_sets)


def result_points(winner: int, team: int, config: ScoringConfig) -> float:
    """Points a member of ``team`` (1 or 2) earns for a match with ``winner``."""
    if winner == 0:
        return config.draw_points
    if winner == team:
        return config.win_points
    return config.loss_points


def win_percentage(stat: PlayerStat) -> float:
    """Percentage of matches won, 0.0 for players without a match."""
    if stat.played == 0:
        return 0.0
    return stat.won / stat.played * 100

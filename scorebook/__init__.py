"""Core module for badminton-scorebook."""

from dataclasses import dataclass, field
from typing import Optional, Union

PlayerId = Union[str, int]


@dataclass(frozen=True)
class Player:
    """A known player. Matching and scoring only look at ``id`` and ``name``."""

    id: PlayerId
    name: str
    email: Optional[str] = None
    groups: tuple[str, ...] = ()


@dataclass
class Match:
    """A single singles or doubles match, one score pair per set."""

    id: Optional[PlayerId]
    team1: list[Player]
    team2: list[Player]
    team1_scores: list[int]
    team2_scores: list[int]
    match_date: str           # YYYY-MM-DD
    winner: int = 0           # 0 = tie/undetermined, 1 = team1, 2 = team2
    created_ts: str = ''
    created_by: str = ''


@dataclass
class PlayerStat:
    """Leaderboard row, rebuilt on every aggregation."""

    player: Player
    played: int = 0
    won: int = 0
    points: float = 0.0
    opponents: set[Player] = field(default_factory=set)
    opponent_points_sum: float = 0.0


@dataclass(frozen=True)
class ScoringConfig:
    """Points awarded per result plus the Buchholz weight."""

    win_points: float = 3
    draw_points: float = 1
    loss_points: float = 0
    buchholz_weight: float = 0.004

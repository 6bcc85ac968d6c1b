"""Period and player predicates applied to match history before aggregation."""

import calendar
import logging
from datetime import date, timedelta
from typing import Callable, Optional

from scorebook import Match, PlayerId

log = logging.getLogger(__name__)

MatchPredicate = Callable[[Match], bool]

PERIODS = ('all', 'last7days', 'thisWeek', 'thisMonth', 'lastMonth', 'myMatches')


def _match_day(match: Match) -> Optional[date]:
    if not match.match_date:
        return None
    try:
        return date.fromisoformat(match.match_date)
    except ValueError:
        log.warning("Spiel %s: ungueltiges Datum %r", match.id, match.match_date)
        return None


def one_month_earlier(day: date) -> date:
    """Same day of the previous month, clamped to that month's last day."""
    year, month = (day.year, day.month - 1) if day.month > 1 else (day.year - 1, 12)
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def period_start(period: str, today: date) -> Optional[date]:
    """First day included by a date period, None for ``all``/``myMatches``.

    Raises:
        ValueError: For an unknown period name.
    """
    if period not in PERIODS:
        raise ValueError(f"Unbekannter Zeitraum: {period}")
    if period == 'last7days':
        return today - timedelta(days=7)
    if period == 'thisWeek':
        # Weeks start on Sunday
        return today - timedelta(days=(today.weekday() + 1) % 7)
    if period == 'thisMonth':
        return today.replace(day=1)
    if period == 'lastMonth':
        return one_month_earlier(today)
    return None


def get_predicate(
    period: str,
    today: Optional[date] = None,
    player_id: Optional[PlayerId] = None,
) -> MatchPredicate:
    """Build the filter for a leaderboard period.

    Args:
        period: One of ``PERIODS``.
        today: Reference date, defaults to the current date.
        player_id: Required for ``myMatches``.

    Returns:
        Predicate that is True for matches to keep. Matches without a
        valid date never pass a date-based period.

    Raises:
        ValueError: For an unknown period or ``myMatches`` without player.
    """
    today = today or date.today()
    start = period_start(period, today)

    if period == 'myMatches':
        if player_id is None:
            raise ValueError("Fuer 'myMatches' wird eine Spieler-ID benoetigt.")
        wanted = str(player_id)
        return lambda m: any(str(p.id) == wanted for p in [*m.team1, *m.team2])

    if start is None:
        return lambda m: True

    def predicate(match: Match) -> bool:
        day = _match_day(match)
        return day is not None and day >= start

    return predicate


def filter_matches(matches: list[Match], predicate: MatchPredicate) -> list[Match]:
    """Keep the matches accepted by ``predicate``, preserving order."""
    kept = [m for m in matches if predicate(m)]
    log.info("%d von %d Spielen im Zeitraum", len(kept), len(matches))
    return kept

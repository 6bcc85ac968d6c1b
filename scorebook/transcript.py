"""Rule-based interpretation of spoken match results."""

import logging
import re
from datetime import date, datetime, timedelta
from typing import Callable, NamedTuple, Optional

from scorebook import Match, Player
from scorebook.matching import resolve_players
from scorebook.scoring import cap_score, sets_winner

log = logging.getLogger(__name__)

_DATE_RE = re.compile(r'\b(today|yesterday|\d{4}-\d{2}-\d{2})\b')

# A set score: "21-18", "21 18" or "21 space 18" (speech-to-text spelling)
_SCORE = r'\d+(?:\s*-\s*|\s+space\s+|\s+)\d+'
_SCORE_PAIR_RE = re.compile(r'\b(\d+)(?:\s*-\s*|\s+space\s+|\s+)(\d+)\b')
_TRAILING_PAIR_RE = re.compile(r'\b(\d+)\s+(\d+)\s*$')

_NAME = r'[^\W\d_]+'  # letters only, accented ones included
_JOIN = r'(?:\s+and\s+|\s*[,&]\s*)'
_BEAT = r'\s+(?:beat|won)(?:\s+against)?\s+'
_WORD_RE = re.compile(_NAME)

_VERSUS_RE = re.compile(r'\b(?:vs|versus)\b\.?')
_PAIR_BEAT_PAIR_RE = re.compile(
    rf'\b({_NAME})(?:{_JOIN}({_NAME}))?{_BEAT}({_NAME})(?:{_JOIN}({_NAME}))?'
)
_PAIR_SCORE_RE = re.compile(rf'\b({_NAME})(?:{_JOIN}({_NAME}))?\s+{_SCORE}')
_NAME_BEAT_NAME_RE = re.compile(rf'\b({_NAME}){_BEAT}({_NAME})')
_NAME_SCORE_RE = re.compile(rf'\b({_NAME})\s+{_SCORE}')
_NAME_LIST_RE = re.compile(rf'\b({_NAME})(?:{_JOIN}({_NAME}))?')


class Teams(NamedTuple):
    """Players resolved by one extraction strategy."""

    team1: list[Player]
    team2: list[Player]
    decisive: bool = False  # a "beat"/"won" phrase named team1 the winner


Strategy = Callable[[str, list[Player]], Optional[Teams]]


def normalize_transcript(transcript: str) -> str:
    """Lowercase and trim a raw transcript."""
    return transcript.lower().strip()


def extract_date(text: str, today: date) -> str:
    """Find the match date in a normalized transcript.

    Recognizes ``today``, ``yesterday`` and ISO ``YYYY-MM-DD`` tokens; the
    first one found wins. Without any, the match is dated ``today``.

    Args:
        text: Normalized transcript.
        today: Reference date for the relative keywords.

    Returns:
        ISO date string.

    Raises:
        ValueError: If an ISO-looking token is not a real date.
    """
    found = _DATE_RE.search(text)
    if not found:
        return today.isoformat()
    token = found.group(1)
    if token == 'today':
        return today.isoformat()
    if token == 'yesterday':
        return (today - timedelta(days=1)).isoformat()
    return date.fromisoformat(token).isoformat()


def extract_scores(text: str) -> tuple[list[int], list[int]]:
    """Extract per-set scores in order of appearance.

    Every ``<n> <sep> <n>`` pair is one set. If there is none, two bare
    numbers at the very end of the text are tried. Each score is capped.

    Args:
        text: Normalized transcript with date tokens removed.

    Returns:
        Tuple of (team1_scores, team2_scores), both empty if nothing found.
    """
    pairs = [(int(a), int(b)) for a, b in _SCORE_PAIR_RE.findall(text)]
    if not pairs:
        trailing = _TRAILING_PAIR_RE.search(text)
        if trailing:
            pairs = [(int(trailing.group(1)), int(trailing.group(2)))]

    team1_scores = [cap_score(a) for a, _ in pairs]
    team2_scores = [cap_score(b) for _, b in pairs]
    return team1_scores, team2_scores


def _strip_scores(text: str) -> str:
    return _SCORE_PAIR_RE.sub(' ', text)


def _teams(
    tokens1: list[str],
    tokens2: list[str],
    roster: list[Player],
    decisive: bool = False,
) -> Optional[Teams]:
    team1 = resolve_players(tokens1, roster)
    # A player can only be on one side; the first mention keeps them
    team1_ids = {p.id for p in team1}
    team2 = [p for p in resolve_players(tokens2, roster) if p.id not in team1_ids]
    if not team1 and not team2:
        return None
    return Teams(team1, team2, decisive)


def _first_resolved(
    pattern: re.Pattern,
    text: str,
    roster: list[Player],
    build: Callable[[re.Match], Optional[Teams]],
) -> Optional[Teams]:
    for found in pattern.finditer(text):
        teams = build(found)
        if teams:
            return teams
    return None


def _groups(found: re.Match, *indexes: int) -> list[str]:
    return [found.group(i) for i in indexes if found.group(i)]


def versus_strategy(text: str, roster: list[Player]) -> Optional[Teams]:
    """``<names...> vs|versus <names...>``; every word on a side is a candidate."""
    sides = _VERSUS_RE.split(_strip_scores(text), maxsplit=1)
    if len(sides) != 2:
        return None
    return _teams(_WORD_RE.findall(sides[0]), _WORD_RE.findall(sides[1]), roster)


def pair_beat_pair_strategy(text: str, roster: list[Player]) -> Optional[Teams]:
    """``<name> [and <name>] beat|won [against] <name> [and <name>]``."""
    return _first_resolved(
        _PAIR_BEAT_PAIR_RE, text, roster,
        lambda m: _teams(_groups(m, 1, 2), _groups(m, 3, 4), roster, decisive=True),
    )


def pair_score_strategy(text: str, roster: list[Player]) -> Optional[Teams]:
    """``<name> [and <name>] <score> <score>``; names go to team 1."""
    return _first_resolved(
        _PAIR_SCORE_RE, text, roster,
        lambda m: _teams(_groups(m, 1, 2), [], roster),
    )


def name_beat_name_strategy(text: str, roster: list[Player]) -> Optional[Teams]:
    """``<name> beat|won [against] <name>``."""
    return _first_resolved(
        _NAME_BEAT_NAME_RE, text, roster,
        lambda m: _teams(_groups(m, 1), _groups(m, 2), roster, decisive=True),
    )


def name_score_strategy(text: str, roster: list[Player]) -> Optional[Teams]:
    """``<name> <score> <score>``."""
    return _first_resolved(
        _NAME_SCORE_RE, text, roster,
        lambda m: _teams(_groups(m, 1), [], roster),
    )


def name_list_strategy(text: str, roster: list[Player]) -> Optional[Teams]:
    """Last resort: the first ``<name> [and <name>]`` clause that resolves."""
    return _first_resolved(
        _NAME_LIST_RE, _strip_scores(text), roster,
        lambda m: _teams(_groups(m, 1, 2), [], roster),
    )


# Evaluated in order, first strategy returning Teams wins
TEAM_STRATEGIES: tuple[Strategy, ...] = (
    versus_strategy,
    pair_beat_pair_strategy,
    pair_score_strategy,
    name_beat_name_strategy,
    name_score_strategy,
    name_list_strategy,
)


def extract_teams(
    text: str,
    roster: list[Player],
    strategies: tuple[Strategy, ...] = TEAM_STRATEGIES,
) -> Optional[Teams]:
    """Run the strategy chain and return the first resolved teams."""
    for strategy in strategies:
        teams = strategy(text, roster)
        if teams:
            log.debug("Teams erkannt mit %s", strategy.__name__)
            return teams
    return None


def parse_transcript(
    transcript: str,
    roster: list[Player],
    author_id: str = '',
    now: Optional[datetime] = None,
) -> Optional[Match]:
    """Parse a spoken or typed result into a match record.

    The winner is the team that won more sets. Without any parsed set,
    a ``beat``/``won`` phrase makes team 1 the winner; otherwise the
    result stays undetermined (0).

    Args:
        transcript: Raw utterance, e.g. ``"John and Jane beat Bob and Alice 21-18 21-15"``.
        roster: Known players to resolve names against.
        author_id: Stored as ``created_by``.
        now: Reference time for relative dates and ``created_ts``.

    Returns:
        A Match with as much as could be extracted, or None if neither
        players nor scores were found or parsing failed.
    """
    now = now or datetime.now()
    try:
        text = normalize_transcript(transcript)
        match_date = extract_date(text, now.date())
        text = _DATE_RE.sub(' ', text)

        team1_scores, team2_scores = extract_scores(text)
        teams = extract_teams(text, roster)
    except Exception:
        log.exception("Fehler beim Auswerten des Transkripts: %r", transcript)
        return None

    team1 = teams.team1 if teams else []
    team2 = teams.team2 if teams else []

    if not team1 and not team2 and not team1_scores:
        log.warning("Keine Spieldaten im Transkript gefunden: %r", transcript)
        return None

    if team1_scores:
        winner = sets_winner(team1_scores, team2_scores)
    elif teams and teams.decisive:
        winner = 1
    else:
        winner = 0

    return Match(
        id=None,
        team1=team1,
        team2=team2,
        team1_scores=team1_scores,
        team2_scores=team2_scores,
        match_date=match_date,
        winner=winner,
        created_ts=now.isoformat(timespec='seconds'),
        created_by=author_id,
    )

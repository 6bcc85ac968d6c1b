"""Prompt building and response decoding for a generative text service.

The service itself is not called from here: callers send the prompt with
whatever client they use and hand the returned text to ``decode_response``.
"""

import json
import logging
from datetime import date, datetime
from typing import Optional

from scorebook import Match, Player
from scorebook.matching import best_match, normalize_name, placeholder_player
from scorebook.scoring import cap_score, sets_winner

log = logging.getLogger(__name__)

PROMPT_TEMPLATE = """Parse the following badminton match transcript into a structured JSON format.
Extract the following information:
- team1: Array of player names (1 or 2 players)
- team2: Array of player names (1 or 2 players)
- scores: Array of score tuples [team1Score, team2Score] for each game
- matchDate: Date in YYYY-MM-DD format if mentioned, otherwise omit it

Available players: {names}

Rules for matching player names:
1. Perform fuzzy matching on player names (e.g., 'John' matches 'John Doe', 'Jon' matches 'John')
2. Match nicknames to full names (e.g., 'Mike' matches 'Michael')
3. Be case insensitive
4. If a name is not found exactly, find the closest match from the available players
5. If no close match is found, use the name as is

Transcript: "{transcript}"

Return only the JSON object with no additional text or markdown formatting."""


class ResponseFormatError(ValueError):
    """The service answer does not have the expected JSON shape."""


def build_prompt(transcript: str, roster: list[Player]) -> str:
    """Render the extraction prompt for a transcript and roster."""
    return PROMPT_TEMPLATE.format(
        names=', '.join(p.name for p in roster),
        transcript=transcript.strip(),
    )


def strip_code_fence(text: str) -> str:
    """Remove a surrounding ```json / ``` markdown fence, if any."""
    body = text.strip()
    for fence in ('```json', '```'):
        if body.startswith(fence):
            body = body[len(fence):]
            end = body.rfind('```')
            if end != -1:
                body = body[:end]
            break
    return body.strip()


def _name_list(data: dict, key: str) -> list[str]:
    value = data.get(key)
    if not isinstance(value, list) or not all(isinstance(n, str) for n in value):
        raise ResponseFormatError(f"'{key}' muss eine Liste von Namen sein")
    return [n.strip() for n in value if n.strip()]


def _score_pairs(data: dict) -> list[tuple[int, int]]:
    value = data.get('scores')
    if not isinstance(value, list):
        raise ResponseFormatError("'scores' muss eine Liste sein")
    pairs = []
    for pair in value:
        if (
            not isinstance(pair, (list, tuple))
            or len(pair) != 2
            or not all(isinstance(s, int) and not isinstance(s, bool) for s in pair)
        ):
            raise ResponseFormatError(f"Ungueltiges Satzergebnis: {pair!r}")
        pairs.append((cap_score(pair[0]), cap_score(pair[1])))
    return pairs


def _lookup(name: str, roster: list[Player], placeholders: dict[str, Player]) -> Player:
    result = best_match(name, [p.name for p in roster])
    if result.match is not None:
        return next(p for p in roster if p.name == result.match)
    key = normalize_name(name)
    if key not in placeholders:
        log.info("Spieler '%s' nicht im Kader, Platzhalter angelegt", name)
        placeholders[key] = placeholder_player(name)
    return placeholders[key]


def _resolve_team(
    names: list[str],
    roster: list[Player],
    placeholders: dict[str, Player],
) -> list[Player]:
    """Resolve names to players, dropping repeated mentions of the same player."""
    team: list[Player] = []
    for name in names:
        player = _lookup(name, roster, placeholders)
        if all(p.id != player.id for p in team):
            team.append(player)
    return team


def decode_response(
    text: str,
    roster: list[Player],
    author_id: str = '',
    now: Optional[datetime] = None,
) -> Optional[Match]:
    """Turn a service answer into a match record.

    Names are resolved through the roster matcher; unknown names become
    placeholder players. The winner is the team that won more sets.

    Args:
        text: Raw answer text, optionally wrapped in a markdown fence.
        roster: Known players.
        author_id: Stored as ``created_by``.
        now: Reference time for the default date and ``created_ts``.

    Returns:
        The decoded Match, or None if the answer is not usable.
    """
    now = now or datetime.now()
    try:
        data = json.loads(strip_code_fence(text or ''))
        if not isinstance(data, dict):
            raise ResponseFormatError("Antwort ist kein JSON-Objekt")
        team1_names = _name_list(data, 'team1')
        team2_names = _name_list(data, 'team2')
        pairs = _score_pairs(data)
        match_date = data.get('matchDate') or now.date().isoformat()
        if not isinstance(match_date, str):
            raise ResponseFormatError("'matchDate' muss ein String sein")
        match_date = date.fromisoformat(match_date).isoformat()
    except ValueError as exc:
        # json.JSONDecodeError and ResponseFormatError are ValueErrors
        log.warning("Antwort des Textdienstes nicht verwertbar: %s", exc)
        return None

    placeholders: dict[str, Player] = {}
    team1 = _resolve_team(team1_names, roster, placeholders)
    team2 = _resolve_team(team2_names, roster, placeholders)
    both_sides = {p.id for p in team1} & {p.id for p in team2}
    if both_sides:
        log.warning(
            "Antwort des Textdienstes nicht verwertbar: Spieler %s in beiden Teams",
            ', '.join(sorted(str(pid) for pid in both_sides)),
        )
        return None

    team1_scores = [a for a, _ in pairs]
    team2_scores = [b for _, b in pairs]
    return Match(
        id=None,
        team1=team1,
        team2=team2,
        team1_scores=team1_scores,
        team2_scores=team2_scores,
        match_date=match_date,
        winner=sets_winner(team1_scores, team2_scores),
        created_ts=now.isoformat(timespec='seconds'),
        created_by=author_id,
    )

"""Multi-stage name resolution against a player roster."""

import logging
import math
import re
import unicodedata
import uuid
from typing import NamedTuple, Optional

from rapidfuzz.distance import Levenshtein

from scorebook import Player

log = logging.getLogger(__name__)

# Upper bound for accepted edit distance; short inputs are capped lower
MAX_EDIT_DISTANCE = 3

# Words that show up between names in spoken results
STOP_WORDS = frozenset({
    'and', 'vs', 'versus', 'beat', 'won', 'lost', 'to',
    'score', 'scores', 'is', 'are',
})

PLACEHOLDER_PREFIX = 'temp-'

_WHITESPACE_RE = re.compile(r'\s+')


class NameMatch(NamedTuple):
    """Outcome of resolving one name token.

    ``match`` is None when nothing was accepted; ``distance`` then holds
    the smallest rejected edit distance, or ``len(text)`` when the input
    is blank or the roster is empty. Check ``match``, not ``distance``.
    """

    match: Optional[str]
    distance: int


def normalize_name(value: str) -> str:
    """Normalize a name for comparison.

    Collapses whitespace, case-folds and removes diacritics via NFD
    decomposition, so ``'José  Ruiz'`` and ``'jose ruiz'`` compare equal.

    Args:
        value: Raw name or spoken token.

    Returns:
        Normalized string.
    """
    decomposed = unicodedata.normalize('NFD', value)
    stripped = ''.join(ch for ch in decomposed if unicodedata.category(ch) != 'Mn')
    return _WHITESPACE_RE.sub(' ', stripped).strip().casefold()


def distance_threshold(text: str, max_distance: int = MAX_EDIT_DISTANCE) -> int:
    """Largest edit distance accepted for ``text``: min(max, ceil(len / 2))."""
    return min(max_distance, math.ceil(len(text) / 2))


def best_match(
    text: str,
    candidate_names: list[str],
    max_distance: int = MAX_EDIT_DISTANCE,
) -> NameMatch:
    """Find the roster name that best matches a spoken name token.

    Uses a multi-stage approach, the first stage with a hit wins:
    1. Exact match (case-insensitive)
    2. Prefix match in either direction
    3. Substring match in either direction
    4. Levenshtein distance, bounded by ``distance_threshold``

    Within a stage the first candidate in list order wins.

    Args:
        text: Name token from a transcript.
        candidate_names: Names of all known players.
        max_distance: Upper bound for the stage 4 threshold.

    Returns:
        NameMatch with the matched candidate (original spelling) or None.
    """
    needle = normalize_name(text)
    if not needle or not candidate_names:
        return NameMatch(None, len(text))

    normalized = [(name, normalize_name(name)) for name in candidate_names]

    # Stage 1: Exact match
    for name, norm in normalized:
        if norm == needle:
            return NameMatch(name, 0)

    # Stage 2: Prefix match
    for name, norm in normalized:
        if norm and (norm.startswith(needle) or needle.startswith(norm)):
            return NameMatch(name, abs(len(norm) - len(needle)))

    # Stage 3: Substring match
    for name, norm in normalized:
        if norm and (needle in norm or norm in needle):
            return NameMatch(name, abs(len(norm) - len(needle)))

    # Stage 4: Bounded edit distance
    best_name: Optional[str] = None
    best_distance = -1
    for name, norm in normalized:
        dist = Levenshtein.distance(needle, norm)
        if best_name is None or dist < best_distance:
            best_name = name
            best_distance = dist

    if best_distance <= distance_threshold(needle, max_distance):
        return NameMatch(best_name, best_distance)

    log.debug(
        "Kein Treffer fuer '%s' (beste Distanz %d zu '%s')",
        text, best_distance, best_name,
    )
    return NameMatch(None, best_distance)


def resolve_players(
    tokens: list[str],
    roster: list[Player],
    max_distance: int = MAX_EDIT_DISTANCE,
) -> list[Player]:
    """Resolve name tokens to roster players.

    Stop words are skipped, unresolved tokens are dropped and the result
    is deduplicated by player id, keeping first-seen order.

    Args:
        tokens: Name tokens in transcript order.
        roster: All known players.
        max_distance: Passed through to ``best_match``.

    Returns:
        Resolved players, possibly empty.
    """
    names = [p.name for p in roster]
    by_name: dict[str, Player] = {}
    for p in roster:
        by_name.setdefault(p.name, p)

    found: list[Player] = []
    seen_ids = set()
    for token in tokens:
        if not token or token.lower() in STOP_WORDS:
            continue
        result = best_match(token, names, max_distance)
        if result.match is None:
            continue
        player = by_name[result.match]
        if player.id not in seen_ids:
            seen_ids.add(player.id)
            found.append(player)
    return found


def placeholder_player(name: str) -> Player:
    """Create an unsaved stand-in for a name that is not on the roster."""
    return Player(id=f'{PLACEHOLDER_PREFIX}{uuid.uuid4().hex[:9]}', name=name)


def is_placeholder(player: Player) -> bool:
    """True for players created by ``placeholder_player``."""
    return str(player.id).startswith(PLACEHOLDER_PREFIX)

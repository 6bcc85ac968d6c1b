"""CSV reader for rosters and match history with encoding detection."""

import csv
import io
import logging
import re
from pathlib import Path

from scorebook import Match, Player
from scorebook.scoring import sets_winner

log = logging.getLogger(__name__)

# Matches any sequence of whitespace (including Unicode whitespace like U+2006)
_WHITESPACE_RE = re.compile(r'\s+')
_SET_RE = re.compile(r'^(\d+)\s*[-:]\s*(\d+)$')

ROSTER_COLUMNS = {'ID', 'Name'}
MATCH_COLUMNS = {'ID', 'Date', 'Team 1', 'Team 2', 'Scores'}


def detect_encoding(path: Path) -> str:
    """Detect file encoding by checking for BOM bytes.

    Args:
        path: Path to the CSV file.

    Returns:
        Encoding string suitable for open().
    """
    with open(path, 'rb') as f:
        bom = f.read(2)
    if bom == b'\xff\xfe':
        return 'utf-16-le'
    return 'utf-8-sig'


def normalize_whitespace(value: str) -> str:
    """Collapse whitespace runs into single spaces and strip the ends."""
    return _WHITESPACE_RE.sub(' ', value).strip()


def _read_rows(path: str | Path, required_cols: set[str]) -> list[tuple[int, dict]]:
    """Read a tab-delimited file into cleaned rows.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the header is missing or lacks required columns.
    """
    path = Path(path)
    encoding = detect_encoding(path)

    with open(path, 'r', encoding=encoding) as f:
        content = f.read()

    # Strip BOM if present
    content = content.lstrip('\ufeff')

    reader = csv.DictReader(io.StringIO(content), delimiter='\t')

    if reader.fieldnames is None:
        raise ValueError(f"Datei {path} ist leer oder hat keine Header-Zeile.")
    actual_cols = {normalize_whitespace(c) for c in reader.fieldnames}
    missing = required_cols - actual_cols
    if missing:
        raise ValueError(
            f"Fehlende Spalten in {path}: {', '.join(sorted(missing))}"
        )

    rows = []
    for row_num, row in enumerate(reader, start=2):
        cleaned = {normalize_whitespace(k): normalize_whitespace(v or '')
                   for k, v in row.items() if k is not None}
        rows.append((row_num, cleaned))
    return rows


def _split_list(value: str) -> list[str]:
    return [part.strip() for part in value.split(',') if part.strip()]


def read_roster(path: str | Path) -> list[Player]:
    """Read the player roster.

    Required columns are ``ID`` and ``Name``; ``Email`` and a
    comma-separated ``Groups`` column are optional. Rows without id or
    name are skipped.

    Args:
        path: Path to the tab-delimited roster file.

    Returns:
        List of Player objects in file order.
    """
    players: list[Player] = []
    for row_num, row in _read_rows(path, ROSTER_COLUMNS):
        if not row.get('ID') or not row.get('Name'):
            log.warning("Zeile %d in %s uebersprungen: ID oder Name fehlt", row_num, path)
            continue
        players.append(Player(
            id=row['ID'],
            name=row['Name'],
            email=row.get('Email') or None,
            groups=tuple(_split_list(row.get('Groups', ''))),
        ))

    log.info("%d Spieler gelesen aus %s", len(players), path)
    return players


def parse_set_scores(value: str) -> tuple[list[int], list[int]]:
    """Parse a scores cell like ``'21-18 15-21'`` into two score lists.

    Raises:
        ValueError: If a set is not written as ``<n>-<n>``.
    """
    team1_scores: list[int] = []
    team2_scores: list[int] = []
    for token in value.replace(',', ' ').split():
        found = _SET_RE.match(token)
        if not found:
            raise ValueError(f"Ungueltiges Satzergebnis '{token}'")
        team1_scores.append(int(found.group(1)))
        team2_scores.append(int(found.group(2)))
    return team1_scores, team2_scores


def _team(value: str, players_by_id: dict[str, Player]) -> list[Player]:
    team = []
    for pid in _split_list(value):
        if pid not in players_by_id:
            raise KeyError(f"Unbekannte Spieler-ID '{pid}'")
        team.append(players_by_id[pid])
    return team


def read_matches(path: str | Path, roster: list[Player]) -> list[Match]:
    """Read the match history.

    Team cells hold comma-separated player ids from the roster, the
    ``Scores`` cell one ``<n>-<n>`` pair per set. A blank ``Winner`` is
    derived from the sets. Rows that cannot be read are skipped.

    Args:
        path: Path to the tab-delimited match file.
        roster: Players the ids refer to.

    Returns:
        List of Match objects in file order.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If required columns are missing.
    """
    players_by_id = {str(p.id): p for p in roster}
    matches: list[Match] = []
    for row_num, row in _read_rows(path, MATCH_COLUMNS):
        try:
            team1_scores, team2_scores = parse_set_scores(row['Scores'])
            if row.get('Winner'):
                winner = int(row['Winner'])
                if winner not in (0, 1, 2):
                    raise ValueError(f"Ungueltiger Gewinner {winner}")
            else:
                winner = sets_winner(team1_scores, team2_scores)
            match = Match(
                id=row['ID'],
                team1=_team(row['Team 1'], players_by_id),
                team2=_team(row['Team 2'], players_by_id),
                team1_scores=team1_scores,
                team2_scores=team2_scores,
                match_date=row['Date'],
                winner=winner,
                created_ts=row.get('Created', ''),
                created_by=row.get('Created By', ''),
            )
            matches.append(match)
        except (ValueError, KeyError) as exc:
            log.warning("Zeile %d in %s uebersprungen: %s", row_num, path, exc)

    log.info("%d Spiele gelesen aus %s", len(matches), path)
    return matches
